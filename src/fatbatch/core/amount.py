"""
Amount value type.

Token amounts are non-negative integers of arbitrary size. They are accepted
only from integers or decimal-integer strings so that no value ever passes
through a binary floating point representation.
"""

import re
from functools import total_ordering
from typing import Union

from fatbatch.core.errors import InvalidAmount

_DECIMAL_INTEGER = re.compile(r"^[0-9]+$")

AmountLike = Union["Amount", int, str]


@total_ordering
class Amount:
    """
    Immutable non-negative integer amount of token units.

    Examples:
        Amount(150)
        Amount("99999999999999999999")
        Amount(150) + Amount(1) == Amount(151)
    """

    __slots__ = ("_value",)

    def __init__(self, value: AmountLike):
        object.__setattr__(self, "_value", _coerce(value))

    @classmethod
    def parse(cls, value: AmountLike) -> "Amount":
        """Return value unchanged if it is already an Amount, otherwise wrap it."""
        if isinstance(value, Amount):
            return value
        return cls(value)

    @property
    def value(self) -> int:
        return self._value

    @property
    def is_zero(self) -> bool:
        return self._value == 0

    def __setattr__(self, name, value):
        raise AttributeError("Amount is immutable")

    def __delattr__(self, name):
        raise AttributeError("Amount is immutable")

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __add__(self, other):
        if isinstance(other, Amount):
            return Amount(self._value + other._value)
        if isinstance(other, int) and not isinstance(other, bool):
            return Amount(self._value + other)
        return NotImplemented

    def __radd__(self, other):
        # sum() starts from the integer 0
        return self.__add__(other)

    def __eq__(self, other):
        if isinstance(other, Amount):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, Amount):
            return self._value < other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value < other
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"Amount({self._value})"


def _coerce(value) -> int:
    if isinstance(value, Amount):
        return value.value

    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be an integer, got {value!r}")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL_INTEGER.match(text):
            raise InvalidAmount(f"Amount must be a non-negative decimal integer string, got {value!r}")
        try:
            result = int(text)
        except ValueError:
            raise InvalidAmount(f"Amount has too many digits ({len(text)})")
    else:
        raise InvalidAmount(
            f"Amount must be an int or a decimal integer string, got {type(value).__name__}"
        )

    if result < 0:
        raise InvalidAmount(f"Amount must not be negative, got {result}")

    # amounts are written to content as decimal literals
    try:
        str(result)
    except ValueError:
        raise InvalidAmount("Amount has too many digits to be written as a decimal integer")
    return result
