"""
Test suite for the Amount value type.
"""

import sys

import pytest

from fatbatch.core.amount import Amount
from fatbatch.core.errors import InvalidAmount, ValidationError


# ============================================================================
# Test Construction
# ============================================================================

class TestAmountConstruction:
    """Tests for accepted and rejected amount inputs."""

    def test_from_int(self):
        """Test creating an amount from an integer."""
        assert Amount(150).value == 150

    def test_from_decimal_string(self):
        """Test creating an amount from a decimal integer string."""
        assert Amount("150").value == 150
        assert Amount(" 42 ").value == 42

    def test_zero_is_allowed(self):
        """Test that zero is a valid amount."""
        assert Amount(0).is_zero

    def test_precision_beyond_float(self):
        """Test that large values keep every digit."""
        big = "9007199254740993123456789"
        assert str(Amount(big)) == big
        assert Amount(2 ** 53 + 1).value == 9007199254740993

    def test_parse_returns_same_instance(self):
        """Test that parse passes Amounts through untouched."""
        amount = Amount(5)
        assert Amount.parse(amount) is amount
        assert Amount.parse("5") == amount

    @pytest.mark.parametrize("value", [1.5, 150.0, -1, "-1", "1.5", "1e3", "", "abc", None, True, [1]])
    def test_rejected_inputs(self, value):
        """Test that floats, negatives, fractions and other types are rejected."""
        with pytest.raises(InvalidAmount):
            Amount(value)

    def test_invalid_amount_is_validation_error(self):
        """Test the error hierarchy."""
        with pytest.raises(ValidationError):
            Amount(-5)

    @pytest.mark.skipif(
        not getattr(sys, "get_int_max_str_digits", lambda: 0)(),
        reason="interpreter has no integer string conversion limit",
    )
    def test_too_many_digits(self):
        """Test amounts that cannot be written as decimal are rejected up front."""
        limit = sys.get_int_max_str_digits()
        with pytest.raises(InvalidAmount, match="too many digits"):
            Amount("9" * (limit + 1))
        with pytest.raises(InvalidAmount, match="too many digits"):
            Amount(10 ** limit)

    def test_many_digits_within_limit(self):
        """Test long decimal strings are kept exactly."""
        text = "1" + "0" * 1000
        assert str(Amount(text)) == text


# ============================================================================
# Test Arithmetic And Comparison
# ============================================================================

class TestAmountBehaviour:
    """Tests for arithmetic, comparison and immutability."""

    def test_addition(self):
        """Test adding amounts."""
        assert Amount(100) + Amount(50) == Amount(150)
        assert Amount(100) + 50 == 150

    def test_sum(self):
        """Test summing amounts with the builtin sum."""
        assert sum([Amount(1), Amount(2), Amount(3)]) == Amount(6)

    def test_ordering(self):
        """Test ordering between amounts and integers."""
        assert Amount(1) < Amount(2)
        assert Amount(3) >= 3
        assert Amount(2) != Amount(3)

    def test_hashable(self):
        """Test that equal amounts hash alike."""
        assert len({Amount(7), Amount("7")}) == 1

    def test_immutable(self):
        """Test that an amount cannot be changed."""
        amount = Amount(1)
        with pytest.raises(AttributeError):
            amount._value = 2

    def test_repr_and_int(self):
        """Test conversions."""
        assert repr(Amount(9)) == "Amount(9)"
        assert int(Amount(9)) == 9
