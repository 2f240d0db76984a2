"""
Canonical content encoding.

The content text is both what is signed and what is stored on the ledger,
so its encoding is fixed: compact JSON, keys in insertion order, UTF-8 kept
as is, and integers written with all of their digits.
"""

import json
from typing import Any, Dict, List

from fatbatch.core.errors import InvalidMetadata

BATCH_VERSION = 1


def encode_content(obj: Any) -> str:
    """
    Serialize obj to its canonical JSON text.

    Python integers are written exactly regardless of size, so amounts never
    lose precision. NaN and infinities are not valid JSON and are rejected.
    """
    return json.dumps(
        obj,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def decode_content(text) -> Any:
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    return json.loads(text)


def is_utf8_text(text: str) -> bool:
    """Check that text can be written to the ledger as UTF-8 (no lone surrogates)."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def canonical_metadata(value: Any) -> str:
    """
    Return the canonical JSON text of transaction metadata.

    Raises:
        InvalidMetadata: If value cannot be serialized, or its text is not
            valid UTF-8
    """
    try:
        text = encode_content(value)
    except (TypeError, ValueError) as e:
        raise InvalidMetadata(f"Transaction metadata must be a valid JSON object or primitive: {e}")

    if not is_utf8_text(text):
        raise InvalidMetadata("Transaction metadata must only contain valid unicode text")
    return text


def batch_content(transactions: List[Dict[str, Any]], version: int = BATCH_VERSION) -> Dict[str, Any]:
    """Assemble the batch payload from per-transaction content dicts."""
    return {"version": version, "transactions": list(transactions)}
