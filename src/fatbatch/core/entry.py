"""
Ledger entry contract.

What a finalized batch or issuance hands to whatever builds and submits the
actual ledger entry: chain id, external ids and content.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from fatbatch.core.errors import ValidationError


@dataclass(frozen=True)
class LedgerEntry:
    """
    Data needed to assemble a ledger entry.

    Attributes:
        chain_id: Raw 32-byte chain id
        ext_ids: [timestamp, RCD_0, sig_0, RCD_1, sig_1, ...]
        content: Canonical content bytes
    """

    chain_id: bytes
    ext_ids: Tuple[bytes, ...]
    content: bytes

    @property
    def chain_id_hex(self) -> str:
        return self.chain_id.hex()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "chain_id": self.chain_id.hex(),
            "ext_ids": [ext_id.hex() for ext_id in self.ext_ids],
            "content": self.content.decode("utf-8"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerEntry":
        """Inverse of to_dict."""
        try:
            return cls(
                chain_id=bytes.fromhex(data["chain_id"]),
                ext_ids=tuple(bytes.fromhex(ext_id) for ext_id in data["ext_ids"]),
                content=data["content"].encode("utf-8"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ValidationError(f"Malformed ledger entry: {e}")

    def __repr__(self) -> str:
        return (
            f"LedgerEntry(chain_id={self.chain_id.hex()[:8]}..., "
            f"ext_ids={len(self.ext_ids)}, content={len(self.content)} bytes)"
        )
