"""
Transaction batch model.

Represents several transactions recorded in one ledger entry, with one
signature per member. Batches are produced by TransactionBatchBuilder.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import structlog

from fatbatch.core.content import decode_content
from fatbatch.core.entry import LedgerEntry
from fatbatch.core.errors import (
    EmptyBatch,
    MissingSignature,
    NotSigned,
    SignatureLengthError,
    ValidationError,
)
from fatbatch.core.transaction import SignedTransaction, Transaction
from fatbatch.crypto.marshal import marshal_data_sig
from fatbatch.crypto.signer import RedeemCondition, verify
from fatbatch.keys.interface import ED25519_SIGNATURE_LENGTH, AddressCodec

logger = structlog.get_logger(__name__)


class BatchStatus(str, Enum):
    """Signing state of a batch."""
    OPEN = "open"                            # Accepting transactions
    CONTENT_FROZEN = "content_frozen"        # Content and timestamp fixed, signing in progress
    PARTIALLY_SIGNED = "partially_signed"    # Waiting for external signatures
    FINALIZED = "finalized"                  # Every slot signed


@dataclass(frozen=True)
class TransactionBatch:
    """
    An immutable snapshot of a batch.

    A PARTIALLY_SIGNED batch is not usable as a ledger entry yet; it exposes
    which slots are pending and the exact data each pending signer has to
    sign. A FINALIZED batch exposes ext ids, the ledger entry and signature
    verification.

    Attributes:
        chain_id: Raw 32-byte token chain id
        transactions: Members, in signing order
        content: Canonical content text, frozen at first build
        timestamp: Shared unix timestamp (seconds)
        signatures: Signature per member, None while pending
        rcds: RCD per member, None while pending
        status: Signing state
        version: Content format version
    """

    chain_id: bytes
    transactions: Tuple[Transaction, ...]
    content: str
    timestamp: int
    signatures: Tuple[Optional[bytes], ...]
    rcds: Tuple[Optional[RedeemCondition], ...]
    status: BatchStatus
    version: int = 1

    def __post_init__(self):
        """Validate after initialization."""
        if isinstance(self.status, str):
            object.__setattr__(self, "status", BatchStatus(self.status))

        if not self.transactions:
            raise EmptyBatch("No Transactions Specified.")

        if len(self.signatures) != len(self.transactions) or len(self.rcds) != len(self.transactions):
            raise ValidationError(
                "Expecting the same number of signatures as there are number of transactions"
            )

        if self.status == BatchStatus.FINALIZED and self.pending_indices:
            raise MissingSignature(self.pending_indices[0])

    @property
    def size(self) -> int:
        return len(self.transactions)

    @property
    def chain_id_hex(self) -> str:
        return self.chain_id.hex()

    @property
    def pending_indices(self) -> Tuple[int, ...]:
        """Indices of members still waiting for a signature."""
        return tuple(
            i for i, (sig, rcd) in enumerate(zip(self.signatures, self.rcds))
            if sig is None or rcd is None
        )

    @property
    def is_complete(self) -> bool:
        return not self.pending_indices

    @property
    def is_finalized(self) -> bool:
        return self.status == BatchStatus.FINALIZED

    def pending_inputs(self) -> Dict[int, str]:
        """Map of pending slot index to the input address that must sign it."""
        return {i: self.transactions[i].input_address for i in self.pending_indices}

    def marshal_data(self, index: int) -> bytes:
        """
        Get the data that has to be hashed then signed for a member.

        External signers sign SHA-512 of these bytes.

        Args:
            index: Position of the member in the batch
        """
        if not 0 <= index < self.size:
            raise IndexError(f"No transaction at index {index}")
        return marshal_data_sig(index, self.timestamp, self.chain_id, self.content)

    @property
    def ext_ids(self) -> Tuple[bytes, ...]:
        """[timestamp, RCD_0, sig_0, RCD_1, sig_1, ...]"""
        if not self.is_finalized:
            raise MissingSignature(self.pending_indices[0] if self.pending_indices else 0)

        ext_ids: List[bytes] = [str(self.timestamp).encode("ascii")]
        for rcd, signature in zip(self.rcds, self.signatures):
            ext_ids.append(rcd.to_bytes())
            ext_ids.append(signature)
        return tuple(ext_ids)

    def ledger_entry(self) -> LedgerEntry:
        """
        Get the data for the ledger entry representing this batch.

        Raises:
            MissingSignature: If any member is unsigned
        """
        return LedgerEntry(
            chain_id=self.chain_id,
            ext_ids=self.ext_ids,
            content=self.content.encode("utf-8"),
        )

    def signed_transactions(self) -> Tuple[SignedTransaction, ...]:
        """Members paired with their signatures."""
        if not self.is_finalized:
            raise MissingSignature(self.pending_indices[0] if self.pending_indices else 0)

        return tuple(
            SignedTransaction(transaction=tx, signature=sig, rcd=rcd, timestamp=self.timestamp)
            for tx, sig, rcd in zip(self.transactions, self.signatures, self.rcds)
        )

    def verify_signature(self, index: int, codec: Optional[AddressCodec] = None) -> bool:
        """
        Verify the signature of one member.

        The RCD has to control the member's input address and the signature
        has to be valid for the member's marshalled data.

        Raises:
            NotSigned: If the member has no signature yet
        """
        signature = self.signatures[index]
        rcd = self.rcds[index]
        if signature is None or rcd is None:
            raise NotSigned(f"Transaction at index {index} not signed")

        if rcd.address(codec) != self.transactions[index].input_address:
            return False

        return verify(rcd, self.marshal_data(index), signature)

    def verify_signatures(self, codec: Optional[AddressCodec] = None) -> bool:
        """
        Verify every member's signature.

        Returns:
            True if all signatures are valid

        Raises:
            NotSigned: If any member has no signature yet
        """
        if not self.is_complete:
            raise NotSigned(f"Transaction at index {self.pending_indices[0]} not signed")

        results = [self.verify_signature(i, codec) for i in range(self.size)]
        if not all(results):
            logger.warning(
                "invalid_batch_signatures",
                chain_id=self.chain_id_hex[:8] + "...",
                invalid=[i for i, ok in enumerate(results) if not ok],
            )
        return all(results)

    @classmethod
    def from_entry(
        cls,
        entry: LedgerEntry,
        codec: Optional[AddressCodec] = None,
    ) -> "TransactionBatch":
        """
        Reconstruct a finalized batch from ledger data, for auditing.

        The stored content is kept byte for byte so signatures can be
        checked against it.

        Args:
            entry: Chain id, ext ids and content as stored on the ledger
            codec: Address codec

        Returns:
            FINALIZED TransactionBatch without signing material
        """
        from fatbatch.tx.builder import TransactionBuilder

        ext_ids = list(entry.ext_ids)
        if len(ext_ids) < 3 or len(ext_ids) % 2 != 1:
            raise ValidationError("Expecting a timestamp followed by RCD/signature pairs in ext ids")

        try:
            timestamp = int(ext_ids[0].decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            raise ValidationError("First ext id must be the decimal timestamp")

        rcds = tuple(RedeemCondition.from_bytes(raw) for raw in ext_ids[1::2])
        signatures = tuple(bytes(raw) for raw in ext_ids[2::2])
        for signature in signatures:
            if len(signature) != ED25519_SIGNATURE_LENGTH:
                raise SignatureLengthError(f"Invalid signature length {len(signature)}")

        try:
            content_text = entry.content.decode("utf-8")
            data = decode_content(content_text)
        except (UnicodeDecodeError, ValueError):
            raise ValidationError("Entry content is not valid JSON")

        if not isinstance(data, dict) or not isinstance(data.get("transactions"), list):
            raise ValidationError("Valid FAT-2 batches must include transactions")

        transactions = tuple(
            TransactionBuilder.from_content(item, codec) for item in data["transactions"]
        )
        if len(transactions) != len(signatures):
            raise ValidationError("Mismatch between transactions and the number of signatures provided")

        return cls(
            chain_id=entry.chain_id,
            transactions=transactions,
            content=content_text,
            timestamp=timestamp,
            signatures=signatures,
            rcds=rcds,
            status=BatchStatus.FINALIZED,
            version=data.get("version", 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "chain_id": self.chain_id_hex,
            "status": self.status.value,
            "size": self.size,
            "timestamp": self.timestamp,
            "pending_indices": list(self.pending_indices),
            "content": self.content,
        }

    def __repr__(self) -> str:
        return (
            f"TransactionBatch(chain={self.chain_id_hex[:8]}..., "
            f"status={self.status.value}, size={self.size})"
        )
