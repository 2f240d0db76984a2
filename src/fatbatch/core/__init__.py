"""
Core data model.

Amounts, canonical content, transactions, batches, issuances and the
ledger entry they produce, plus the error hierarchy.
"""

from fatbatch.core.errors import FatError, NotSigned, ValidationError
from fatbatch.core.amount import Amount
from fatbatch.core.entry import LedgerEntry
from fatbatch.core.transaction import (
    SignedTransaction,
    Transaction,
    TransactionInput,
    TransferEntry,
    attach_signature,
)
from fatbatch.core.batch import BatchStatus, TransactionBatch
from fatbatch.core.issuance import Issuance, IssuanceBuilder

__all__ = [
    "FatError",
    "NotSigned",
    "ValidationError",
    "Amount",
    "LedgerEntry",
    "SignedTransaction",
    "Transaction",
    "TransactionInput",
    "TransferEntry",
    "attach_signature",
    "BatchStatus",
    "TransactionBatch",
    "Issuance",
    "IssuanceBuilder",
]
