"""
fatbatch

Builds and signs FAT-2 (PegNet) transaction batches for Factom token chains.
Several transactions are recorded in one ledger entry, each signed by the
key that controls its input address, either locally or by an external
signer such as a hardware wallet.
"""

__version__ = "0.1.0"

from fatbatch.core.amount import Amount
from fatbatch.core.batch import BatchStatus, TransactionBatch
from fatbatch.core.entry import LedgerEntry
from fatbatch.core.issuance import Issuance, IssuanceBuilder
from fatbatch.core.transaction import SignedTransaction, Transaction, attach_signature
from fatbatch.tx.batch_builder import TransactionBatchBuilder
from fatbatch.tx.builder import TransactionBuilder

__all__ = [
    "Amount",
    "BatchStatus",
    "TransactionBatch",
    "LedgerEntry",
    "Issuance",
    "IssuanceBuilder",
    "SignedTransaction",
    "Transaction",
    "attach_signature",
    "TransactionBatchBuilder",
    "TransactionBuilder",
]
