"""
Transaction module.

Handles transaction construction and two-phase batch signing.
"""

from fatbatch.tx.builder import TransactionBuilder
from fatbatch.tx.batch_builder import TransactionBatchBuilder

__all__ = [
    "TransactionBuilder",
    "TransactionBatchBuilder",
]
