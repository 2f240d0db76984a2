"""
Signing primitives.

Marshalling of the data covered by a signature, Ed25519 signing and
verification, and redeem conditions (RCDs).
"""

from fatbatch.crypto.marshal import chain_id_bytes, marshal_data_sig
from fatbatch.crypto.signer import RedeemCondition, sign, verify

__all__ = [
    "chain_id_bytes",
    "marshal_data_sig",
    "RedeemCondition",
    "sign",
    "verify",
]
