"""
Transaction model.

A Transaction moves or converts one input. It comes in two variants:

- Transaction: the unsigned payload plus its signing material (a local key
  pair, or nothing beyond the public input address when an external device
  will sign)
- SignedTransaction: a Transaction together with a detached signature and
  the RCD of the key that produced it

attach_signature() is the only way to go from the first to the second.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import structlog

from fatbatch.core.amount import Amount
from fatbatch.core.content import encode_content
from fatbatch.crypto.signer import RedeemCondition
from fatbatch.core.errors import (
    AddressMismatch,
    IllegalMutation,
    InvalidKey,
    SignatureLengthError,
)
from fatbatch.keys.factoid import get_codec
from fatbatch.keys.interface import (
    ED25519_SIGNATURE_LENGTH,
    AddressCodec,
    KeyPair,
)

logger = structlog.get_logger(__name__)


def as_bytes(value: Union[bytes, bytearray, str], what: str) -> bytes:
    """Accept raw bytes or a hex string."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes.fromhex(value)
        except ValueError:
            raise InvalidKey(f"{what} is not valid hex")
    raise InvalidKey(f"{what} must be bytes or a hex string, got {type(value).__name__}")


@dataclass(frozen=True)
class TransactionInput:
    """The single input of a transaction."""

    address: str
    amount: Amount
    asset_type: str

    def to_content(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "amount": self.amount.value,
            "type": self.asset_type,
        }


@dataclass(frozen=True)
class TransferEntry:
    """One destination of a value-moving transaction."""

    address: str
    amount: Amount

    def to_content(self) -> Dict[str, Any]:
        return {"address": self.address, "amount": self.amount.value}


@dataclass(frozen=True)
class Transaction:
    """
    An unsigned FAT-2 transaction.

    Built by TransactionBuilder, which enforces every invariant before
    construction. Exactly one of conversion / transfers is set.

    Attributes:
        input: Input address, amount and asset type
        conversion: Target asset type of a conversion
        transfers: Destinations of a transfer
        metadata_json: Canonical JSON text of the metadata, if any
        key_pair: Local signing key, absent when an external device signs
    """

    input: TransactionInput
    conversion: Optional[str] = None
    transfers: Tuple[TransferEntry, ...] = ()
    metadata_json: Optional[str] = None
    key_pair: Optional[KeyPair] = field(default=None, repr=False, compare=False)

    @property
    def input_address(self) -> str:
        return self.input.address

    @property
    def metadata(self) -> Any:
        """A fresh copy of the metadata (None when absent)."""
        if self.metadata_json is None:
            return None
        return json.loads(self.metadata_json)

    @property
    def is_conversion(self) -> bool:
        return self.conversion is not None

    @property
    def can_sign_locally(self) -> bool:
        return self.key_pair is not None

    @property
    def total_transferred(self) -> Amount:
        return sum((t.amount for t in self.transfers), Amount(0))

    def to_content(self) -> Dict[str, Any]:
        """Canonical content dict: input, conversion?, transfers?, metadata?"""
        content: Dict[str, Any] = {"input": self.input.to_content()}
        if self.conversion is not None:
            content["conversion"] = self.conversion
        if self.transfers:
            content["transfers"] = [t.to_content() for t in self.transfers]
        if self.metadata_json is not None:
            content["metadata"] = json.loads(self.metadata_json)
        return content

    def content_json(self) -> str:
        return encode_content(self.to_content())

    def __repr__(self) -> str:
        target = f"conversion={self.conversion}" if self.is_conversion else f"transfers={len(self.transfers)}"
        return (
            f"Transaction(input={self.input.address[:10]}..., amount={self.input.amount}, "
            f"type={self.input.asset_type}, {target})"
        )


@dataclass(frozen=True)
class SignedTransaction:
    """
    A transaction with its detached signature attached.

    Attributes:
        transaction: The signed payload
        signature: 64-byte detached signature
        rcd: Redeem condition naming the signing key
        timestamp: Shared timestamp of the data the signature covers
    """

    transaction: Transaction
    signature: bytes
    rcd: RedeemCondition
    timestamp: Optional[int] = None

    @property
    def input_address(self) -> str:
        return self.transaction.input_address

    def to_content(self) -> Dict[str, Any]:
        return self.transaction.to_content()


def attach_signature(
    tx: Union[Transaction, SignedTransaction],
    public_key: Union[bytes, str],
    signature: Union[bytes, str],
    timestamp: Optional[int] = None,
    codec: Optional[AddressCodec] = None,
) -> SignedTransaction:
    """
    Attach an externally produced signature to an unsigned transaction.

    Used for signatures coming from hardware wallets and other detached
    signers. The payload itself can never be changed here.

    Args:
        tx: The unsigned transaction
        public_key: Signer's raw public key (bytes or hex)
        signature: 64-byte detached signature (bytes or hex)
        timestamp: Shared timestamp the signature was produced for
        codec: Address codec (defaults to Factoid)

    Returns:
        SignedTransaction

    Raises:
        IllegalMutation: If tx is already signed
        SignatureLengthError: If the signature is not 64 bytes
        AddressMismatch: If the key does not control the input address
    """
    if isinstance(tx, SignedTransaction):
        raise IllegalMutation(
            "Transaction is already signed; start a new unsigned transaction to change it"
        )

    codec = codec or get_codec()
    pk = as_bytes(public_key, "Public key")
    sig = as_bytes(signature, "Signature")

    if len(sig) != ED25519_SIGNATURE_LENGTH:
        raise SignatureLengthError(
            f"Invalid signature length {len(sig)}, expected {ED25519_SIGNATURE_LENGTH}"
        )

    address = codec.public_key_to_address(pk)
    if address != tx.input_address:
        raise AddressMismatch(
            f"Public key ({pk.hex()}) for provided signature does not match input address"
        )

    logger.debug("signature_attached", input=tx.input_address[:12] + "...")

    return SignedTransaction(
        transaction=tx,
        signature=sig,
        rcd=RedeemCondition(public_key=pk),
        timestamp=timestamp,
    )
