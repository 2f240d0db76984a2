"""
Transaction Builder - constructs FAT-2 transactions.

Collects the input, the conversion or transfers, and optional metadata,
then validates every invariant before producing an immutable Transaction.
Signing is not done here: the signed bytes depend on the batch the
transaction ends up in (position, shared timestamp, chain id).
"""

from typing import Any, Dict, List, Optional

import structlog

from fatbatch.core.amount import Amount, AmountLike
from fatbatch.core.content import canonical_metadata, is_utf8_text
from fatbatch.core.errors import (
    AssetTypeConflict,
    ConflictingField,
    ConservationViolation,
    DuplicateField,
    InvalidAddress,
    SelfTransferViolation,
    ValidationError,
)
from fatbatch.core.transaction import Transaction, TransactionInput, TransferEntry
from fatbatch.keys.factoid import get_codec
from fatbatch.keys.interface import AddressCodec, KeyPair

logger = structlog.get_logger(__name__)


class TransactionBuilder:
    """
    Builds and validates a single transaction.

    Usage:
        ```python
        # conversion of 150 pFCT to PEG, signed locally later on
        tx = (
            TransactionBuilder()
            .set_input("pFCT", "Fs1PkAEbmo1XNangSnxmKqi1PN5sVDbQ6zsnXCsMUejT66WaDgkm", 150)
            .set_conversion("PEG")
            .build()
        )

        # transfer from a public address, signed by an external device
        tx = (
            TransactionBuilder()
            .set_input("pFCT", public_address, 150)
            .add_transfer("FA3aECpw3gEZ7CMQvRNxEtKBGKAos3922oqYLcHQ9NqXHudC6YBM", 150)
            .build()
        )
        ```
    """

    def __init__(self, codec: Optional[AddressCodec] = None):
        """
        Initialize the transaction builder.

        Args:
            codec: Address codec (defaults to Factoid addresses)
        """
        self.codec = codec or get_codec()

        self._input: Optional[TransactionInput] = None
        self._key_pair: Optional[KeyPair] = None
        self._conversion: Optional[str] = None
        self._transfers: List[TransferEntry] = []
        self._metadata_json: Optional[str] = None

    def set_input(
        self,
        asset_type: str,
        address: str,
        amount: AmountLike,
    ) -> "TransactionBuilder":
        """
        Set the input of the transaction.

        Args:
            asset_type: Asset to convert or transfer from (e.g. "pFCT")
            address: Private address to sign locally, or public address to
                defer signing to an external signer
            amount: Integer amount of token units (int or decimal string)

        Returns:
            The builder
        """
        if self._input is not None:
            raise DuplicateField("Input already specified")

        if not isinstance(asset_type, str) or not asset_type:
            raise ValidationError("Input asset type must be a non-empty string")
        if not is_utf8_text(asset_type):
            raise ValidationError("Input asset type must only contain valid unicode text")

        if self.codec.is_valid_private_address(address):
            key_pair = self.codec.key_pair(address)
            public_address = self.codec.public_key_to_address(key_pair.public_key)
        elif self.codec.is_valid_public_address(address):
            key_pair = None
            public_address = address
        else:
            raise InvalidAddress(
                "Input address must be either a valid private Factoid address or a Factoid public address"
            )

        self._input = TransactionInput(
            address=public_address,
            amount=Amount.parse(amount),
            asset_type=asset_type,
        )
        self._key_pair = key_pair
        return self

    def add_transfer(self, address: str, amount: AmountLike) -> "TransactionBuilder":
        """
        Add a transfer destination.

        Args:
            address: Public destination address
            amount: Integer amount of token units

        Returns:
            The builder
        """
        if self._conversion is not None:
            raise ConflictingField("Conversion already specified")

        if not self.codec.is_valid_public_address(address):
            raise InvalidAddress("Transfer address must be a valid public Factoid address")

        self._transfers.append(TransferEntry(address=address, amount=Amount.parse(amount)))
        return self

    def set_conversion(self, asset_type: str) -> "TransactionBuilder":
        """
        Convert the whole input into another asset.

        Args:
            asset_type: Target asset type (e.g. "PEG")

        Returns:
            The builder
        """
        if self._transfers:
            raise ConflictingField("One or more transfer(s) already specified for this transaction")
        if self._conversion is not None:
            raise DuplicateField("Conversion already specified")
        if isinstance(asset_type, str) and not is_utf8_text(asset_type):
            raise ValidationError("Conversion asset type must only contain valid unicode text")

        self._conversion = asset_type
        return self

    def set_metadata(self, metadata: Any) -> "TransactionBuilder":
        """
        Set arbitrary metadata. Must be JSON serializable.

        Returns:
            The builder
        """
        self._metadata_json = canonical_metadata(metadata)
        return self

    def build(self) -> Transaction:
        """
        Validate and build the transaction.

        Returns:
            Immutable, unsigned Transaction

        Raises:
            ValidationError: The first violated invariant
        """
        if self._input is None:
            raise ValidationError("Input must have an address, type, and amount specified")

        if self._conversion is None and not self._transfers:
            raise ValidationError("Either a conversion or transfer must be specified")

        if self._conversion is not None:
            if not isinstance(self._conversion, str) or not self._conversion:
                raise ValidationError("Conversion asset type must be a non-empty string")
            if self._conversion == self._input.asset_type:
                raise AssetTypeConflict("Conversion asset cannot be the same as the input asset")

        if self._transfers:
            total = Amount(0)
            for transfer in self._transfers:
                if transfer.address == self._input.address:
                    raise SelfTransferViolation("Input cannot be the same as the transfer address")
                total = total + transfer.amount

            if total != self._input.amount:
                raise ConservationViolation(
                    f"Transfer amount ({total}) must equal input amount ({self._input.amount})"
                )

        tx = Transaction(
            input=self._input,
            conversion=self._conversion,
            transfers=tuple(self._transfers),
            metadata_json=self._metadata_json,
            key_pair=self._key_pair,
        )

        logger.debug(
            "transaction_built",
            input=self._input.address[:12] + "...",
            amount=str(self._input.amount),
            asset_type=self._input.asset_type,
            conversion=self._conversion,
            transfers=len(self._transfers),
            local_key=self._key_pair is not None,
        )

        return tx

    @classmethod
    def from_content(
        cls,
        content: Dict[str, Any],
        codec: Optional[AddressCodec] = None,
    ) -> Transaction:
        """
        Rebuild an unsigned transaction from its ledger content.

        The content goes through the same validation as a freshly built
        transaction, so malformed ledger data is rejected.

        Args:
            content: Decoded content dict of one transaction
            codec: Address codec

        Returns:
            Transaction without signing material
        """
        if not isinstance(content, dict):
            raise ValidationError("Transaction content must be an object")

        tx_input = content.get("input")
        if not isinstance(tx_input, dict):
            raise ValidationError("Valid FAT-2 transactions must include input")

        builder = cls(codec)
        builder.set_input(tx_input.get("type"), tx_input.get("address"), tx_input.get("amount"))

        if "conversion" in content:
            builder.set_conversion(content["conversion"])

        for transfer in content.get("transfers") or []:
            if not isinstance(transfer, dict):
                raise ValidationError("Malformed transfer entry")
            builder.add_transfer(transfer.get("address"), transfer.get("amount"))

        if "metadata" in content:
            builder.set_metadata(content["metadata"])

        # ledger data never carries private keys
        if builder._key_pair is not None:
            raise InvalidAddress("Ledger content must reference a public input address")

        return builder.build()
