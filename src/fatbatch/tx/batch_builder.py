"""
Transaction Batch Builder - two-phase batch signing.

First pass (build): the batch content and timestamp are frozen and every
member whose transaction holds a local key is signed. If some members can
only be signed by an external device, the batch comes back
PARTIALLY_SIGNED. Second pass: the missing signatures are supplied and
build() is called again to finalize.

    OPEN -> CONTENT_FROZEN -> PARTIALLY_SIGNED -> FINALIZED
                           \\----------------------^
"""

import time
from typing import Callable, List, Optional, Tuple, Union

import structlog

from fatbatch.config import FatConfig, get_config
from fatbatch.core.batch import BatchStatus, TransactionBatch
from fatbatch.core.content import batch_content, encode_content
from fatbatch.core.errors import (
    EmptyBatch,
    IllegalMutation,
    MissingSignature,
    SignatureRequiredFirst,
    UnknownInput,
    ValidationError,
)
from fatbatch.core.transaction import SignedTransaction, Transaction, attach_signature
from fatbatch.crypto.marshal import chain_id_bytes, marshal_data_sig
from fatbatch.crypto.signer import RedeemCondition, sign
from fatbatch.keys.factoid import get_codec
from fatbatch.keys.interface import AddressCodec

logger = structlog.get_logger(__name__)


class TransactionBatchBuilder:
    """
    Builds and signs a batch of transactions sharing one ledger entry.

    Usage:
        ```python
        builder = TransactionBatchBuilder()
        builder.add_transaction(local_tx).add_transaction(device_tx)

        batch = builder.build()              # PARTIALLY_SIGNED
        data = batch.marshal_data(1)         # hand to the device
        builder.supply_external_signature(device_tx.input_address, public_key, signature)

        batch = builder.build()              # FINALIZED
        entry = batch.ledger_entry()
        ```

    Signatures are associated with members by input address: a supplied
    signature fills the first still-pending member spending from that
    address.
    """

    def __init__(
        self,
        chain_id: Optional[Union[str, bytes]] = None,
        config: Optional[FatConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        codec: Optional[AddressCodec] = None,
    ):
        """
        Initialize the batch builder.

        Args:
            chain_id: Token chain id (defaults to the configured one)
            config: Configuration
            clock: Returns the current unix time in seconds
            codec: Address codec
        """
        self.config = config or get_config()
        self.chain_id = chain_id_bytes(chain_id if chain_id is not None else self.config.token_chain_id)
        self.version = self.config.batch_version
        self.codec = codec or get_codec()
        self._clock = clock or time.time

        self._status = BatchStatus.OPEN
        self._transactions: List[Transaction] = []
        self._content: Optional[str] = None
        self._timestamp: Optional[int] = None
        self._signatures: List[Optional[bytes]] = []
        self._rcds: List[Optional[RedeemCondition]] = []
        self._batch: Optional[TransactionBatch] = None

    @classmethod
    def from_batch(
        cls,
        batch: TransactionBatch,
        config: Optional[FatConfig] = None,
        codec: Optional[AddressCodec] = None,
    ) -> "TransactionBatchBuilder":
        """
        Resume a previously built batch, e.g. to collect its remaining signatures.

        Content, timestamp and the signatures gathered so far are carried
        over unchanged.
        """
        builder = cls(chain_id=batch.chain_id, config=config, codec=codec)
        builder.version = batch.version
        builder._transactions = list(batch.transactions)
        builder._content = batch.content
        builder._timestamp = batch.timestamp
        builder._signatures = list(batch.signatures)
        builder._rcds = list(batch.rcds)
        builder._status = batch.status
        if batch.status == BatchStatus.FINALIZED:
            builder._batch = batch
        return builder

    @property
    def status(self) -> BatchStatus:
        return self._status

    @property
    def size(self) -> int:
        return len(self._transactions)

    @property
    def pending_indices(self) -> Tuple[int, ...]:
        if self._status == BatchStatus.OPEN:
            return tuple(range(len(self._transactions)))
        return tuple(i for i, sig in enumerate(self._signatures) if sig is None)

    @property
    def is_complete(self) -> bool:
        return self._status != BatchStatus.OPEN and not self.pending_indices

    def add_transaction(self, tx: Transaction) -> "TransactionBatchBuilder":
        """
        Append a transaction to the batch.

        Args:
            tx: Unsigned transaction

        Returns:
            The builder

        Raises:
            SignatureRequiredFirst: If the batch content is already frozen
        """
        if self._status != BatchStatus.OPEN:
            raise SignatureRequiredFirst(
                "Batch content is frozen; transactions can no longer be added"
            )
        if isinstance(tx, SignedTransaction):
            raise IllegalMutation(
                "Signatures are computed over the batch; add the unsigned transaction instead"
            )
        if not isinstance(tx, Transaction):
            raise ValidationError(f"Malformed transaction {len(self._transactions)}")

        self._transactions.append(tx)
        return self

    def supply_external_signature(
        self,
        input_address: str,
        public_key: Union[bytes, str],
        signature: Union[bytes, str],
    ) -> "TransactionBatchBuilder":
        """
        Assign an externally produced signature (hardware wallets etc).

        The signature must cover SHA-512 of batch.marshal_data(index) for
        the member it is meant for.

        Args:
            input_address: Input address of the member being signed
            public_key: Signer's raw public key
            signature: 64-byte detached signature

        Returns:
            The builder

        Raises:
            IllegalMutation: Before the first build, once finalized, or if
                every member spending from input_address is already signed
            UnknownInput: If no member spends from input_address
            SignatureLengthError: If the signature is not 64 bytes
            AddressMismatch: If public_key does not control input_address
        """
        if self._status == BatchStatus.OPEN:
            raise IllegalMutation("Build the batch before supplying external signatures")
        if self._status == BatchStatus.FINALIZED:
            raise IllegalMutation("Batch is already finalized")

        matching = [i for i, tx in enumerate(self._transactions) if tx.input_address == input_address]
        if not matching:
            raise UnknownInput(
                f"Transaction {input_address} not found, so signature cannot be assigned"
            )

        pending = [i for i in matching if self._signatures[i] is None]
        if not pending:
            raise IllegalMutation(f"Every transaction from {input_address} is already signed")

        index = pending[0]
        signed = attach_signature(
            self._transactions[index],
            public_key,
            signature,
            timestamp=self._timestamp,
            codec=self.codec,
        )
        self._signatures[index] = signed.signature
        self._rcds[index] = signed.rcd

        logger.info(
            "external_signature_supplied",
            index=index,
            input=input_address[:12] + "...",
            remaining=len(self.pending_indices),
        )
        return self

    def build(self) -> TransactionBatch:
        """
        Build the batch.

        The first call freezes the content and signs every member holding a
        local key; it returns a PARTIALLY_SIGNED batch if external signatures
        are still needed. Later calls finalize once they are all supplied.

        Returns:
            TransactionBatch in PARTIALLY_SIGNED or FINALIZED state

        Raises:
            EmptyBatch: If no transactions were added
            MissingSignature: On a later call while a member is still unsigned
        """
        if self._status == BatchStatus.FINALIZED:
            return self._batch

        if not self._transactions:
            raise EmptyBatch("No Transactions Specified.")

        if self._status == BatchStatus.OPEN:
            self._freeze()
            self._sign_locally()
        else:
            if len(self._signatures) != len(self._transactions) or len(self._rcds) != len(self._transactions):
                raise ValidationError(
                    "Expecting the same number of signatures as there are number of transactions"
                )
            pending = self.pending_indices
            if pending:
                raise MissingSignature(pending[0])

        if self.pending_indices:
            self._status = BatchStatus.PARTIALLY_SIGNED
            batch = self._snapshot()
            logger.info(
                "batch_partially_signed",
                chain_id=batch.chain_id_hex[:8] + "...",
                size=batch.size,
                pending=list(batch.pending_indices),
            )
            return batch

        self._status = BatchStatus.FINALIZED
        self._batch = self._snapshot()
        logger.info(
            "batch_finalized",
            chain_id=self._batch.chain_id_hex[:8] + "...",
            size=self._batch.size,
            timestamp=self._timestamp,
        )
        return self._batch

    def _freeze(self) -> None:
        """Compute content and timestamp; neither changes afterwards."""
        content = batch_content([tx.to_content() for tx in self._transactions], self.version)
        self._content = encode_content(content)
        self._timestamp = int(self._clock())
        self._signatures = [None] * len(self._transactions)
        self._rcds = [None] * len(self._transactions)
        self._status = BatchStatus.CONTENT_FROZEN

        logger.debug(
            "batch_content_frozen",
            size=len(self._transactions),
            timestamp=self._timestamp,
            content_size=len(self._content),
        )

    def _sign_locally(self) -> None:
        for index, tx in enumerate(self._transactions):
            if not tx.can_sign_locally:
                continue

            data = marshal_data_sig(index, self._timestamp, self.chain_id, self._content)
            self._signatures[index] = sign(tx.key_pair, data)
            self._rcds[index] = RedeemCondition(public_key=tx.key_pair.public_key)

    def _snapshot(self) -> TransactionBatch:
        return TransactionBatch(
            chain_id=self.chain_id,
            transactions=tuple(self._transactions),
            content=self._content,
            timestamp=self._timestamp,
            signatures=tuple(self._signatures),
            rcds=tuple(self._rcds),
            status=self._status,
            version=self.version,
        )
