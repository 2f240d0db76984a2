"""
Token issuance.

The genesis record of a token, signed once by the issuer's identity key
(sk1) with the same marshal-for-signature and signer primitives used for
transactions.
"""

import hashlib
import json
import re
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

from fatbatch.core.amount import Amount, AmountLike
from fatbatch.core.content import canonical_metadata, encode_content, is_utf8_text
from fatbatch.core.entry import LedgerEntry
from fatbatch.core.errors import InvalidAmount, ValidationError
from fatbatch.crypto.marshal import marshal_data_sig
from fatbatch.crypto.signer import RedeemCondition, sign, verify
from fatbatch.keys.factoid import is_valid_identity_chain_id, sk1_key_pair

logger = structlog.get_logger(__name__)

_SYMBOL = re.compile(r"^[A-Z]{1,4}$")

DEFAULT_TOKEN_TYPE = "FAT-0"


def token_chain_id(token_id: str, root_chain_id: str) -> bytes:
    """
    Chain id of a token issued by an identity.

    Derived like any chain id from its first entry's ext ids
    ["token", token_id, "issuer", root_chain_id]: the SHA-256 of the
    concatenated SHA-256 hashes of each ext id.
    """
    ext_ids = [b"token", token_id.encode("utf-8"), b"issuer", bytes.fromhex(root_chain_id)]
    return hashlib.sha256(b"".join(hashlib.sha256(e).digest() for e in ext_ids)).digest()


@dataclass(frozen=True)
class Issuance:
    """
    A signed token issuance.

    Attributes:
        token_id: Token identifier chosen by the issuer
        root_chain_id: Issuer identity root chain id
        token_type: Token standard tag
        symbol: 1-4 capital letters
        supply: Maximum supply
        salt: Random salt making the content unique
        name: Optional human readable name
        metadata_json: Canonical JSON of optional metadata
        content: Canonical content text (what is signed and stored)
        timestamp: Unix timestamp the signature covers
        chain_id: Token chain id
        rcd: RCD of the sk1 key
        signature: Detached signature
    """

    token_id: str
    root_chain_id: str
    token_type: str
    symbol: str
    supply: Amount
    salt: str
    name: Optional[str]
    metadata_json: Optional[str]
    content: str
    timestamp: int
    chain_id: bytes
    rcd: RedeemCondition
    signature: bytes

    @property
    def chain_id_hex(self) -> str:
        return self.chain_id.hex()

    def marshal_data(self) -> bytes:
        return marshal_data_sig(0, self.timestamp, self.chain_id, self.content)

    @property
    def ext_ids(self) -> Tuple[bytes, ...]:
        return (str(self.timestamp).encode("ascii"), self.rcd.to_bytes(), self.signature)

    def ledger_entry(self) -> LedgerEntry:
        return LedgerEntry(
            chain_id=self.chain_id,
            ext_ids=self.ext_ids,
            content=self.content.encode("utf-8"),
        )

    def verify_signature(self) -> bool:
        return verify(self.rcd, self.marshal_data(), self.signature)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_id": self.token_id,
            "root_chain_id": self.root_chain_id,
            "chain_id": self.chain_id_hex,
            "timestamp": self.timestamp,
            "content": self.content,
        }


class IssuanceBuilder:
    """
    Builds and signs a token issuance.

    Usage:
        ```python
        issuance = (
            IssuanceBuilder(root_chain_id, "mytoken", sk1)
            .symbol("TTK")
            .supply(1_000_000)
            .name("Test Token")
            .build()
        )
        ```
    """

    def __init__(
        self,
        root_chain_id: str,
        token_id: str,
        sk1: str,
        token_type: str = DEFAULT_TOKEN_TYPE,
        clock: Optional[Callable[[], float]] = None,
    ):
        if not is_valid_identity_chain_id(root_chain_id):
            raise ValidationError(
                "You must include a valid issuer identity Root Chain Id to issue a token"
            )
        if not isinstance(token_id, str) or not token_id or not is_utf8_text(token_id):
            raise ValidationError("Token id is a required string")
        if not isinstance(token_type, str) or not token_type or not is_utf8_text(token_type):
            raise ValidationError("Token type must be a non empty string")

        self._root_chain_id = root_chain_id
        self._token_id = token_id
        self._key_pair = sk1_key_pair(sk1)
        self._token_type = token_type
        self._clock = clock or time.time

        self._name: Optional[str] = None
        self._symbol: Optional[str] = None
        self._supply: Optional[Amount] = None
        self._salt: Optional[str] = None
        self._metadata_json: Optional[str] = None

    def name(self, name: str) -> "IssuanceBuilder":
        if not isinstance(name, str) or not name or not is_utf8_text(name):
            raise ValidationError("Token name must be defined")
        self._name = name
        return self

    def symbol(self, symbol: str) -> "IssuanceBuilder":
        if not isinstance(symbol, str) or not _SYMBOL.match(symbol):
            raise ValidationError("Token symbol must be 1 - 4 capital letters A-Z")
        self._symbol = symbol
        return self

    def supply(self, supply: AmountLike) -> "IssuanceBuilder":
        amount = Amount.parse(supply)
        if amount.is_zero:
            raise InvalidAmount("Supply must be > 0")
        self._supply = amount
        return self

    def salt(self, salt: str) -> "IssuanceBuilder":
        if not isinstance(salt, str) or not salt or not is_utf8_text(salt):
            raise ValidationError("Salt must be a non empty string, if defined")
        self._salt = salt
        return self

    def metadata(self, metadata: Any) -> "IssuanceBuilder":
        self._metadata_json = canonical_metadata(metadata)
        return self

    def build(self) -> Issuance:
        """
        Validate, serialize and sign the issuance.

        Raises:
            ValidationError: If symbol or supply is missing
        """
        if self._symbol is None:
            raise ValidationError("Token symbol must be defined")
        if self._supply is None:
            raise ValidationError("Token supply must be defined")

        salt = self._salt or secrets.token_hex(32)

        content: Dict[str, Any] = {
            "type": self._token_type,
            "supply": self._supply.value,
            "symbol": self._symbol,
        }
        if self._name is not None:
            content["name"] = self._name
        content["salt"] = salt
        if self._metadata_json is not None:
            content["metadata"] = json.loads(self._metadata_json)

        content_text = encode_content(content)
        chain_id = token_chain_id(self._token_id, self._root_chain_id)
        timestamp = int(self._clock())

        signature = sign(self._key_pair, marshal_data_sig(0, timestamp, chain_id, content_text))

        issuance = Issuance(
            token_id=self._token_id,
            root_chain_id=self._root_chain_id,
            token_type=self._token_type,
            symbol=self._symbol,
            supply=self._supply,
            salt=salt,
            name=self._name,
            metadata_json=self._metadata_json,
            content=content_text,
            timestamp=timestamp,
            chain_id=chain_id,
            rcd=RedeemCondition(public_key=self._key_pair.public_key),
            signature=signature,
        )

        logger.info(
            "issuance_built",
            token_id=self._token_id,
            symbol=self._symbol,
            chain_id=issuance.chain_id_hex[:8] + "...",
        )
        return issuance

