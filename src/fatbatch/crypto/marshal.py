"""
Marshal-for-signature.

The bytes that get hashed and signed for the signer at a given position:

    str(index) || str(timestamp) || chain_id (raw 32 bytes) || content

Verifiers rebuild this sequence from ledger-stored data, so it has to be
byte-for-byte reproducible.
"""

from typing import Union

from fatbatch.core.errors import ValidationError

CHAIN_ID_LENGTH = 32


def chain_id_bytes(chain_id: Union[str, bytes]) -> bytes:
    """
    Normalize a chain id given as raw bytes or as a 64-character hex string.

    Raises:
        ValidationError: If the chain id is not 32 bytes
    """
    if isinstance(chain_id, str):
        try:
            raw = bytes.fromhex(chain_id)
        except ValueError:
            raise ValidationError(f"Chain id is not valid hex: {chain_id!r}")
    elif isinstance(chain_id, (bytes, bytearray)):
        raw = bytes(chain_id)
    else:
        raise ValidationError(f"Chain id must be bytes or a hex string, got {type(chain_id).__name__}")

    if len(raw) != CHAIN_ID_LENGTH:
        raise ValidationError(f"Chain id must be {CHAIN_ID_LENGTH} bytes, got {len(raw)}")
    return raw


def marshal_data_sig(
    index: int,
    timestamp: int,
    chain_id: Union[str, bytes],
    content: Union[str, bytes],
) -> bytes:
    """
    Assemble the data that needs to be hashed then signed.

    Args:
        index: Position of the signer within the batch
        timestamp: Shared unix timestamp (seconds) of the batch
        chain_id: Token chain id, raw or hex
        content: Canonical content, text or UTF-8 bytes

    Returns:
        The marshalled bytes
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    return b"".join([
        str(int(index)).encode("ascii"),
        str(int(timestamp)).encode("ascii"),
        chain_id_bytes(chain_id),
        bytes(content),
    ])
