"""
Key and address handling.

Provides the address codec interface and the Factoid implementation.
"""

from fatbatch.keys.interface import AddressCodec, KeyPair
from fatbatch.keys.factoid import FactoidAddressCodec, get_codec

__all__ = [
    "AddressCodec",
    "KeyPair",
    "FactoidAddressCodec",
    "get_codec",
]
