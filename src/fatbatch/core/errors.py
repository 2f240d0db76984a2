"""
Error types raised while building, signing and verifying transactions.

Every builder or validation failure derives from ValidationError so callers
can catch the whole family at once. Verification of a bad signature is not
an error (it returns False); only a missing signature raises NotSigned.
"""

from typing import Optional


class FatError(Exception):
    """Base class for all fatbatch errors."""
    pass


class ValidationError(FatError):
    """Raised when a builder call or build() rejects its input."""
    pass


class InvalidAddress(ValidationError):
    """Address string is neither a valid private nor public address."""
    pass


class InvalidAmount(ValidationError):
    """Amount is negative, fractional, or of an unsupported type."""
    pass


class InvalidMetadata(ValidationError):
    """Metadata cannot be serialized to JSON."""
    pass


class InvalidKey(ValidationError):
    """Key material is malformed."""
    pass


class ConflictingField(ValidationError):
    """Conversion and transfers were both specified."""
    pass


class DuplicateField(ValidationError):
    """A single-valued field was specified twice."""
    pass


class IllegalMutation(ValidationError):
    """Attempt to change an object that no longer accepts changes."""
    pass


class SignatureRequiredFirst(IllegalMutation):
    """Transactions were added after the batch content was frozen."""
    pass


class SignatureLengthError(ValidationError):
    """Signature does not have the fixed Ed25519 length."""
    pass


class AddressMismatch(ValidationError):
    """Public key does not belong to the transaction's input address."""
    pass


class EmptyBatch(ValidationError):
    """A batch was built without any transactions."""
    pass


class UnknownInput(ValidationError):
    """No batch member spends from the given input address."""
    pass


class MissingSignature(ValidationError):
    """A batch slot is still waiting for its signature."""

    def __init__(self, index: int, message: Optional[str] = None):
        self.index = index
        super().__init__(
            message or f"Expecting signature for transaction index {index}. No signature found."
        )


class ConservationViolation(ValidationError):
    """Transfer amounts do not add up to the input amount."""
    pass


class SelfTransferViolation(ValidationError):
    """A transfer sends back to the input address."""
    pass


class AssetTypeConflict(ValidationError):
    """Conversion target is the same asset as the input."""
    pass


class NotSigned(FatError):
    """Verification was requested for something that carries no signature."""
    pass
