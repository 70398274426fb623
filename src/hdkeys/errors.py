"""Exception hierarchy for key derivation and message signing.

Every error is fatal: cryptographic and format violations are raised to
the direct caller and never retried or partially recovered.
"""

from typing import Optional

__all__ = [
    "HDKeysError",
    "KeyDerivationError",
    "InvalidEntropyLengthError",
    "InvalidRootSecretError",
    "InvalidKeyLengthError",
    "ChildIndexOverflowError",
    "HardenedDerivationError",
    "InvalidDerivationPathError",
    "MnemonicError",
    "DecodeError",
    "MissingAlgError",
    "UnsupportedAlgError",
    "InvalidAddressFormatError",
    "NonPubKeyHashAddressError",
    "InvalidCoseKeyError",
    "SignatureVerificationError",
]


class HDKeysError(Exception):
    """Base exception for all hdkeys errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class KeyDerivationError(HDKeysError):
    """Raised when a key cannot be created or derived."""
    pass


class InvalidEntropyLengthError(KeyDerivationError):
    """Raised when root entropy is not 16, 20, 24, 28 or 32 bytes."""

    def __init__(self, length: int) -> None:
        super().__init__(
            f"expected 16, 20, 24, 28 or 32 bytes for the root entropy, got {length}"
        )
        self.length = length


class InvalidRootSecretError(KeyDerivationError):
    """Raised by the weak root key guard."""
    pass


class InvalidKeyLengthError(KeyDerivationError):
    """Raised when key bytes have the wrong size."""

    def __init__(self, expected: int, actual: int, kind: str = "private key") -> None:
        super().__init__(f"expected a {expected} byte {kind}, got {actual} bytes")
        self.expected = expected
        self.actual = actual


class ChildIndexOverflowError(KeyDerivationError):
    """Raised when a child index does not fit in 4 bytes."""

    def __init__(self, index: int) -> None:
        super().__init__(f"child index out of range [0, 2^32): {index}")
        self.index = index


class HardenedDerivationError(KeyDerivationError):
    """Raised when a public key is asked for a hardened child."""
    pass


class InvalidDerivationPathError(KeyDerivationError):
    """Raised when a textual derivation path cannot be parsed."""
    pass


class MnemonicError(HDKeysError):
    """Raised when a phrase cannot be converted to or from entropy."""
    pass


class DecodeError(HDKeysError):
    """Raised when wire bytes are not a valid envelope or key.

    Attributes:
        field: Name of the offending field, if a single field is at fault
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class MissingAlgError(DecodeError):
    """Raised when the algorithm field is absent."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="alg")


class UnsupportedAlgError(DecodeError):
    """Raised when the algorithm field is not EdDSA (-8)."""

    def __init__(self, message: str, alg: object = None) -> None:
        super().__init__(message, field="alg")
        self.alg = alg


class InvalidAddressFormatError(DecodeError):
    """Raised when an address is missing, not bytes or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="address")


class NonPubKeyHashAddressError(DecodeError):
    """Raised when an address spending credential is a script hash."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="address")


class InvalidCoseKeyError(DecodeError):
    """Raised when a COSE key field has the wrong value."""
    pass


class SignatureVerificationError(HDKeysError):
    """Raised when a signature does not match the message and key."""
    pass
