"""Key value types and the signer interface.

Signing flow:
1. Derive a leaf key from a root key
2. Hand the key to an envelope builder as a ``PrivateKey``
3. The builder asks for ``sign(message)`` and gets a ``Signature`` back
4. Verifiers only ever need the ``PubKey``
"""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass

from hdkeys.errors import InvalidKeyLengthError, SignatureVerificationError
from hdkeys.keys import ed25519

# BLAKE2b-224 digest size used for key hash credentials
PUB_KEY_HASH_SIZE = 28


@dataclass(frozen=True)
class PubKey:
    """32-byte Ed25519 public key."""

    bytes: bytes

    def __post_init__(self) -> None:
        if len(self.bytes) != ed25519.PUBLIC_KEY_SIZE:
            raise InvalidKeyLengthError(
                ed25519.PUBLIC_KEY_SIZE, len(self.bytes), kind="public key"
            )

    @classmethod
    def from_hex(cls, value: str) -> "PubKey":
        return cls(bytes.fromhex(value))

    def hex(self) -> str:
        return self.bytes.hex()

    def hash(self) -> bytes:
        """Key hash credential (BLAKE2b-224 of the key)."""
        return hashlib.blake2b(self.bytes, digest_size=PUB_KEY_HASH_SIZE).digest()

    def verify(self, message: bytes, signature: bytes) -> None:
        """Verify a raw 64-byte signature.

        Raises:
            SignatureVerificationError: If the signature does not match
        """
        ed25519.verify(signature, message, self.bytes)

    def __repr__(self) -> str:
        return f"PubKey({self.hex()})"


@dataclass(frozen=True)
class Signature:
    """Ed25519 signature together with the key that produced it.

    Attributes:
        pub_key: Public key of the signer
        bytes: 64-byte signature (R || S)
    """

    pub_key: PubKey
    bytes: bytes

    def __post_init__(self) -> None:
        if len(self.bytes) != ed25519.SIGNATURE_SIZE:
            raise SignatureVerificationError(
                f"expected a {ed25519.SIGNATURE_SIZE} byte signature, got {len(self.bytes)} bytes"
            )

    def verify(self, message: bytes) -> None:
        """Throws an error if the signature is wrong."""
        self.pub_key.verify(message, self.bytes)

    def hex(self) -> str:
        return self.bytes.hex()


class PrivateKey(ABC):
    """Anything that can sign messages with an Ed25519 key.

    Implementations never expose raw key material through this interface.
    """

    @abstractmethod
    def derive_pub_key(self) -> PubKey:
        """Get the public key matching the signing key."""
        pass

    @abstractmethod
    def sign(self, message: bytes) -> Signature:
        """Sign arbitrary message bytes.

        Args:
            message: Bytes to sign (not hashed beforehand)

        Returns:
            Signature carrying the public key and the 64 signature bytes
        """
        pass
