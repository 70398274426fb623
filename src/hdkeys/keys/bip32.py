"""BIP32-Ed25519 extended keys.

An extended private key is 96 bytes: kl (32) || kr (32) || c (32).
kl is the clamped secret scalar, kr the signing nonce prefix and c the
chain code mixed into every child derivation.

Child derivation (index i, 4 little-endian bytes ib, public key A):
- soft (i < 2^31):   Z = HMAC-SHA512(c, 0x02 || A || ib)
                     C = HMAC-SHA512(c, 0x03 || A || ib)
- hardened:          Z = HMAC-SHA512(c, 0x00 || kl || kr || ib)
                     C = HMAC-SHA512(c, 0x01 || kl || kr || ib)
- kl' = 8 * ZL[0:28] + kl, kr' = ZR + kr (both mod 2^256), c' = C[32:64]

Soft children only need A and c, so they can also be derived from a
``Bip32PublicKey`` without any private material.
"""

import hashlib
import hmac
import logging
import secrets
import threading
from typing import Optional

from hdkeys.config import get_settings
from hdkeys.errors import (
    HardenedDerivationError,
    InvalidEntropyLengthError,
    InvalidKeyLengthError,
    InvalidRootSecretError,
)
from hdkeys.keys import ed25519
from hdkeys.keys.base import PrivateKey, PubKey, Signature
from hdkeys.keys.paths import BIP32_HARDEN, DerivationPath, encode_index, to_indices

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = 96
PUBLIC_KEY_SIZE = 64

VALID_ENTROPY_SIZES = (16, 20, 24, 28, 32)

PBKDF2_ITERATIONS = 4096

_MOD_256 = 1 << 256


def _hmac_sha512(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


def _le(data: bytes) -> int:
    return int.from_bytes(data, "little")


def _add_mod_256(a: int, b: int) -> bytes:
    return ((a + b) % _MOD_256).to_bytes(32, "little")


class Bip32PrivateKey(PrivateKey):
    """Ed25519-BIP32 extendable private key.

    Instances are immutable: ``derive`` always returns a new key. The
    public key is computed on first use and cached.

    Usage:
        key = Bip32PrivateKey.from_bip39_entropy(entropy)
        child = key.derive_path([harden(1852), harden(1815), harden(0), 0, 0])
        signature = child.sign(b"message")
    """

    __slots__ = ("_bytes", "_pub_key", "_pub_key_lock")

    def __init__(self, key_bytes: bytes):
        """Wrap 96 raw key bytes.

        Args:
            key_bytes: kl || kr || c

        Raises:
            InvalidKeyLengthError: If not exactly 96 bytes are given
        """
        key_bytes = bytes(key_bytes)
        if len(key_bytes) != PRIVATE_KEY_SIZE:
            raise InvalidKeyLengthError(PRIVATE_KEY_SIZE, len(key_bytes))

        self._bytes = key_bytes
        self._pub_key: Optional[PubKey] = None
        self._pub_key_lock = threading.Lock()

    @classmethod
    def from_bip39_entropy(cls, entropy: bytes, force: Optional[bool] = None) -> "Bip32PrivateKey":
        """Create a root key from BIP39 entropy (Icarus scheme).

        Args:
            entropy: 16, 20, 24, 28 or 32 bytes of mnemonic entropy
            force: Accept keys the weak key guard would reject. Defaults to
                the inverse of the ``reject_weak_root_secret`` setting.

        Raises:
            InvalidEntropyLengthError: If the entropy has an unsupported size
            InvalidRootSecretError: If ``force`` is false and kl[31] has
                bit 0b00100000 set
        """
        entropy = bytes(entropy)
        if len(entropy) not in VALID_ENTROPY_SIZES:
            raise InvalidEntropyLengthError(len(entropy))

        if force is None:
            force = not get_settings().reject_weak_root_secret

        seed = hashlib.pbkdf2_hmac("sha512", b"", entropy, PBKDF2_ITERATIONS, dklen=PRIVATE_KEY_SIZE)

        kl = bytearray(seed[:32])
        kr = seed[32:64]
        c = seed[64:]

        if not force and kl[31] & 0b00100000:
            raise InvalidRootSecretError("invalid root secret")

        kl[0] &= 0b11111000
        kl[31] &= 0b00011111
        kl[31] |= 0b01000000

        return cls(bytes(kl) + kr + c)

    @classmethod
    def random(cls) -> "Bip32PrivateKey":
        """Create a key from 96 random bytes (for testing).

        The result is not clamped, so it is not a valid root key for wallets.
        """
        return cls(secrets.token_bytes(PRIVATE_KEY_SIZE))

    @classmethod
    def from_hex(cls, value: str) -> "Bip32PrivateKey":
        return cls(bytes.fromhex(value))

    @property
    def k(self) -> bytes:
        return self._bytes[:64]

    @property
    def kl(self) -> bytes:
        return self._bytes[:32]

    @property
    def kr(self) -> bytes:
        return self._bytes[32:64]

    @property
    def chain_code(self) -> bytes:
        return self._bytes[64:]

    def derive(self, index: int) -> "Bip32PrivateKey":
        """Derive the child key at ``index``.

        Indices >= 2^31 are hardened and mix in the private key; lower
        indices mix in the public key only.

        Raises:
            ChildIndexOverflowError: If index is outside [0, 2^32)
        """
        ib = encode_index(index)

        if index < BIP32_HARDEN:
            a = self.derive_pub_key().bytes
            z = _hmac_sha512(self.chain_code, b"\x02" + a + ib)
            c = _hmac_sha512(self.chain_code, b"\x03" + a + ib)
        else:
            z = _hmac_sha512(self.chain_code, b"\x00" + self.k + ib)
            c = _hmac_sha512(self.chain_code, b"\x01" + self.k + ib)

        kl = _add_mod_256(8 * _le(z[:28]), _le(self.kl))
        kr = _add_mod_256(_le(z[32:]), _le(self.kr))

        # A child whose public key is the identity point is not discarded
        return Bip32PrivateKey(kl + kr + c[32:])

    def derive_path(self, path: DerivationPath) -> "Bip32PrivateKey":
        """Apply ``derive`` for each index, left to right.

        Args:
            path: Sequence of indices or a path string like m/1852'/1815'/0'

        Returns:
            The derived key, or this very key for an empty path
        """
        indices = to_indices(path)
        key = self
        for index in indices:
            key = key.derive(index)

        if indices and logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Derived {len(indices)} levels -> {key.derive_pub_key().hex()}")
        return key

    def derive_pub_key(self) -> PubKey:
        """Public key for kl, computed once and cached."""
        if self._pub_key is None:
            with self._pub_key_lock:
                if self._pub_key is None:
                    self._pub_key = PubKey(ed25519.derive_public_key(self.k))
        return self._pub_key

    def to_public(self) -> "Bip32PublicKey":
        """Extended public key (A || c) for watch-only soft derivation."""
        return Bip32PublicKey(self.derive_pub_key().bytes + self.chain_code)

    def sign(self, message: bytes) -> Signature:
        pub_key = self.derive_pub_key()
        return Signature(pub_key, ed25519.sign(bytes(message), self.k, pub_key.bytes))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bip32PrivateKey):
            return NotImplemented
        return hmac.compare_digest(self._bytes, other._bytes)

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __repr__(self) -> str:
        return f"Bip32PrivateKey(pub_key={self.derive_pub_key().hex()})"

    # Defined last so the name does not shadow the builtin in annotations above
    @property
    def bytes(self) -> bytes:
        """All 96 key bytes."""
        return self._bytes


class Bip32PublicKey:
    """Ed25519-BIP32 extended public key: A (32) || c (32).

    Only soft children can be derived; they match the public keys of the
    private key's soft children.
    """

    __slots__ = ("_bytes",)

    def __init__(self, key_bytes: bytes):
        key_bytes = bytes(key_bytes)
        if len(key_bytes) != PUBLIC_KEY_SIZE:
            raise InvalidKeyLengthError(PUBLIC_KEY_SIZE, len(key_bytes), kind="extended public key")
        self._bytes = key_bytes

    @classmethod
    def from_hex(cls, value: str) -> "Bip32PublicKey":
        return cls(bytes.fromhex(value))

    @property
    def pub_key(self) -> PubKey:
        return PubKey(self._bytes[:32])

    @property
    def chain_code(self) -> bytes:
        return self._bytes[32:]

    def derive(self, index: int) -> "Bip32PublicKey":
        """Derive the soft child at ``index``.

        Raises:
            HardenedDerivationError: If index >= 2^31
            ChildIndexOverflowError: If index is outside [0, 2^32)
        """
        ib = encode_index(index)
        if index >= BIP32_HARDEN:
            raise HardenedDerivationError(
                f"cannot derive hardened child {index} from a public key"
            )

        a = self._bytes[:32]
        z = _hmac_sha512(self.chain_code, b"\x02" + a + ib)
        c = _hmac_sha512(self.chain_code, b"\x03" + a + ib)

        zl8 = (8 * _le(z[:28])).to_bytes(32, "little")
        child = ed25519.point_add(a, ed25519.scalar_mult_base(zl8))

        return Bip32PublicKey(child + c[32:])

    def derive_path(self, path: DerivationPath) -> "Bip32PublicKey":
        key = self
        for index in to_indices(path):
            key = key.derive(index)
        return key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bip32PublicKey):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __repr__(self) -> str:
        return f"Bip32PublicKey({self._bytes.hex()})"

    @property
    def bytes(self) -> bytes:
        return self._bytes
