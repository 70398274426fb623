"""Ed25519 operations on pre-clamped (extended) secret scalars.

BIP32-Ed25519 keys are already clamped and may leave the range a
standard Ed25519 seed hashes to, so public key derivation and signing
work directly on ``kl`` and ``kr`` instead of on a 32-byte seed.
Point and scalar arithmetic comes from libsodium via pynacl.
"""

import hashlib
from typing import Optional

import nacl.bindings
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from hdkeys.errors import InvalidKeyLengthError, SignatureVerificationError

PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64


def _reduce(data: bytes) -> bytes:
    """Reduce up to 64 little-endian bytes modulo L."""
    return nacl.bindings.crypto_core_ed25519_scalar_reduce(data.ljust(64, b"\x00"))


def scalar_mult_base(scalar: bytes) -> bytes:
    """Multiply the base point by a 32-byte little-endian scalar, no clamping."""
    return nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(_reduce(scalar))


def point_add(p: bytes, q: bytes) -> bytes:
    """Add two encoded Ed25519 points."""
    return nacl.bindings.crypto_core_ed25519_add(p, q)


def derive_public_key(k: bytes) -> bytes:
    """Public key for a 64-byte extended secret ``kl || kr``."""
    if len(k) != 64:
        raise InvalidKeyLengthError(64, len(k), kind="extended secret")
    return scalar_mult_base(k[:32])


def sign(message: bytes, k: bytes, public_key: Optional[bytes] = None) -> bytes:
    """Sign ``message`` with a 64-byte extended secret ``kl || kr``.

    ``kl`` is used as the secret scalar as is and ``kr`` as the nonce
    prefix, which is what Ed25519 does after hashing and clamping a seed.
    """
    if len(k) != 64:
        raise InvalidKeyLengthError(64, len(k), kind="extended secret")

    kl, kr = k[:32], k[32:]
    if public_key is None:
        public_key = scalar_mult_base(kl)

    a = _reduce(kl)
    r = _reduce(hashlib.sha512(kr + message).digest())
    big_r = nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(r)
    h = _reduce(hashlib.sha512(big_r + public_key + message).digest())
    s = nacl.bindings.crypto_core_ed25519_scalar_add(
        r, nacl.bindings.crypto_core_ed25519_scalar_mul(h, a)
    )

    return big_r + s


def verify(signature: bytes, message: bytes, public_key: bytes) -> None:
    """Verify a 64-byte signature, raising on mismatch."""
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise InvalidKeyLengthError(PUBLIC_KEY_SIZE, len(public_key), kind="public key")
    if len(signature) != SIGNATURE_SIZE:
        raise SignatureVerificationError(
            f"expected a {SIGNATURE_SIZE} byte signature, got {len(signature)} bytes"
        )

    try:
        VerifyKey(public_key).verify(message, signature)
    except BadSignatureError as e:
        raise SignatureVerificationError("incorrect signature") from e
