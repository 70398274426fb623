"""CIP-30 COSE_Key for Ed25519 public keys.

    {1: 1 (kty OKP), 3: -8 (alg EdDSA), -1: 6 (crv Ed25519), -2: key bytes}

Wallets may add a key id under label 2; it is accepted and ignored.
"""

import logging

import cbor2

from hdkeys.cose.sign1 import ALG_EDDSA, BytesLike, decode_cbor, to_bytes
from hdkeys.errors import (
    DecodeError,
    InvalidCoseKeyError,
    MissingAlgError,
    UnsupportedAlgError,
)
from hdkeys.keys import ed25519
from hdkeys.keys.base import PubKey

logger = logging.getLogger(__name__)

# COSE_Key labels
LABEL_KTY = 1
LABEL_KID = 2
LABEL_ALG = 3
LABEL_CRV = -1
LABEL_X = -2

KTY_OKP = 1
CRV_ED25519 = 6


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def decode_cip30_cose_pub_key(data: BytesLike) -> PubKey:
    """Decode a COSE_Key into a PubKey.

    Raises:
        MissingAlgError: If label 3 is absent
        UnsupportedAlgError: If label 3 is not -8
        InvalidCoseKeyError: If kty, crv or the key bytes are missing or wrong
        DecodeError: If the bytes are not a CBOR map
    """
    try:
        decoded = decode_cbor(to_bytes(data))
    except cbor2.CBORDecodeError as e:
        raise DecodeError(f"invalid Cip30 COSE PubKey: {e}") from e

    if not isinstance(decoded, dict):
        raise DecodeError("invalid Cip30 COSE PubKey: not a map")

    kty = decoded.get(LABEL_KTY)
    if kty is None:
        raise InvalidCoseKeyError(
            "invalid Cip30 COSE PubKey: kty not set (i.e. field 1 not set)", field="kty"
        )
    if not _is_int(kty) or kty != KTY_OKP:
        raise InvalidCoseKeyError(
            f"invalid Cip30 COSE PubKey: kty not set to OKP (i.e. field 1 not set to 1), got {kty}",
            field="kty",
        )

    alg = decoded.get(LABEL_ALG)
    if alg is None:
        raise MissingAlgError("invalid Cip30 COSE PubKey: alg not set (i.e. field 3 not set)")
    if not _is_int(alg) or alg != ALG_EDDSA:
        raise UnsupportedAlgError(
            f"invalid Cip30 COSE PubKey: alg not set to EdDSA (i.e. field 3 not set to -8), got {alg}",
            alg=alg,
        )

    crv = decoded.get(LABEL_CRV)
    if crv is None:
        raise InvalidCoseKeyError(
            "invalid Cip30 COSE PubKey: crv not set (i.e. field -1 not set)", field="crv"
        )
    if not _is_int(crv) or crv != CRV_ED25519:
        raise InvalidCoseKeyError(
            f"invalid Cip30 COSE PubKey: crv not set to Ed25519 (i.e. field -1 not set to 6), got {crv}",
            field="crv",
        )

    key_bytes = decoded.get(LABEL_X)
    if key_bytes is None:
        raise InvalidCoseKeyError(
            "invalid Cip30 COSE PubKey: pubKey field not set (i.e. field -2 not set)", field="x"
        )
    if not isinstance(key_bytes, bytes) or len(key_bytes) != ed25519.PUBLIC_KEY_SIZE:
        raise InvalidCoseKeyError(
            "invalid Cip30 COSE PubKey: field -2 is not a 32 byte key", field="x"
        )

    if LABEL_KID in decoded:
        logger.debug("Ignoring kid in COSE PubKey")

    return PubKey(key_bytes)


def encode_cip30_cose_pub_key(pub_key: PubKey) -> bytes:
    """Encode a PubKey as a COSE_Key."""
    return cbor2.dumps({
        LABEL_KTY: KTY_OKP,
        LABEL_ALG: ALG_EDDSA,
        LABEL_CRV: CRV_ED25519,
        LABEL_X: pub_key.bytes,
    })
