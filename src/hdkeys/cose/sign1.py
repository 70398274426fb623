"""CIP-8 / CIP-30 COSE_Sign1 data signatures.

Wire format (CBOR array of 4):
1. protected header: bstr wrapping {1: -8, "address": address_bytes}
2. unprotected header: {"hashed": false}
3. payload: bstr
4. signature: bstr (64 bytes)

The signature covers the Sig_structure
    ["Signature1", protected_header_bytes, b"", payload]
where the empty bstr is the external_aad, which CIP-30 leaves empty.
"""

import io
import logging
from typing import Union

import cbor2

from hdkeys.address import ShelleyAddress
from hdkeys.errors import (
    DecodeError,
    InvalidAddressFormatError,
    MissingAlgError,
    NonPubKeyHashAddressError,
    UnsupportedAlgError,
)
from hdkeys.keys import ed25519
from hdkeys.keys.base import PrivateKey, PubKey

logger = logging.getLogger(__name__)

# COSE header labels and values
HEADER_ALG = 1
HEADER_ADDRESS = "address"
ALG_EDDSA = -8

SIG_STRUCTURE_CONTEXT = "Signature1"

BytesLike = Union[bytes, bytearray, str]


def to_bytes(data: BytesLike) -> bytes:
    """Accept raw bytes or a hex string."""
    if isinstance(data, str):
        try:
            return bytes.fromhex(data)
        except ValueError as e:
            raise DecodeError(f"Invalid hex string: {e}") from e
    return bytes(data)


def decode_cbor(data: bytes) -> object:
    """Decode exactly one CBOR item.

    Raises:
        cbor2.CBORDecodeError: If the item is malformed or followed by more bytes
    """
    fp = io.BytesIO(data)
    decoded = cbor2.CBORDecoder(fp).decode()
    trailing = fp.read()
    if trailing:
        raise cbor2.CBORDecodeError(f"{len(trailing)} trailing bytes after CBOR item")
    return decoded


def _check_address(address: ShelleyAddress) -> None:
    if not address.spending_credential.is_pub_key_hash:
        raise NonPubKeyHashAddressError(
            "invalid Cip30 COSE Sign1 header address: not a PubKeyHash address"
        )


def encode_protected_header(address: ShelleyAddress) -> bytes:
    """CBOR map {1: -8, "address": address_bytes}, int key first."""
    return cbor2.dumps({HEADER_ALG: ALG_EDDSA, HEADER_ADDRESS: address.bytes})


def wrap_payload_for_signing(address: ShelleyAddress, payload: bytes) -> bytes:
    """CBOR Sig_structure the signature is computed over."""
    return cbor2.dumps([
        SIG_STRUCTURE_CONTEXT,
        encode_protected_header(address),
        b"",
        payload,
    ])


class Cip30CoseSign1:
    """Signed message envelope binding an address, a payload and a signature.

    Usage:
        sign1 = sign_cip30_cose_data(address, key, b"hello")
        wire = sign1.to_cbor()
        Cip30CoseSign1.from_cbor(wire).verify(key.derive_pub_key())
    """

    __slots__ = ("_address", "_payload", "_signature")

    def __init__(self, address: ShelleyAddress, payload: BytesLike, signature: BytesLike):
        """Create an envelope from its parts.

        Args:
            address: Address whose spending credential is a key hash
            payload: Raw payload (bytes or hex)
            signature: 64 signature bytes (bytes or hex)

        Raises:
            NonPubKeyHashAddressError: If the address has a script credential
            DecodeError: If the signature is not 64 bytes
        """
        _check_address(address)

        signature = to_bytes(signature)
        if len(signature) != ed25519.SIGNATURE_SIZE:
            raise DecodeError(
                f"expected a {ed25519.SIGNATURE_SIZE} byte signature, got {len(signature)} bytes",
                field="signature",
            )

        self._address = address
        self._payload = to_bytes(payload)
        self._signature = signature

    @classmethod
    def from_cbor(cls, data: BytesLike) -> "Cip30CoseSign1":
        """Decode wire bytes (or hex).

        Raises:
            MissingAlgError: If header field 1 is absent
            UnsupportedAlgError: If header field 1 is not -8
            InvalidAddressFormatError: If the address is absent or malformed
            NonPubKeyHashAddressError: If the address has a script credential
            DecodeError: If the structure itself is malformed
        """
        try:
            decoded = decode_cbor(to_bytes(data))
        except cbor2.CBORDecodeError as e:
            raise DecodeError(f"invalid Cip30 COSE Sign1: {e}") from e

        if not isinstance(decoded, list) or len(decoded) != 4:
            raise DecodeError("invalid Cip30 COSE Sign1: expected an array of 4 items")

        protected_bytes, unprotected, payload, signature = decoded

        if not isinstance(protected_bytes, bytes):
            raise DecodeError("invalid Cip30 COSE Sign1: protected header is not a bstr", field="protected")
        if not isinstance(unprotected, dict):
            raise DecodeError("invalid Cip30 COSE Sign1: unprotected header is not a map", field="unprotected")
        for name, flag in unprotected.items():
            if not isinstance(name, str) or not isinstance(flag, bool):
                raise DecodeError(
                    "invalid Cip30 COSE Sign1: unprotected header must map text to bool",
                    field="unprotected",
                )
        if not isinstance(payload, bytes):
            raise DecodeError("invalid Cip30 COSE Sign1: payload is not a bstr", field="payload")
        if not isinstance(signature, bytes):
            raise DecodeError("invalid Cip30 COSE Sign1: signature is not a bstr", field="signature")

        address = _decode_protected_header(protected_bytes)

        sign1 = cls(address, payload, signature)
        logger.debug(f"Decoded COSE Sign1 for address {address.hex()}")
        return sign1

    @property
    def address(self) -> ShelleyAddress:
        return self._address

    @property
    def payload(self) -> bytes:
        return self._payload

    @property
    def signature(self) -> bytes:
        """64 signature bytes."""
        return self._signature

    def to_cbor(self) -> bytes:
        """Encode as the 4 item COSE_Sign1 array."""
        return cbor2.dumps([
            encode_protected_header(self._address),
            {"hashed": False},
            self._payload,
            self._signature,
        ])

    def hex(self) -> str:
        return self.to_cbor().hex()

    def verify(self, pub_key: PubKey) -> None:
        """Throws an error if the signature is wrong.

        Raises:
            SignatureVerificationError: If the signature does not match
        """
        wrapped = wrap_payload_for_signing(self._address, self._payload)
        pub_key.verify(wrapped, self._signature)
        logger.debug(f"Verified COSE Sign1 for address {self._address.hex()}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cip30CoseSign1):
            return NotImplemented
        return (
            self._address == other._address
            and self._payload == other._payload
            and self._signature == other._signature
        )

    def __hash__(self) -> int:
        return hash((self._address, self._payload, self._signature))

    def __repr__(self) -> str:
        return (
            f"Cip30CoseSign1(address={self._address.hex()}, "
            f"payload={self._payload.hex()}, signature={self._signature.hex()})"
        )


def sign_cip30_cose_data(
    address: ShelleyAddress, private_key: PrivateKey, payload: BytesLike
) -> Cip30CoseSign1:
    """Low-level signing of a CIP-30 data signature.

    Doesn't check that the address actually corresponds to the given key.

    Raises:
        NonPubKeyHashAddressError: If the address has a script credential
    """
    _check_address(address)
    payload_bytes = to_bytes(payload)

    signature = private_key.sign(wrap_payload_for_signing(address, payload_bytes))
    return Cip30CoseSign1(address, payload_bytes, signature.bytes)


def _decode_protected_header(protected_bytes: bytes) -> ShelleyAddress:
    try:
        header = decode_cbor(protected_bytes)
    except cbor2.CBORDecodeError as e:
        raise DecodeError(f"invalid Cip30 COSE Sign1 header: {e}", field="protected") from e

    if not isinstance(header, dict):
        raise DecodeError("invalid Cip30 COSE Sign1 header: not a map", field="protected")

    if HEADER_ALG not in header:
        raise MissingAlgError(
            "invalid Cip30 COSE Sign1 header: alg not set (i.e. field 1 not set)"
        )

    alg = header[HEADER_ALG]
    if isinstance(alg, bool) or alg != ALG_EDDSA:
        raise UnsupportedAlgError(
            f"invalid Cip30 COSE Sign1 header: alg not set to EdDSA (i.e. field 1 not set to -8), got {alg}",
            alg=alg,
        )

    address_bytes = header.get(HEADER_ADDRESS)
    if address_bytes is None:
        raise InvalidAddressFormatError("invalid Cip30 COSE Sign1 header: address not set")

    if not isinstance(address_bytes, bytes):
        raise InvalidAddressFormatError("invalid Cip30 COSE Sign1 header: invalid address format")

    address = ShelleyAddress.from_bytes(address_bytes)
    _check_address(address)
    return address
