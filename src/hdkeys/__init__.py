"""HD Ed25519 key derivation and CIP-30 message signing.

Usage:
    root = RootPrivateKey.from_phrase(phrase)
    key = root.derive_spending_key(account_index=0, index=0)
    address = ShelleyAddress.from_pub_key_hash(key.derive_pub_key().hash(), network_id=1)
    wire = sign_cip30_cose_data(address, key, b"hello").to_cbor()
"""

from hdkeys.address import Credential, CredentialKind, ShelleyAddress
from hdkeys.cose import (
    Cip30CoseSign1,
    decode_cip30_cose_pub_key,
    encode_cip30_cose_pub_key,
    sign_cip30_cose_data,
)
from hdkeys.errors import (
    DecodeError,
    HDKeysError,
    KeyDerivationError,
    SignatureVerificationError,
)
from hdkeys.keys import (
    BIP32_HARDEN,
    Bip32PrivateKey,
    Bip32PublicKey,
    PrivateKey,
    PubKey,
    RootPrivateKey,
    Signature,
)

__version__ = "0.1.0"

__all__ = [
    # Keys
    "BIP32_HARDEN",
    "Bip32PrivateKey",
    "Bip32PublicKey",
    "PrivateKey",
    "PubKey",
    "RootPrivateKey",
    "Signature",

    # Addresses
    "Credential",
    "CredentialKind",
    "ShelleyAddress",

    # COSE
    "Cip30CoseSign1",
    "decode_cip30_cose_pub_key",
    "encode_cip30_cose_pub_key",
    "sign_cip30_cose_data",

    # Errors
    "DecodeError",
    "HDKeysError",
    "KeyDerivationError",
    "SignatureVerificationError",
]
