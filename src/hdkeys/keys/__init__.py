"""HD Ed25519 keys for deterministic signing key generation."""

from hdkeys.keys.base import PrivateKey, PubKey, Signature
from hdkeys.keys.bip32 import Bip32PrivateKey, Bip32PublicKey
from hdkeys.keys.mnemonic import entropy_to_phrase, phrase_to_entropy
from hdkeys.keys.paths import (
    BIP32_HARDEN,
    format_derivation_path,
    harden,
    parse_derivation_path,
)
from hdkeys.keys.root import RootPrivateKey

__all__ = [
    "BIP32_HARDEN",
    "Bip32PrivateKey",
    "Bip32PublicKey",
    "PrivateKey",
    "PubKey",
    "RootPrivateKey",
    "Signature",
    "entropy_to_phrase",
    "format_derivation_path",
    "harden",
    "parse_derivation_path",
    "phrase_to_entropy",
]
