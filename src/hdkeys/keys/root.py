"""Root private key and CIP-1852 account derivation.

With a RootPrivateKey any number of Bip32PrivateKeys can be generated:
    m/1852'/1815'/account'/0/index  -> spending keys
    m/1852'/1815'/account'/2/index  -> staking keys
"""

import logging
from typing import Optional

from bip_utils import Bip39Languages

from hdkeys.config import get_settings
from hdkeys.errors import InvalidEntropyLengthError
from hdkeys.keys.base import PrivateKey, PubKey, Signature
from hdkeys.keys.bip32 import VALID_ENTROPY_SIZES, Bip32PrivateKey
from hdkeys.keys.mnemonic import (
    Phrase,
    entropy_to_phrase,
    generate_entropy,
    phrase_to_entropy,
)
from hdkeys.keys.paths import DerivationPath, spending_root_path, staking_root_path

logger = logging.getLogger(__name__)


def _account(account_index: Optional[int]) -> int:
    if account_index is None:
        return get_settings().default_account_index
    return account_index


class RootPrivateKey(PrivateKey):
    """Root of a key tree, created from BIP39 entropy.

    Keeps the entropy so the phrase can be exported again, and signs
    with the root Bip32PrivateKey.
    """

    def __init__(self, entropy: bytes, force: Optional[bool] = None):
        """Initialize from raw entropy.

        Args:
            entropy: 16, 20, 24, 28 or 32 bytes
            force: Passed on to Bip32PrivateKey.from_bip39_entropy

        Raises:
            InvalidEntropyLengthError: If the entropy has an unsupported size
        """
        entropy = bytes(entropy)
        if len(entropy) not in VALID_ENTROPY_SIZES:
            raise InvalidEntropyLengthError(len(entropy))

        self._entropy = entropy
        self._bip32_key = Bip32PrivateKey.from_bip39_entropy(entropy, force=force)

    @classmethod
    def from_phrase(
        cls,
        phrase: Phrase,
        language: Optional[Bip39Languages] = None,
        force: Optional[bool] = None,
    ) -> "RootPrivateKey":
        """Restore a root key from a BIP39 phrase.

        Args:
            phrase: Space separated string or list of words
            language: Word list, defaults to the configured language

        Raises:
            MnemonicError: If the phrase is not valid
        """
        if language is None:
            language = get_settings().language
        return cls(phrase_to_entropy(phrase, language), force=force)

    @classmethod
    def generate(cls, strength: int = 256) -> "RootPrivateKey":
        """Create a root key from fresh random entropy."""
        logger.info(f"Generating new {strength}-bit root key")
        return cls(generate_entropy(strength))

    @property
    def entropy(self) -> bytes:
        return self._entropy

    @property
    def bip32_key(self) -> Bip32PrivateKey:
        return self._bip32_key

    def to_phrase(self, language: Optional[Bip39Languages] = None) -> list[str]:
        """Export the entropy as BIP39 words."""
        if language is None:
            language = get_settings().language
        return entropy_to_phrase(self._entropy, language)

    def derive(self, index: int) -> Bip32PrivateKey:
        return self._bip32_key.derive(index)

    def derive_path(self, path: DerivationPath) -> Bip32PrivateKey:
        return self._bip32_key.derive_path(path)

    def derive_spending_root_key(self, account_index: Optional[int] = None) -> Bip32PrivateKey:
        """Role 0 key of an account: m/1852'/1815'/account'/0"""
        return self.derive_path(spending_root_path(_account(account_index)))

    def derive_staking_root_key(self, account_index: Optional[int] = None) -> Bip32PrivateKey:
        """Role 2 key of an account: m/1852'/1815'/account'/2"""
        return self.derive_path(staking_root_path(_account(account_index)))

    def derive_spending_key(self, account_index: Optional[int] = None, index: int = 0) -> Bip32PrivateKey:
        return self.derive_spending_root_key(account_index).derive(index)

    def derive_staking_key(self, account_index: Optional[int] = None, index: int = 0) -> Bip32PrivateKey:
        return self.derive_staking_root_key(account_index).derive(index)

    def derive_pub_key(self) -> PubKey:
        return self._bip32_key.derive_pub_key()

    def sign(self, message: bytes) -> Signature:
        return self._bip32_key.sign(message)

    def __repr__(self) -> str:
        return f"RootPrivateKey(pub_key={self.derive_pub_key().hex()})"

    @property
    def bytes(self) -> bytes:
        return self._bip32_key.bytes
