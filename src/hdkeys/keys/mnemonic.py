"""BIP39 phrase <-> entropy conversion.

The word list is chosen with a ``Bip39Languages`` member (English by
default); the conversion itself is done by bip_utils.
"""

import logging
import secrets
from typing import Sequence, Union

from bip_utils import (
    Bip39Languages,
    Bip39MnemonicDecoder,
    Bip39MnemonicEncoder,
    MnemonicChecksumError,
)

from hdkeys.errors import InvalidEntropyLengthError, MnemonicError

logger = logging.getLogger(__name__)

# Entropy strength in bits -> number of words
STRENGTH_WORDS: dict[int, int] = {
    128: 12,
    160: 15,
    192: 18,
    224: 21,
    256: 24,
}

Phrase = Union[str, Sequence[str]]


def _normalize(phrase: Phrase) -> str:
    words = phrase.split() if isinstance(phrase, str) else list(phrase)
    return " ".join(word.strip().lower() for word in words)


def generate_entropy(strength: int = 256) -> bytes:
    """Fresh random entropy for a new phrase.

    Args:
        strength: 128, 160, 192, 224 or 256 bits
    """
    if strength not in STRENGTH_WORDS:
        raise InvalidEntropyLengthError(strength // 8)
    return secrets.token_bytes(strength // 8)


def entropy_to_phrase(
    entropy: bytes, language: Bip39Languages = Bip39Languages.ENGLISH
) -> list[str]:
    """Encode entropy as a list of BIP39 words."""
    if len(entropy) * 8 not in STRENGTH_WORDS:
        raise InvalidEntropyLengthError(len(entropy))

    mnemonic = Bip39MnemonicEncoder(language).Encode(bytes(entropy))
    return mnemonic.ToList()


def phrase_to_entropy(
    phrase: Phrase, language: Bip39Languages = Bip39Languages.ENGLISH
) -> bytes:
    """Decode a BIP39 phrase back to its entropy.

    Args:
        phrase: Space separated string or list of words
        language: Word list the phrase was written with

    Raises:
        MnemonicError: On unknown words, a bad word count or a bad checksum
    """
    normalized = _normalize(phrase)
    word_count = len(normalized.split())
    if word_count not in STRENGTH_WORDS.values():
        raise MnemonicError(f"Expected 12, 15, 18, 21 or 24 words, got {word_count}")

    try:
        return bytes(Bip39MnemonicDecoder(language).Decode(normalized))
    except MnemonicChecksumError as e:
        raise MnemonicError(f"Invalid mnemonic checksum: {e}") from e
    except ValueError as e:
        raise MnemonicError(f"Invalid mnemonic: {e}") from e


def is_valid_phrase(phrase: Phrase, language: Bip39Languages = Bip39Languages.ENGLISH) -> bool:
    """Check a phrase without raising."""
    try:
        phrase_to_entropy(phrase, language)
    except MnemonicError as e:
        logger.debug(f"Rejected phrase: {e.message}")
        return False
    return True
