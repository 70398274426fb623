"""Derivation path helpers.

Paths follow CIP-1852: m/1852'/1815'/account'/role/index
- role 0: external (spending) keys
- role 1: internal (change) keys
- role 2: staking keys
"""

from typing import Sequence, Union

from hdkeys.errors import ChildIndexOverflowError, InvalidDerivationPathError

BIP32_HARDEN = 0x80000000

PURPOSE = 1852
COIN_TYPE = 1815

ROLE_EXTERNAL = 0
ROLE_INTERNAL = 1
ROLE_STAKING = 2

_HARDENED_MARKERS = ("'", "h", "H")

DerivationPath = Union[str, Sequence[int]]


def harden(index: int) -> int:
    """Turn a soft index into its hardened counterpart."""
    if index < 0 or index >= BIP32_HARDEN:
        raise ChildIndexOverflowError(index + BIP32_HARDEN)
    return index + BIP32_HARDEN


def is_hardened(index: int) -> bool:
    return index >= BIP32_HARDEN


def encode_index(index: int) -> bytes:
    """Encode a child index as 4 little-endian bytes."""
    if index < 0 or index > 0xFFFFFFFF:
        raise ChildIndexOverflowError(index)
    return index.to_bytes(4, "little")


def parse_derivation_path(path: str) -> list[int]:
    """Parse a path like m/1852'/1815'/0'/0/0 into child indices.

    The leading ``m`` is optional and hardened components may be marked
    with ``'``, ``h`` or ``H``. An empty path or bare ``m`` yields [].
    """
    path = path.strip()
    if path in ("", "m", "M"):
        return []

    if path.startswith("m/") or path.startswith("M/"):
        path = path[2:]

    indices = []
    for component in path.split("/"):
        hardened = component.endswith(_HARDENED_MARKERS)
        digits = component[:-1] if hardened else component

        if not (digits.isascii() and digits.isdigit()):
            raise InvalidDerivationPathError(f"Invalid path component: {component!r}")

        index = int(digits)
        if index >= BIP32_HARDEN:
            raise InvalidDerivationPathError(f"Path component out of range: {component!r}")

        indices.append(index + BIP32_HARDEN if hardened else index)

    return indices


def format_derivation_path(indices: Sequence[int]) -> str:
    """Format child indices as m/a'/b/... (inverse of parse_derivation_path)."""
    parts = ["m"]
    for index in indices:
        encode_index(index)
        if is_hardened(index):
            parts.append(f"{index - BIP32_HARDEN}'")
        else:
            parts.append(str(index))
    return "/".join(parts)


def to_indices(path: DerivationPath) -> list[int]:
    """Accept either a path string or a sequence of indices."""
    if isinstance(path, str):
        return parse_derivation_path(path)
    return list(path)


def account_path(account_index: int, role: int) -> list[int]:
    """Indices of the role root for an account."""
    return [harden(PURPOSE), harden(COIN_TYPE), harden(account_index), role]


def spending_root_path(account_index: int = 0) -> list[int]:
    return account_path(account_index, ROLE_EXTERNAL)


def staking_root_path(account_index: int = 0) -> list[int]:
    return account_path(account_index, ROLE_STAKING)
