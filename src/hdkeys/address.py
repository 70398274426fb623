"""Shelley address parsing and formatting.

Header byte: high nibble = address type, low nibble = network id.

    type  payment credential  staking part
    0     key hash            key hash      (base)
    1     script hash         key hash      (base)
    2     key hash            script hash   (base)
    3     script hash         script hash   (base)
    4     key hash            pointer
    5     script hash         pointer
    6     key hash            none          (enterprise)
    7     script hash         none          (enterprise)

Byron (8) and reward (14, 15) addresses are not Shelley payment addresses.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from bip_utils import Bech32Decoder, Bech32Encoder
from bip_utils.bech32 import Bech32ChecksumError

from hdkeys.errors import InvalidAddressFormatError

logger = logging.getLogger(__name__)

CREDENTIAL_SIZE = 28

BASE_ADDRESS_SIZE = 1 + 2 * CREDENTIAL_SIZE
ENTERPRISE_ADDRESS_SIZE = 1 + CREDENTIAL_SIZE
# A pointer holds three variable length naturals of at least one byte each
MIN_POINTER_ADDRESS_SIZE = ENTERPRISE_ADDRESS_SIZE + 3

MAINNET_HRP = "addr"
TESTNET_HRP = "addr_test"


class CredentialKind(str, Enum):
    """What a credential hash commits to."""
    PUB_KEY_HASH = "PubKeyHash"
    SCRIPT_HASH = "ScriptHash"


class AddressType(int, Enum):
    """Shelley address types (header high nibble)."""
    BASE_KEY_KEY = 0
    BASE_SCRIPT_KEY = 1
    BASE_KEY_SCRIPT = 2
    BASE_SCRIPT_SCRIPT = 3
    POINTER_KEY = 4
    POINTER_SCRIPT = 5
    ENTERPRISE_KEY = 6
    ENTERPRISE_SCRIPT = 7


@dataclass(frozen=True)
class Credential:
    """Spending or staking credential of an address."""

    kind: CredentialKind
    hash: bytes

    @property
    def is_pub_key_hash(self) -> bool:
        return self.kind == CredentialKind.PUB_KEY_HASH


@dataclass(frozen=True)
class ShelleyAddress:
    """Raw Shelley address bytes with typed accessors.

    Usage:
        address = ShelleyAddress.from_hex("603a5904...")
        address.spending_credential.kind  # CredentialKind.PUB_KEY_HASH
    """

    bytes: bytes

    def __post_init__(self) -> None:
        _validate(self.bytes)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> "ShelleyAddress":
        """Parse raw address bytes.

        Raises:
            InvalidAddressFormatError: If the bytes are not a Shelley address
        """
        return cls(bytes(data))

    @classmethod
    def from_hex(cls, value: str) -> "ShelleyAddress":
        try:
            data = bytes.fromhex(value)
        except ValueError as e:
            raise InvalidAddressFormatError(f"Invalid address hex: {e}") from e
        return cls(data)

    @classmethod
    def from_bech32(cls, value: str) -> "ShelleyAddress":
        """Parse an addr1... or addr_test1... string."""
        sep = value.rfind("1")
        if sep <= 0:
            raise InvalidAddressFormatError(f"Invalid bech32 address: {value}")

        hrp = value[:sep].lower()
        try:
            data = Bech32Decoder.Decode(hrp, value)
        except (Bech32ChecksumError, ValueError) as e:
            raise InvalidAddressFormatError(f"Invalid bech32 address: {e}") from e
        return cls(bytes(data))

    @classmethod
    def from_pub_key_hash(
        cls,
        pub_key_hash: bytes,
        network_id: int,
        staking_key_hash: Optional[bytes] = None,
    ) -> "ShelleyAddress":
        """Build an enterprise address, or a base address if a staking key hash is given.

        Raises:
            InvalidAddressFormatError: If network_id is outside [0, 15] or a
                hash is not 28 bytes
        """
        if not 0 <= network_id <= 0x0F:
            raise InvalidAddressFormatError(f"Network id out of range [0, 15]: {network_id}")
        for key_hash in (pub_key_hash, staking_key_hash):
            if key_hash is not None and len(key_hash) != CREDENTIAL_SIZE:
                raise InvalidAddressFormatError(
                    f"expected a {CREDENTIAL_SIZE} byte key hash, got {len(key_hash)} bytes"
                )

        if staking_key_hash is None:
            header = (AddressType.ENTERPRISE_KEY << 4) | network_id
            return cls(bytes([header]) + pub_key_hash)

        header = (AddressType.BASE_KEY_KEY << 4) | network_id
        return cls(bytes([header]) + pub_key_hash + staking_key_hash)

    @property
    def address_type(self) -> AddressType:
        return AddressType(self.bytes[0] >> 4)

    @property
    def network_id(self) -> int:
        return self.bytes[0] & 0x0F

    @property
    def is_mainnet(self) -> bool:
        return self.network_id == 1

    @property
    def spending_credential(self) -> Credential:
        kind = (
            CredentialKind.SCRIPT_HASH
            if self.address_type & 0b0001
            else CredentialKind.PUB_KEY_HASH
        )
        return Credential(kind, self.bytes[1:1 + CREDENTIAL_SIZE])

    @property
    def staking_credential(self) -> Optional[Credential]:
        """Staking credential of a base address, None otherwise."""
        if self.address_type > AddressType.BASE_SCRIPT_SCRIPT:
            return None
        kind = (
            CredentialKind.SCRIPT_HASH
            if self.address_type & 0b0010
            else CredentialKind.PUB_KEY_HASH
        )
        return Credential(kind, self.bytes[1 + CREDENTIAL_SIZE:])

    def hex(self) -> str:
        return self.bytes.hex()

    def to_bech32(self, hrp: Optional[str] = None) -> str:
        """Encode as bech32, choosing the prefix from the network id by default."""
        if hrp is None:
            hrp = MAINNET_HRP if self.is_mainnet else TESTNET_HRP
        return Bech32Encoder.Encode(hrp, self.bytes)

    def __repr__(self) -> str:
        return f"ShelleyAddress({self.hex()})"


def _validate(data: bytes) -> None:
    """Check header type and length of raw address bytes."""
    if not isinstance(data, bytes) or len(data) == 0:
        raise InvalidAddressFormatError("Address must be non-empty bytes")

    address_type = data[0] >> 4
    if address_type > AddressType.ENTERPRISE_SCRIPT:
        raise InvalidAddressFormatError(
            f"Not a Shelley payment address (header type {address_type})"
        )

    if address_type <= AddressType.BASE_SCRIPT_SCRIPT:
        expected_ok = len(data) == BASE_ADDRESS_SIZE
    elif address_type <= AddressType.POINTER_SCRIPT:
        expected_ok = len(data) >= MIN_POINTER_ADDRESS_SIZE
    else:
        expected_ok = len(data) == ENTERPRISE_ADDRESS_SIZE

    if not expected_ok:
        raise InvalidAddressFormatError(
            f"Invalid length {len(data)} for address type {address_type}"
        )
