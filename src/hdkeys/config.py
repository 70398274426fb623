"""Library configuration using pydantic-settings.

Every setting can be overridden with an ``HDKEYS_`` prefixed environment
variable or from a local ``.env`` file.
"""

from functools import lru_cache
from typing import Optional

from bip_utils import Bip39Languages
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Shelley address network ids and bech32 prefixes
NETWORK_IDS: dict[str, int] = {
    "mainnet": 1,
    "testnet": 0,
}

ADDRESS_HRPS: dict[str, str] = {
    "mainnet": "addr",
    "testnet": "addr_test",
}


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HDKEYS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Mnemonic
    # ======================
    mnemonic_language: str = Field(
        default="english", description="BIP39 word list used for phrase conversion"
    )
    wallet_seed_phrase: Optional[str] = Field(
        default=None, description="12-24 word seed phrase used by the helper scripts"
    )

    # ======================
    # Derivation
    # ======================
    reject_weak_root_secret: bool = Field(
        default=False,
        description="Reject root keys whose kl[31] has bit 0b00100000 set",
    )
    default_account_index: int = Field(
        default=0, description="Account index used when none is given"
    )

    # ======================
    # Network
    # ======================
    network: str = Field(default="mainnet", description="mainnet or testnet")

    # ======================
    # Logging
    # ======================
    log_level: str = Field(default="INFO", description="Log level used by the scripts")

    @field_validator("mnemonic_language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        name = value.strip().upper()
        if name not in Bip39Languages.__members__:
            raise ValueError(f"Unsupported BIP39 language: {value}")
        return value.strip().lower()

    @field_validator("default_account_index")
    @classmethod
    def _check_account_index(cls, value: int) -> int:
        if value < 0 or value >= 0x80000000:
            raise ValueError("Account index must be in [0, 2^31)")
        return value

    @field_validator("network")
    @classmethod
    def _check_network(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in NETWORK_IDS:
            raise ValueError(f"Unknown network: {value}")
        return value

    @property
    def language(self) -> Bip39Languages:
        """BIP39 language enum member for the configured word list."""
        return Bip39Languages[self.mnemonic_language.upper()]

    @property
    def network_id(self) -> int:
        """Network id nibble written into address headers."""
        return NETWORK_IDS[self.network]

    @property
    def address_hrp(self) -> str:
        """Bech32 prefix for payment addresses."""
        return ADDRESS_HRPS[self.network]

    @property
    def has_wallet(self) -> bool:
        """Check if a seed phrase is configured."""
        return bool(self.wallet_seed_phrase and len(self.wallet_seed_phrase.split()) >= 12)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "mnemonic_language": self.mnemonic_language,
            "wallet_seed_phrase": "***" if self.wallet_seed_phrase else "(not set)",
            "reject_weak_root_secret": self.reject_weak_root_secret,
            "default_account_index": self.default_account_index,
            "network": self.network,
            "log_level": self.log_level,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    get_settings.cache_clear()
