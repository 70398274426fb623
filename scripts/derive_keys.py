#!/usr/bin/env python3
"""Derive CIP-1852 spending and staking keys from a seed phrase.

Usage:
    python scripts/derive_keys.py "your seed phrase here"
    python scripts/derive_keys.py --account 1 --count 5
    python scripts/derive_keys.py  # uses HDKEYS_WALLET_SEED_PHRASE or prompts

Only public data is printed: public keys, key hashes and addresses.
"""

import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hdkeys.address import ShelleyAddress
from hdkeys.config import get_settings
from hdkeys.errors import HDKeysError
from hdkeys.keys import RootPrivateKey, format_derivation_path
from hdkeys.keys.paths import spending_root_path, staking_root_path

settings = get_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def read_phrase(words: list[str]) -> str:
    """Seed phrase from argv, settings or an interactive prompt."""
    if words:
        return " ".join(words)
    if settings.has_wallet:
        return settings.wallet_seed_phrase
    print("Enter your seed phrase (12-24 words):")
    return getpass("Seed phrase: ")


def derive_keys(root: RootPrivateKey, account: int, start: int, count: int) -> list[dict]:
    """Derive public data for a range of spending key indices.

    Returns:
        One dict per index with path, public keys, hashes and address
    """
    spending_root = root.derive_spending_root_key(account)
    staking_key = root.derive_staking_key(account, 0)
    staking_hash = staking_key.derive_pub_key().hash()

    rows = []
    for index in range(start, start + count):
        pub_key = spending_root.derive(index).derive_pub_key()
        address = ShelleyAddress.from_pub_key_hash(
            pub_key.hash(), settings.network_id, staking_key_hash=staking_hash
        )
        enterprise = ShelleyAddress.from_pub_key_hash(pub_key.hash(), settings.network_id)

        rows.append({
            "path": format_derivation_path(spending_root_path(account) + [index]),
            "pub_key": pub_key.hex(),
            "pub_key_hash": pub_key.hash().hex(),
            "address": address.to_bech32(settings.address_hrp),
            "enterprise_address": enterprise.to_bech32(settings.address_hrp),
        })

    logger.info(
        f"Staking key {format_derivation_path(staking_root_path(account) + [0])}: "
        f"{staking_key.derive_pub_key().hex()}"
    )
    return rows


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Derive CIP-1852 keys")
    parser.add_argument("words", nargs="*", help="Seed phrase words")
    parser.add_argument("--account", type=int, default=settings.default_account_index, help="Account index")
    parser.add_argument("--start", type=int, default=0, help="First address index")
    parser.add_argument("--count", type=int, default=1, help="Number of addresses")

    args = parser.parse_args()

    phrase = read_phrase(args.words)

    try:
        root = RootPrivateKey.from_phrase(phrase, settings.language)
        rows = derive_keys(root, args.account, args.start, args.count)
    except HDKeysError as e:
        logger.error(f"Derivation failed: {e.message}")
        sys.exit(1)

    print("=" * 60)
    print(f"Network: {settings.network}")
    print("=" * 60)
    for row in rows:
        for name, value in row.items():
            print(f"{name:>20}: {value}")
        print("-" * 60)


if __name__ == "__main__":
    main()
