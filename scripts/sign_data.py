#!/usr/bin/env python3
"""Sign a payload the way a CIP-30 wallet's signData does.

Usage:
    python scripts/sign_data.py --payload "Hello World" "seed phrase ..."
    python scripts/sign_data.py --payload-hex 1b00000194d70e512f --index 3

Prints the COSE_Sign1 envelope and the COSE_Key, both as hex, for the
enterprise address of the chosen spending key.
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
from hdkeys.cose import encode_cip30_cose_pub_key, sign_cip30_cose_data
from hdkeys.errors import HDKeysError
from hdkeys.keys import RootPrivateKey

settings = get_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="CIP-30 data signing")
    parser.add_argument("words", nargs="*", help="Seed phrase words")
    payload_group = parser.add_mutually_exclusive_group(required=True)
    payload_group.add_argument("--payload", type=str, help="UTF-8 payload")
    payload_group.add_argument("--payload-hex", type=str, help="Hex payload")
    parser.add_argument("--account", type=int, default=settings.default_account_index, help="Account index")
    parser.add_argument("--index", type=int, default=0, help="Spending key index")

    args = parser.parse_args()

    if args.words:
        phrase = " ".join(args.words)
    elif settings.has_wallet:
        phrase = settings.wallet_seed_phrase
    else:
        phrase = getpass("Seed phrase: ")

    payload = args.payload.encode("utf-8") if args.payload is not None else args.payload_hex

    try:
        root = RootPrivateKey.from_phrase(phrase, settings.language)
        key = root.derive_spending_key(args.account, args.index)
        pub_key = key.derive_pub_key()
        address = ShelleyAddress.from_pub_key_hash(pub_key.hash(), settings.network_id)

        sign1 = sign_cip30_cose_data(address, key, payload)
        sign1.verify(pub_key)
    except HDKeysError as e:
        logger.error(f"Signing failed: {e.message}")
        sys.exit(1)

    print(f"address:   {address.to_bech32(settings.address_hrp)}")
    print(f"signature: {sign1.hex()}")
    print(f"key:       {encode_cip30_cose_pub_key(pub_key).hex()}")


if __name__ == "__main__":
    main()
