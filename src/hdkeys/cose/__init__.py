"""CIP-8 / CIP-30 message signing structures."""

from hdkeys.cose.pubkey import decode_cip30_cose_pub_key, encode_cip30_cose_pub_key
from hdkeys.cose.sign1 import Cip30CoseSign1, sign_cip30_cose_data

__all__ = [
    "Cip30CoseSign1",
    "decode_cip30_cose_pub_key",
    "encode_cip30_cose_pub_key",
    "sign_cip30_cose_data",
]
