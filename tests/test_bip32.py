"""Tests for BIP32-Ed25519 root keys, child derivation and signing."""

import hashlib
import hmac
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest
from nacl.signing import VerifyKey

from hdkeys.errors import (
    ChildIndexOverflowError,
    HardenedDerivationError,
    InvalidEntropyLengthError,
    InvalidKeyLengthError,
    InvalidRootSecretError,
    SignatureVerificationError,
)
from hdkeys.keys import BIP32_HARDEN, Bip32PrivateKey, Bip32PublicKey, harden


def _seed(entropy: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha512", b"", entropy, 4096, dklen=96)


def _expected_child(key: Bip32PrivateKey, index: int) -> bytes:
    """Child bytes computed straight from the derivation formulas."""
    ib = index.to_bytes(4, "little")
    if index >= BIP32_HARDEN:
        data = key.k
        z = hmac.new(key.chain_code, b"\x00" + data + ib, hashlib.sha512).digest()
        c = hmac.new(key.chain_code, b"\x01" + data + ib, hashlib.sha512).digest()
    else:
        data = key.derive_pub_key().bytes
        z = hmac.new(key.chain_code, b"\x02" + data + ib, hashlib.sha512).digest()
        c = hmac.new(key.chain_code, b"\x03" + data + ib, hashlib.sha512).digest()

    kl = (8 * int.from_bytes(z[:28], "little") + int.from_bytes(key.kl, "little")) % 2**256
    kr = (int.from_bytes(z[32:], "little") + int.from_bytes(key.kr, "little")) % 2**256
    return kl.to_bytes(32, "little") + kr.to_bytes(32, "little") + c[32:]


def _weak_entropy() -> bytes:
    """Entropy whose unclamped kl[31] has bit 0b00100000 set."""
    for i in range(256):
        entropy = bytes([i]) * 16
        if _seed(entropy)[31] & 0b00100000:
            return entropy
    raise AssertionError("no weak entropy found")


class TestRootKeyFactory:
    """Tests for Bip32PrivateKey.from_bip39_entropy."""

    @pytest.mark.parametrize("size", [16, 20, 24, 28, 32])
    def test_valid_entropy_sizes(self, size):
        """Test that every mnemonic strength gives a 96 byte key."""
        entropy = bytes(range(size))

        key = Bip32PrivateKey.from_bip39_entropy(entropy)

        assert len(key.bytes) == 96
        assert Bip32PrivateKey.from_bip39_entropy(entropy) == key

    @pytest.mark.parametrize("size", [0, 15, 17, 31, 33, 64])
    def test_invalid_entropy_sizes(self, size):
        """Test that other entropy sizes are rejected."""
        with pytest.raises(InvalidEntropyLengthError):
            Bip32PrivateKey.from_bip39_entropy(bytes(size))

    def test_matches_pbkdf2_and_clamping(self):
        """Test the seed split and the kl clamping."""
        entropy = bytes(range(32))
        seed = _seed(entropy)

        key = Bip32PrivateKey.from_bip39_entropy(entropy)

        assert key.kr == seed[32:64]
        assert key.chain_code == seed[64:]
        assert key.kl[1:31] == seed[1:31]
        assert key.kl[0] == seed[0] & 0b11111000
        assert key.kl[31] == (seed[31] & 0b00011111) | 0b01000000

    def test_weak_key_guard(self):
        """Test that the guard rejects weak keys only when not forced."""
        entropy = _weak_entropy()

        Bip32PrivateKey.from_bip39_entropy(entropy, force=True)

        with pytest.raises(InvalidRootSecretError):
            Bip32PrivateKey.from_bip39_entropy(entropy, force=False)

    def test_weak_key_guard_from_settings(self, monkeypatch):
        """Test that the guard default follows the settings."""
        from hdkeys.config import reset_settings

        entropy = _weak_entropy()
        monkeypatch.setenv("HDKEYS_REJECT_WEAK_ROOT_SECRET", "true")
        reset_settings()

        with pytest.raises(InvalidRootSecretError):
            Bip32PrivateKey.from_bip39_entropy(entropy)


class TestBip32PrivateKey:
    """Tests for child derivation."""

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidKeyLengthError):
            Bip32PrivateKey(bytes(95))
        with pytest.raises(InvalidKeyLengthError):
            Bip32PrivateKey(bytes(97))

    def test_hardened_child_matches_formula(self, root_key):
        """Test hardened derivation against a direct computation."""
        key = root_key.bip32_key
        index = harden(1852)

        assert key.derive(index).bytes == _expected_child(key, index)

    def test_soft_child_matches_formula(self, root_key):
        """Test soft derivation against a direct computation."""
        key = root_key.bip32_key

        for index in (0, 1, 2**31 - 1):
            assert key.derive(index).bytes == _expected_child(key, index)

    def test_soft_and_hardened_differ(self, root_key):
        """Test domain separation between soft and hardened children."""
        key = root_key.bip32_key

        assert key.derive(5) != key.derive(5 + BIP32_HARDEN)

    def test_derive_does_not_mutate(self, root_key):
        key = root_key.bip32_key
        before = key.bytes

        key.derive(0)
        key.derive(harden(0))

        assert key.bytes == before

    def test_empty_path_is_identity(self, root_key):
        """Test that an empty path returns the same key."""
        key = root_key.bip32_key

        assert key.derive_path([]) is key
        assert key.derive_path("m") is key

    def test_path_composition(self, root_key):
        """Test derive_path(p1 + p2) == derive_path(p1).derive_path(p2)."""
        key = root_key.bip32_key
        p1 = [harden(1852), harden(1815)]
        p2 = [harden(0), 0, 7]

        assert key.derive_path(p1 + p2) == key.derive_path(p1).derive_path(p2)

    def test_path_string_matches_indices(self, root_key):
        key = root_key.bip32_key

        assert key.derive_path("m/1852'/1815'/0'/0/0") == key.derive_path(
            [harden(1852), harden(1815), harden(0), 0, 0]
        )

    @pytest.mark.parametrize("index", [-1, 2**32, 2**40])
    def test_index_overflow(self, root_key, index):
        """Test that indices outside 4 bytes are rejected."""
        with pytest.raises(ChildIndexOverflowError):
            root_key.bip32_key.derive(index)

    def test_largest_index(self, root_key):
        child = root_key.bip32_key.derive(2**32 - 1)

        assert len(child.bytes) == 96

    def test_pub_key_is_cached(self, root_key):
        key = root_key.bip32_key

        assert key.derive_pub_key() is key.derive_pub_key()

    def test_pub_key_concurrent_access(self):
        """Test that concurrent first access yields one consistent key."""
        key = Bip32PrivateKey.from_bip39_entropy(bytes(range(16)))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: key.derive_pub_key(), range(32)))

        assert all(result is results[0] for result in results)

    def test_path_skips_pub_key_without_debug_logging(self, root_key, caplog):
        """Test that a hardened path computes no public key unless DEBUG is on."""
        caplog.set_level(logging.INFO, logger="hdkeys.keys.bip32")

        child = root_key.bip32_key.derive_path("m/1852'/1815'/0'")

        assert child._pub_key is None

    def test_path_logs_leaf_pub_key_at_debug(self, root_key, caplog):
        caplog.set_level(logging.DEBUG, logger="hdkeys.keys.bip32")

        child = root_key.bip32_key.derive_path("m/1852'/1815'/0'")

        assert child.derive_pub_key().hex() in caplog.text

    def test_repr_hides_secret(self, root_key):
        key = root_key.bip32_key

        assert key.kl.hex() not in repr(key)


class TestBip32PublicKey:
    """Tests for watch-only soft derivation."""

    def test_soft_derivation_matches_private(self, spending_key):
        """Test that public derivation agrees with private derivation."""
        public = spending_key.to_public()

        for index in (0, 1, 42, 2**31 - 1):
            assert spending_key.derive(index).to_public() == public.derive(index)

    def test_soft_path_matches_private(self, root_key):
        account = root_key.derive_path("m/1852'/1815'/0'")

        assert account.derive_path([0, 3]).to_public() == account.to_public().derive_path("0/3")

    def test_hardened_rejected(self, spending_key):
        with pytest.raises(HardenedDerivationError):
            spending_key.to_public().derive(harden(0))

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidKeyLengthError):
            Bip32PublicKey(bytes(32))

    def test_fields(self, spending_key):
        public = spending_key.to_public()

        assert public.pub_key == spending_key.derive_pub_key()
        assert public.chain_code == spending_key.chain_code


class TestSigning:
    """Tests for Ed25519 signing with extended keys."""

    def test_signs_hello_world(self, hello_world_key, hello_world_signature):
        """Test the known signature vector."""
        signature = hello_world_key.sign(b"Hello World")

        assert signature.bytes == hello_world_signature
        assert signature.pub_key == hello_world_key.derive_pub_key()

    def test_signature_is_standard_ed25519(self, spending_key):
        """Test that an independent Ed25519 verifier accepts the signature."""
        message = b"interop"
        signature = spending_key.sign(message)

        VerifyKey(signature.pub_key.bytes).verify(message, signature.bytes)

    def test_sign_verify_round_trip(self, spending_key):
        message = b"some message"

        signature = spending_key.sign(message)

        signature.verify(message)
        spending_key.derive_pub_key().verify(message, signature.bytes)

    def test_verify_with_unrelated_key_fails(self, root_key, spending_key):
        message = b"some message"
        signature = spending_key.sign(message)
        other = root_key.derive_spending_key(0, 1).derive_pub_key()

        with pytest.raises(SignatureVerificationError):
            other.verify(message, signature.bytes)

    def test_verify_tampered_message_fails(self, spending_key):
        signature = spending_key.sign(b"original")

        with pytest.raises(SignatureVerificationError):
            signature.verify(b"tampered")

    def test_signing_is_deterministic(self, spending_key):
        assert spending_key.sign(b"x") == spending_key.sign(b"x")
