"""Unit tests for key derivation and the wipeable secret key."""

import hashlib

import pytest
from ecdsa import SECP256k1, VerifyingKey
from ecdsa.util import sigdecode_string

from tron_wallet.keys import (
    DEFAULT_BIP44_PATH,
    SecretKey,
    derive_private_key,
    ensure_seed,
    public_key_from_private_key,
    sign_digest,
)

from vectors import COIN_TRANSFER_HEX, PRIVATE_KEY_HEX, PUBLIC_KEY_HEX


@pytest.mark.unit
def test_derive_private_key_known_vector(seed):
    """Seed derives the expected key at m/44'/195'/0'"""
    secret = derive_private_key(seed, DEFAULT_BIP44_PATH)
    assert secret.hex() == PRIVATE_KEY_HEX


@pytest.mark.unit
def test_public_key_is_uncompressed(seed):
    secret = derive_private_key(seed)
    public_key = secret.public_key()
    assert len(public_key) == 65
    assert public_key[0] == 0x04
    assert public_key.hex() == PUBLIC_KEY_HEX
    assert public_key_from_private_key(bytes.fromhex(PRIVATE_KEY_HEX)) == public_key


@pytest.mark.unit
def test_other_path_derives_other_key(seed):
    assert derive_private_key(seed, "m/44'/195'/1'").hex() != PRIVATE_KEY_HEX


@pytest.mark.unit
@pytest.mark.parametrize("value", ["seed", None, 123, ["a"]])
def test_ensure_seed_rejects_non_bytes(value):
    with pytest.raises(TypeError, match="seed must be an instance of bytes"):
        ensure_seed(value)


@pytest.mark.unit
def test_ensure_seed_accepts_bytearray(seed):
    assert ensure_seed(bytearray(seed)) == seed


class TestSecretKey:
    def test_requires_32_bytes(self):
        with pytest.raises(ValueError):
            SecretKey(bytes(31))

    def test_wipe_zeroes_buffer(self):
        secret = SecretKey(bytes.fromhex(PRIVATE_KEY_HEX))
        assert secret.is_wiped is False

        secret.wipe()

        assert secret.is_wiped is True
        with pytest.raises(ValueError):
            secret.reveal()

    def test_repr_hides_material(self):
        secret = SecretKey(bytes.fromhex(PRIVATE_KEY_HEX))
        assert PRIVATE_KEY_HEX not in repr(secret)


@pytest.mark.unit
def test_sign_digest_is_recoverable():
    secret = SecretKey(bytes.fromhex(PRIVATE_KEY_HEX))
    digest = hashlib.sha256(b"tron").digest()

    signature = sign_digest(secret, digest)

    assert len(signature) == 65
    assert signature[64] in (0, 1)
    candidates = VerifyingKey.from_public_key_recovery_with_digest(
        signature[:64],
        digest,
        curve=SECP256k1,
        hashfunc=hashlib.sha256,
        sigdecode=sigdecode_string,
    )
    assert candidates[signature[64]].to_string("uncompressed").hex() == PUBLIC_KEY_HEX
    assert sign_digest(secret, digest) == signature


@pytest.mark.unit
def test_sign_digest_keeps_high_s():
    """Signature over the vector transfer keeps the generated s value"""
    secret = SecretKey(bytes.fromhex(PRIVATE_KEY_HEX))
    raw = bytes.fromhex(COIN_TRANSFER_HEX[6 : 6 + 262])

    signature = sign_digest(secret, hashlib.sha256(raw).digest())

    assert signature.hex() == COIN_TRANSFER_HEX[-130:]
    s = int.from_bytes(signature[32:64], "big")
    assert s > SECP256k1.order // 2
    assert signature[64] == 0
