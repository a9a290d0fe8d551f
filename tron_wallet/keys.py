"""Key derivation and handling of private key material."""

from __future__ import annotations

import hashlib

from bip_utils import Bip32Slip10Secp256k1
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string

from tron_wallet.errors import SigningError

DEFAULT_BIP44_PATH = "m/44'/195'/0'"


class SecretKey:
    """Private key bytes that can be wiped in place.

    The wrapper owns a mutable buffer so ``wipe()`` overwrites the secret
    instead of waiting for the object to be collected.
    """

    __slots__ = ("_buffer",)

    def __init__(self, raw: bytes):
        if len(raw) != 32:
            raise ValueError("Private key must be 32 bytes")
        self._buffer = bytearray(raw)

    @property
    def is_wiped(self) -> bool:
        return not any(self._buffer)

    def reveal(self) -> bytes:
        if self.is_wiped:
            raise ValueError("Private key has been wiped")
        return bytes(self._buffer)

    def hex(self) -> str:
        return self.reveal().hex()

    def public_key(self) -> bytes:
        return public_key_from_private_key(self.reveal())

    def wipe(self) -> None:
        for i in range(len(self._buffer)):
            self._buffer[i] = 0

    def __repr__(self) -> str:
        return "SecretKey(<redacted>)"


def ensure_seed(seed) -> bytes:
    if not isinstance(seed, (bytes, bytearray, memoryview)):
        raise TypeError(
            f"seed must be an instance of bytes, {type(seed).__name__} provided"
        )
    return bytes(seed)


def derive_private_key(seed: bytes, path: str = DEFAULT_BIP44_PATH) -> SecretKey:
    node = Bip32Slip10Secp256k1.FromSeed(ensure_seed(seed)).DerivePath(path)
    return SecretKey(node.PrivateKey().Raw().ToBytes())


def public_key_from_private_key(private_key: bytes) -> bytes:
    """Uncompressed 65-byte public key, which is what TRON addresses hash."""
    signing_key = SigningKey.from_string(private_key, curve=SECP256k1)
    return signing_key.get_verifying_key().to_string("uncompressed")


def sign_digest(private_key: SecretKey, digest: bytes) -> bytes:
    """Deterministic RFC 6979 signature: r || s || recovery id.

    ``s`` is not normalized to the lower half of the curve order.
    """
    signing_key = SigningKey.from_string(private_key.reveal(), curve=SECP256k1)
    signature = signing_key.sign_digest_deterministic(
        digest, hashfunc=hashlib.sha256, sigencode=sigencode_string
    )

    # Candidates come back ordered by the parity of R.y, i.e. by recovery id.
    own_key = signing_key.get_verifying_key().to_string()
    candidates = VerifyingKey.from_public_key_recovery_with_digest(
        signature,
        digest,
        curve=SECP256k1,
        hashfunc=hashlib.sha256,
        sigdecode=sigdecode_string,
    )
    for recovery_id, candidate in enumerate(candidates):
        if candidate.to_string() == own_key:
            return signature + bytes([recovery_id])
    raise SigningError("Could not determine the signature recovery id")
