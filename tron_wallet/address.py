"""TRON address derivation and Base58Check encoding."""

from __future__ import annotations

import hashlib

import base58
from Crypto.Hash import keccak

from tron_wallet.errors import (
    InvalidAddressError,
    InvalidChecksumError,
    InvalidPublicKeyError,
)

ADDRESS_PREFIX = 0x41
ADDRESS_SIZE = 21
PUBLIC_KEY_SIZE = 65
CHECKSUM_SIZE = 4


def _double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


class Address:
    """A 21-byte account address: network prefix followed by 20 hash bytes."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        raw = bytes(raw)
        if len(raw) != ADDRESS_SIZE:
            raise InvalidAddressError(raw.hex(), "Invalid address bytes")
        if raw[0] != ADDRESS_PREFIX:
            raise InvalidAddressError(raw.hex(), "Invalid address prefix")
        self._raw = raw

    @classmethod
    def from_public_key(cls, public_key: bytes) -> "Address":
        # The uncompressed key marker byte is not hashed.
        if len(public_key) != PUBLIC_KEY_SIZE:
            raise InvalidPublicKeyError()
        digest = keccak256(bytes(public_key[1:]))
        return cls(bytes([ADDRESS_PREFIX]) + digest[-20:])

    @classmethod
    def from_base58check(cls, address: str) -> "Address":
        try:
            decoded = base58.b58decode(address)
        except ValueError as e:
            raise InvalidAddressError(address) from e
        if len(decoded) < CHECKSUM_SIZE:
            raise InvalidAddressError(address)
        payload, checksum = decoded[:-CHECKSUM_SIZE], decoded[-CHECKSUM_SIZE:]
        if _double_sha256(payload)[:CHECKSUM_SIZE] != checksum:
            raise InvalidChecksumError(address)
        try:
            return cls(payload)
        except InvalidAddressError as e:
            raise InvalidAddressError(address) from e

    @classmethod
    def from_hex(cls, value: str) -> "Address":
        try:
            raw = bytes.fromhex(value)
        except (TypeError, ValueError) as e:
            raise InvalidAddressError(str(value)) from e
        return cls(raw)

    @staticmethod
    def is_valid(address: str) -> bool:
        try:
            Address.from_base58check(address)
        except InvalidAddressError:
            return False
        return True

    def to_base58check(self) -> str:
        checksum = _double_sha256(self._raw)[:CHECKSUM_SIZE]
        return base58.b58encode(self._raw + checksum).decode("ascii")

    def to_hex(self) -> str:
        return self._raw.hex()

    @property
    def raw(self) -> bytes:
        return self._raw

    def __bytes__(self) -> bytes:
        return self._raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __str__(self) -> str:
        return self.to_base58check()

    def __repr__(self) -> str:
        return f"Address({self.to_base58check()!r})"
