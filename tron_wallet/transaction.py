"""TRX and TRC20 transfer construction, signing and size estimation.

Transactions are protobuf messages; the txid is the SHA-256 of the
serialized raw data and the signature covers that same digest.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass

from tron_wallet import protocol
from tron_wallet.address import ADDRESS_PREFIX, Address
from tron_wallet.config import CryptoAsset
from tron_wallet.errors import InvalidAddressError, SigningError
from tron_wallet.keys import SecretKey, sign_digest
from tron_wallet.node import LatestBlock

logger = logging.getLogger(__name__)

# transfer(address,uint256)
TRC20_TRANSFER_SELECTOR = bytes.fromhex("a9059cbb")
ABI_WORD_SIZE = 32

VALIDITY_WINDOW_MS = 5 * 60 * 1000
SIGNATURE_SIZE = 65
# Bandwidth is charged for the transaction plus the result the node appends.
MAX_RESULT_SIZE_IN_TX = 64
# Any millisecond timestamp until the year 2109 encodes to the same varint width.
PLACEHOLDER_BLOCK = LatestBlock(block_id="00" * 32, number=0, timestamp=1_654_251_828_000)


def encode_trc20_transfer(to: Address, value: int) -> bytes:
    """Call data for ``transfer(to, value)``; ABI addresses drop the 0x41 prefix."""
    if value < 0:
        raise ValueError("Token amount cannot be negative")
    return (
        TRC20_TRANSFER_SELECTOR
        + to.raw[1:].rjust(ABI_WORD_SIZE, b"\x00")
        + value.to_bytes(ABI_WORD_SIZE, "big")
    )


def decode_trc20_transfer(data: bytes) -> tuple[Address, int]:
    expected_size = len(TRC20_TRANSFER_SELECTOR) + 2 * ABI_WORD_SIZE
    if len(data) != expected_size or not data.startswith(TRC20_TRANSFER_SELECTOR):
        raise ValueError("Not a TRC20 transfer call")
    address_word = data[4 : 4 + ABI_WORD_SIZE]
    if any(address_word[:12]):
        raise ValueError("Malformed ABI address")
    to = Address(bytes([ADDRESS_PREFIX]) + address_word[12:])
    value = int.from_bytes(data[4 + ABI_WORD_SIZE :], "big")
    return to, value


def _as_address(value: Address | str) -> Address:
    if isinstance(value, Address):
        return value
    if not isinstance(value, str):
        raise InvalidAddressError(str(value))
    return Address.from_base58check(value)


@dataclass
class UnsignedTransaction:
    to: Address
    amount: int
    raw: protocol.TransactionRaw
    fee: int = 0

    @property
    def raw_bytes(self) -> bytes:
        return self.raw.SerializeToString()

    @property
    def txid(self) -> str:
        return hashlib.sha256(self.raw_bytes).hexdigest()


@dataclass
class SignedTransaction:
    transaction: UnsignedTransaction
    signature: bytes

    @property
    def txid(self) -> str:
        return self.transaction.txid

    def serialize(self) -> bytes:
        envelope = protocol.Transaction(
            raw_data=self.transaction.raw, signature=[self.signature]
        )
        return envelope.SerializeToString()

    def hex(self) -> str:
        return self.serialize().hex()


class TransactionBuilder:
    def __init__(self, validity_window_ms: int = VALIDITY_WINDOW_MS):
        self.validity_window_ms = validity_window_ms

    def build_transfer(
        self,
        asset: CryptoAsset,
        owner: Address | str,
        to: Address | str,
        value: int,
    ) -> UnsignedTransaction:
        owner_address = _as_address(owner)
        to_address = _as_address(to)

        if asset.is_token:
            contract = protocol.TriggerSmartContract(
                owner_address=owner_address.raw,
                contract_address=_as_address(asset.address).raw,
                data=encode_trc20_transfer(to_address, value),
            )
            packed = protocol.pack_contract(
                protocol.TRIGGER_SMART_CONTRACT, "TriggerSmartContract", contract
            )
        else:
            contract = protocol.TransferContract(
                owner_address=owner_address.raw,
                to_address=to_address.raw,
                amount=value,
            )
            packed = protocol.pack_contract(
                protocol.TRANSFER_CONTRACT, "TransferContract", contract
            )

        raw = protocol.TransactionRaw(contract=[packed])
        return UnsignedTransaction(to=to_address, amount=value, raw=raw)

    def attach_reference(
        self, transaction: UnsignedTransaction, block: LatestBlock, fee_limit: int
    ) -> UnsignedTransaction:
        block_hash = bytes.fromhex(block.block_id)
        raw = transaction.raw
        raw.ref_block_bytes = (block.number & 0xFFFF).to_bytes(2, "big")
        raw.ref_block_hash = block_hash[8:16]
        raw.expiration = block.timestamp + self.validity_window_ms
        raw.fee_limit = fee_limit
        return transaction

    def sign(
        self, transaction: UnsignedTransaction, private_key: SecretKey | None
    ) -> SignedTransaction:
        if private_key is None or private_key.is_wiped:
            raise SigningError("Wallet is locked")
        digest = hashlib.sha256(transaction.raw_bytes).digest()
        signature = sign_digest(private_key, digest)
        logger.debug("Signed transaction %s", transaction.txid)
        return SignedTransaction(transaction=transaction, signature=signature)

    def estimate_size(
        self,
        asset: CryptoAsset,
        owner: Address | str,
        to: Address | str,
        value: int,
        fee_limit: int,
    ) -> int:
        transaction = self.build_transfer(asset, owner, to, value)
        self.attach_reference(transaction, PLACEHOLDER_BLOCK, fee_limit)
        envelope = protocol.Transaction(
            raw_data=transaction.raw, signature=[bytes(SIGNATURE_SIZE)]
        )
        return envelope.ByteSize() + MAX_RESULT_SIZE_IN_TX
