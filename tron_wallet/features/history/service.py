"""Transaction history pagination and normalization.

Coin ledger records carry the raw contract, so each record is decoded by
contract type. TRC20 ledger records arrive already flattened by the node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol

from tron_wallet.address import Address
from tron_wallet.amount import Amount
from tron_wallet.config import CryptoAsset
from tron_wallet.errors import InvalidAddressError
from tron_wallet.transaction import decode_trc20_transfer

logger = logging.getLogger(__name__)


class HistoryStatus(Enum):
    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"


class TransactionAction(Enum):
    TRANSFER = "transfer"
    TOKEN_TRANSFER = "token_transfer"
    UNKNOWN = "unknown"


class HistoryNodeProtocol(Protocol):
    def load_transactions(
        self, address: str, limit: int, cursor: str | None = None
    ) -> dict[str, Any]: ...

    def load_token_transactions(
        self, address: str, token: str, limit: int, cursor: str | None = None
    ) -> dict[str, Any]: ...


@dataclass
class HistoryEntry:
    id: str
    from_address: str
    to_address: str
    amount: Amount
    incoming: bool
    fee: Amount | None
    timestamp: datetime
    confirmations: int
    min_confirmations: int
    status: HistoryStatus
    action: TransactionAction
    token_address: str | None = None
    url: str = ""


@dataclass
class HistoryPage:
    transactions: list[HistoryEntry]
    has_more: bool
    cursor: str | None


def _timestamp(record: dict[str, Any]) -> datetime:
    return datetime.fromtimestamp(
        int(record.get("block_timestamp") or 0) / 1000, tz=timezone.utc
    )


class TransactionHistory:
    def __init__(
        self,
        node: HistoryNodeProtocol,
        asset: CryptoAsset,
        platform: CryptoAsset,
        address: Address,
        page_size: int = 5,
        min_confirmations: int = 21,
        explorer_url: str = "https://tronscan.org",
    ):
        self.node = node
        self.asset = asset
        self.platform = platform
        self.address = address
        self.page_size = page_size
        self.min_confirmations = min_confirmations
        self.explorer_url = explorer_url
        self._index: dict[str, HistoryEntry] = {}
        self._decoders: dict[str, Callable[..., HistoryEntry]] = {
            "TransferContract": self._decode_transfer,
            "TriggerSmartContract": self._decode_trigger,
        }

    def tx_url(self, txid: str) -> str:
        return f"{self.explorer_url}/#/transaction/{txid}"

    def load_transactions(self, cursor: str | None = None) -> HistoryPage:
        if not cursor:
            self._index.clear()

        owner = self.address.to_base58check()
        if self.asset.is_token:
            response = self.node.load_token_transactions(
                owner, self.asset.address, self.page_size, cursor
            )
        else:
            response = self.node.load_transactions(owner, self.page_size, cursor)

        records = response.get("data") or []
        entries = [self._normalize(record) for record in records]
        for entry in entries:
            self._index[entry.id] = entry

        next_cursor = None
        if records:
            next_cursor = (response.get("meta") or {}).get("fingerprint")

        logger.info(
            "Loaded %d transactions for %s (cursor=%s)", len(entries), owner, cursor
        )
        return HistoryPage(
            transactions=entries,
            has_more=len(records) == self.page_size,
            cursor=next_cursor,
        )

    def load_transaction(self, txid: str) -> HistoryEntry | None:
        return self._index.get(txid)

    def _normalize(self, record: dict[str, Any]) -> HistoryEntry:
        if self.asset.is_token:
            return self._decode_token_record(record)

        contract: Any = {}
        try:
            contract = record["raw_data"]["contract"][0]
            decoder = self._decoders.get(contract.get("type"), self._decode_unsupported)
            return decoder(record, contract)
        except (
            AttributeError,
            KeyError,
            IndexError,
            TypeError,
            ValueError,
            InvalidAddressError,
        ) as e:
            logger.warning(
                "Could not decode record %s: %s",
                record.get("txID"),
                e,
            )
            return self._decode_unsupported(record, contract)

    def _status(self, record: dict[str, Any]) -> HistoryStatus:
        result = (record.get("ret") or [{}])[0]
        if result.get("contractRet") != "SUCCESS":
            return HistoryStatus.FAILED
        if int(record.get("confirmations") or 0) >= self.min_confirmations:
            return HistoryStatus.SUCCESS
        return HistoryStatus.PENDING

    def _fee(self, record: dict[str, Any]) -> Amount:
        result = (record.get("ret") or [{}])[0]
        return Amount(int(result.get("fee") or 0), self.platform.decimals)

    def _entry(
        self,
        record: dict[str, Any],
        *,
        from_address: str,
        to_address: str,
        value: int,
        incoming: bool,
        action: TransactionAction,
        token_address: str | None = None,
    ) -> HistoryEntry:
        txid = record.get("txID", "")
        return HistoryEntry(
            id=txid,
            from_address=from_address,
            to_address=to_address,
            amount=Amount(value if incoming else -value, self.asset.decimals),
            incoming=incoming,
            fee=self._fee(record),
            timestamp=_timestamp(record),
            confirmations=int(record.get("confirmations") or 0),
            min_confirmations=self.min_confirmations,
            status=self._status(record),
            action=action,
            token_address=token_address,
            url=self.tx_url(txid),
        )

    def _decode_transfer(
        self, record: dict[str, Any], contract: dict[str, Any]
    ) -> HistoryEntry:
        value = contract["parameter"]["value"]
        to = Address.from_hex(value["to_address"])
        return self._entry(
            record,
            from_address=Address.from_hex(value["owner_address"]).to_base58check(),
            to_address=to.to_base58check(),
            value=int(value.get("amount") or 0),
            incoming=to == self.address,
            action=TransactionAction.TRANSFER,
        )

    def _decode_trigger(
        self, record: dict[str, Any], contract: dict[str, Any]
    ) -> HistoryEntry:
        value = contract["parameter"]["value"]
        to, amount = decode_trc20_transfer(bytes.fromhex(value["data"]))
        return self._entry(
            record,
            from_address=Address.from_hex(value["owner_address"]).to_base58check(),
            to_address=to.to_base58check(),
            value=amount,
            incoming=to == self.address,
            action=TransactionAction.TOKEN_TRANSFER,
            token_address=Address.from_hex(value["contract_address"]).to_base58check(),
        )

    def _decode_unsupported(
        self, record: dict[str, Any], contract: dict[str, Any]
    ) -> HistoryEntry:
        owner = ""
        try:
            owner = Address.from_hex(
                contract["parameter"]["value"]["owner_address"]
            ).to_base58check()
        except (KeyError, TypeError, InvalidAddressError):
            logger.debug("Record %s has no usable owner address", record.get("txID"))
        return self._entry(
            record,
            from_address=owner,
            to_address="",
            value=0,
            incoming=True,
            action=TransactionAction.UNKNOWN,
        )

    def _decode_token_record(self, record: dict[str, Any]) -> HistoryEntry:
        txid = record.get("transaction_id", "")
        incoming = record.get("to") == self.address.to_base58check()
        value = int(record.get("value") or 0)
        return HistoryEntry(
            id=txid,
            from_address=record.get("from", ""),
            to_address=record.get("to", ""),
            amount=Amount(value if incoming else -value, self.asset.decimals),
            incoming=incoming,
            fee=None,
            timestamp=_timestamp(record),
            confirmations=0,
            min_confirmations=0,
            status=HistoryStatus.SUCCESS,
            action=TransactionAction.TOKEN_TRANSFER,
            token_address=self.asset.address,
            url=self.tx_url(txid),
        )
