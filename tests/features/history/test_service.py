"""Tests for transaction history normalization and pagination."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from tron_wallet.address import Address
from tron_wallet.config import TRX
from tron_wallet.features.history.service import (
    HistoryStatus,
    TransactionAction,
    TransactionHistory,
)
from tron_wallet.transaction import encode_trc20_transfer

from vectors import (
    DESTINATION_ADDRESS,
    DESTINATION_ADDRESS_HEX,
    USDT_ADDRESS,
    USDT_ADDRESS_HEX,
    WALLET_ADDRESS,
    WALLET_ADDRESS_HEX,
)

BLOCK_TIMESTAMP = 1654251828000


def coin_record(
    txid: str,
    contract: dict[str, Any],
    confirmations: int = 30,
    result: str = "SUCCESS",
    fee: int = 0,
) -> dict[str, Any]:
    return {
        "txID": txid,
        "block_timestamp": BLOCK_TIMESTAMP,
        "confirmations": confirmations,
        "ret": [{"contractRet": result, "fee": fee}],
        "raw_data": {"contract": [contract]},
    }


def transfer_contract(owner_hex: str, to_hex: str, amount: int) -> dict[str, Any]:
    return {
        "type": "TransferContract",
        "parameter": {
            "value": {"owner_address": owner_hex, "to_address": to_hex, "amount": amount}
        },
    }


def trigger_contract(owner_hex: str, to_hex: str, amount: int) -> dict[str, Any]:
    data = encode_trc20_transfer(Address.from_hex(to_hex), amount)
    return {
        "type": "TriggerSmartContract",
        "parameter": {
            "value": {
                "owner_address": owner_hex,
                "contract_address": USDT_ADDRESS_HEX,
                "data": data.hex(),
            }
        },
    }


def token_record(txid: str, from_address: str, to_address: str, value: str) -> dict[str, Any]:
    return {
        "transaction_id": txid,
        "block_timestamp": BLOCK_TIMESTAMP,
        "from": from_address,
        "to": to_address,
        "value": value,
        "type": "Transfer",
    }


def make_history(node, asset=TRX, page_size=5) -> TransactionHistory:
    return TransactionHistory(
        node=node,
        asset=asset,
        platform=TRX,
        address=Address.from_base58check(WALLET_ADDRESS),
        page_size=page_size,
        min_confirmations=21,
        explorer_url="https://tronscan.org",
    )


class TestCoinNormalization:
    def test_outgoing_transfer(self, node):
        record = coin_record(
            "tx1",
            transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 2_000000),
            fee=265_000,
        )
        node.load_transactions.return_value = {"data": [record], "meta": {}}

        entry = make_history(node).load_transactions().transactions[0]

        assert entry.id == "tx1"
        assert entry.action == TransactionAction.TRANSFER
        assert entry.incoming is False
        assert entry.from_address == WALLET_ADDRESS
        assert entry.to_address == DESTINATION_ADDRESS
        assert entry.amount.value == -2_000000
        assert entry.fee.value == 265_000
        assert entry.status == HistoryStatus.SUCCESS
        assert entry.timestamp == datetime(2022, 6, 3, 10, 23, 48, tzinfo=timezone.utc)
        assert entry.min_confirmations == 21
        assert entry.url == "https://tronscan.org/#/transaction/tx1"

    def test_incoming_transfer(self, node):
        record = coin_record(
            "tx2", transfer_contract(DESTINATION_ADDRESS_HEX, WALLET_ADDRESS_HEX, 5)
        )
        node.load_transactions.return_value = {"data": [record]}

        entry = make_history(node).load_transactions().transactions[0]

        assert entry.incoming is True
        assert entry.amount.value == 5

    @pytest.mark.parametrize(
        "confirmations,result,status",
        [
            (21, "SUCCESS", HistoryStatus.SUCCESS),
            (20, "SUCCESS", HistoryStatus.PENDING),
            (0, "SUCCESS", HistoryStatus.PENDING),
            (100, "OUT_OF_ENERGY", HistoryStatus.FAILED),
            (100, "REVERT", HistoryStatus.FAILED),
        ],
    )
    def test_status(self, node, confirmations, result, status):
        record = coin_record(
            "tx",
            transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 1),
            confirmations=confirmations,
            result=result,
        )
        node.load_transactions.return_value = {"data": [record]}

        assert make_history(node).load_transactions().transactions[0].status == status

    def test_trc20_trigger_decodes_recipient_and_amount(self, node):
        record = coin_record(
            "tx3", trigger_contract(DESTINATION_ADDRESS_HEX, WALLET_ADDRESS_HEX, 7_000000)
        )
        node.load_transactions.return_value = {"data": [record]}

        entry = make_history(node).load_transactions().transactions[0]

        assert entry.action == TransactionAction.TOKEN_TRANSFER
        assert entry.from_address == DESTINATION_ADDRESS
        assert entry.to_address == WALLET_ADDRESS
        assert entry.incoming is True
        assert entry.amount.value == 7_000000
        assert entry.token_address == USDT_ADDRESS

    def test_unsupported_contract_degrades(self, node):
        contract = {
            "type": "FreezeBalanceV2Contract",
            "parameter": {"value": {"owner_address": WALLET_ADDRESS_HEX}},
        }
        node.load_transactions.return_value = {"data": [coin_record("tx4", contract)]}

        entry = make_history(node).load_transactions().transactions[0]

        assert entry.action == TransactionAction.UNKNOWN
        assert entry.from_address == WALLET_ADDRESS
        assert entry.to_address == ""
        assert entry.amount.value == 0
        assert entry.incoming is True

    def test_undecodable_trigger_degrades_without_failing_page(self, node):
        contract = trigger_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 1)
        contract["parameter"]["value"]["data"] = "095ea7b3" + "00" * 64
        records = [
            coin_record("approve", contract),
            coin_record("ok", transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 1)),
        ]
        node.load_transactions.return_value = {"data": records}

        page = make_history(node).load_transactions()

        assert [entry.action for entry in page.transactions] == [
            TransactionAction.UNKNOWN,
            TransactionAction.TRANSFER,
        ]
        assert page.transactions[0].from_address == WALLET_ADDRESS

    def test_missing_owner_degrades_to_empty_sender(self, node):
        contract = {"type": "AccountCreateContract", "parameter": {"value": {}}}
        node.load_transactions.return_value = {"data": [coin_record("tx5", contract)]}

        entry = make_history(node).load_transactions().transactions[0]

        assert entry.from_address == ""

    @pytest.mark.parametrize(
        "raw_data",
        [{"contract": []}, {}, {"contract": [None]}, {"contract": ["TransferContract"]}],
    )
    def test_malformed_raw_data_degrades(self, node, raw_data):
        broken = {"txID": "broken", "ret": [{"contractRet": "SUCCESS"}], "raw_data": raw_data}
        ok = coin_record("ok", transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 1))
        node.load_transactions.return_value = {"data": [broken, ok]}

        page = make_history(node).load_transactions()

        assert [entry.id for entry in page.transactions] == ["broken", "ok"]
        degraded = page.transactions[0]
        assert degraded.action == TransactionAction.UNKNOWN
        assert degraded.from_address == ""
        assert degraded.amount.value == 0

    def test_record_without_txid_degrades(self, node):
        record = coin_record("x", transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 1))
        del record["txID"]
        node.load_transactions.return_value = {"data": [record]}

        entry = make_history(node).load_transactions().transactions[0]

        assert entry.id == ""
        assert entry.action == TransactionAction.TRANSFER


class TestTokenNormalization:
    def test_token_ledger_records(self, node, usdt):
        node.load_token_transactions.return_value = {
            "data": [
                token_record("in", DESTINATION_ADDRESS, WALLET_ADDRESS, "2000000"),
                token_record("out", WALLET_ADDRESS, DESTINATION_ADDRESS, "1000000"),
            ],
            "meta": {"fingerprint": "next"},
        }

        page = make_history(node, usdt).load_transactions()

        incoming, outgoing = page.transactions
        assert incoming.incoming is True
        assert incoming.amount.value == 2_000000
        assert outgoing.amount.value == -1_000000
        for entry in page.transactions:
            assert entry.status == HistoryStatus.SUCCESS
            assert entry.fee is None
            assert entry.confirmations == 0
            assert entry.min_confirmations == 0
            assert entry.token_address == USDT_ADDRESS
        node.load_token_transactions.assert_called_once_with(
            WALLET_ADDRESS, USDT_ADDRESS, 5, None
        )
        node.load_transactions.assert_not_called()


class TestPagination:
    def transfers(self, count: int) -> list[dict[str, Any]]:
        return [
            coin_record(
                f"tx{i}", transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, i + 1)
            )
            for i in range(count)
        ]

    def test_full_page_has_more(self, node):
        node.load_transactions.return_value = {
            "data": self.transfers(5),
            "meta": {"fingerprint": "cursor-1"},
        }

        page = make_history(node).load_transactions()

        assert page.has_more is True
        assert page.cursor == "cursor-1"
        assert len(page.transactions) == 5

    def test_short_page(self, node):
        node.load_transactions.return_value = {"data": self.transfers(3), "meta": {}}

        page = make_history(node).load_transactions()

        assert page.has_more is False
        assert page.cursor is None

    def test_empty_page_has_no_cursor(self, node):
        node.load_transactions.return_value = {"data": [], "meta": {"fingerprint": "x"}}

        page = make_history(node).load_transactions()

        assert page.transactions == []
        assert page.cursor is None
        assert page.has_more is False

    def test_cursor_is_forwarded_and_index_appended(self, node):
        history = make_history(node)
        node.load_transactions.return_value = {
            "data": self.transfers(5),
            "meta": {"fingerprint": "cursor-1"},
        }
        first = history.load_transactions()

        node.load_transactions.return_value = {
            "data": [coin_record("tx-next", transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 9))]
        }
        history.load_transactions(first.cursor)

        node.load_transactions.assert_called_with(WALLET_ADDRESS, 5, "cursor-1")
        assert history.load_transaction("tx0") is not None
        assert history.load_transaction("tx-next") is not None

    def test_reload_without_cursor_resets_index(self, node):
        history = make_history(node)
        node.load_transactions.return_value = {"data": self.transfers(2)}
        history.load_transactions()

        node.load_transactions.return_value = {
            "data": [coin_record("fresh", transfer_contract(WALLET_ADDRESS_HEX, DESTINATION_ADDRESS_HEX, 1))]
        }
        history.load_transactions()

        assert history.load_transaction("tx0") is None
        assert history.load_transaction("fresh").id == "fresh"

    def test_load_transaction_does_not_fetch(self, node):
        history = make_history(node)

        assert history.load_transaction("unknown") is None
        node.load_transactions.assert_not_called()
