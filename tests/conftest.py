import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from tron_wallet.config import CryptoAsset, WalletConfig
from tron_wallet.node import NodeClient
from tron_wallet.storage import JsonWalletStorage

from vectors import (
    CHAIN_PARAMETERS,
    DESTINATION_ADDRESS_HEX,
    LATEST_BLOCK,
    SEED_HEX,
    USDT_ADDRESS,
)


@pytest.fixture(autouse=True)
def isolate_wallet_storage(monkeypatch):
    """Run every test against its own wallet directory."""
    with tempfile.TemporaryDirectory(prefix="tron-wallet-test-") as tmp_dir:
        monkeypatch.setenv("TRON_WALLET_DIR", str(Path(tmp_dir)))
        monkeypatch.delenv("TRON_WALLET_NODE_URL", raising=False)
        monkeypatch.delenv("TRON_WALLET_NETWORK", raising=False)
        yield


@pytest.fixture
def seed():
    """Fixture providing the 64-byte test seed"""
    return bytes.fromhex(SEED_HEX)


@pytest.fixture
def usdt():
    """Fixture providing a USDT token asset"""
    return CryptoAsset(
        id="tether@tron",
        platform="tron",
        decimals=6,
        type="token",
        address=USDT_ADDRESS,
    )


@pytest.fixture
def node():
    """Fixture providing a node mock with an existing destination account"""
    node = Mock(spec=NodeClient)
    node.coin_balance.return_value = 10_000_000
    node.token_balance.return_value = 6_000_000
    node.account.return_value = {"address": DESTINATION_ADDRESS_HEX}
    node.resources.return_value = {"freeNetLimit": 1500, "freeNetUsed": 0}
    node.chain_parameters.return_value = dict(CHAIN_PARAMETERS)
    node.latest_block.return_value = LATEST_BLOCK
    node.estimate_energy.return_value = 28362
    node.submit_transaction.return_value = {"code": "SUCCESS", "txid": "a" * 64}
    node.load_transactions.return_value = {"data": [], "meta": {}}
    node.load_token_transactions.return_value = {"data": [], "meta": {}}
    return node


@pytest.fixture
def wallet_config(tmp_path):
    """Fixture providing a config rooted in a temporary directory"""
    return WalletConfig(storage_dir=tmp_path)


@pytest.fixture
def storage(tmp_path):
    """Fixture providing file storage for one wallet"""
    return JsonWalletStorage(tmp_path / "wallets" / "test.json")
