"""Wallet configuration and asset descriptions."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tron_wallet.address import Address
from tron_wallet.network import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://127.0.0.1:8090"

EXPLORERS = {
    "mainnet": "https://tronscan.org",
    "testnet": "https://nile.tronscan.org",
}

COIN = "coin"
TOKEN = "token"


@dataclass(frozen=True)
class CryptoAsset:
    id: str
    platform: str
    decimals: int
    type: str = COIN
    address: str | None = None

    def __post_init__(self):
        if self.type not in (COIN, TOKEN):
            raise ValueError(f"Unsupported crypto type: {self.type}")
        if self.type == TOKEN and not Address.is_valid(self.address or ""):
            raise ValueError(f"Token {self.id} needs a valid contract address")

    @property
    def is_token(self) -> bool:
        return self.type == TOKEN


TRX = CryptoAsset(id="tron@tron", platform="tron", decimals=6)


def default_storage_dir() -> Path:
    env_dir = os.getenv("TRON_WALLET_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".config" / "tron-wallet"


@dataclass
class WalletConfig:
    node_url: str = DEFAULT_NODE_URL
    network: str = "mainnet"
    txs_per_page: int = 5
    min_confirmations: int = 21
    dust_threshold: int = 1
    token_fee_limit: int = 10_000_000
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    storage_dir: Path = field(default_factory=default_storage_dir)

    @property
    def explorer_url(self) -> str:
        return EXPLORERS.get(self.network, EXPLORERS["mainnet"])

    @property
    def config_file(self) -> Path:
        return self.storage_dir / "config.json"

    @classmethod
    def load(cls, storage_dir: str | Path | None = None) -> "WalletConfig":
        config = cls()
        if storage_dir is not None:
            config.storage_dir = Path(storage_dir).expanduser()

        if config.config_file.exists():
            with open(config.config_file, "r") as f:
                data = json.load(f)
            config._apply(data)
        else:
            logger.info("No config file at %s, using defaults", config.config_file)

        config.node_url = os.getenv("TRON_WALLET_NODE_URL", config.node_url)
        config.network = os.getenv("TRON_WALLET_NETWORK", config.network)
        return config

    def _apply(self, data: dict[str, Any]) -> None:
        self.network = data.get("network", self.network)
        self.node_url = data.get("node_url", self.node_url)
        self.txs_per_page = int(data.get("txs_per_page", self.txs_per_page))
        self.min_confirmations = int(
            data.get("min_confirmations", self.min_confirmations)
        )
        self.token_fee_limit = int(data.get("token_fee_limit", self.token_fee_limit))

        timeout_cfg = data.get("timeout", {})
        if timeout_cfg:
            self.timeout_config = TimeoutConfig(
                connect_timeout=timeout_cfg.get("connect_timeout", 5.0),
                read_timeout=timeout_cfg.get("read_timeout", 15.0),
            )
        retry_cfg = data.get("retry", {})
        if retry_cfg:
            self.retry_config = RetryConfig(
                max_retries=retry_cfg.get("max_retries", 3),
                base_delay=retry_cfg.get("base_delay", 1.0),
                max_delay=retry_cfg.get("max_delay", 30.0),
            )

    def save(self) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        data = {
            "node_url": self.node_url,
            "network": self.network,
            "txs_per_page": self.txs_per_page,
            "min_confirmations": self.min_confirmations,
            "token_fee_limit": self.token_fee_limit,
            "timeout": {
                "connect_timeout": self.timeout_config.connect_timeout,
                "read_timeout": self.timeout_config.read_timeout,
            },
            "retry": {
                "max_retries": self.retry_config.max_retries,
                "base_delay": self.retry_config.base_delay,
                "max_delay": self.retry_config.max_delay,
            },
        }
        with open(self.config_file, "w") as f:
            json.dump(data, f, indent=2)
