"""Per-wallet persisted values (balance cache)."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class WalletStorage(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def save(self) -> None: ...


class JsonWalletStorage:
    STORAGE_VERSION = 1

    def __init__(self, path: Path):
        self.path = path
        self._values: dict[str, str] = {}
        self._load()

    @classmethod
    def for_wallet(
        cls, storage_dir: Path, wallet_id: str, address: str
    ) -> "JsonWalletStorage":
        """Storage file for one asset of one account."""
        safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", f"{wallet_id}_{address}")
        return cls(storage_dir / "wallets" / f"{safe_id}.json")

    def _load(self) -> None:
        if not self.path.exists():
            self._values = {}
            return

        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable wallet storage %s: %s", self.path, e)
            self._values = {}
            return

        self._values = {str(k): str(v) for k, v in data.get("values", {}).items()}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(
                {"version": self.STORAGE_VERSION, "values": self._values}, f, indent=2
            )
