"""Endpoints of the wallet node API used by the TRON wallet."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from tron_wallet.errors import NodeError
from tron_wallet.network import NetworkClient, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_PREFIX = "api/v1"

CHAIN_PARAMETER_DEFAULTS = {
    "getTransactionFee": 1000,
    "getEnergyFee": 420,
    "getCreateAccountFee": 100000,
    "getCreateNewAccountFeeInSystemContract": 1000000,
}


@dataclass(frozen=True)
class LatestBlock:
    block_id: str
    number: int
    timestamp: int


class NodeClient:
    def __init__(self, network_client: NetworkClient):
        self._network = network_client

    def _call(self, operation: Callable[[], T], context: str) -> T:
        try:
            return operation()
        except NetworkError as e:
            logger.error("%s failed: %s", context, e.message)
            raise NodeError(
                f"NodeError: {context} failed", status_code=e.status_code
            ) from e

    def _get(self, path: str, context: str, **kwargs) -> Any:
        return self._call(
            lambda: self._network.get(f"{API_PREFIX}/{path}", context=context, **kwargs),
            context,
        )

    def coin_balance(self, address: str) -> int:
        data = self._get(f"account/{address}/balance", "Fetch balance") or {}
        return int(data.get("balance") or 0)

    def token_balance(self, address: str, token: str) -> int:
        data = (
            self._get(f"account/{address}/trc20/{token}/balance", "Fetch token balance")
            or {}
        )
        return int(data.get("balance") or 0)

    def account(self, address: str) -> dict[str, Any] | None:
        data = self._call(
            lambda: self._network.get_optional(
                f"{API_PREFIX}/account/{address}", context="Fetch account"
            ),
            "Fetch account",
        )
        return data or None

    def resources(self, address: str) -> dict[str, Any]:
        return self._get(f"account/{address}/resources", "Fetch resources") or {}

    def chain_parameters(self) -> dict[str, Any]:
        data = self._get("chainparameters", "Fetch chain parameters") or {}
        return {**CHAIN_PARAMETER_DEFAULTS, **data}

    def latest_block(self) -> LatestBlock:
        data = self._get("latestblock", "Fetch latest block")
        return LatestBlock(
            block_id=data["blockID"],
            number=int(data["number"]),
            timestamp=int(data["timestamp"]),
        )

    def estimate_energy(self, token: str, from_address: str, to_address: str, value: int) -> int:
        data = self._get(
            f"estimateenergy/{token}",
            "Estimate energy",
            params={"from": from_address, "to": to_address, "value": str(value)},
        )
        return int(data["energy"])

    def submit_transaction(self, transaction_hex: str) -> dict[str, Any]:
        return self._call(
            lambda: self._network.post(
                f"{API_PREFIX}/transaction/submit",
                context="Submit transaction",
                json={"transaction": transaction_hex},
            ),
            "Submit transaction",
        ) or {}

    def load_transactions(
        self, address: str, limit: int, cursor: str | None = None
    ) -> dict[str, Any]:
        return self._get(
            f"account/{address}/transactions",
            "Load transactions",
            params={"limit": limit, "fingerprint": cursor},
        ) or {}

    def load_token_transactions(
        self, address: str, token: str, limit: int, cursor: str | None = None
    ) -> dict[str, Any]:
        return self._get(
            f"account/{address}/trc20/{token}/transactions",
            "Load token transactions",
            params={"limit": limit, "fingerprint": cursor},
        ) or {}
