"""Fee estimation for coin and TRC20 transfers.

A transfer consumes bandwidth: free daily bandwidth first, otherwise every
byte is billed at the chain's transaction fee. A TRC20 transfer also burns
energy, billed separately at the chain's energy fee. A coin transfer to an
account that does not exist yet pays the flat account creation cost instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar

from tron_wallet.address import Address
from tron_wallet.config import CryptoAsset

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NodeProtocol(Protocol):
    def account(self, address: str) -> dict[str, Any] | None: ...
    def resources(self, address: str) -> dict[str, Any]: ...
    def chain_parameters(self) -> dict[str, Any]: ...
    def estimate_energy(
        self, token: str, from_address: str, to_address: str, value: int
    ) -> int: ...


class SizeEstimatorProtocol(Protocol):
    def estimate_size(
        self,
        asset: CryptoAsset,
        owner: Address,
        to: Address,
        value: int,
        fee_limit: int,
    ) -> int: ...


@dataclass(frozen=True)
class ChainParameters:
    transaction_fee: int
    energy_fee: int
    create_account_fee: int
    create_new_account_fee_in_system_contract: int

    @classmethod
    def from_node(cls, data: dict[str, Any]) -> "ChainParameters":
        return cls(
            transaction_fee=int(data["getTransactionFee"]),
            energy_fee=int(data["getEnergyFee"]),
            create_account_fee=int(data["getCreateAccountFee"]),
            create_new_account_fee_in_system_contract=int(
                data["getCreateNewAccountFeeInSystemContract"]
            ),
        )

    @property
    def new_account_fee(self) -> int:
        return self.create_account_fee + self.create_new_account_fee_in_system_contract


@dataclass(frozen=True)
class Resources:
    free_net_limit: int = 0
    free_net_used: int = 0

    @classmethod
    def from_node(cls, data: dict[str, Any]) -> "Resources":
        return cls(
            free_net_limit=int(data.get("freeNetLimit") or 0),
            free_net_used=int(data.get("freeNetUsed") or 0),
        )

    @property
    def free_net_remaining(self) -> int:
        return self.free_net_limit - self.free_net_used


class SessionCache:
    """Memoized lookups that live until the wallet session is cleaned up."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        if key not in self._values:
            self._values[key] = loader()
        return self._values[key]

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def clear(self) -> None:
        self._values.clear()


def coin_transfer_fee(
    params: ChainParameters,
    resources: Resources,
    recipient_exists: bool,
    size: int,
) -> int:
    # New recipients pay the flat activation cost whatever the bandwidth.
    if not recipient_exists:
        return params.new_account_fee
    if size <= resources.free_net_remaining:
        return 0
    return size * params.transaction_fee


def token_transfer_fee(
    params: ChainParameters,
    resources: Resources,
    energy: int,
    size: int,
) -> int:
    energy_fee = energy * params.energy_fee
    if size <= resources.free_net_remaining:
        return energy_fee
    return size * params.transaction_fee + energy_fee


class FeeEstimator:
    def __init__(
        self,
        node: NodeProtocol,
        size_estimator: SizeEstimatorProtocol,
        asset: CryptoAsset,
        cache: SessionCache,
        token_fee_limit: int = 10_000_000,
    ):
        self.node = node
        self.size_estimator = size_estimator
        self.asset = asset
        self.cache = cache
        self.token_fee_limit = token_fee_limit

    def chain_parameters(self) -> ChainParameters:
        return self.cache.get_or_load(
            "chain_parameters",
            lambda: ChainParameters.from_node(self.node.chain_parameters()),
        )

    def fee_limit(self) -> int:
        def load() -> int:
            if self.asset.is_token:
                return self.token_fee_limit
            return self.chain_parameters().new_account_fee

        return self.cache.get_or_load("fee_limit", load)

    def declared_fee_limit(self, fee: int) -> int:
        return max(self.fee_limit(), fee)

    def estimate(self, owner: Address, to: Address, value: int) -> int:
        params = self.chain_parameters()
        fee_limit = self.fee_limit()

        if self.asset.is_token:
            energy = self.node.estimate_energy(
                self.asset.address,
                owner.to_base58check(),
                to.to_base58check(),
                value,
            )
            resources = Resources.from_node(self.node.resources(owner.to_base58check()))
            size = self.size_estimator.estimate_size(
                self.asset, owner, to, value, fee_limit
            )
            fee = token_transfer_fee(params, resources, energy, size)
            logger.debug(
                "Token transfer fee: energy=%d size=%d free=%d fee=%d",
                energy,
                size,
                resources.free_net_remaining,
                fee,
            )
            return fee

        if self.node.account(to.to_base58check()) is None:
            logger.debug("Recipient %s is a new account", to)
            return coin_transfer_fee(params, Resources(), False, 0)

        resources = Resources.from_node(self.node.resources(owner.to_base58check()))
        size = self.size_estimator.estimate_size(self.asset, owner, to, value, fee_limit)
        fee = coin_transfer_fee(params, resources, True, size)
        logger.debug(
            "Coin transfer fee: size=%d free=%d fee=%d",
            size,
            resources.free_net_remaining,
            fee,
        )
        return fee
