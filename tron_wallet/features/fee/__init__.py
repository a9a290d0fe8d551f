"""Fee estimation under the bandwidth/energy resource model."""

from tron_wallet.features.fee.service import (
    ChainParameters,
    FeeEstimator,
    Resources,
    SessionCache,
    coin_transfer_fee,
    token_transfer_fee,
)

__all__ = [
    "ChainParameters",
    "FeeEstimator",
    "Resources",
    "SessionCache",
    "coin_transfer_fee",
    "token_transfer_fee",
]
