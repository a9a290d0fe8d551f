"""TRON wallet core - single-asset TRX and TRC20 wallet.

This package is organized into modules:
- address, keys: address derivation and key material
- transaction, protocol: transfer construction and signing
- features.fee: bandwidth and energy fee estimation
- features.history: transaction history pagination
- wallet: the wallet state machine tying them together
"""

from tron_wallet.address import Address
from tron_wallet.amount import Amount
from tron_wallet.config import TRX, CryptoAsset, WalletConfig
from tron_wallet.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from tron_wallet.node import NodeClient
from tron_wallet.wallet import TronWallet, WalletState

__version__ = "0.1.0"
__all__ = [
    "Address",
    "Amount",
    "CryptoAsset",
    "TRX",
    "WalletConfig",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "NodeClient",
    "TronWallet",
    "WalletState",
]
