"""Transaction history pagination and normalization."""

from tron_wallet.features.history.service import (
    HistoryEntry,
    HistoryPage,
    HistoryStatus,
    TransactionAction,
    TransactionHistory,
)

__all__ = [
    "HistoryEntry",
    "HistoryPage",
    "HistoryStatus",
    "TransactionAction",
    "TransactionHistory",
]
