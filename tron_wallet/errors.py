"""Error types raised by the TRON wallet core."""

from __future__ import annotations

from typing import Any

from tron_wallet.amount import Amount


class WalletError(Exception):
    """Base class for wallet errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidPublicKeyError(WalletError):
    def __init__(self, message: str = "Invalid public key"):
        super().__init__(message)


class InvalidAddressError(WalletError):
    def __init__(self, address: str = "", message: str | None = None):
        self.address = address
        super().__init__(
            message or f'Invalid address "{address}"', {"address": address}
        )


class InvalidChecksumError(InvalidAddressError):
    def __init__(self, address: str = ""):
        super().__init__(address, "Invalid checksum")


class EmptyAddressError(WalletError):
    def __init__(self):
        super().__init__("Empty address")


class DestinationEqualsSourceError(WalletError):
    def __init__(self):
        super().__init__("Destination address equals source address")


class AmountError(WalletError):
    """Validation error carrying the amount the caller should display."""

    def __init__(self, message: str, amount: Amount):
        self.amount = amount
        super().__init__(message, {"amount": str(amount)})


class SmallAmountError(AmountError):
    def __init__(self, amount: Amount):
        super().__init__("Small amount", amount)


class BigAmountError(AmountError):
    def __init__(self, amount: Amount):
        super().__init__("Big amount", amount)


class InsufficientFundsError(AmountError):
    def __init__(self, amount: Amount, message: str = "Insufficient funds"):
        super().__init__(message, amount)


class InsufficientCoinForTokenTransactionError(InsufficientFundsError):
    def __init__(self, amount: Amount):
        super().__init__(amount, "Insufficient funds to pay the transaction fee")


class InsufficientCoinForTransactionFeeError(InsufficientFundsError):
    def __init__(self, amount: Amount):
        super().__init__(amount, "Insufficient amount of TRX to pay fee")


class SigningError(WalletError):
    pass


class WalletStateError(WalletError):
    pass


class NodeError(WalletError):
    """Opaque node failure. Transport details stay in ``__cause__``."""

    def __init__(
        self,
        message: str = "Node error",
        code: str | None = None,
        status_code: int | None = None,
    ):
        self.code = code
        self.status_code = status_code
        super().__init__(message, {"code": code, "status_code": status_code})


__all__ = [
    "WalletError",
    "InvalidPublicKeyError",
    "InvalidAddressError",
    "InvalidChecksumError",
    "EmptyAddressError",
    "DestinationEqualsSourceError",
    "AmountError",
    "SmallAmountError",
    "BigAmountError",
    "InsufficientFundsError",
    "InsufficientCoinForTokenTransactionError",
    "InsufficientCoinForTransactionFeeError",
    "SigningError",
    "WalletStateError",
    "NodeError",
]
