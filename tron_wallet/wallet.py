"""Wallet state machine for a single TRX or TRC20 asset."""

from __future__ import annotations

import logging
import secrets
from enum import Enum
from typing import Any

from tron_wallet.address import PUBLIC_KEY_SIZE, Address
from tron_wallet.amount import Amount
from tron_wallet.config import TRX, CryptoAsset, WalletConfig
from tron_wallet.errors import (
    BigAmountError,
    DestinationEqualsSourceError,
    EmptyAddressError,
    InsufficientCoinForTokenTransactionError,
    InsufficientCoinForTransactionFeeError,
    InvalidAddressError,
    NodeError,
    SigningError,
    SmallAmountError,
    WalletStateError,
)
from tron_wallet.features.fee import FeeEstimator, SessionCache
from tron_wallet.features.history import (
    HistoryEntry,
    HistoryPage,
    TransactionHistory,
)
from tron_wallet.keys import (
    DEFAULT_BIP44_PATH,
    SecretKey,
    derive_private_key,
    ensure_seed,
)
from tron_wallet.network import NetworkClient
from tron_wallet.node import NodeClient
from tron_wallet.storage import JsonWalletStorage, WalletStorage
from tron_wallet.transaction import TransactionBuilder, UnsignedTransaction

logger = logging.getLogger(__name__)

BAD_REQUEST = 400


class WalletState(Enum):
    CREATED = "created"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    NEED_INITIALIZATION = "need_initialization"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class TronWallet:
    """Single-asset TRON wallet: TRX itself or one TRC20 token.

    A token wallet tracks two balances. The token balance is what the user
    spends, the TRX balance pays bandwidth and energy.
    """

    def __init__(
        self,
        crypto: CryptoAsset = TRX,
        platform: CryptoAsset = TRX,
        config: WalletConfig | None = None,
        storage: WalletStorage | None = None,
        node: NodeClient | None = None,
        settings: dict[str, Any] | None = None,
    ):
        self.crypto = crypto
        self.platform = platform
        self.config = config or WalletConfig.load()
        self.node = node or NodeClient(
            NetworkClient(
                node_url=self.config.node_url,
                timeout_config=self.config.timeout_config,
                retry_config=self.config.retry_config,
            )
        )
        self._custom_storage = storage
        self.storage: WalletStorage | None = storage
        self._settings = {**self.default_settings, **(settings or {})}
        self.state = WalletState.CREATED

        self._public_key: bytes | None = None
        self._address: Address | None = None
        self._coin_balance = 0
        self._token_balance = 0
        self._secret: SecretKey | None = None
        self._history: TransactionHistory | None = None

        self._cache = SessionCache()
        self.builder = TransactionBuilder()
        self.fee_estimator = FeeEstimator(
            node=self.node,
            size_estimator=self.builder,
            asset=crypto,
            cache=self._cache,
            token_fee_limit=self.config.token_fee_limit,
        )

    def _set_state(self, state: WalletState) -> None:
        logger.debug(f"{self.crypto.id} wallet state: {self.state.value} -> {state.value}")
        self.state = state

    @property
    def default_settings(self) -> dict[str, Any]:
        return {"bip44": DEFAULT_BIP44_PATH}

    @property
    def settings(self) -> dict[str, Any]:
        return dict(self._settings)

    @property
    def is_settings_supported(self) -> bool:
        return not self.crypto.is_token

    @property
    def address(self) -> str | None:
        if self._address is None:
            return None
        return self._address.to_base58check()

    @property
    def balance(self) -> Amount:
        if self.crypto.is_token:
            return Amount(self._token_balance, self.crypto.decimals)
        return Amount(self._coin_balance, self.crypto.decimals)

    @property
    def coin_balance(self) -> Amount:
        return Amount(self._coin_balance, self.platform.decimals)

    @property
    def is_locked(self) -> bool:
        return self._secret is None or self._secret.is_wiped

    @property
    def token_url(self) -> str | None:
        if not self.crypto.is_token:
            return None
        return f"{self.config.explorer_url}/#/contract/{self.crypto.address}"

    def tx_url(self, txid: str) -> str:
        return f"{self.config.explorer_url}/#/transaction/{txid}"

    @property
    def dummy_exchange_deposit_address(self) -> str:
        return Address.from_public_key(
            secrets.token_bytes(PUBLIC_KEY_SIZE)
        ).to_base58check()

    def create(self, seed: bytes) -> None:
        seed = ensure_seed(seed)
        previous = self.state
        self._set_state(WalletState.INITIALIZING)
        try:
            secret = derive_private_key(seed, self._settings["bip44"])
            try:
                public_key = secret.public_key()
            finally:
                secret.wipe()
            self._init(public_key)
        except Exception:
            self._set_state(previous)
            raise
        self._set_state(WalletState.INITIALIZED)
        logger.info(f"Wallet created: {self.address}")

    def open(self, public_key: dict[str, Any]) -> None:
        if not isinstance(public_key, dict) or not isinstance(
            public_key.get("data"), str
        ):
            raise TypeError("public key must be an object with hex data")

        previous = self.state
        self._set_state(WalletState.INITIALIZING)
        settings = public_key.get("settings") or {}
        if settings.get("bip44") != self._settings["bip44"]:
            logger.warning(
                f"Stored derivation path {settings.get('bip44')} does not match "
                f"{self._settings['bip44']}"
            )
            self._set_state(WalletState.NEED_INITIALIZATION)
            return

        try:
            self._init(bytes.fromhex(public_key["data"]))
        except Exception:
            self._set_state(previous)
            raise
        self._set_state(WalletState.INITIALIZED)
        logger.info(f"Wallet opened: {self.address}")

    def _init(self, public_key: bytes) -> None:
        address = Address.from_public_key(public_key)
        storage = self._custom_storage or JsonWalletStorage.for_wallet(
            self.config.storage_dir, self.crypto.id, address.to_base58check()
        )
        stored = int(storage.get("balance") or 0)

        self._public_key = public_key
        self._address = address
        self.storage = storage
        self._coin_balance = 0
        self._token_balance = 0
        self._history = TransactionHistory(
            node=self.node,
            asset=self.crypto,
            platform=self.platform,
            address=address,
            page_size=self.config.txs_per_page,
            min_confirmations=self.config.min_confirmations,
            explorer_url=self.config.explorer_url,
        )
        if self.crypto.is_token:
            self._token_balance = stored
        else:
            self._coin_balance = stored

    def _require_address(self) -> Address:
        if self._address is None:
            raise WalletStateError(
                f"Wallet is not initialized (state: {self.state.value})"
            )
        return self._address

    def load(self) -> None:
        address = self._require_address().to_base58check()
        self._set_state(WalletState.LOADING)
        try:
            if self.crypto.is_token:
                self._token_balance = self.node.token_balance(
                    address, self.crypto.address
                )
                self._coin_balance = self.node.coin_balance(address)
                self.storage.set("balance", str(self._token_balance))
            else:
                self._coin_balance = self.node.coin_balance(address)
                self.storage.set("balance", str(self._coin_balance))
            self.storage.save()
        except Exception as e:
            self._set_state(WalletState.ERROR)
            logger.error(f"Failed to load wallet {address}: {e}")
            raise
        self._set_state(WalletState.LOADED)
        logger.info(f"Balance loaded for {address}: {self.balance}")

    def cleanup(self) -> None:
        self._cache.clear()
        logger.debug("Session caches cleared")

    def get_public_key(self) -> dict[str, Any]:
        if self._public_key is None:
            raise WalletStateError("Wallet has no public key")
        return {"settings": self.settings, "data": self._public_key.hex()}

    def get_private_key(self, seed: bytes) -> list[dict[str, str]]:
        secret = derive_private_key(ensure_seed(seed), self._settings["bip44"])
        try:
            return [{"address": self.address, "privatekey": secret.hex()}]
        finally:
            secret.wipe()

    def export_private_keys(self, seed: bytes) -> str:
        """CSV with an ``address,privatekey`` header row."""
        rows = ["address,privatekey"]
        for item in self.get_private_key(seed):
            rows.append(f"{item['address']},{item['privatekey']}")
        return "\n".join(rows)

    def _derive_secret(self, seed: bytes) -> SecretKey:
        self._require_address()
        secret = derive_private_key(ensure_seed(seed), self._settings["bip44"])
        if secret.public_key() != self._public_key:
            secret.wipe()
            raise SigningError("Seed does not match the wallet public key")
        return secret

    def unlock(self, seed: bytes) -> None:
        secret = self._derive_secret(seed)
        self.lock()
        self._secret = secret
        logger.info("Wallet unlocked")

    def lock(self) -> None:
        if self._secret is not None:
            self._secret.wipe()
            self._secret = None
            logger.info("Wallet locked")

    def _parse_address(self, address: str) -> Address:
        if not isinstance(address, str) or not address.strip():
            raise EmptyAddressError()
        try:
            return Address.from_base58check(address.strip())
        except InvalidAddressError as e:
            raise InvalidAddressError(address) from e

    def parse_amount(self, value: str) -> Amount:
        """Parse a user-entered amount such as ``"1.5"`` in this asset's units.

        Raises ``ValueError`` with a displayable message for malformed input.
        """
        return Amount.from_human(value, self.crypto.decimals)

    def _base_units(self, amount: Amount | int | str) -> int:
        if isinstance(amount, str):
            return self.parse_amount(amount).value
        return int(amount)

    def validate_address(self, address: str) -> bool:
        own = self._require_address()
        if self._parse_address(address) == own:
            raise DestinationEqualsSourceError()
        return True

    def _estimate_max_amount(self, to: Address) -> int:
        if self.crypto.is_token:
            return self._token_balance
        fee = self.fee_estimator.estimate(self._address, to, self._coin_balance)
        return max(0, self._coin_balance - fee)

    def validate_amount(self, address: str, amount: Amount | int | str) -> bool:
        own = self._require_address()
        to = self._parse_address(address)
        value = self._base_units(amount)

        dust_threshold = self.config.dust_threshold
        if value < dust_threshold:
            raise SmallAmountError(Amount(dust_threshold, self.crypto.decimals))

        if self.crypto.is_token:
            fee = self.fee_estimator.estimate(own, to, value)
            if fee > self._coin_balance:
                raise InsufficientCoinForTokenTransactionError(
                    Amount(fee, self.platform.decimals)
                )

        max_amount = self._estimate_max_amount(to)
        if value > max_amount:
            raise BigAmountError(Amount(max_amount, self.crypto.decimals))
        return True

    def estimate_transaction_fee(
        self, address: str, amount: Amount | int | str
    ) -> Amount:
        own = self._require_address()
        fee = self.fee_estimator.estimate(
            own, self._parse_address(address), self._base_units(amount)
        )
        if self.crypto.is_token:
            return Amount(fee, self.platform.decimals)
        return Amount(fee, self.crypto.decimals)

    def estimate_max_amount(self, address: str) -> Amount:
        self._require_address()
        max_amount = self._estimate_max_amount(self._parse_address(address))
        return Amount(max_amount, self.crypto.decimals)

    def _sign(self, transaction: UnsignedTransaction, seed: bytes | None):
        if seed is None:
            return self.builder.sign(transaction, self._secret)
        secret = self._derive_secret(seed)
        try:
            return self.builder.sign(transaction, secret)
        finally:
            secret.wipe()

    def create_transaction(
        self, address: str, amount: Amount | int | str, seed: bytes | None = None
    ) -> str:
        """Send ``amount`` to ``address`` and debit the local balance.

        Without a seed the key from ``unlock()`` signs. Returns the txid.
        """
        self.validate_address(address)
        self.validate_amount(address, amount)

        own = self._require_address()
        to = self._parse_address(address)
        value = self._base_units(amount)
        fee = self.fee_estimator.estimate(own, to, value)

        transaction = self.builder.build_transfer(self.crypto, own, to, value)
        transaction.fee = fee
        block = self.node.latest_block()
        self.builder.attach_reference(
            transaction, block, self.fee_estimator.declared_fee_limit(fee)
        )
        signed = self._sign(transaction, seed)

        try:
            response = self.node.submit_transaction(signed.hex())
        except NodeError as e:
            if e.status_code == BAD_REQUEST:
                raise InsufficientCoinForTransactionFeeError(
                    Amount(fee, self.platform.decimals)
                ) from e
            raise

        code = response.get("code")
        if code != "SUCCESS":
            logger.error(f"Transaction {signed.txid} rejected: {code}")
            raise NodeError(f"NodeError {code}", code=code)

        if self.crypto.is_token:
            self._token_balance -= value
            self._coin_balance -= fee
            self.storage.set("balance", str(self._token_balance))
        else:
            self._coin_balance -= value + fee
            self.storage.set("balance", str(self._coin_balance))
        self.storage.save()

        txid = response.get("txid") or signed.txid
        logger.info(f"Transaction submitted: {txid} (fee {fee})")
        return txid

    def _require_history(self) -> TransactionHistory:
        self._require_address()
        return self._history

    def load_transactions(self, cursor: str | None = None) -> HistoryPage:
        return self._require_history().load_transactions(cursor)

    def load_transaction(self, txid: str) -> HistoryEntry | None:
        return self._require_history().load_transaction(txid)
