"""Logging configuration for the TRON wallet.

This module provides:
- Log level and output selection from the environment
- Redaction of private keys and seeds before records are written
- Mapping of wallet and node errors to messages for end users
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from tron_wallet.config import default_storage_dir


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "human"
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "wallet.log"
    sanitize_sensitive: bool = True
    include_context: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        try:
            log_level = LogLevel(os.getenv("TRON_WALLET_LOG_LEVEL", "INFO").upper())
        except ValueError:
            log_level = LogLevel.INFO

        log_format = os.getenv("TRON_WALLET_LOG_FORMAT", "human").lower()
        if log_format not in ("human", "json"):
            log_format = "human"

        return cls(
            log_level=log_level,
            log_format=log_format,
            log_to_stdout=_env_flag("TRON_WALLET_LOG_STDOUT"),
        )


SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(
            r"(private[_-]?key['\"]?\s*[:=,]\s*['\"]?)([A-Fa-f0-9]{64})",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        re.compile(r"(seed['\"]?\s*[:=]\s*['\"]?)([A-Fa-f0-9]{32,})", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
    # BIP39 seeds are 64 bytes.
    (re.compile(r"\b[A-Fa-f0-9]{128}\b"), "[SEED_REDACTED]"),
    (re.compile(r"\b[A-Fa-f0-9]{64}\b"), "[KEY_REDACTED]"),
]

ADDRESS_PATTERN = re.compile(r"\bT[1-9A-HJ-NP-Za-km-z]{33}\b")

SENSITIVE_KEYS = ("private_key", "privatekey", "seed", "secret", "mnemonic")


def sanitize_message(message: str, preserve_addresses: bool = True) -> str:
    if not message:
        return message

    sanitized = message
    for pattern, replacement in SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)

    if not preserve_addresses:
        sanitized = ADDRESS_PATTERN.sub("[ADDRESS_REDACTED]", sanitized)

    return sanitized


def _sanitize_value(value: Any, preserve_addresses: bool) -> Any:
    if isinstance(value, str):
        return sanitize_message(value, preserve_addresses)
    if isinstance(value, dict):
        return sanitize_dict(value, preserve_addresses)
    if isinstance(value, list):
        return [_sanitize_value(item, preserve_addresses) for item in value]
    return value


def sanitize_dict(
    data: dict[str, Any], preserve_addresses: bool = True
) -> dict[str, Any]:
    result = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        else:
            result[key] = _sanitize_value(value, preserve_addresses)
    return result


@dataclass
class ErrorMapping:
    error_pattern: str
    user_message: str
    log_level: LogLevel = LogLevel.ERROR
    suggest_action: str | None = None


# First match wins. Node failures are matched before resource keywords.
ERROR_MAPPINGS: list[ErrorMapping] = [
    ErrorMapping(
        error_pattern="timeout|timed out",
        user_message="Connection to the TRON node timed out.",
        log_level=LogLevel.WARNING,
        suggest_action="Try again later or check your network connection.",
    ),
    ErrorMapping(
        error_pattern="connection refused|cannot connect|connection error",
        user_message="Unable to connect to the TRON node.",
        log_level=LogLevel.WARNING,
        suggest_action="Check the node URL and your internet connection.",
    ),
    ErrorMapping(
        error_pattern="nodeerror|node error|network.*error",
        user_message="The TRON node could not process the request.",
        log_level=LogLevel.ERROR,
        suggest_action="Try again later or switch to another node.",
    ),
    ErrorMapping(
        error_pattern="insufficient amount of trx|insufficient funds to pay the transaction fee",
        user_message="Not enough TRX to pay the network fee.",
        log_level=LogLevel.WARNING,
        suggest_action="Top up TRX to cover bandwidth and energy costs.",
    ),
    ErrorMapping(
        error_pattern="energy",
        user_message="Not enough energy for the token transfer.",
        log_level=LogLevel.WARNING,
        suggest_action="Freeze TRX for energy or keep more TRX to burn for it.",
    ),
    ErrorMapping(
        error_pattern="bandwidth",
        user_message="Not enough bandwidth for this transaction.",
        log_level=LogLevel.WARNING,
        suggest_action="Wait for free bandwidth to recover or keep TRX for fees.",
    ),
    ErrorMapping(
        error_pattern="insufficient funds|big amount",
        user_message="Insufficient balance for this transaction.",
        log_level=LogLevel.WARNING,
        suggest_action="Lower the amount so it fits your balance and fees.",
    ),
    ErrorMapping(
        error_pattern="small amount",
        user_message="The amount is below the minimum transferable amount.",
        log_level=LogLevel.WARNING,
    ),
    ErrorMapping(
        error_pattern="invalid.*address|invalid checksum|empty address",
        user_message="The address provided is not a valid TRON address.",
        log_level=LogLevel.WARNING,
        suggest_action="Please check the recipient address, it starts with T.",
    ),
    ErrorMapping(
        error_pattern="destination address equals source",
        user_message="You cannot send funds to your own address.",
        log_level=LogLevel.WARNING,
    ),
    ErrorMapping(
        error_pattern="wallet is locked|seed does not match",
        user_message="The wallet could not sign this transaction.",
        log_level=LogLevel.WARNING,
        suggest_action="Unlock the wallet with its recovery seed.",
    ),
    ErrorMapping(
        error_pattern="rate limit|too many requests|429",
        user_message="Too many requests to the TRON node.",
        log_level=LogLevel.WARNING,
        suggest_action="Wait a moment and try again.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    error_message = str(error) if isinstance(error, Exception) else error
    error_lower = error_message.lower()

    for mapping in ERROR_MAPPINGS:
        if re.search(mapping.error_pattern, error_lower):
            return mapping.user_message, mapping.suggest_action

    return "An unexpected error occurred.", None


def format_error_for_user(error: Exception | str) -> str:
    user_message, suggestion = get_user_friendly_error(error)
    if suggestion:
        return f"{user_message} {suggestion}"
    return user_message


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(
        self,
        sanitize: bool = True,
        include_context: bool = True,
        preserve_addresses: bool = True,
    ):
        super().__init__()
        self.sanitize = sanitize
        self.include_context = include_context
        self.preserve_addresses = preserve_addresses

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if self.sanitize:
            message = sanitize_message(message, self.preserve_addresses)

        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }

        if self.include_context:
            log_data["module"] = record.module
            log_data["function"] = record.funcName
            log_data["line"] = record.lineno

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            if self.sanitize:
                context = sanitize_dict(context, self.preserve_addresses)
            log_data["context"] = context

        if record.exc_info:
            exc_text = self.formatException(record.exc_info)
            if self.sanitize:
                exc_text = sanitize_message(exc_text, self.preserve_addresses)
            log_data["exception"] = exc_text

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    def __init__(self, sanitize: bool = True, preserve_addresses: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.sanitize = sanitize
        self.preserve_addresses = preserve_addresses

    def format(self, record: logging.LogRecord) -> str:
        if self.sanitize and record.msg:
            record.msg = sanitize_message(str(record.msg), self.preserve_addresses)
            if isinstance(record.args, tuple):
                record.args = tuple(
                    sanitize_message(arg, self.preserve_addresses)
                    if isinstance(arg, str)
                    else arg
                    for arg in record.args
                )
        return super().format(record)


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.log_format == "json":
        return StructuredFormatter(
            sanitize=config.sanitize_sensitive,
            include_context=config.include_context,
        )
    return HumanReadableFormatter(sanitize=config.sanitize_sensitive)


_logging_initialized = False


def setup_logging(config: LoggingConfig | None = None) -> None:
    global _logging_initialized

    if _logging_initialized:
        return

    if config is None:
        config = LoggingConfig.from_environment()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level.value))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = []

    if config.log_to_file:
        if config.log_dir is None:
            config.log_dir = default_storage_dir()
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(
                config.log_dir / config.log_filename, mode="a", encoding="utf-8"
            )
        )

    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(_formatter(config))
        root_logger.addHandler(handler)

    _logging_initialized = True


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    logger.log(level, message, extra={"context": context})


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "format_error_for_user",
    "setup_logging",
    "log_with_context",
]
