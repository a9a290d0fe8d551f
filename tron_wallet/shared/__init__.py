"""Shared utilities for the TRON wallet."""

from tron_wallet.shared.logging import (
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_user_friendly_error,
    log_with_context,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_user_friendly_error",
    "log_with_context",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
