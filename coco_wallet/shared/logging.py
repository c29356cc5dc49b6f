"""Centralized logging configuration for Coco Wallet.

This module provides:
- Configurable log levels (DEBUG for dev, INFO for prod)
- Sensitive data sanitization (payment passwords, private keys, mnemonics)
- User-friendly error message mapping for remote rejections
- Structured logging with context fields (idempotency key, state)
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


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "engine.log"
    sanitize_sensitive: bool = True
    include_context: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        env_level = os.getenv("COCO_WALLET_LOG_LEVEL", "INFO").upper()
        try:
            log_level = LogLevel(env_level)
        except ValueError:
            log_level = LogLevel.INFO

        log_to_stdout = os.getenv("COCO_WALLET_LOG_STDOUT", "").lower() in (
            "1",
            "true",
            "yes",
        )

        log_dir_env = os.getenv("COCO_WALLET_LOG_DIR")

        return cls(
            log_level=log_level,
            log_to_stdout=log_to_stdout,
            log_dir=Path(log_dir_env).expanduser() if log_dir_env else None,
        )


SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(
            r"(private[_-]?key['\"]?\s*[:=]\s*['\"]?)([A-Za-z0-9]{32,})",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        re.compile(
            r"(mnemonic['\"]?\s*[:=]\s*['\"])([^'\"]+)",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        re.compile(
            r"((?:payment[_-]?)?password['\"]?\s*[:=]\s*['\"]?)([^\s'\",}]+)",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        re.compile(
            r"(auth[_-]?secret['\"]?\s*[:=]\s*['\"]?)([^\s'\",}]+)",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
]

SENSITIVE_KEYS = (
    "private_key",
    "privatekey",
    "password",
    "secret",
    "mnemonic",
)


def sanitize_message(message: str) -> str:
    if not message:
        return message

    sanitized = message
    for pattern, replacement in SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    result = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        elif isinstance(value, str):
            result[key] = sanitize_message(value)
        elif isinstance(value, dict):
            result[key] = sanitize_dict(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_dict(item)
                if isinstance(item, dict)
                else sanitize_message(item)
                if isinstance(item, str)
                else item
                for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class ErrorMapping:
    error_pattern: str
    user_message: str
    log_level: LogLevel = LogLevel.ERROR
    suggest_action: str | None = None


ERROR_MAPPINGS: list[ErrorMapping] = [
    ErrorMapping(
        error_pattern="timeout|timed out",
        user_message="Connection timed out. The server may be slow or unavailable.",
        log_level=LogLevel.WARNING,
        suggest_action="Check the transaction history before trying again.",
    ),
    ErrorMapping(
        error_pattern="connection refused|cannot connect|connection error|network error",
        user_message="Unable to connect to the server.",
        log_level=LogLevel.WARNING,
        suggest_action="Check your internet connection and try again.",
    ),
    ErrorMapping(
        error_pattern="insufficient.?balance|insufficient funds|not enough balance",
        user_message="Insufficient balance for this transaction.",
        log_level=LogLevel.WARNING,
        suggest_action="Ensure you have enough balance for the amount and network fees.",
    ),
    ErrorMapping(
        error_pattern="slippage",
        user_message="The price moved beyond your slippage tolerance.",
        log_level=LogLevel.WARNING,
        suggest_action="Refresh the quote or increase the slippage setting.",
    ),
    ErrorMapping(
        error_pattern="incorrect password|invalid password|wrong password|bad password",
        user_message="The payment password is incorrect.",
        log_level=LogLevel.WARNING,
        suggest_action="Re-enter your payment password.",
    ),
    ErrorMapping(
        error_pattern="invalid.*(address|recipient)|(address|recipient).*invalid",
        user_message="The recipient address is not valid.",
        log_level=LogLevel.WARNING,
        suggest_action="Please check the recipient address.",
    ),
    ErrorMapping(
        error_pattern="quote.*expired|expired.*quote",
        user_message="The swap quote has expired.",
        log_level=LogLevel.WARNING,
        suggest_action="Request a new quote and try again.",
    ),
    ErrorMapping(
        error_pattern="unauthorized|forbidden|401|403",
        user_message="Access denied. Authentication failed.",
        log_level=LogLevel.WARNING,
        suggest_action="Check your credentials and permissions.",
    ),
    ErrorMapping(
        error_pattern="rate limit|too many requests|429",
        user_message="Too many requests. Please slow down.",
        log_level=LogLevel.WARNING,
        suggest_action="Wait a moment and try again.",
    ),
    ErrorMapping(
        error_pattern="not confirmed within|still unconfirmed",
        user_message="The transaction has not been confirmed yet.",
        log_level=LogLevel.WARNING,
        suggest_action="Re-check the status later; it may still complete.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    error_message = str(error) if isinstance(error, Exception) else error
    error_lower = error_message.lower()

    for mapping in ERROR_MAPPINGS:
        if re.search(mapping.error_pattern, error_lower):
            return mapping.user_message, mapping.suggest_action

    return "An unexpected error occurred.", None


class StructuredFormatter(logging.Formatter):
    def __init__(
        self,
        sanitize: bool = True,
        include_context: bool = True,
    ):
        super().__init__()
        self.sanitize = sanitize
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            log_data["module"] = record.module
            log_data["function"] = record.funcName
            log_data["line"] = record.lineno

        extra_data = getattr(record, "context", None)
        if extra_data and isinstance(extra_data, dict):
            if self.sanitize:
                extra_data = sanitize_dict(extra_data)
            log_data["context"] = extra_data

        if record.exc_info:
            exc_text = self.formatException(record.exc_info)
            if self.sanitize:
                exc_text = sanitize_message(exc_text)
            log_data["exception"] = exc_text

        if self.sanitize:
            log_data["message"] = sanitize_message(log_data["message"])

        try:
            return json.dumps(log_data, default=str)
        except (TypeError, ValueError):
            return f"{log_data['timestamp']} - {log_data['logger']} - {log_data['level']} - {log_data['message']}"


class HumanReadableFormatter(logging.Formatter):
    def __init__(self, sanitize: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.sanitize = sanitize

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        context = getattr(record, "context", None)
        if context and isinstance(context, dict):
            formatted = f"{formatted} {context}"
        if self.sanitize:
            formatted = sanitize_message(formatted)
        return formatted


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches a ``context`` dict to every record."""

    def __init__(
        self,
        logger: logging.Logger,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(logger, context or {})

    def process(
        self,
        msg: str,
        kwargs: dict[str, Any],
    ) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        context = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = {**extra, "context": context}
        return msg, kwargs

    def with_context(self, **kwargs: Any) -> "ContextAdapter":
        new_context = {**self.extra, **kwargs}
        return ContextAdapter(self.logger, new_context)


_logging_initialized = False


def _build_formatter(config: LoggingConfig, log_format: str) -> logging.Formatter:
    if log_format == "json":
        return StructuredFormatter(
            sanitize=config.sanitize_sensitive,
            include_context=config.include_context,
        )
    return HumanReadableFormatter(sanitize=config.sanitize_sensitive)


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

    log_format = (
        "json"
        if os.getenv("COCO_WALLET_LOG_FORMAT", "human").lower() == "json"
        else "human"
    )

    handlers: list[logging.Handler] = []

    if config.log_to_file:
        if config.log_dir is None:
            config.log_dir = Path.home() / ".coco-wallet"
        config.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = config.log_dir / config.log_filename

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(_build_formatter(config, log_format))
        handlers.append(file_handler)

    if config.log_to_stdout:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(_build_formatter(config, log_format))
        handlers.append(stdout_handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    _logging_initialized = True


def get_logger(
    name: str,
    context: dict[str, Any] | None = None,
) -> ContextAdapter:
    return ContextAdapter(logging.getLogger(name), context)


def format_error_for_user(error: Exception | str) -> str:
    user_message, suggestion = get_user_friendly_error(error)
    if suggestion:
        return f"{user_message} {suggestion}"
    return user_message


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "ContextAdapter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "setup_logging",
    "get_logger",
    "format_error_for_user",
]
