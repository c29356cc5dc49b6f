"""Tests for logging configuration, redaction and error mapping."""

import json
import logging

import pytest

from coco_wallet.shared.logging import (
    ContextAdapter,
    HumanReadableFormatter,
    LoggingConfig,
    LogLevel,
    StructuredFormatter,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
)


def _record(message, context=None):
    record = logging.LogRecord(
        name="coco_wallet.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    if context is not None:
        record.context = context
    return record


@pytest.mark.unit
class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_to_file is True
        assert config.log_to_stdout is False

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COCO_WALLET_LOG_LEVEL", "debug")
        monkeypatch.setenv("COCO_WALLET_LOG_STDOUT", "true")
        monkeypatch.setenv("COCO_WALLET_LOG_DIR", str(tmp_path))

        config = LoggingConfig.from_environment()

        assert config.log_level == LogLevel.DEBUG
        assert config.log_to_stdout is True
        assert config.log_dir == tmp_path

    def test_invalid_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("COCO_WALLET_LOG_LEVEL", "chatty")
        assert LoggingConfig.from_environment().log_level == LogLevel.INFO


@pytest.mark.unit
class TestSanitization:
    def test_payment_password_redacted(self):
        message = "body={'payment_password': '123456', 'amount': '1500000'}"
        sanitized = sanitize_message(message)
        assert "123456" not in sanitized
        assert "1500000" in sanitized

    def test_mnemonic_redacted(self):
        sanitized = sanitize_message("mnemonic='abandon ability able'")
        assert "abandon" not in sanitized

    def test_transaction_hash_kept(self):
        tx_hash = "0x" + "ab" * 32
        assert sanitize_message(f"reference={tx_hash}") == f"reference={tx_hash}"

    def test_sanitize_dict_nested(self):
        data = {
            "device_id": "android_1",
            "payment_password": "secret-pin",
            "nested": {"auth_secret": "xyz", "amount": "10"},
        }
        sanitized = sanitize_dict(data)
        assert sanitized["device_id"] == "android_1"
        assert sanitized["payment_password"] == "[REDACTED]"
        assert sanitized["nested"]["auth_secret"] == "[REDACTED]"
        assert sanitized["nested"]["amount"] == "10"


@pytest.mark.unit
class TestErrorMapping:
    def test_insufficient_balance(self):
        message, suggestion = get_user_friendly_error("Insufficient balance")
        assert "Insufficient balance" in message
        assert suggestion is not None

    def test_slippage(self):
        message, _ = get_user_friendly_error("Slippage tolerance exceeded")
        assert "slippage" in message.lower()

    def test_polling_timeout(self):
        message, _ = get_user_friendly_error(
            "Transaction not confirmed within 30 status checks (0xabc)"
        )
        assert "not been confirmed" in message

    def test_unknown_error(self):
        message, suggestion = get_user_friendly_error(ValueError("boom"))
        assert message == "An unexpected error occurred."
        assert suggestion is None

    def test_format_error_for_user_appends_suggestion(self):
        text = format_error_for_user("Incorrect password")
        assert text.startswith("The payment password is incorrect.")
        assert "Re-enter" in text


@pytest.mark.unit
class TestFormatters:
    def test_structured_formatter_outputs_json_with_context(self):
        formatter = StructuredFormatter()
        output = formatter.format(
            _record("Submitting", {"idempotency_key": "k1", "password": "pw"})
        )
        data = json.loads(output)
        assert data["message"] == "Submitting"
        assert data["context"]["idempotency_key"] == "k1"
        assert data["context"]["password"] == "[REDACTED]"

    def test_human_formatter_appends_context(self):
        formatter = HumanReadableFormatter()
        output = formatter.format(_record("Polling", {"idempotency_key": "k2"}))
        assert "Polling" in output
        assert "k2" in output


@pytest.mark.unit
class TestContextAdapter:
    def test_get_logger_binds_context(self):
        adapter = get_logger("coco_wallet.test", {"idempotency_key": "abc"})
        msg, kwargs = adapter.process("hello", {})
        assert msg == "hello"
        assert kwargs["extra"]["context"] == {"idempotency_key": "abc"}

    def test_with_context_merges(self):
        adapter = ContextAdapter(logging.getLogger("x"), {"a": 1})
        child = adapter.with_context(b=2)
        _, kwargs = child.process("m", {"extra": {"context": {"c": 3}}})
        assert kwargs["extra"]["context"] == {"a": 1, "b": 2, "c": 3}
