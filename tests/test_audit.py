"""Tests for audit events."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cryptoservice.audit import EventType, audit_event, reset_logger, setup_logging
from cryptoservice.audit.logger import LOG_FILE_NAME
from cryptoservice.exceptions import DecryptionFailed


@pytest.fixture
def log_dir(tmp_path: Path):
    """Configure logging into a temporary directory."""
    setup_logging(base_dir=tmp_path)
    yield tmp_path
    reset_logger()


def read_events(log_dir: Path) -> list[dict]:
    for handler in logging.getLogger().handlers:
        handler.flush()
    lines = (log_dir / LOG_FILE_NAME).read_text().strip().splitlines()
    return [json.loads(line) for line in lines]


def test_event_types_are_strings():
    """Test event types serialize to their dotted names."""
    assert EventType.CRYPTO_ENCRYPT == "crypto.encrypt"
    assert EventType("password.verify") is EventType.PASSWORD_VERIFY


def test_audit_event_success(log_dir: Path):
    """Test a successful event is logged at info level."""
    audit_event(
        EventType.CRYPTO_ENCRYPT,
        success=True,
        details={"algorithm": "aes-256-gcm", "key": "00ff"},
    )

    event = read_events(log_dir)[-1]
    assert event["event"] == "audit_event"
    assert event["level"] == "info"
    assert event["event_type"] == "crypto.encrypt"
    assert event["success"] is True
    assert event["details"] == {"algorithm": "aes-256-gcm", "key": "***"}


def test_audit_event_failure(log_dir: Path):
    """Test a failed event records the error type and level."""
    audit_event(EventType.CRYPTO_DECRYPT, success=False, error=DecryptionFailed())

    event = read_events(log_dir)[-1]
    assert event["level"] == "error"
    assert event["success"] is False
    assert event["error"] == {"type": "DecryptionFailed", "message": "decryption failed"}


def test_audit_event_accepts_plain_strings(log_dir: Path):
    """Test free-form event names."""
    audit_event("custom.event", success=True)
    assert read_events(log_dir)[-1]["event_type"] == "custom.event"


def test_audit_event_uses_global_logger():
    """Test audit_event binds onto the configured logger."""
    mock_logger = MagicMock()
    with patch("cryptoservice.audit.logger.get_logger", return_value=mock_logger):
        audit_event(EventType.KEY_DERIVE, success=True, details={"salt": "abc"})

    kwargs = mock_logger.bind.call_args.kwargs
    assert kwargs["event_type"] == "key.derive"
    assert kwargs["details"] == {"salt": "***"}
    mock_logger.bind.return_value.info.assert_called_once_with("audit_event")
