"""Structured audit logging for cryptographic operations."""

import json
import logging
import os
import sys
import threading
import uuid
from contextlib import suppress
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict

from .events import EventType

LOG_FILE_NAME = "cryptoservice.log"
SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "key",
    "plaintext",
    "salt",
    "aad",
    "credential",
}

# Global instances
_LOGGER_INSTANCE: structlog.BoundLogger | None = None
_logger_lock = threading.Lock()


def get_log_dir(base_dir: str | Path | None = None) -> Path:
    """Get normalized log directory path.

    Args:
        base_dir: Base directory for logs. If None, uses ~/.local/log

    Returns:
        Resolved Path object for log directory
    """
    if base_dir is None:
        base_dir = Path.home() / ".local" / "log"
    return Path(base_dir).resolve()


def create_secure_handler(
    log_path: Path, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    """Create a RotatingFileHandler whose file is readable only by owner and group.

    Args:
        log_path: Path to the log file
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep

    Returns:
        Configured RotatingFileHandler instance
    """
    os.makedirs(log_path.parent, mode=0o750, exist_ok=True)

    handler = RotatingFileHandler(
        str(log_path), maxBytes=max_bytes, backupCount=backup_count
    )

    # Some platforms need the file to exist before chmod
    if not log_path.exists():
        log_path.touch(mode=0o640)
    os.chmod(log_path, 0o640)

    return handler


def get_handler(logger: logging.Logger) -> RotatingFileHandler | None:
    """Return the logger's RotatingFileHandler, if it has one."""
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler):
            return handler
    return None


def add_timestamp(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_thread_info(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> EventDict:
    """Add thread information."""
    result: EventDict = dict(event_dict)
    thread = threading.current_thread()
    result["thread"] = {
        "id": thread.ident,
        "name": thread.name,
    }
    return result


def sanitize_keys(
    event_dict: dict[str, Any], sensitive_keys: set[str]
) -> dict[str, Any]:
    """Redact sensitive keys, matching case-insensitively and recursing into
    nested dicts and lists.

    Args:
        event_dict: Dictionary to sanitize
        sensitive_keys: Set of keys to redact

    Returns:
        Sanitized copy of the dictionary
    """

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in sensitive_keys:
            return "***"
        if isinstance(value, dict):
            return sanitize_keys(value, sensitive_keys)
        if isinstance(value, list):
            return [_sanitize_value("", item) for item in value]
        return value

    return {k: _sanitize_value(k, v) for k, v in event_dict.items()}


def sanitize_event_dict(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> dict[str, Any]:
    """Processor that masks secrets before rendering."""
    return sanitize_keys(dict(event_dict), SENSITIVE_KEYS)


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for records that did not go through structlog."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        # structlog already rendered this record as JSON
        if message.startswith("{"):
            return message

        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": message,
        }
        if record.exc_info:
            log_data["exception"] = {
                "type": str(record.exc_info[0]),
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_data)


def configure_logger(
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 50 * 1024 * 1024,  # 50 MB
    backup_count: int = 5,
    base_dir: str | Path | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the root logger, returning a bound logger.

    Prefer :func:`setup_logging`, which also maintains the global instance.

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID for request tracing
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        A configured structlog.BoundLogger
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            add_thread_info,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    log_file = get_log_dir(base_dir) / LOG_FILE_NAME
    file_handler = create_secure_handler(log_file, max_log_size, backup_count)
    file_handler.setFormatter(StructuredJsonFormatter())

    # Warnings and above also go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return structlog.get_logger().bind(
        correlation_id=correlation_id or str(uuid.uuid4())
    )


def setup_logging(
    *,
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 50 * 1024 * 1024,  # 50 MB
    backup_count: int = 5,
    base_dir: str | Path | None = None,
) -> structlog.BoundLogger:
    """Set up structured logging and store the global logger instance.

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID for request tracing
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        The configured logger instance.
    """
    global _LOGGER_INSTANCE

    reset_logger()
    new_logger = configure_logger(
        log_level=log_level,
        correlation_id=correlation_id,
        max_log_size=max_log_size,
        backup_count=backup_count,
        base_dir=base_dir,
    )
    with _logger_lock:
        _LOGGER_INSTANCE = new_logger
    return new_logger


def get_logger() -> structlog.BoundLogger:
    """Return the global logger, configuring defaults on first use."""
    global _LOGGER_INSTANCE

    with _logger_lock:
        if _LOGGER_INSTANCE is not None:
            return _LOGGER_INSTANCE

    new_logger = configure_logger()
    with _logger_lock:
        if _LOGGER_INSTANCE is None:
            _LOGGER_INSTANCE = new_logger
        return _LOGGER_INSTANCE


def reset_logger() -> None:
    """Close handlers, reset structlog and clear the global instance.

    Idempotent; cleanup errors never prevent the reset.
    """
    global _LOGGER_INSTANCE
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        with suppress(Exception):
            handler.close()
        root_logger.removeHandler(handler)

    with suppress(Exception):
        structlog.reset_defaults()

    with _logger_lock:
        _LOGGER_INSTANCE = None


def audit_event(
    event_type: EventType | str,
    *,
    success: bool,
    details: dict[str, Any] | None = None,
    error: Exception | None = None,
) -> None:
    """Log the outcome of a cryptographic operation.

    Args:
        event_type: Type of event (e.g., ``EventType.CRYPTO_ENCRYPT``)
        success: Whether the operation succeeded
        details: Optional event details; sensitive keys are redacted
        error: Optional exception if operation failed
    """
    event: dict[str, Any] = {
        "event_type": str(getattr(event_type, "value", event_type)),
        "success": success,
    }
    if details:
        event["details"] = sanitize_keys(details, SENSITIVE_KEYS)
    if error:
        event["error"] = {
            "type": type(error).__name__,
            "message": str(error),
        }

    logger = get_logger().bind(**event)
    if success:
        logger.info("audit_event")
    else:
        logger.error("audit_event")
