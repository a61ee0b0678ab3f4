"""Structured logging configuration for loan-recon."""

from __future__ import annotations

import logging
import sys
from typing import Any


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure logging for loan-recon.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("loan_recon").setLevel(log_level)

    # Reduce noise from external libraries
    logging.getLogger("confluent_kafka").setLevel(logging.WARNING)
    logging.getLogger("psycopg").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        import json
        from datetime import datetime, timezone

        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Session-scoped fields passed through ``extra={"extra": {...}}``
        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


class SessionLoggerAdapter(logging.LoggerAdapter):
    """Prefix messages with the session id and expose it to JsonFormatter."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        session_id = self.extra["session_id"]
        extra = dict(kwargs.pop("extra", None) or {})
        fields = dict(extra.pop("extra", None) or {})
        fields.setdefault("session_id", session_id)
        extra["extra"] = fields
        kwargs["extra"] = extra
        return f"[{session_id}] {msg}", kwargs


def get_logger(name: str, session_id: str | None = None) -> logging.Logger | SessionLoggerAdapter:
    """Get a logger with the given name.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).
    session_id : str, optional
        Reconciliation session the messages belong to. When given, every
        message is prefixed with it and JSON output carries a
        ``session_id`` field.

    Returns
    -------
    logging.Logger or SessionLoggerAdapter
        Configured logger.
    """
    logger = logging.getLogger(name)
    if session_id is None:
        return logger
    return SessionLoggerAdapter(logger, {"session_id": session_id})
