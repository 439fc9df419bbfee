"""Logging for the relay server: one stderr handler, records tagged with session ID and component."""

import logging
import sys
from typing import Optional

LOGGER_NAME = "tictactoe_relay"

LOG_FORMAT = "%(asctime)s | %(levelname)s | session=%(session_id)s | %(component)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RelayFormatter(logging.Formatter):
    """Fills in session_id / component for records that were not logged through an adapter."""

    def __init__(self) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        record.session_id = getattr(record, "session_id", "-")
        record.component = getattr(record, "component", "-")
        return super().format(record)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach the stderr handler to the package logger. Calling it again replaces the handler."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(RelayFormatter())
    logger.addHandler(stream_handler)
    logger.propagate = False
    return logger


def get_logger(component: str, session_id: Optional[str] = None) -> logging.LoggerAdapter:
    """LoggerAdapter below the package logger that tags each record with session_id and component."""
    base = logging.getLogger(f"{LOGGER_NAME}.{component.lower()}")
    return logging.LoggerAdapter(
        base, {"session_id": session_id or "-", "component": component}
    )
