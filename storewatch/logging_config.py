"""Structured logging configuration."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

from storewatch.config import settings


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with timestamp, level and source location fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['source'] = f"{record.filename}:{record.lineno}"

        if record.funcName:
            log_record['function'] = record.funcName


def setup_logging(
    level: str | None = None,
    log_dir: str | Path | None = None,
    json_console: bool | None = None,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        log_dir: Directory for ``storewatch.log`` / ``error.log``; defaults to
                 ``settings.log_dir``. No file handlers when unset.
        json_console: Emit JSON on stderr instead of plain text

    Returns:
        The configured root logger
    """
    level = level or settings.log_level
    log_dir = log_dir if log_dir is not None else settings.log_dir
    json_console = settings.log_json if json_console is None else json_console

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    json_formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )

    # Console goes to stderr so CLI output on stdout stays clean JSON
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)
    if json_console:
        console_handler.setFormatter(json_formatter)
    else:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    root_logger.addHandler(console_handler)

    if log_dir:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        json_handler = logging.FileHandler(logs_dir / "storewatch.log")
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(json_formatter)
        root_logger.addHandler(json_handler)

        error_handler = logging.FileHandler(logs_dir / "error.log")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(json_formatter)
        root_logger.addHandler(error_handler)

    return root_logger


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its context into each record's extra fields."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with optional context fields.

    Args:
        name: Logger name (usually __name__)
        **context: Additional context fields (e.g., domain='shop.example', handle='widget')

    Returns:
        LoggerAdapter with context
    """
    logger = logging.getLogger(name)
    return LoggerAdapter(logger, context)
