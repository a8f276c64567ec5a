"""Logging setup shared by every pushel component."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

__all__ = ["configure_logging", "get_logger", "logger"]

LOG_FORMATS = ("pretty", "json")
_PRETTY_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("pushel")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for journald and log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter()
    return logging.Formatter(fmt=_PRETTY_FORMAT, datefmt=_DATE_FORMAT)


def configure_logging(
    log_format: str = "pretty",
    log_file: str | Path | None = None,
    level: str = "INFO",
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the ``pushel`` logger.

    Calling it again replaces the handlers installed by the previous call, so
    the CLI can reconfigure once the config file has been read.
    """
    if log_format not in LOG_FORMATS:
        msg = f"log_format must be one of {', '.join(LOG_FORMATS)}, got {log_format!r}"
        raise ValueError(msg)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = _build_formatter(log_format)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level.upper())
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``pushel`` logger for *name*."""
    return logger.getChild(name)
