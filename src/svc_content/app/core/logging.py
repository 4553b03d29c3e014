from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception
from typing import Any, Optional

from .env import pick

DATEFMT = "%Y-%m-%dT%H:%M:%S"

# record attribute -> key under "http"; the pipeline passes these as ``extra``
HTTP_FIELDS = {
    "http_method": "method",
    "path": "path",
    "status_code": "status",
}

# Third-party loggers that stay at their own level whatever LOG_LEVEL says.
QUIET_LOGGERS = {
    "uvicorn": "INFO",
    "uvicorn.error": "INFO",
    "uvicorn.access": "INFO",
    "sqlalchemy.engine": "WARNING",  # SQL echo is DB_ECHO's job
    "httpx": "WARNING",
}


def _error_block(exc_info) -> dict[str, Any]:
    exc_type, exc, _ = exc_info
    block: dict[str, Any] = {}
    if exc_type is not None:
        block["type"] = exc_type.__name__
    if exc is not None and str(exc):
        block["message"] = str(exc)
    stack = "".join(format_exception(*exc_info))
    limit = int(os.getenv("LOG_STACK_LIMIT", "4000"))
    block["stack"] = stack if len(stack) <= limit else stack[:limit] + "...(truncated)"
    return block


class JsonFormatter(logging.Formatter):
    """One JSON object per line: message, request context and error."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }
        user = getattr(record, "user", None)
        if user:
            payload["user"] = user

        http = {key: getattr(record, attr) for attr, key in HTTP_FIELDS.items() if getattr(record, attr, None) is not None}
        if http:
            payload["http"] = http
        if record.exc_info:
            payload["error"] = _error_block(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _read_level() -> str:
    explicit = os.getenv("LOG_LEVEL")
    if explicit:
        return explicit.upper()
    return pick(prod="INFO", nonprod="DEBUG")


def _read_format() -> str:
    explicit = os.getenv("LOG_FORMAT")
    if explicit:
        return explicit.lower()
    return pick(prod="json", nonprod="plain")


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure the root logger; LOG_LEVEL and LOG_FORMAT override the per-environment defaults."""
    level = (level or _read_level()).upper()
    formatter = "json" if (fmt or _read_format()) == "json" else "plain"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s",
                    "datefmt": DATEFMT,
                },
                "json": {"()": JsonFormatter, "datefmt": DATEFMT},
            },
            "handlers": {
                "stream": {"class": "logging.StreamHandler", "level": level, "formatter": formatter},
            },
            "root": {"level": level, "handlers": ["stream"]},
            "loggers": {
                name: {"level": quiet, "handlers": [], "propagate": True}
                for name, quiet in QUIET_LOGGERS.items()
            },
        }
    )
