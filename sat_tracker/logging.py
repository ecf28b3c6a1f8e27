"""Structured logging helpers for sat-tracker."""

from __future__ import annotations

import contextlib
import contextvars
import datetime as _dt
import json
import logging
import math
import sys
from typing import Any, Dict, Mapping, Optional

_LOGGER_NAME = "sat_tracker"
_CONTEXT: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "sat_tracker_log_context", default={}
)
# Observer coordinates locate a user; they are logged at ~11 km resolution.
_LOCATION_KEYS = {"observer_lat", "observer_lon"}
_LOCATION_DECIMALS = 1
# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render log records as JSON with contextual metadata."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _dt.datetime.fromtimestamp(record.created, _dt.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _CONTEXT.get()
        if context:
            payload["context"] = _coarsen(context)

        extras = {k: v for k, v in record.__dict__.items() if k not in _RECORD_FIELDS}
        if extras:
            payload["extra"] = _coarsen(extras)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=repr)


def _coarsen(value: Any, key_hint: Optional[str] = None) -> Any:
    if isinstance(value, Mapping):
        return {k: _coarsen(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_coarsen(item, key_hint) for item in value]
    if key_hint and key_hint.lower() in _LOCATION_KEYS and isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return round(float(value), _LOCATION_DECIMALS)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def configure_logging(
    level: Optional[str | int] = None,
    stream: Optional[Any] = None,
    force: bool = False,
) -> logging.Logger:
    """Configure the package logger with JSON output."""

    logger = logging.getLogger(_LOGGER_NAME)
    if force:
        logger.handlers.clear()
    if logger.handlers and not force:
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level or logging.INFO)
    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a child logger of the package logger."""

    if not name:
        return logging.getLogger(_LOGGER_NAME)
    if name.startswith(_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


@contextlib.contextmanager
def log_context(**kwargs: Any):
    """Bind contextual metadata to every record emitted inside the block."""

    current = dict(_CONTEXT.get())
    current.update({k: v for k, v in kwargs.items() if v is not None})
    token = _CONTEXT.set(current)
    try:
        yield
    finally:
        _CONTEXT.reset(token)


__all__ = ["JSONFormatter", "configure_logging", "get_logger", "log_context"]
