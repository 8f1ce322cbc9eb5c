"""Structured Logging - context-bound loggers and formatters for the store server.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - Context fields (peer, usuario, tipo, funko_id, error_code) appear only when set
    - A field passed at the call site overrides the bound value unless it is None
    - setup_logging() installs exactly one store handler on the root logger,
      however many times it runs

Design Decisions:
    - Context is bound once per connection (peer) and once per request
      (tipo, usuario) with a LoggerAdapter instead of repeating extra= at
      every call site
    - Same context rendering for JSON and text output: JSON keys for
      production, trailing key=value pairs for a terminal
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = ("peer", "usuario", "tipo", "funko_id", "error_code")

_HANDLER_NAME = "funko_store"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class ContextLogger(logging.LoggerAdapter):
    """Logger carrying fields that are attached to every record it emits."""

    def process(self, msg, kwargs):
        call_extra = {
            k: v for k, v in (kwargs.get("extra") or {}).items() if v is not None
        }
        kwargs["extra"] = {**self.extra, **call_extra}
        return msg, kwargs

    def bind(self, **fields) -> "ContextLogger":
        """New logger with `fields` added to the current context."""
        return ContextLogger(self.logger, {**self.extra, **fields})


def bind(logger: logging.Logger | ContextLogger, **fields) -> ContextLogger:
    """Attach context fields to a module logger (or extend a bound one)."""
    if isinstance(logger, ContextLogger):
        return logger.bind(**fields)
    return ContextLogger(logger, fields)


def record_context(record: logging.LogRecord) -> dict:
    """Context fields present on `record`, in CONTEXT_FIELDS order."""
    return {
        key: record.__dict__[key]
        for key in CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Plain line with context appended as key=value, traceback below."""

    def __init__(self):
        super().__init__(_TEXT_FORMAT)

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the store's stream handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
