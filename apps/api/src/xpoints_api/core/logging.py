from __future__ import annotations

import json
import logging
import sys
from logging import LogRecord
from typing import Any, Dict, Mapping

from loguru import logger
from opentelemetry import trace


# Attributes every LogRecord carries; anything else was passed through ``extra=``.
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "sqlalchemy.engine")


def _record_extras(record: LogRecord) -> Dict[str, Any]:
    return {key: value for key, value in record.__dict__.items() if key not in _STANDARD_RECORD_ATTRS}


class InterceptHandler(logging.Handler):
    """Route stdlib logging records (uvicorn, sqlalchemy) into Loguru."""

    def emit(self, record: LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        extras = _record_extras(record)
        message = record.getMessage()
        target = logger.bind(**extras) if extras else logger
        target.opt(depth=6, exception=record.exc_info).log(level, message)


def build_log_payload(record: Mapping[str, Any], metadata: Mapping[str, str]) -> Dict[str, Any]:
    """Flatten a Loguru record into the JSON document shipped to the log pipeline."""

    payload: Dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name.lower(),
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        **metadata,
    }

    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        payload["trace_id"] = format(span_context.trace_id, "032x")
        payload["span_id"] = format(span_context.span_id, "016x")

    payload.update(record["extra"])

    exception = record["exception"]
    if exception is not None and exception.value is not None:
        payload["error"] = {"type": type(exception.value).__name__, "detail": str(exception.value)}
    return payload


def configure_logging(*, service_name: str, environment: str, version: str) -> None:
    """Send Loguru and stdlib logging to stdout as one JSON document per line."""

    metadata = {"service": service_name, "environment": environment, "version": version}

    def sink(message: "logger.Message") -> None:
        sys.stdout.write(json.dumps(build_log_payload(message.record, metadata), default=str) + "\n")

    logger.remove()
    logger.add(sink, backtrace=False, diagnose=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
