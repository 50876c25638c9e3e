"""
Structured logging for the engine, the API and the CLI.

Every line carries the context it was emitted in: the request id (HTTP
request or CLI run) and, while a snapshot is being derived, the evaluation
instant. Fields passed with `extra=` are kept as top-level keys.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from .context import get_evaluated_at, get_request_id

if TYPE_CHECKING:
    from activity_engine.config import EngineSettings

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

# The correlation middleware writes one access line per request already.
_QUIET_LOGGERS = ("uvicorn.access",)


def _context_fields() -> dict[str, str]:
    fields: dict[str, str] = {}
    request_id = get_request_id()
    if request_id:
        fields["request_id"] = request_id
    evaluated_at = get_evaluated_at()
    if evaluated_at is not None:
        fields["evaluated_at"] = evaluated_at.isoformat()
    return fields


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Example:
    {
        "timestamp": "2024-06-01T12:00:00.000Z",
        "level": "WARNING",
        "logger": "activity_engine.status_engine",
        "message": "Unparsable schedule on shooting-7, keeping raw status: ...",
        "request_id": "req-3f2a9c01d4e5b6a7",
        "evaluated_at": "2024-06-01T00:00:00+00:00",
        "activity_id": "shooting-7",
        "kind": "shooting"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")[:-6] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context_fields(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(_extra_fields(record))
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Readable single-line format for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        context = _context_fields()
        prefix = ""
        if "request_id" in context:
            prefix += f"[{context['request_id'][:12]}] "
        if "evaluated_at" in context:
            prefix += f"@{context['evaluated_at']} "

        stamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{stamp} [{record.levelname}] {record.name}: {prefix}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str = "INFO", json_format: bool | None = None) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines if True, human lines if False, and when None
            JSON unless stderr is a terminal.
    """
    if json_format is None:
        json_format = not sys.stderr.isatty()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.getLevelName(level.upper()))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_settings(settings: "EngineSettings") -> None:
    configure_logging(settings.log_level, settings.log_json)


def get_logger(name: str) -> logging.Logger:
    """
    Module logger. Pass structured fields with `extra=`:

        logger = get_logger(__name__)
        logger.warning("Skipping task row 3", extra={"kind": "task", "row_index": 3})
    """
    return logging.getLogger(name)
