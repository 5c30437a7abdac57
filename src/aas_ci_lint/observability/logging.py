"""Structured logging for lint runs.

Provides:
- JSON-formatted logs for CI log processors
- Human-readable console logs for local runs
- File and engine context propagated through the async validation calls

Logs go to stderr; stdout is reserved for findings.

Usage:
    from aas_ci_lint.observability.logging import configure_logging

    configure_logging(json_format=False, level="INFO")

    logger = logging.getLogger(__name__)
    with LogContext(file_path="/repo/model.aasx", engine="template-conformance"):
        logger.info("Validating")  # Includes file_path and engine
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

# Per-file correlation, set by the orchestrator
file_path_var: contextvars.ContextVar[str] = contextvars.ContextVar("file_path", default="")
engine_var: contextvars.ContextVar[str] = contextvars.ContextVar("engine", default="")

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    "file_path": file_path_var,
    "engine": engine_var,
}

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def current_context() -> dict[str, str]:
    """Lint context of the running task, without empty values."""
    return {key: value for key, var in _CONTEXT_VARS.items() if (value := var.get())}


def _to_jsonable(value: Any) -> Any:
    try:
        orjson.dumps(value)
    except TypeError:
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Output format:
    {"timestamp": "2026-01-10T12:34:56.789000+00:00", "level": "WARNING",
     "logger": "aas_ci_lint.orchestrator", "message": "Engine failing failed on ...",
     "line": 142, "file_path": "/repo/models/pump.aasx", "engine": "failing"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
            **current_context(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = _to_jsonable(value)

        return orjson.dumps(entry, default=str).decode("utf-8")


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for local runs.

    Output format:
    2026-01-10 12:34:56 | INFO     | aas_ci_lint.orchestrator | Validating | engine=fake
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        # Colors only when a human is watching
        self.use_colors = use_colors and sys.stderr.isatty()

    def _level(self, record: logging.LogRecord) -> str:
        padded = f"{record.levelname:8}"
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{padded}{self.RESET}" if color else padded

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        parts = [timestamp, self._level(record), record.name, record.getMessage()]

        tags = []
        if engine := engine_var.get():
            tags.append(f"engine={engine}")
        if file_path := file_path_var.get():
            tags.append(f"file={file_path}")
        if tags:
            parts.append(" ".join(tags))

        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    json_format: bool = False,
    level: str = "WARNING",
    use_colors: bool = True,
) -> None:
    """Configure process-wide logging on stderr.

    Args:
        json_format: Use JSON format (for CI log processors)
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_colors: Use ANSI colors in console format

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter(use_colors))
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    # Subprocess plumbing is noisy at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)


class LogContext:
    """Temporarily attach lint context to log records.

    Only the known keys (file_path, engine) are recorded.

    Usage:
        with LogContext(file_path="/repo/a.json"):
            logger.info("Validating file")  # Includes file_path
    """

    def __init__(self, **kwargs: Any) -> None:
        unknown = set(kwargs) - set(_CONTEXT_VARS)
        if unknown:
            raise TypeError(f"Unknown log context keys: {', '.join(sorted(unknown))}")
        self.values = {key: str(value) for key, value in kwargs.items()}
        self._tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []

    def __enter__(self) -> LogContext:
        for key, value in self.values.items():
            var = _CONTEXT_VARS[key]
            self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *exc_info: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)
