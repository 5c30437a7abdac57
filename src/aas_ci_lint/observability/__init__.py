"""Observability for aas-ci-lint.

Provides structured logging with per-file and per-engine context.
"""

from aas_ci_lint.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
)

__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "LogContext",
    "configure_logging",
]
