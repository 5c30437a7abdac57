"""Exceptions raised by aas-ci-lint.

Only configuration and discovery problems abort a run. Engine failures are
raised inside engines and converted to findings by the orchestrator;
validation problems are never exceptions, they are findings.
"""

from __future__ import annotations


class LintError(Exception):
    """Base exception for aas-ci-lint errors."""


class DiscoveryError(LintError):
    """File discovery failed (invalid glob, missing or unreadable base path)."""

    def __init__(self, message: str, pattern: str | None = None):
        self.pattern = pattern
        super().__init__(message)


class PackageError(LintError):
    """An AASX package could not be opened or extracted."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid AASX package {path}: {reason}")


class EngineError(LintError):
    """A validation engine could not complete on a file."""

    def __init__(self, engine: str, message: str):
        self.engine = engine
        super().__init__(message)
