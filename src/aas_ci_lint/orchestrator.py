"""Validation orchestrator.

The orchestrator is the main entry point for a lint run. It coordinates
file discovery, engine invocation and result aggregation.

Engines for one file run concurrently; files are processed one after the
other. Findings are sorted and deduplicated afterwards, so the output is
identical across runs regardless of which engine finishes first.

Example:
    orchestrator = Orchestrator()
    orchestrator.register_engine(AasTestEnginesEngine())
    orchestrator.register_engine(TemplateConformanceEngine())

    result = await orchestrator.lint(LintConfig(paths=["**/*.aasx"]))
    print(f"Found {result.summary.errors} errors")
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from aas_ci_lint import __version__
from aas_ci_lint.core.discovery import discover_files
from aas_ci_lint.core.model import (
    Finding,
    LintConfig,
    LintResult,
    LintSummary,
    Location,
    RunMetadata,
    Severity,
)
from aas_ci_lint.engines.base import ValidationEngine
from aas_ci_lint.observability.logging import LogContext

logger = logging.getLogger(__name__)

ENGINE_ERROR_CODE = "internal/engine-error"


class Orchestrator:
    """Manages the validation lifecycle.

    Holds the ordered list of registered engines and runs them against
    every discovered file. Engines are only identified by their name.
    """

    def __init__(self, engines: Iterable[ValidationEngine] | None = None) -> None:
        self._engines: list[ValidationEngine] = []
        self._running = False
        for engine in engines or ():
            self.register_engine(engine)

    @property
    def engines(self) -> tuple[ValidationEngine, ...]:
        """Registered engines in registration order."""
        return tuple(self._engines)

    def register_engine(self, engine: ValidationEngine) -> None:
        """Register a validation engine.

        Engines must be registered before lint() is called.

        Raises:
            RuntimeError: If called while a run is in progress
            ValueError: If an engine with the same name is registered
        """
        if self._running:
            raise RuntimeError("Engines cannot be registered during a lint run")
        if any(e.name == engine.name for e in self._engines):
            raise ValueError(f"Engine already registered: {engine.name}")
        self._engines.append(engine)
        logger.debug(f"Registered engine {engine.name}")

    async def lint(self, config: LintConfig) -> LintResult:
        """Run validation according to the provided configuration.

        1. Discovers files matching the configured patterns
        2. Runs every enabled, applicable engine on each file
        3. Sorts and deduplicates findings
        4. Computes summary statistics

        Args:
            config: Lint configuration

        Returns:
            LintResult with findings, summary and run metadata

        Raises:
            DiscoveryError: If discovery fails; there is no partial mode
        """
        start_time = datetime.now(timezone.utc)
        started = time.monotonic()

        base_path = config.base_path or str(Path.cwd())
        files = await discover_files(config.paths, base_path=base_path, exclude=config.exclude)

        active_engines = [e for e in self._engines if config.is_engine_enabled(e.name)]
        logger.info(
            f"Validating {len(files)} file(s) with engines: "
            f"{', '.join(e.name for e in active_engines) or 'none'}"
        )

        self._running = True
        try:
            all_findings: list[Finding] = []
            for file_path in files:
                with LogContext(file_path=file_path):
                    all_findings.extend(
                        await self._validate_file(file_path, active_engines, config)
                    )
        finally:
            self._running = False

        findings = normalize_findings(all_findings)
        summary = compute_summary(findings, files)

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Lint complete in {duration_ms}ms: {summary.errors} error(s), "
            f"{summary.warnings} warning(s), {summary.notes} note(s)"
        )

        return LintResult(
            findings=findings,
            summary=summary,
            metadata=RunMetadata(
                start_time=start_time,
                duration_ms=duration_ms,
                version=__version__,
                config=config,
            ),
        )

    async def _validate_file(
        self,
        file_path: str,
        engines: Sequence[ValidationEngine],
        config: LintConfig,
    ) -> list[Finding]:
        """Validate a single file with all applicable engines in parallel."""

        async def run_engine(engine: ValidationEngine) -> list[Finding]:
            with LogContext(engine=engine.name):
                try:
                    if not engine.can_validate(file_path):
                        return []
                    return list(await engine.validate(file_path, config))
                except Exception as e:
                    logger.warning(f"Engine {engine.name} failed on {file_path}: {e}")
                    return [engine_error_finding(engine.name, file_path, e)]

        results = await asyncio.gather(*(run_engine(e) for e in engines))

        findings: list[Finding] = []
        for engine_findings in results:
            findings.extend(engine_findings)
        return findings


def engine_error_finding(engine_name: str, file_path: str, error: BaseException) -> Finding:
    """Synthesize the finding reported when an engine fails on a file."""
    return Finding(
        rule_id=f"{engine_name}/{ENGINE_ERROR_CODE}",
        rule_name="Engine Error",
        severity=Severity.ERROR,
        message=f'Validation engine "{engine_name}" failed: {error}',
        location=Location(file_path=file_path),
        source=engine_name,
    )


def _sort_key(finding: Finding) -> tuple[str, float, str]:
    line = finding.location.line
    return (
        finding.location.file_path,
        math.inf if line is None else line,
        finding.rule_id,
    )


def normalize_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Sort findings for determinism, then drop duplicates.

    Sort order is file path, then line (findings without a line last),
    then rule ID. The sort is stable, so ties keep engine order. A finding
    is a duplicate when file path, JSON pointer, line, rule ID and message
    all match an earlier one.
    """
    ordered = sorted(findings, key=_sort_key)

    seen: set[tuple[str, str | None, int | None, str, str]] = set()
    deduplicated: list[Finding] = []
    for finding in ordered:
        key = finding.dedup_key
        if key in seen:
            continue
        seen.add(key)
        deduplicated.append(finding)
    return deduplicated


def compute_summary(findings: Sequence[Finding], files_scanned: Sequence[str]) -> LintSummary:
    """Count findings by severity and scanned files with findings."""
    scanned = set(files_scanned)
    return LintSummary(
        errors=sum(1 for f in findings if f.severity == Severity.ERROR),
        warnings=sum(1 for f in findings if f.severity == Severity.WARNING),
        notes=sum(1 for f in findings if f.severity == Severity.NOTE),
        files_scanned=len(files_scanned),
        files_with_findings=len({f.location.file_path for f in findings} & scanned),
    )
