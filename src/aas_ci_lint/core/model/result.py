"""Result of a complete lint run."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from pydantic import Field

from aas_ci_lint.core.model import StrictModel
from aas_ci_lint.core.model.config import LintConfig
from aas_ci_lint.core.model.findings import Finding, Severity


class LintSummary(StrictModel):
    """Counts by severity and file coverage."""

    errors: int = 0
    warnings: int = 0
    notes: int = 0
    files_scanned: int = Field(default=0, alias="filesScanned")
    files_with_findings: int = Field(default=0, alias="filesWithFindings")


class RunMetadata(StrictModel):
    """Metadata about the run for auditability."""

    start_time: datetime = Field(..., alias="startTime")
    duration_ms: int = Field(..., alias="durationMs", ge=0)
    version: str
    config: LintConfig


class LintResult(StrictModel):
    """All findings from all engines, normalized and deduplicated."""

    findings: list[Finding] = Field(default_factory=list)
    summary: LintSummary = Field(default_factory=LintSummary)
    metadata: RunMetadata

    def failing_findings(self, fail_on: Iterable[Severity | str]) -> list[Finding]:
        """Findings whose severity is in the failing set."""
        failing = {Severity(s) for s in fail_on}
        return [f for f in self.findings if f.severity in failing]

    def has_failures(self, fail_on: Iterable[Severity | str] | None = None) -> bool:
        """Check the findings against a failing-severity policy.

        Args:
            fail_on: Severities that count as failures. Defaults to the
                fail_on list of the configuration used for the run.
        """
        if fail_on is None:
            fail_on = self.metadata.config.fail_on
        return bool(self.failing_findings(fail_on))

    def to_json(self) -> bytes:
        """Serialize with camelCase aliases, 2-space indented."""
        import orjson

        return orjson.dumps(
            self.model_dump(mode="json", by_alias=True, exclude_none=True),
            option=orjson.OPT_INDENT_2,
        )
