"""Findings and their locations.

A Finding is self-contained: it carries enough context (rule identity,
severity, message, location, producing engine) to be reported without
access to the validated file.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from aas_ci_lint.core.model import StrictModel


class Severity(str, Enum):
    """Severity levels for findings.

    These map one-to-one to SARIF result levels.
    """

    ERROR = "error"  # Must be fixed
    WARNING = "warning"  # Should be reviewed
    NOTE = "note"  # Informational


class Location(StrictModel):
    """Where a finding was detected.

    AAS JSON content is addressed by JSON pointer (RFC 6901). Packages add
    the path of the environment document inside the archive. Line and
    column are only set by engines that report textual positions.
    """

    model_config = {**StrictModel.model_config, "frozen": True}

    file_path: str = Field(..., alias="filePath", description="Absolute path on disk")
    internal_path: str | None = Field(
        default=None,
        alias="internalPath",
        description="Path inside an AASX archive, e.g. aasx/aas-environment.json",
    )
    json_pointer: str | None = Field(
        default=None,
        alias="jsonPointer",
        description="RFC 6901 pointer, e.g. /submodels/0/submodelElements/2",
    )
    line: int | None = Field(default=None, ge=1, description="1-based line number")
    column: int | None = Field(default=None, ge=1, description="1-based column number")


class Finding(StrictModel):
    """A single normalized validation result.

    rule_id has the form "{engine}/{category}/{code}" and becomes the SARIF
    rule identity.
    """

    model_config = {**StrictModel.model_config, "frozen": True}

    rule_id: str = Field(..., alias="ruleId", min_length=1)
    rule_name: str = Field(..., alias="ruleName")
    severity: Severity
    message: str
    location: Location
    source: str = Field(..., description="Name of the engine that produced the finding")
    details: dict[str, Any] | None = None

    @property
    def dedup_key(self) -> tuple[str, str | None, int | None, str, str]:
        """Identity used to collapse duplicate findings."""
        return (
            self.location.file_path,
            self.location.json_pointer,
            self.location.line,
            self.rule_id,
            self.message,
        )
