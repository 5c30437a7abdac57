"""Lint run configuration.

The configuration is serializable so it can be stored next to the results
for reproducibility.
"""

from __future__ import annotations

from pydantic import Field

from aas_ci_lint.core.model import StrictModel
from aas_ci_lint.core.model.findings import Severity


class LintConfig(StrictModel):
    """Configuration for a validation run.

    Attributes:
        paths: Glob patterns or file paths to validate
        exclude: Glob patterns removed from the discovered set
        fail_on: Severities that make a caller treat the run as failed
        template_version: Pinned IDTA template version, or "latest"
        template_dir: Local directory containing IDTA template JSON files
        base_path: Directory that relative patterns resolve against
        engines: Per-engine enable flags; engines not listed are enabled
    """

    model_config = {**StrictModel.model_config, "frozen": True}

    paths: list[str]
    exclude: list[str] | None = None
    fail_on: list[Severity] = Field(default_factory=lambda: [Severity.ERROR], alias="failOn")
    template_version: str | None = Field(default=None, alias="templateVersion")
    template_dir: str | None = Field(default=None, alias="templateDir")
    base_path: str | None = Field(default=None, alias="basePath")
    engines: dict[str, bool] | None = None

    def is_engine_enabled(self, name: str) -> bool:
        """Engines are enabled unless explicitly switched off."""
        if not self.engines:
            return True
        return self.engines.get(name, True) is not False
