"""Domain models for lint runs.

This module provides the data structures shared by discovery, the
orchestrator, the validation engines and downstream reporting:
findings and their locations, the run configuration, and the run result.

All models use Pydantic v2 and serialize with camelCase aliases so that a
LintResult can be written as JSON and embedded in CI artifacts unchanged.
"""

from pydantic import BaseModel


class StrictModel(BaseModel):
    """Base model for all lint domain models.

    Note: extra="forbid" rejects unknown fields, and populate_by_name lets
    callers construct models with either snake_case names or camelCase
    aliases.
    """

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "validate_default": True,
    }


# Import order matters due to forward references - StrictModel must be defined first
# ruff: noqa: E402
from aas_ci_lint.core.model.config import LintConfig
from aas_ci_lint.core.model.findings import Finding, Location, Severity
from aas_ci_lint.core.model.result import LintResult, LintSummary, RunMetadata

__all__ = [
    "StrictModel",
    "Severity",
    "Location",
    "Finding",
    "LintConfig",
    "LintSummary",
    "RunMetadata",
    "LintResult",
]
