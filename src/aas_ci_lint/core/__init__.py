"""Core lint infrastructure: domain models, discovery and document loading."""

from aas_ci_lint.core.discovery import (
    discover_files,
    find_aas_environment_in_aasx,
    unpack_aasx,
)
from aas_ci_lint.core.model import (
    Finding,
    LintConfig,
    LintResult,
    LintSummary,
    Location,
    RunMetadata,
    Severity,
)

__all__ = [
    "Finding",
    "LintConfig",
    "LintResult",
    "LintSummary",
    "Location",
    "RunMetadata",
    "Severity",
    "discover_files",
    "find_aas_environment_in_aasx",
    "unpack_aasx",
]
