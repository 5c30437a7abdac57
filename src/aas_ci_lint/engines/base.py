"""Base class for validation engines.

Engines are invoked by the orchestrator, once per discovered file, and
return findings in the standard format. Each engine wraps its own
validation logic and converts the results to Finding objects.

Example:
    class IdShortEngine(ValidationEngine):
        name = "id-short"
        description = "Checks idShort naming"

        def can_validate(self, file_path: str) -> bool:
            return file_path.endswith(".json")

        async def validate(self, file_path: str, config: LintConfig) -> list[Finding]:
            return []
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from aas_ci_lint.core.model import Finding, LintConfig, Location, Severity


class ValidationEngine(ABC):
    """Base class for all validation engines.

    Subclasses must define:
    - name: Unique engine identifier, used as the first rule ID segment
      and as the key in LintConfig.engines
    - description: Human-readable description
    - can_validate: Early filter called before validate
    - validate: Produce findings for one file

    validate may raise; the orchestrator turns the failure into a single
    engine-error finding for that file.
    """

    name: str = ""
    description: str = ""

    # Extensions accepted by the default can_validate
    extensions: frozenset[str] = frozenset({".aasx", ".json", ".xml"})

    def can_validate(self, file_path: str) -> bool:
        """Check if this engine should validate the given file."""
        return Path(file_path).suffix.lower() in self.extensions

    @abstractmethod
    async def validate(self, file_path: str, config: LintConfig) -> list[Finding]:
        """Validate a single file.

        Args:
            file_path: Absolute path to the file
            config: Configuration of the current run

        Returns:
            Findings for the file (empty if valid)
        """

    def finding(
        self,
        code: str,
        rule_name: str,
        severity: Severity,
        message: str,
        location: Location,
        details: dict[str, Any] | None = None,
    ) -> Finding:
        """Build a finding attributed to this engine.

        Args:
            code: Rule ID suffix ("{category}/{code}"); prefixed with the engine name
        """
        return Finding(
            rule_id=f"{self.name}/{code}",
            rule_name=rule_name,
            severity=severity,
            message=message,
            location=location,
            source=self.name,
            details=details,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
