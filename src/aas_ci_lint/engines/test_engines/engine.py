"""Wrapper for the official AAS Test Engines.

Invokes the aas_test_engines CLI once per file and converts its output to
findings. The test engines are the source of truth for AAS metamodel
compliance; other engines only supplement them.

Requires `aas_test_engines` on PATH (pip install aas-test-engines).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from pathlib import Path

from aas_ci_lint.config import Settings, get_settings
from aas_ci_lint.core.model import Finding, LintConfig, Location, Severity
from aas_ci_lint.engines.base import ValidationEngine
from aas_ci_lint.engines.test_engines.output import TestEngineOutput, interpret_output
from aas_ci_lint.errors import EngineError

logger = logging.getLogger(__name__)

_SEVERITY_MAP = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "info": Severity.NOTE,
}

# Message keyword categories, checked in order
_RULE_CATEGORIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("required", "mandatory"), "constraint/required-property"),
    (("type", "expected"), "constraint/type-mismatch"),
    (("semantic", "reference"), "semantic/invalid-reference"),
    (("structure", "invalid"), "structure/invalid-structure"),
)
GENERIC_RULE = "validation/generic"

_SENTENCE_END_RE = re.compile(r"[.!?]")
MAX_RULE_NAME_LENGTH = 50


def input_format_for(file_path: str) -> str:
    """Input format flag for the test engines, from the file extension."""
    suffix = Path(file_path).suffix.lower()
    if suffix == ".xml":
        return "xml"
    if suffix == ".aasx":
        return "aasx"
    return "json"


def map_severity(level: str | None) -> Severity:
    """Map a test engines level to a severity; unlabeled means error."""
    return _SEVERITY_MAP.get((level or "").lower(), Severity.ERROR)


def rule_code_for(message: str) -> str:
    """Derive a stable rule code from a violation message.

    The test engines do not report rule IDs, so violations are grouped by
    keywords in the message.
    """
    lower = message.lower()
    for keywords, code in _RULE_CATEGORIES:
        if any(keyword in lower for keyword in keywords):
            return code
    return GENERIC_RULE


def rule_name_for(message: str) -> str:
    """Short rule name: the first sentence, truncated."""
    first_sentence = _SENTENCE_END_RE.split(message, maxsplit=1)[0]
    if len(first_sentence) <= MAX_RULE_NAME_LENGTH:
        return first_sentence
    return first_sentence[: MAX_RULE_NAME_LENGTH - 3] + "..."


class AasTestEnginesEngine(ValidationEngine):
    """Runs aas_test_engines check_file on AASX, JSON and XML files."""

    name = "aas-test-engines"
    description = "Official AAS Test Engines (admin-shell-io)"

    def __init__(
        self,
        executable_path: str | None = None,
        timeout: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            executable_path: aas_test_engines executable; defaults to the
                AAS_CI_LINT_TEST_ENGINES_EXECUTABLE setting
            timeout: Seconds before the subprocess is killed; defaults to
                the AAS_CI_LINT_TEST_ENGINES_TIMEOUT setting
        """
        settings = settings or get_settings()
        self.executable_path = executable_path or settings.test_engines_executable
        self.timeout = timeout if timeout is not None else settings.test_engines_timeout

    async def validate(self, file_path: str, config: LintConfig) -> list[Finding]:
        output = await self.invoke(file_path)
        return self.to_findings(output, file_path)

    async def invoke(self, file_path: str) -> TestEngineOutput:
        """Run the test engines on a file and parse the output.

        Raises:
            EngineError: If the executable cannot be started or times out
        """
        args = ["check_file", file_path, "--format", input_format_for(file_path)]
        logger.debug(f"Running {self.executable_path} {' '.join(args)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                self.executable_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineError(
                self.name,
                f"Failed to invoke {self.executable_path}: {e}. "
                "Is it installed? Run: pip install aas-test-engines",
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise EngineError(
                self.name, f"{self.executable_path} timed out after {self.timeout:g}s"
            ) from e

        return interpret_output(
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
            proc.returncode,
        )

    def to_findings(self, output: TestEngineOutput, file_path: str) -> list[Finding]:
        """Convert parsed test engines output into findings."""
        if output.valid or not output.violations:
            return []

        return [
            self.finding(
                rule_code_for(violation.message),
                rule_name_for(violation.message),
                map_severity(violation.level),
                violation.message,
                Location(file_path=file_path, json_pointer=violation.path),
                details={"violationIndex": index},
            )
            for index, violation in enumerate(output.violations)
        ]
