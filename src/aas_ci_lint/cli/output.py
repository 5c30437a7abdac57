"""Human-readable rendering of lint results."""

from __future__ import annotations

import os
from itertools import groupby

from rich.console import Console
from rich.markup import escape

from aas_ci_lint.core.model import Finding, LintResult, Severity

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.NOTE: "blue",
}

LOCATION_WIDTH = 20


def format_location(finding: Finding) -> str:
    """line:column when known, else the JSON pointer, else "-"."""
    location = finding.location
    if location.line is not None:
        return f"{location.line}:{location.column or 1}"
    return location.json_pointer or "-"


def _relative(file_path: str, base_path: str) -> str:
    try:
        return os.path.relpath(file_path, base_path)
    except ValueError:  # Different drive on Windows
        return file_path


def print_findings(result: LintResult, base_path: str, console: Console) -> None:
    """Print findings grouped by file.

    Output format:
        models/pump.aasx
          /submodels/0         error    Missing required template element "..."
                               template-conformance/missing-element
    """
    # Findings are already sorted by file, so groupby yields one group per file
    for file_path, file_findings in groupby(result.findings, key=lambda f: f.location.file_path):
        console.print()
        console.print(f"[underline]{escape(_relative(file_path, base_path))}[/underline]")

        for finding in file_findings:
            style = SEVERITY_STYLES[finding.severity]
            location = format_location(finding).ljust(LOCATION_WIDTH)
            console.print(
                f"  [dim]{escape(location)}[/dim] "
                f"[{style}]{finding.severity.value:<8}[/{style}] {escape(finding.message)}"
            )
            console.print(f"  {' ' * LOCATION_WIDTH} [dim]{escape(finding.rule_id)}[/dim]")

    console.print()
