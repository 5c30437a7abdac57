"""CLI command for linting AAS files.

Usage:
    aas-ci-lint lint
    aas-ci-lint lint "models/**/*.aasx" --sarif results.sarif
    aas-ci-lint lint --fail-on error,warning --template-dir ./submodel-templates

Exit codes: 0 = no failing findings, 1 = findings at a --fail-on severity,
2 = execution error.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from aas_ci_lint.core.model import LintConfig, LintResult, Severity

if TYPE_CHECKING:
    from aas_ci_lint.engines.base import ValidationEngine

DEFAULT_PATTERNS = ["**/*.aasx", "**/*.json"]

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_severities(value: str) -> list[Severity]:
    """Parse a comma-separated severity list such as "error,warning"."""
    severities: list[Severity] = []
    for part in _split_csv(value):
        try:
            severities.append(Severity(part.lower()))
        except ValueError:
            allowed = ", ".join(s.value for s in Severity)
            raise typer.BadParameter(
                f"Unknown severity {part!r} (expected: {allowed})", param_hint="--fail-on"
            ) from None
    return severities


def lint(
    paths: list[str] = typer.Argument(
        None,
        help="File paths or glob patterns to validate (default: **/*.aasx **/*.json)",
        show_default=False,
    ),
    sarif: Path | None = typer.Option(None, "--sarif", help="Write SARIF output to file"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
    fail_on: str = typer.Option(
        "error", "--fail-on", help="Fail on these severities (comma-separated)"
    ),
    exclude: str | None = typer.Option(
        None, "--exclude", help="Exclude patterns (comma-separated)"
    ),
    base_path: Path | None = typer.Option(
        None, "--base-path", help="Base directory for resolving paths (default: cwd)"
    ),
    template_version: str | None = typer.Option(
        None, "--template-version", help="IDTA template version to validate against"
    ),
    template_dir: str | None = typer.Option(
        None, "--template-dir", help="Directory containing IDTA template JSON files"
    ),
    template: bool = typer.Option(
        True, "--template/--no-template", help="Enable template conformance checks"
    ),
    color: bool = typer.Option(True, "--color/--no-color", help="Colored output"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (default: WARNING)"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON"),
) -> None:
    """Validate AAS files and report findings.

    Runs the official AAS Test Engines and IDTA template conformance checks
    on every discovered AASX, JSON and XML file.
    """
    from rich.console import Console
    from rich.markup import escape

    from aas_ci_lint.cli.output import print_findings
    from aas_ci_lint.config import get_settings
    from aas_ci_lint.observability.logging import configure_logging

    settings = get_settings()
    try:
        configure_logging(
            json_format=log_json or settings.log_format == "json",
            level=log_level or settings.log_level,
            use_colors=color,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e

    err_console = Console(stderr=True, no_color=not color, highlight=False)

    config = LintConfig(
        paths=paths or list(DEFAULT_PATTERNS),
        exclude=_split_csv(exclude) or None,
        fail_on=parse_severities(fail_on),
        base_path=str((base_path or Path.cwd()).absolute()),
        template_version=template_version,
        template_dir=template_dir,
    )

    err_console.print("[blue]Discovering AAS files...[/blue]")
    try:
        result = asyncio.run(_run(config, template_dir=template_dir, use_template=template))
    except Exception as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=EXIT_ERROR) from e

    summary = result.summary
    err_console.print(
        f"[blue]Scanned {summary.files_scanned} file(s) in {result.metadata.duration_ms}ms[/blue]"
    )
    if not result.findings:
        err_console.print("[green]No issues found![/green]")
    else:
        err_console.print(
            f"[yellow]Found {summary.errors} error(s), {summary.warnings} warning(s), "
            f"{summary.notes} note(s)[/yellow]"
        )

    if json_output:
        typer.echo(result.to_json().decode("utf-8"))
    elif sarif is None:
        console = Console(no_color=not color, highlight=False, soft_wrap=True)
        print_findings(result, base_path=config.base_path or str(Path.cwd()), console=console)

    if sarif is not None:
        _write_sarif(result, sarif, config.base_path)
        err_console.print(f"[blue]SARIF written to {escape(str(sarif))}[/blue]")

    raise typer.Exit(code=EXIT_FINDINGS if result.has_failures() else EXIT_OK)


def build_engines(template_dir: str | None, use_template: bool) -> list[ValidationEngine]:
    """Engines run by the CLI, in registration order."""
    from aas_ci_lint.engines import AasTestEnginesEngine, TemplateConformanceEngine

    engines: list[ValidationEngine] = [AasTestEnginesEngine()]
    if use_template:
        engines.append(TemplateConformanceEngine(template_dir=template_dir))
    return engines


async def _run(config: LintConfig, template_dir: str | None, use_template: bool) -> LintResult:
    from aas_ci_lint.orchestrator import Orchestrator

    orchestrator = Orchestrator(build_engines(template_dir, use_template))
    return await orchestrator.lint(config)


def _write_sarif(result: LintResult, target: Path, base_path: str | None) -> None:
    from aas_ci_lint.sarif import generate_sarif

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(generate_sarif(result, base_path=base_path), encoding="utf-8")
