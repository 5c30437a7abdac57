"""CLI commands for aas-ci-lint.

Provides command-line interface using Typer:
- aas-ci-lint lint: Validate AAS files and report findings
- aas-ci-lint version: Print the tool version

Usage:
    aas-ci-lint --help
    aas-ci-lint lint "**/*.aasx" --sarif results.sarif
    aas-ci-lint lint models/ --fail-on error,warning
"""

import typer

from aas_ci_lint import __version__
from aas_ci_lint.cli.lint_cmd import lint

# Main CLI application
app = typer.Typer(
    name="aas-ci-lint",
    help="aas-ci-lint: Validate Asset Administration Shell files in CI",
    no_args_is_help=True,
)

app.command(name="lint")(lint)


@app.command()
def version() -> None:
    """Print the aas-ci-lint version."""
    typer.echo(__version__)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
