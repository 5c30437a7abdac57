"""Main entry point for the aas-ci-lint CLI.

Usage:
    python -m aas_ci_lint --help
    aas-ci-lint --help  # If installed via pip/uv
"""

from aas_ci_lint.cli import main

if __name__ == "__main__":
    main()
