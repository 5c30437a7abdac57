"""SARIF v2.1.0 output for lint results."""

from aas_ci_lint.sarif.generator import build_sarif_log, generate_sarif

__all__ = ["build_sarif_log", "generate_sarif"]
