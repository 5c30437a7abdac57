"""AAS Test Engines (admin-shell-io) wrapper engine."""

from aas_ci_lint.engines.test_engines.engine import AasTestEnginesEngine
from aas_ci_lint.engines.test_engines.output import TestEngineOutput, Violation

__all__ = ["AasTestEnginesEngine", "TestEngineOutput", "Violation"]
