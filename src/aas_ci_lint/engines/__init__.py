"""Validation engines.

Provides:
- ValidationEngine: the interface every engine implements
- AasTestEnginesEngine: metamodel compliance via the official AAS Test Engines
- TemplateConformanceEngine: IDTA submodel template conformance
"""

from aas_ci_lint.engines.base import ValidationEngine
from aas_ci_lint.engines.template import TemplateConformanceEngine
from aas_ci_lint.engines.test_engines import AasTestEnginesEngine

__all__ = [
    "ValidationEngine",
    "AasTestEnginesEngine",
    "TemplateConformanceEngine",
]
