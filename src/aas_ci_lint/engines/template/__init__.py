"""IDTA submodel template conformance engine."""

from aas_ci_lint.engines.template.engine import TemplateConformanceEngine
from aas_ci_lint.engines.template.index import TemplateIndex, TemplateSpec
from aas_ci_lint.engines.template.paths import get_default_template_dir

__all__ = [
    "TemplateConformanceEngine",
    "TemplateIndex",
    "TemplateSpec",
    "get_default_template_dir",
]
