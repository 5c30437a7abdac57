"""IDTA template conformance engine.

Loads submodel templates from a local directory and checks that submodels
with a matching semantic ID contain every element the template requires.

The engine is best-effort and quiet: without a template directory it
returns no findings, except for a single note when template checking was
explicitly requested but no directory could be resolved.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aas_ci_lint.config import Settings, get_settings
from aas_ci_lint.core.discovery import find_aas_environment_in_aasx, unpack_aasx
from aas_ci_lint.core.documents import safe_read_json
from aas_ci_lint.core.model import Finding, LintConfig, Location, Severity
from aas_ci_lint.engines.base import ValidationEngine
from aas_ci_lint.engines.template.index import TemplateIndex, TemplateSpec
from aas_ci_lint.engines.template.paths import resolve_template_dir
from aas_ci_lint.engines.template.walker import (
    PathSets,
    collect_instance_paths,
    get_semantic_id_value,
)

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "aas-ci-lint-"


@dataclass
class LoadedEnvironment:
    """A parsed AAS environment and, for packages, its path in the archive."""

    data: dict[str, Any]
    internal_path: str | None = None


class TemplateConformanceEngine(ValidationEngine):
    """Validates submodels against IDTA submodel templates."""

    name = "template-conformance"
    description = "IDTA submodel template conformance (best-effort)"

    def __init__(
        self,
        template_dir: str | Path | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            template_dir: Template directory; overrides the lint config and
                the AAS_CI_LINT_TEMPLATE_DIR environment variable
            settings: Settings to use instead of reading the environment
        """
        self.template_dir = str(template_dir) if template_dir else None
        self._settings = settings
        self._index: TemplateIndex | None = None
        self._index_lock = asyncio.Lock()
        self._warned_missing_templates = False

    async def validate(self, file_path: str, config: LintConfig) -> list[Finding]:
        settings = self._settings or get_settings()
        explicit_dir = self.template_dir or config.template_dir or settings.template_dir
        requested = bool(explicit_dir or config.template_version)

        template_dir = resolve_template_dir(explicit_dir, settings)
        if template_dir is None:
            if not requested or self._warned_missing_templates:
                return []
            self._warned_missing_templates = True
            return [
                self.finding(
                    "templates-not-found",
                    "Templates Not Found",
                    Severity.NOTE,
                    "Template validation skipped: no templates directory configured. "
                    "Set AAS_CI_LINT_TEMPLATE_DIR or use --template-dir to enable "
                    "template checks.",
                    Location(file_path=file_path),
                )
            ]

        index = await self._get_index(str(template_dir), config.template_version)
        if not index:
            return []

        environment = await load_environment(file_path)
        if environment is None:
            return []

        return self.check_environment(file_path, environment, index)

    async def _get_index(self, template_dir: str, template_version: str | None) -> TemplateIndex:
        """Return the cached index, rebuilding it when the cache key changes."""
        async with self._index_lock:
            if self._index is None or not self._index.is_for(template_dir, template_version):
                self._index = await TemplateIndex.load(template_dir, template_version)
            return self._index

    def check_environment(
        self,
        file_path: str,
        environment: LoadedEnvironment,
        index: TemplateIndex,
    ) -> list[Finding]:
        """Check every submodel of an environment against its template."""
        submodels = environment.data.get("submodels")
        if not isinstance(submodels, list):
            return []

        findings: list[Finding] = []
        for position, submodel in enumerate(submodels):
            if not isinstance(submodel, dict):
                continue

            template = index.get(get_semantic_id_value(submodel.get("semanticId")))
            if template is None:
                continue

            instance_paths = collect_instance_paths(submodel.get("submodelElements"))
            location = Location(
                file_path=file_path,
                internal_path=environment.internal_path,
                json_pointer=f"/submodels/{position}",
            )
            findings.extend(self._missing_elements(template, instance_paths, location))

        return findings

    def _missing_elements(
        self,
        template: TemplateSpec,
        instance_paths: PathSets,
        location: Location,
    ) -> list[Finding]:
        findings: list[Finding] = []
        required_paths = (
            *sorted(template.required_id_short_paths),
            *sorted(template.required_semantic_paths),
        )
        for required_path in required_paths:
            if required_path in instance_paths:
                continue
            findings.append(
                self.finding(
                    "missing-element",
                    "Missing Template Element",
                    Severity.ERROR,
                    f'Missing required template element "{required_path}" '
                    f"for template {template.display_name}.",
                    location,
                    details={
                        "templateId": template.id,
                        "templateName": template.name,
                        "expectedPath": required_path,
                        "templateSource": template.source_path,
                    },
                )
            )
        return findings


async def load_environment(file_path: str | Path) -> LoadedEnvironment | None:
    """Load the JSON environment of a file.

    JSON files are parsed directly. AASX packages are extracted to a scratch
    directory that is removed before returning. XML environments are not
    supported by template checks and yield None.

    Raises:
        PackageError: If an AASX file is not a valid archive
    """
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = await safe_read_json(path)
        return LoadedEnvironment(data=data) if isinstance(data, dict) else None

    if suffix == ".aasx":
        scratch_dir = await asyncio.to_thread(tempfile.mkdtemp, prefix=SCRATCH_PREFIX)
        try:
            unpacked_dir = await unpack_aasx(path, scratch_dir)
            env_path = await find_aas_environment_in_aasx(unpacked_dir)
            if env_path is None or env_path.suffix.lower() != ".json":
                logger.debug(f"No JSON environment found in {path}")
                return None
            data = await safe_read_json(env_path)
            if not isinstance(data, dict):
                return None
            internal_path = env_path.relative_to(unpacked_dir).as_posix()
            return LoadedEnvironment(data=data, internal_path=internal_path)
        finally:
            await asyncio.to_thread(shutil.rmtree, scratch_dir, ignore_errors=True)

    return None
