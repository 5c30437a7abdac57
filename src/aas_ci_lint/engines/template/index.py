"""Index of IDTA submodel templates by semantic ID."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from aas_ci_lint.core.documents import safe_read_json
from aas_ci_lint.engines.template.walker import collect_template_paths, get_semantic_id_value

logger = logging.getLogger(__name__)

LATEST_VERSION = "latest"


@dataclass
class TemplateSpec:
    """Required elements of one submodel template.

    Attributes:
        id: Semantic ID of the template submodel
        name: idShort of the template submodel
        required_id_short_paths: Required element paths by idShort
        required_semantic_paths: Required element paths by semantic ID
        source_path: Template file the submodel was read from
    """

    id: str
    name: str | None
    required_id_short_paths: set[str] = field(default_factory=set)
    required_semantic_paths: set[str] = field(default_factory=set)
    source_path: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass
class TemplateIndex:
    """Templates loaded from one directory for one version pin.

    The first template file defining a semantic ID wins; files are read in
    sorted path order so the winner does not depend on directory listing
    order.
    """

    template_dir: str
    template_version: str | None
    templates: dict[str, TemplateSpec] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.templates)

    def __contains__(self, semantic_id: object) -> bool:
        return semantic_id in self.templates

    def get(self, semantic_id: str | None) -> TemplateSpec | None:
        if not semantic_id:
            return None
        return self.templates.get(semantic_id)

    def is_for(self, template_dir: str, template_version: str | None) -> bool:
        """Check the cache key of this index."""
        return self.template_dir == template_dir and self.template_version == template_version

    @classmethod
    async def load(
        cls, template_dir: str | Path, template_version: str | None = None
    ) -> TemplateIndex:
        """Index every template JSON file under a directory.

        Args:
            template_dir: Root of the template tree
            template_version: Only read files whose path contains this
                version string; None or "latest" reads all files

        Returns:
            TemplateIndex; unreadable files are skipped
        """
        index = cls(template_dir=str(template_dir), template_version=template_version)
        version_filter = (
            template_version if template_version and template_version != LATEST_VERSION else None
        )

        root = Path(template_dir)
        files = await asyncio.to_thread(
            lambda: sorted(p for p in root.rglob("*.json") if p.is_file())
        )

        for file_path in files:
            source = str(file_path)
            if version_filter and version_filter not in source:
                continue

            data = await safe_read_json(file_path)
            if not isinstance(data, dict) or not isinstance(data.get("submodels"), list):
                continue

            for submodel in data["submodels"]:
                if isinstance(submodel, dict):
                    index.add_submodel(submodel, source)

        logger.info(f"Indexed {len(index)} template(s) from {template_dir}")
        return index

    def add_submodel(self, submodel: dict, source_path: str) -> TemplateSpec | None:
        """Index one template submodel unless its semantic ID is known."""
        template_id = get_semantic_id_value(submodel.get("semanticId"))
        if not template_id or template_id in self.templates:
            return None

        required = collect_template_paths(submodel.get("submodelElements"))
        id_short = submodel.get("idShort")
        spec = TemplateSpec(
            id=template_id,
            name=id_short if isinstance(id_short, str) and id_short else None,
            required_id_short_paths=required.id_short,
            required_semantic_paths=required.semantic,
            source_path=source_path,
        )
        self.templates[template_id] = spec
        return spec
