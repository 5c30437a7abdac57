"""Template directory locations."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from aas_ci_lint.config import Settings

APP_DIR_NAME = "aas-ci-lint"
TEMPLATE_REPO_DIR_NAME = "submodel-templates"
PUBLISHED_DIR_NAME = "published"


def get_cache_root(settings: Settings | None = None) -> Path:
    """Platform cache directory for aas-ci-lint.

    AAS_CI_LINT_CACHE_DIR overrides the platform default.
    """
    if settings is not None and settings.cache_dir:
        return Path(settings.cache_dir)

    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    elif sys.platform == "darwin":
        base = str(Path.home() / "Library" / "Caches")
    else:
        base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / APP_DIR_NAME


def get_default_template_repo_dir(settings: Settings | None = None) -> Path:
    """Where a checkout of the IDTA submodel-templates repository is cached."""
    return get_cache_root(settings) / TEMPLATE_REPO_DIR_NAME


def get_default_template_dir(settings: Settings | None = None) -> Path:
    """The published templates folder inside the cached checkout."""
    return get_default_template_repo_dir(settings) / PUBLISHED_DIR_NAME


def resolve_template_root(path: Path) -> Path | None:
    """Prefer the published subdirectory of a full repository checkout."""
    if not path.is_dir():
        return None
    published = path / PUBLISHED_DIR_NAME
    if published.is_dir():
        return published
    return path


def resolve_template_dir(
    explicit: str | Path | None, settings: Settings | None = None
) -> Path | None:
    """Resolve the template directory for a run.

    Args:
        explicit: Directory from the engine option, the lint config or the
            environment, in that precedence; relative paths resolve
            against the working directory
        settings: Settings providing the cache root override

    Returns:
        An existing directory, or None when template checks should be skipped
    """
    if explicit:
        path = Path(explicit)
        if not path.is_absolute():
            path = Path.cwd() / path
        return resolve_template_root(path)

    default_dir = get_default_template_dir(settings)
    return default_dir if default_dir.is_dir() else None
