"""Global pytest configuration and fixtures.

Provides rule marker infrastructure for tracking which rule IDs are
covered by tests, plus builders for AAS environment files and packages.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any

import orjson
import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "rule(id): mark test with the rule ID it exercises")


def pytest_collection_modifyitems(items):
    """Extract rule markers into user_properties for coverage reporting."""
    for item in items:
        for marker in item.iter_markers(name="rule"):
            if marker.args:
                item.user_properties.append(("rule_id", marker.args[0]))


@pytest.fixture
def write_json():
    """Write a JSON document, creating parent directories."""

    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(data))
        return path

    return _write


@pytest.fixture
def make_aasx():
    """Build an AASX package from a mapping of archive path to content."""

    def _make(path: Path, entries: dict[str, Any]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("[Content_Types].xml", "<Types/>")
            for name, content in entries.items():
                if isinstance(content, (dict, list)):
                    content = orjson.dumps(content)
                zf.writestr(name, content)
        return path

    return _make
