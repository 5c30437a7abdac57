"""JSON document loading for AAS environments and templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import aiofiles  # type: ignore[import-untyped]
import orjson

logger = logging.getLogger(__name__)


async def read_json(path: str | Path) -> Any:
    """Read and parse a JSON file.

    Raises:
        OSError: If the file cannot be read
        orjson.JSONDecodeError: If the content is not valid JSON
    """
    async with aiofiles.open(path, "rb") as f:
        content = await f.read()
    return orjson.loads(content)


async def safe_read_json(path: str | Path) -> Any | None:
    """Read a JSON file, returning None if it is unreadable or malformed."""
    try:
        return await read_json(path)
    except (OSError, orjson.JSONDecodeError) as e:
        logger.debug(f"Skipping unreadable JSON {path}: {e}")
        return None
