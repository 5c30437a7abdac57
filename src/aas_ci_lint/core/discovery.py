"""File discovery for AAS content.

Finds the AAS files to validate from glob patterns, and unpacks AASX
packages for engines that need the environment document inside them.

Discovery is deterministic: results are deduplicated and sorted by
absolute path, because the orchestrator's stable sort builds on this
order.

Example:
    files = await discover_files(["**/*.aasx", "**/*.json"], base_path="/repo")
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
import re
import zipfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from aas_ci_lint.core.documents import safe_read_json
from aas_ci_lint.errors import DiscoveryError, PackageError

logger = logging.getLogger(__name__)

# AASX: OPC package; JSON/XML: serialized AAS environment (IDTA-01001 Part 2)
SUPPORTED_EXTENSIONS = frozenset({".aasx", ".json", ".xml"})

# An AAS environment has at least one of these top-level arrays
AAS_ENVIRONMENT_KEYS = ("assetAdministrationShells", "submodels", "conceptDescriptions")

# Excluded regardless of caller excludes
ALWAYS_EXCLUDED = ("**/node_modules/**", "**/.git/**")

# Canonical environment locations inside an unpacked AASX
AASX_ENVIRONMENT_CANDIDATES = (
    ("aasx", "aas-environment.json"),
    ("aasx", "aas-environment.xml"),
)

_GLOB_MAGIC = frozenset("*?[")


async def discover_files(
    patterns: Sequence[str],
    base_path: str | Path,
    exclude: Sequence[str] | None = None,
    follow_symlinks: bool = False,
) -> list[str]:
    """Discover AAS files matching the given patterns.

    Patterns may be relative to base_path or absolute, with or without
    wildcards. JSON files are only included when they look like an AAS
    environment; arbitrary JSON in a repository is expected and silently
    skipped. AASX and XML files are always included.

    Args:
        patterns: Glob patterns or file paths
        base_path: Directory that relative patterns resolve against
        exclude: Glob patterns to remove from the result
        follow_symlinks: Include files reached through symlinked directories

    Returns:
        Absolute file paths, deduplicated and sorted ascending

    Raises:
        DiscoveryError: If the base path is unusable or a pattern is invalid
    """
    base = Path(base_path).absolute()
    if not base.is_dir():
        raise DiscoveryError(f"Base path is not a readable directory: {base}")

    excludes = [*(exclude or []), *ALWAYS_EXCLUDED]

    candidates = await asyncio.to_thread(
        _expand_patterns, patterns, base, excludes, follow_symlinks
    )

    accepted: list[str] = []
    for path in sorted(candidates):
        if path.suffix.lower() == ".json":
            if await looks_like_aas_json(path):
                accepted.append(str(path))
            else:
                logger.debug(f"Skipping non-AAS JSON: {path}")
        else:
            accepted.append(str(path))

    logger.info(f"Discovered {len(accepted)} AAS file(s) under {base}")
    return sorted(accepted)


async def looks_like_aas_json(path: str | Path) -> bool:
    """Check whether a JSON file has the top-level shape of an AAS environment.

    This is a heuristic, not validation; validation is the engines' job.
    """
    data = await safe_read_json(path)
    if not isinstance(data, dict):
        return False
    return any(isinstance(data.get(key), list) for key in AAS_ENVIRONMENT_KEYS)


def _expand_patterns(
    patterns: Iterable[str],
    base: Path,
    excludes: Sequence[str],
    follow_symlinks: bool,
) -> set[Path]:
    found: set[Path] = set()
    for pattern in patterns:
        for path in _glob(pattern, base, follow_symlinks):
            if not path.is_file():
                continue
            if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                continue
            if is_excluded(path, base, excludes):
                continue
            if not follow_symlinks and _reached_through_symlink(path, base):
                continue
            found.add(path)
    return found


def _glob(pattern: str, base: Path, follow_symlinks: bool = False) -> list[Path]:
    if not pattern or not pattern.strip():
        raise DiscoveryError("Empty glob pattern", pattern)

    target = Path(pattern)
    if target.is_absolute():
        root = Path(target.anchor)
        relative = target.relative_to(root).as_posix()
    else:
        root = base
        relative = pattern

    if not any(ch in _GLOB_MAGIC for ch in relative):
        candidate = root / relative
        return [candidate] if candidate.exists() else []

    # pathlib's "**" never descends into symlinked directories
    if follow_symlinks:
        return _walk_glob(root, relative, pattern)

    try:
        return list(root.glob(relative))
    except (ValueError, NotImplementedError) as e:
        raise DiscoveryError(f"Invalid glob pattern {pattern!r}: {e}", pattern) from e
    except OSError as e:
        raise DiscoveryError(f"Failed to expand {pattern!r}: {e}", pattern) from e


def _walk_glob(root: Path, relative: str, pattern: str) -> list[Path]:
    matcher = compile_glob(relative)

    # Start below the literal directory prefix of the pattern
    prefix: list[str] = []
    for segment in _glob_segments(relative)[:-1]:
        if any(ch in _GLOB_MAGIC for ch in segment):
            break
        prefix.append(segment)
    start = root.joinpath(*prefix)
    if not start.is_dir():
        return []

    matches: list[Path] = []
    ancestors: dict[str, frozenset[str]] = {}
    for dirpath, dirnames, filenames in os.walk(start, followlinks=True):
        real = os.path.realpath(dirpath)
        seen = ancestors.pop(dirpath, frozenset())
        if real in seen:
            logger.debug(f"Not following symlink loop at {dirpath} ({pattern})")
            dirnames[:] = []
            continue
        chain = seen | {real}
        for name in dirnames:
            ancestors[os.path.join(dirpath, name)] = chain

        for name in filenames:
            path = Path(dirpath, name)
            if matcher.fullmatch(path.relative_to(root).as_posix()):
                matches.append(path)
    return matches


def _glob_segments(pattern: str) -> list[str]:
    return [s for s in pattern.split("/") if s not in ("", ".")]


def _translate_segment(segment: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(segment):
        ch = segment[i]
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[" and (end := segment.find("]", i + 2)) != -1:
            body = segment[i + 1 : end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^/" + body[1:]
            out.append(f"[{body}]")
            i = end
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob into a regex over "/"-separated relative paths.

    "*", "?" and "[...]" never match "/", so they stay inside one path
    segment. A "**" segment spans any number of directories, including
    none. Leading slashes are ignored: patterns are always relative.

    Raises:
        DiscoveryError: If a character class is malformed
    """
    segments = _glob_segments(pattern)
    parts: list[str] = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == "**":
            parts.append(".*" if last else "(?:.*/)?")
        else:
            parts.append(_translate_segment(segment) + ("" if last else "/"))
    try:
        return re.compile("".join(parts))
    except re.error as e:
        raise DiscoveryError(f"Invalid glob pattern {pattern!r}: {e}", pattern) from e


def is_excluded(path: Path, base: Path, patterns: Sequence[str]) -> bool:
    """Match a path against exclude globs.

    Patterns are matched against the path relative to base, segment by
    segment: "*.json" only excludes top-level JSON files, "**/*.json"
    excludes them at any depth, and "**/dir/**" also excludes a top-level
    "dir".
    """
    try:
        relative = path.relative_to(base).as_posix()
    except ValueError:
        relative = path.as_posix().lstrip("/")
    return any(compile_glob(pattern).fullmatch(relative) for pattern in patterns)


def _reached_through_symlink(path: Path, base: Path) -> bool:
    try:
        parts = path.relative_to(base).parts[:-1]
    except ValueError:
        return False
    current = base
    for part in parts:
        current = current / part
        if current.is_symlink():
            return True
    return False


async def unpack_aasx(aasx_path: str | Path, target_dir: str | Path) -> Path:
    """Extract an AASX package into target_dir/<package stem>.

    Args:
        aasx_path: Path to the AASX file
        target_dir: Directory to extract into

    Returns:
        Path to the extracted directory

    Raises:
        PackageError: If the file is not a valid ZIP archive
    """
    aasx_path = Path(aasx_path)
    extract_path = Path(target_dir) / aasx_path.stem

    def _extract() -> None:
        extract_path.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(aasx_path, "r") as zf:
                zf.extractall(extract_path)
        except zipfile.BadZipFile as e:
            raise PackageError(str(aasx_path), str(e)) from e

    await asyncio.to_thread(_extract)
    logger.debug(f"Unpacked {aasx_path} to {extract_path}")
    return extract_path


async def find_aas_environment_in_aasx(unpacked_dir: str | Path) -> Path | None:
    """Find the AAS environment document inside an unpacked AASX.

    Checks the canonical locations first (aasx/aas-environment.json, then
    .xml), then falls back to the first JSON or XML file in aasx/.

    Returns:
        Path to the environment file, or None if not found
    """
    root = Path(unpacked_dir)

    def _find() -> Path | None:
        for parts in AASX_ENVIRONMENT_CANDIDATES:
            candidate = root.joinpath(*parts)
            if candidate.is_file():
                return candidate

        aasx_dir = root / "aasx"
        if not aasx_dir.is_dir():
            return None
        for entry in sorted(aasx_dir.iterdir()):
            if entry.is_file() and entry.suffix.lower() in (".json", ".xml"):
                return entry
        return None

    return await asyncio.to_thread(_find)
