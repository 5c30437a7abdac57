"""Parsing of aas_test_engines output.

The tool has no stable machine-readable output. Its combined stdout and
stderr are searched for an embedded JSON payload first; if none is found,
violation-like lines are scraped from the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import orjson

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

# Keywords that mark a text line as a violation
_VIOLATION_KEYWORDS = ("not allowed", "missing", "invalid")

MESSAGE_FIELDS = ("message", "msg", "description")
LEVEL_FIELDS = ("level", "severity")
PATH_FIELDS = ("path", "pointer", "jsonPointer")


@dataclass
class Violation:
    """A single violation reported by the test engines."""

    message: str
    level: str = "error"
    path: str | None = None


@dataclass
class TestEngineOutput:
    """Normalized result of one aas_test_engines invocation."""

    __test__ = False  # Not a pytest test class

    valid: bool
    violations: list[Violation] = field(default_factory=list)


def strip_ansi(text: str) -> str:
    """Remove terminal color codes."""
    return _ANSI_RE.sub("", text)


def _first(data: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def normalize_violation(raw: Any) -> Violation | None:
    """Normalize one violation from any of the known field aliases."""
    if isinstance(raw, str):
        return Violation(message=raw) if raw else None
    if not isinstance(raw, dict):
        return None

    message = _first(raw, MESSAGE_FIELDS)
    if not isinstance(message, str) or not message:
        return None

    level = _first(raw, LEVEL_FIELDS)
    path = _first(raw, PATH_FIELDS)
    return Violation(
        message=message,
        level=str(level) if level is not None else "error",
        path=path if isinstance(path, str) and path else None,
    )


def normalize_violations(parsed: Any) -> list[Violation] | None:
    """Extract violations from a recognized payload shape.

    Recognized shapes: {"violations": [...]}, {"errors": [...]} and a bare
    array. Returns None for anything else.
    """
    if isinstance(parsed, dict):
        raw = parsed.get("violations")
        if not isinstance(raw, list):
            raw = parsed.get("errors")
        if not isinstance(raw, list):
            return None
    elif isinstance(parsed, list):
        raw = parsed
    else:
        return None

    violations = [normalize_violation(v) for v in raw]
    return [v for v in violations if v is not None]


def _parse_bounded(output: str, opening: str, closing: str) -> TestEngineOutput | None:
    start = output.find(opening)
    end = output.rfind(closing)
    if start == -1 or end == -1 or end <= start:
        return None

    try:
        parsed = orjson.loads(output[start : end + 1])
    except orjson.JSONDecodeError:
        return None

    violations = normalize_violations(parsed)
    if violations is None:
        return None

    valid = parsed.get("valid") if isinstance(parsed, dict) else None
    if not isinstance(valid, bool):
        valid = not violations
    return TestEngineOutput(valid=valid, violations=violations)


def parse_json_output(output: str) -> TestEngineOutput | None:
    """Find a JSON payload embedded in tool output.

    The object between the first "{" and the last "}" is tried first, then
    the array between the first "[" and the last "]". An array only counts
    when it yields violations: bracketed indices in text output such as
    "submodels[0]" parse as JSON arrays too.
    """
    result = _parse_bounded(output, "{", "}")
    if result is not None:
        return result

    result = _parse_bounded(output, "[", "]")
    if result is None or not result.violations:
        return None
    return result


def parse_text_output(output: str) -> list[Violation]:
    """Scrape violation lines from plain-text output.

    Lines with a path marker ("@") or a violation keyword are kept; blank
    lines and section headers ("Check ...", "Skipped ...") are dropped.
    """
    violations: list[Violation] = []
    for line in strip_ansi(output).splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed == "Check" or trimmed.startswith(("Check ", "Skipped")):
            continue
        lower = trimmed.lower()
        if "@" in trimmed or any(keyword in lower for keyword in _VIOLATION_KEYWORDS):
            violations.append(Violation(message=trimmed))
    return violations


def interpret_output(stdout: str, stderr: str, exit_code: int | None) -> TestEngineOutput:
    """Turn raw process output into a normalized result.

    The exit code is only used when neither parser recovers violations.
    """
    combined = f"{stdout}\n{stderr}"
    for candidate in (combined, stdout, stderr):
        parsed = parse_json_output(candidate)
        if parsed is not None:
            return parsed

    violations = parse_text_output(combined)
    return TestEngineOutput(valid=exit_code == 0 and not violations, violations=violations)
