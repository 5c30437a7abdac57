"""SARIF (Static Analysis Results Interchange Format) generator.

SARIF v2.1.0 is the interchange format understood by code scanning
platforms; uploaded results show up as alerts and inline annotations.

Reference: https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson

from aas_ci_lint.core.model import Finding, LintResult, Severity

SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/"
    "sarif-schema-2.1.0.json"
)
SARIF_VERSION = "2.1.0"
TOOL_NAME = "aas-ci-lint"
DEFAULT_INFORMATION_URI = "https://github.com/hadijannat/aas-ci-lint"

_LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.NOTE: "note",
}


def severity_to_level(severity: Severity) -> str:
    """Map a severity to a SARIF result level."""
    return _LEVELS[severity]


def fingerprint(finding: Finding) -> str:
    """Stable fingerprint for tracking a finding across commits."""
    location = finding.location
    anchor = location.json_pointer or (str(location.line) if location.line is not None else "")
    material = "::".join((finding.rule_id, anchor, finding.message[:100]))
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:16]


def extract_rules(findings: Iterable[Finding]) -> list[dict[str, Any]]:
    """Rule descriptors for the tool section, one per rule ID, sorted."""
    rules: dict[str, dict[str, Any]] = {}
    for finding in findings:
        if finding.rule_id in rules:
            continue
        rules[finding.rule_id] = {
            "id": finding.rule_id,
            "name": finding.rule_name,
            "shortDescription": {"text": finding.rule_name},
            "defaultConfiguration": {"level": severity_to_level(finding.severity)},
        }
    return [rules[rule_id] for rule_id in sorted(rules)]


def _artifact_uri(file_path: str, base_path: Path) -> str:
    path = Path(file_path)
    if path.is_absolute():
        path = Path(os.path.relpath(path, base_path))
    return path.as_posix()


def finding_to_result(finding: Finding, base_path: Path) -> dict[str, Any]:
    """Convert a finding to a SARIF result."""
    location = finding.location
    physical: dict[str, Any] = {
        "artifactLocation": {
            "uri": _artifact_uri(location.file_path, base_path),
            "uriBaseId": "%SRCROOT%",
        }
    }
    if location.line is not None:
        region: dict[str, Any] = {"startLine": location.line}
        if location.column is not None:
            region["startColumn"] = location.column
        physical["region"] = region

    sarif_location: dict[str, Any] = {"physicalLocation": physical}
    if location.json_pointer:
        sarif_location["logicalLocations"] = [{"fullyQualifiedName": location.json_pointer}]

    return {
        "ruleId": finding.rule_id,
        "level": severity_to_level(finding.severity),
        "message": {"text": finding.message},
        "locations": [sarif_location],
        "partialFingerprints": {"primaryLocationLineHash": fingerprint(finding)},
    }


def build_sarif_log(
    result: LintResult,
    base_path: str | Path | None = None,
    information_uri: str = DEFAULT_INFORMATION_URI,
) -> dict[str, Any]:
    """Build a SARIF log from a lint result.

    Args:
        result: The lint result to convert
        base_path: Artifact URIs are made relative to this directory;
            defaults to the run's base path, then the working directory
        information_uri: Homepage of the tool

    Returns:
        SARIF log as a dict
    """
    if base_path is None:
        base_path = result.metadata.config.base_path or Path.cwd()
    root = Path(base_path).absolute()

    return {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": result.metadata.version,
                        "informationUri": information_uri,
                        "rules": extract_rules(result.findings),
                    }
                },
                "results": [finding_to_result(f, root) for f in result.findings],
                "invocations": [
                    {
                        "executionSuccessful": True,
                        "startTimeUtc": result.metadata.start_time.isoformat(),
                    }
                ],
            }
        ],
    }


def generate_sarif(
    result: LintResult,
    base_path: str | Path | None = None,
    information_uri: str = DEFAULT_INFORMATION_URI,
) -> str:
    """Generate a SARIF log as 2-space indented JSON."""
    log = build_sarif_log(result, base_path=base_path, information_uri=information_uri)
    return orjson.dumps(log, option=orjson.OPT_INDENT_2).decode("utf-8")
