"""Tests for the AAS Test Engines wrapper."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from aas_ci_lint.config import Settings
from aas_ci_lint.core.model import LintConfig, Severity
from aas_ci_lint.engines.test_engines import AasTestEnginesEngine, TestEngineOutput, Violation
from aas_ci_lint.engines.test_engines.engine import (
    GENERIC_RULE,
    input_format_for,
    map_severity,
    rule_code_for,
    rule_name_for,
)
from aas_ci_lint.errors import EngineError

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script executable")


@pytest.fixture
def fake_executable(tmp_path: Path):
    """Write a shell script standing in for aas_test_engines.

    The script records its arguments next to itself.
    """

    def _make(body: str) -> Path:
        script = tmp_path / "aas_test_engines"
        script.write_text(f'#!/bin/sh\nprintf "%s\\n" "$@" > "{tmp_path}/args.txt"\n{body}\n')
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        return script

    return _make


class TestHelpers:
    """Tests for output mapping helpers."""

    @pytest.mark.parametrize(
        "file_path,expected",
        [("a.xml", "xml"), ("a.AASX", "aasx"), ("a.json", "json"), ("a", "json")],
    )
    def test_input_format(self, file_path, expected):
        assert input_format_for(file_path) == expected

    @pytest.mark.parametrize(
        "level,expected",
        [
            ("error", Severity.ERROR),
            ("WARNING", Severity.WARNING),
            ("info", Severity.NOTE),
            ("fatal", Severity.ERROR),
            (None, Severity.ERROR),
        ],
    )
    def test_map_severity(self, level, expected):
        assert map_severity(level) == expected

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("Attribute idShort is required", "constraint/required-property"),
            ("Expected string, got int", "constraint/type-mismatch"),
            ("Dangling reference to submodel", "semantic/invalid-reference"),
            ("Invalid structure", "structure/invalid-structure"),
            ("Something happened", GENERIC_RULE),
        ],
    )
    def test_rule_code(self, message, expected):
        assert rule_code_for(message) == expected

    def test_rule_name_first_sentence(self):
        assert rule_name_for("Missing idShort. See constraint AASd-117.") == "Missing idShort"

    def test_rule_name_truncated(self):
        name = rule_name_for("x" * 80)

        assert len(name) == 50
        assert name.endswith("...")


class TestToFindings:
    """Tests for AasTestEnginesEngine.to_findings."""

    def test_valid_output(self):
        engine = AasTestEnginesEngine(settings=Settings())

        assert engine.to_findings(TestEngineOutput(valid=True), "/a.json") == []

    def test_violations(self):
        engine = AasTestEnginesEngine(settings=Settings())
        output = TestEngineOutput(
            valid=False,
            violations=[
                Violation("Value is required", path="/submodels/0"),
                Violation("Unknown thing", level="warning"),
            ],
        )

        findings = engine.to_findings(output, "/a.json")

        assert [f.rule_id for f in findings] == [
            "aas-test-engines/constraint/required-property",
            "aas-test-engines/validation/generic",
        ]
        assert findings[0].location.json_pointer == "/submodels/0"
        assert findings[1].severity == Severity.WARNING
        assert [f.details["violationIndex"] for f in findings] == [0, 1]
        assert {f.source for f in findings} == {"aas-test-engines"}


class TestInvoke:
    """Tests for running the external executable."""

    def test_settings_defaults(self):
        settings = Settings(test_engines_executable="/opt/ate", test_engines_timeout=5)

        engine = AasTestEnginesEngine(settings=settings)

        assert engine.executable_path == "/opt/ate"
        assert engine.timeout == 5

    @pytest.mark.asyncio
    @posix_only
    async def test_json_output(self, tmp_path: Path, fake_executable):
        script = fake_executable(
            """echo 'Checking...'
echo '{"valid": false, "violations": [{"message": "Missing idShort", "path": "/submodels/0"}]}'
exit 1"""
        )
        engine = AasTestEnginesEngine(executable_path=str(script), timeout=10)
        target = tmp_path / "model.aasx"
        target.write_bytes(b"")

        findings = await engine.validate(str(target), LintConfig(paths=[]))

        args = (tmp_path / "args.txt").read_text().splitlines()
        assert args == ["check_file", str(target), "--format", "aasx"]
        assert len(findings) == 1
        assert findings[0].message == "Missing idShort"
        assert findings[0].location.json_pointer == "/submodels/0"

    @pytest.mark.asyncio
    @posix_only
    async def test_clean_file(self, tmp_path: Path, fake_executable):
        script = fake_executable("echo 'Check'\nexit 0")
        engine = AasTestEnginesEngine(executable_path=str(script), timeout=10)

        assert await engine.validate(str(tmp_path / "a.json"), LintConfig(paths=[])) == []

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path: Path):
        engine = AasTestEnginesEngine(executable_path=str(tmp_path / "missing"), timeout=10)

        with pytest.raises(EngineError, match="pip install aas-test-engines"):
            await engine.invoke(str(tmp_path / "a.json"))

    @pytest.mark.asyncio
    @posix_only
    async def test_timeout(self, tmp_path: Path, fake_executable):
        script = fake_executable("exec sleep 5")
        engine = AasTestEnginesEngine(executable_path=str(script), timeout=0.2)

        with pytest.raises(EngineError, match="timed out after 0.2s") as exc_info:
            await engine.invoke(str(tmp_path / "a.json"))

        assert exc_info.value.engine == "aas-test-engines"
