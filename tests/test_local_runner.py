"""Tests for the local grading runner."""

import sys
import textwrap
from pathlib import Path

import pytest

from behavior_probe.config import TEST_REPORT_FILENAME
from behavior_probe.local_runner import LocalRunner, parse_junit_xml

JUNIT_REPORT = """<?xml version="1.0" encoding="utf-8"?>
<testsuites>
  <testsuite name="pytest" tests="4">
    <testcase classname="test_grading.TestCalc" name="test_add" time="0.012"/>
    <testcase classname="test_grading.TestCalc" name="test_divide" time="0.004">
      <failure message="Failed: Could not invoke the method 'divide'">Could not invoke the method 'divide' in the class 'Calc' because of an exception within the method: ZeroDivisionError: division by zero</failure>
    </testcase>
    <testcase classname="test_grading" name="test_setup" time="">
      <error message="fixture failed"/>
    </testcase>
    <testcase classname="test_grading" name="test_skipped" time="0">
      <skipped message="later"/>
    </testcase>
  </testsuite>
</testsuites>
"""


class TestParseJunitXml:
    def test_parses_outcomes(self, tmp_path):
        report = tmp_path / TEST_REPORT_FILENAME
        report.write_text(JUNIT_REPORT, encoding="utf-8")

        results = parse_junit_xml(report)

        assert [(r.test_name, r.passed) for r in results] == [
            ("test_add", True),
            ("test_divide", False),
            ("test_setup", False),
        ]
        assert results[0].duration_seconds == pytest.approx(0.012)
        assert results[1].error_message.endswith("ZeroDivisionError: division by zero")
        assert results[2].error_message == "fixture failed"
        assert results[2].duration_seconds == 0.0

    def test_missing_report(self, tmp_path):
        assert parse_junit_xml(tmp_path / "missing.xml") == []

    def test_malformed_report(self, tmp_path):
        report = tmp_path / TEST_REPORT_FILENAME
        report.write_text("<testsuites><testcase", encoding="utf-8")
        assert parse_junit_xml(report) == []


class TestLocalRunner:
    def test_command_loads_probe_plugin(self, tmp_path):
        runner = LocalRunner(tmp_path / "tests", probe_config=tmp_path / "probe.yml", python_executable="python3")

        cmd = runner.build_command(tmp_path / "alice")

        assert cmd[:3] == ["python3", "-m", "pytest"]
        assert cmd[3] == str((tmp_path / "tests").resolve())
        assert ["-p", "behavior_probe.plugin"] == cmd[4:6]
        assert f"--junitxml={TEST_REPORT_FILENAME}" in cmd
        assert f"--submission={(tmp_path / 'alice').resolve()}" in cmd
        assert cmd[-1] == f"--probe-config={(tmp_path / 'probe.yml').resolve()}"

    def test_defaults_to_current_interpreter(self, tmp_path):
        assert LocalRunner(tmp_path).python_executable == sys.executable

    def test_missing_submission(self, tmp_path):
        result = LocalRunner(tmp_path).run_submission(tmp_path / "ghost")
        assert not result.success
        assert "Submission path not found" in result.setup_log

    def test_missing_tests(self, tmp_path):
        (tmp_path / "alice").mkdir()
        result = LocalRunner(tmp_path / "no-tests").run_submission(tmp_path / "alice")
        assert not result.success
        assert "Grading tests not found" in result.setup_log


def _write_grading_project(root: Path) -> tuple[Path, Path]:
    tests_dir = root / "grading"
    tests_dir.mkdir()
    (tests_dir / "test_counter.py").write_text(
        textwrap.dedent(
            """
            from behavior_probe import BehaviorTest


            class TestCounter(BehaviorTest):
                def test_increment(self):
                    counter = self.instantiate("counter.Counter")
                    self.invoke_by_name(counter, "increment")
                    assert self.read_field(counter, "value") == 1

                def test_reset(self):
                    counter = self.instantiate("counter.Counter")
                    self.invoke_by_name(counter, "reset")
            """
        ),
        encoding="utf-8",
    )

    submission = root / "alice"
    submission.mkdir()
    (submission / "counter.py").write_text(
        textwrap.dedent(
            """
            class Counter:
                def __init__(self):
                    self.value = 0

                def increment(self):
                    self.value += 1
            """
        ),
        encoding="utf-8",
    )
    return tests_dir, submission


def test_runs_grading_suite_against_submission(tmp_path):
    tests_dir, submission = _write_grading_project(tmp_path)

    result = LocalRunner(tests_dir, timeout_seconds=60).run_submission(submission)

    assert result.exit_code == 1
    assert not result.success
    outcomes = {t.test_name: t for t in result.tests}
    assert outcomes["test_increment"].passed
    assert not outcomes["test_reset"].passed
    assert "Could not find the method 'reset' from the class Counter" in outcomes["test_reset"].error_message
    assert (submission / TEST_REPORT_FILENAME).exists()
