"""
Local execution runner for grading suites.

Runs the grading test suite with pytest against one submission at a time,
with the probe plugin loaded, and captures the results.
"""

import logging
import os
import subprocess
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

from .config import (
    EXECUTION_TIMEOUT_SECONDS,
    PYTEST_ARGS,
    TEST_REPORT_FILENAME,
)
from .models import ExecutionResult, TestResult

logger = logging.getLogger(__name__)


class LocalRunner:
    """
    Runs a grading suite against submissions on the host machine.

    Uses subprocess to execute pytest and captures results.
    """

    def __init__(
        self,
        tests_dir: Path,
        timeout_seconds: int = EXECUTION_TIMEOUT_SECONDS,
        probe_config: Path | None = None,
        python_executable: str | None = None,
    ) -> None:
        """
        Initialize the Local runner.

        Args:
            tests_dir: Path to the grading test suite.
            timeout_seconds: Maximum execution time per student.
            probe_config: Optional probe YAML configuration passed to the plugin.
            python_executable: Interpreter to run pytest with; defaults to the current one.
        """
        self.tests_dir = tests_dir
        self.timeout_seconds = timeout_seconds
        self.probe_config = probe_config
        self.python_executable = python_executable or sys.executable

    def build_command(self, submission_path: Path) -> list[str]:
        """
        Build the pytest command line for a submission.

        Args:
            submission_path: Path to the student's submission directory.

        Returns:
            The argument vector.
        """
        cmd = [
            self.python_executable, "-m", "pytest",
            str(self.tests_dir.resolve()),
            *PYTEST_ARGS,
            f"--submission={submission_path.resolve()}",
        ]
        if self.probe_config is not None:
            cmd.append(f"--probe-config={self.probe_config.resolve()}")
        return cmd

    def run_submission(self, submission_path: Path) -> ExecutionResult:
        """
        Run the grading suite against a submission.

        Args:
            submission_path: Path to the student's submission directory.

        Returns:
            ExecutionResult containing logs, test results, and exit codes.
        """
        # Validate submission
        if not submission_path.exists():
            return ExecutionResult(
                success=False,
                setup_log=f"Submission path not found: {submission_path}",
                exit_code=-1,
            )

        if not self.tests_dir.exists():
            return ExecutionResult(
                success=False,
                setup_log=f"Grading tests not found: {self.tests_dir}",
                exit_code=-1,
            )

        # A stale report from an earlier run must not be mistaken for this one
        report_path = submission_path / TEST_REPORT_FILENAME
        if report_path.exists():
            report_path.unlink()

        env = os.environ.copy()
        env["PYTHONPATH"] = os.pathsep.join(
            part for part in (str(submission_path.resolve()), env.get("PYTHONPATH", "")) if part
        )

        cmd = self.build_command(submission_path)
        logger.info("Executing: %s", " ".join(cmd))

        try:
            process = subprocess.run(
                cmd,
                cwd=str(submission_path.resolve()),
                env=env,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            return ExecutionResult(
                success=False,
                setup_log="Execution timed out",
                exit_code=-1,
                timeout_exceeded=True,
            )
        except OSError as e:
            return ExecutionResult(
                success=False,
                setup_log=f"Local execution error: {e}",
                exit_code=-1,
            )

        # Parse test results from JUnit XML if available
        tests = parse_junit_xml(report_path)

        return ExecutionResult(
            success=process.returncode == 0,
            setup_log="Local environment used",
            test_log=process.stdout + process.stderr,
            exit_code=process.returncode,
            tests=tests,
            timeout_exceeded=False,
        )


def parse_junit_xml(xml_path: Path) -> list[TestResult]:
    """
    Parse pytest JUnit XML output.

    Args:
        xml_path: Path to the report.

    Returns:
        One TestResult per test case; empty if the report is missing or malformed.
    """
    if not xml_path.exists():
        return []

    try:
        tree = ET.parse(xml_path)
    except ET.ParseError as e:
        logger.warning("Could not parse %s: %s", xml_path, e)
        return []

    results: list[TestResult] = []

    for testcase in tree.getroot().iter("testcase"):
        name = testcase.get("name", "unknown")
        time_str = testcase.get("time", "0")
        duration = float(time_str) if time_str else 0.0

        problem = testcase.find("failure")
        if problem is None:
            problem = testcase.find("error")

        if problem is not None:
            results.append(
                TestResult(
                    test_name=name,
                    passed=False,
                    error_message=(problem.text or problem.get("message", "")).strip(),
                    duration_seconds=duration,
                )
            )
        elif testcase.find("skipped") is not None:
            continue
        else:
            results.append(
                TestResult(
                    test_name=name,
                    passed=True,
                    duration_seconds=duration,
                )
            )

    return results
