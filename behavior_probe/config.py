"""
Configuration constants for the Behavior Probe system.
"""

from pathlib import Path



# Execution configuration
EXECUTION_TIMEOUT_SECONDS: int = 120

# File patterns
GRADE_OUTPUT_FILENAME: str = "grade.json"
TEST_REPORT_FILENAME: str = "test_report.xml"
SKIPPED_SUBMISSION_DIRS: tuple[str, ...] = ("__pycache__", "tests", "GRADES", "grades")

# Pytest configuration
# The probe plugin is loaded explicitly so grading suites need no conftest
PLUGIN_MODULE: str = "behavior_probe.plugin"
PYTEST_ARGS: list[str] = [
    "-p",
    PLUGIN_MODULE,
    f"--junitxml={TEST_REPORT_FILENAME}",
    "-v",
    "--tb=short",
]

# Default paths (can be overridden via the YAML configuration)
DEFAULT_CONFIG_FILENAME: str = "grader_config.yml"
DEFAULT_TESTS_DIR: Path = Path("tests")
DEFAULT_GRADES_DIR: Path = Path("grades")
GRADES_SUMMARY_FILENAME: str = "grades_summary.json"
GRADES_CSV_FILENAME: str = "grades_summary.csv"

# Message rendering
NO_PARAMETERS: str = "[ none ]"

# Logging
LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(module)s.%(funcName)s:%(lineno)d | %(message)s"
