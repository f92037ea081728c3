"""
Behavior Probe: run a grading suite against every student submission

Usage:
  main.py [--config=PATH]
  main.py --summary [--config=PATH]
  main.py (-h | --help)

Options:
  --config=PATH  Path to YAML configuration file [default: grader_config.yml].
  --summary      Print the grades already saved in the grades directory.
  -h --help      Show this screen.
"""

from docopt import docopt
import logging
import sys
from pathlib import Path

from behavior_probe.config import (
    DEFAULT_GRADES_DIR,
    GRADE_OUTPUT_FILENAME,
    LOG_FORMAT,
    SKIPPED_SUBMISSION_DIRS,
)
from behavior_probe.config_loader import load_config
from behavior_probe.grades_aggregator import GradesAggregator, grade_execution, load_grades_from_dir
from behavior_probe.local_runner import LocalRunner
from behavior_probe.models import GradeResult, StudentSubmission


def setup_logging(verbose: bool) -> None:
    """Configure root logging once for the CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def find_submissions(submissions_dir: Path) -> list[StudentSubmission]:
    """
    Find all student submission directories.

    Args:
        submissions_dir: Path to directory containing student folders.

    Returns:
        List of StudentSubmission objects.
    """
    submissions: list[StudentSubmission] = []

    for item in sorted(submissions_dir.iterdir()):
        if not item.is_dir():
            continue

        # Skip hidden directories and common non-submission dirs
        if item.name.startswith(".") or item.name in SKIPPED_SUBMISSION_DIRS:
            continue

        source_files = sorted(
            str(path.relative_to(item))
            for path in item.rglob("*.py")
            if "__pycache__" not in path.parts
        )

        submissions.append(
            StudentSubmission(
                student_id=item.name,
                submission_path=str(item.resolve()),
                source_files=source_files,
            )
        )

    return submissions


def save_grade(submission_path: Path, grade: GradeResult) -> None:
    """
    Save grade result as JSON to the submission directory.

    Args:
        submission_path: Path to student's submission directory.
        grade: GradeResult to save.
    """
    output_path = submission_path / GRADE_OUTPUT_FILENAME
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(grade.model_dump_json(indent=2))
    print(f"  Saved grade to {output_path}")


def print_grade_summary(grade: GradeResult) -> None:
    """
    Print a summary of the grade to console.

    Args:
        grade: GradeResult to summarize.
    """
    print(f"\n  {'='*50}")
    print(f"  Student: {grade.student_id}")
    print(f"  Total Score: {grade.total_score:.0f}/{grade.max_score:.0f}")
    print(f"  Tests Passed: {'Yes' if grade.code_execution_passed else 'No'}")
    print(f"  {'='*50}")

    for test in grade.tests:
        status = "+" if test.passed else "-"
        print(f"  [{status}] {test.test_name}")

    print()


def run_grading_pipeline(
    submissions_dir: Path,
    tests_dir: Path,
    grades_dir: Path | None = None,
    probe_config: Path | None = None,
    timeout_seconds: int | None = None,
    python_executable: str | None = None,
    verbose: bool = False,
) -> list[GradeResult]:
    """
    Run the complete grading pipeline.

    Args:
        submissions_dir: Path to directory containing student submissions.
        tests_dir: Path to the grading test suite.
        grades_dir: Optional path to save aggregated grades.
        probe_config: Optional probe configuration for the grading suite.
        timeout_seconds: Per-submission time limit.
        python_executable: Interpreter used to run pytest.
        verbose: Print verbose output.

    Returns:
        List of GradeResult objects for all students.
    """
    print(f"Scanning {submissions_dir} for submissions...")
    submissions = find_submissions(submissions_dir)
    print(f"Found {len(submissions)} submissions")

    if not submissions:
        print("No submissions found!")
        return []

    runner_kwargs = {"probe_config": probe_config, "python_executable": python_executable}
    if timeout_seconds is not None:
        runner_kwargs["timeout_seconds"] = timeout_seconds
    runner = LocalRunner(tests_dir, **runner_kwargs)
    aggregator = GradesAggregator(output_dir=grades_dir or DEFAULT_GRADES_DIR)

    results: list[GradeResult] = []

    for i, submission in enumerate(submissions, 1):
        print(f"\n[{i}/{len(submissions)}] Processing {submission.student_id}...")
        submission_path = Path(submission.submission_path)

        if not submission.has_sources:
            print(f"  Warning: no Python files found for student '{submission.student_id}'.")

        print("  Running tests...")
        execution_result = runner.run_submission(submission_path)

        if execution_result.timeout_exceeded:
            print("  Tests: TIMED OUT")
        elif execution_result.success:
            print("  Tests: PASSED")
        else:
            print(f"  Tests: FAILED (exit code {execution_result.exit_code})")

        if verbose and execution_result.test_log:
            print("  --- Test Log ---")
            for line in execution_result.test_log.split("\n")[:20]:
                print(f"  {line}")
            print("  ----------------")

        grade = grade_execution(submission.student_id, execution_result, submission.submission_path)

        save_grade(submission_path, grade)
        aggregator.add_grade(grade)
        print_grade_summary(grade)
        results.append(grade)

    print("\nSaving aggregated grades...")
    output_files = aggregator.save_all()
    print(f"  Summary JSON: {output_files.get('summary_json')}")
    print(f"  Summary CSV:  {output_files.get('summary_csv')}")

    print("\n" + "=" * 60)
    print("GRADING COMPLETE")
    print("=" * 60)
    print(f"Total submissions processed: {len(results)}")

    passed = sum(1 for r in results if r.code_execution_passed)
    print(f"Tests passed: {passed}/{len(results)} ({100*passed/len(results):.1f}%)")

    return results


def main() -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__)
    config_path = Path(arguments["--config"])

    if not config_path.exists():
        print(f"Error: Configuration file not found at {config_path}")
        return 1

    try:
        config = load_config(config_path)
        print(f"Loaded configuration from {config_path}")
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    setup_logging(config.verbose)

    if arguments["--summary"]:
        grades_dir = config.grades_dir or DEFAULT_GRADES_DIR
        if not grades_dir.exists():
            print(f"Error: Grades directory not found: {grades_dir}")
            return 1
        grades = load_grades_from_dir(grades_dir)
        if not grades:
            print("No grades found.")
            return 1
        for grade in grades:
            print_grade_summary(grade)
        return 0

    if not config.submissions_dir.exists():
        print(f"Error: Submissions directory not found: {config.submissions_dir}")
        return 1

    if not config.tests_dir.exists():
        print(f"Error: Grading tests not found: {config.tests_dir}")
        return 1

    try:
        run_grading_pipeline(
            submissions_dir=config.submissions_dir,
            tests_dir=config.tests_dir,
            grades_dir=config.grades_dir,
            probe_config=config.probe_config,
            timeout_seconds=config.timeout_seconds,
            python_executable=config.python_executable,
            verbose=config.verbose,
        )
        return 0
    except KeyboardInterrupt:
        print("\nGrading interrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1

if __name__ == "__main__":
    sys.exit(main())
