"""Tests for the grading CLI."""

import json
import textwrap

import pytest

import main
from behavior_probe.config import GRADE_OUTPUT_FILENAME, GRADES_SUMMARY_FILENAME


def test_find_submissions_skips_hidden_and_reserved_dirs(tmp_path):
    for name in ["alice", "bob", ".git", "__pycache__", "tests", "grades"]:
        (tmp_path / name).mkdir()
    (tmp_path / "alice" / "calc.py").write_text("", encoding="utf-8")
    (tmp_path / "alice" / "pkg").mkdir()
    (tmp_path / "alice" / "pkg" / "util.py").write_text("", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")

    submissions = main.find_submissions(tmp_path)

    assert [s.student_id for s in submissions] == ["alice", "bob"]
    assert submissions[0].source_files == ["calc.py", "pkg/util.py"]
    assert submissions[0].has_sources
    assert not submissions[1].has_sources


def test_missing_config_exits_with_error(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["main.py", f"--config={tmp_path / 'missing.yml'}"])
    assert main.main() == 1
    assert "Configuration file not found" in capsys.readouterr().out


def test_summary_requires_grades(tmp_path, monkeypatch, capsys):
    config = tmp_path / "grader_config.yml"
    config.write_text("submissions_dir: subs\ntests_dir: grading\ngrades_dir: grades\n", encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["main.py", "--summary", f"--config={config}"])

    assert main.main() == 1
    assert "Grades directory not found" in capsys.readouterr().out


@pytest.fixture
def project(tmp_path):
    grading = tmp_path / "grading"
    grading.mkdir()
    (grading / "test_greeter.py").write_text(
        textwrap.dedent(
            """
            def test_greets(behavior):
                greeter = behavior.instantiate("greeter.Greeter")
                assert behavior.invoke_by_name(greeter, "greet", "Ada") == "Hello, Ada"
            """
        ),
        encoding="utf-8",
    )

    submissions = tmp_path / "submissions"
    (submissions / "alice").mkdir(parents=True)
    (submissions / "alice" / "greeter.py").write_text(
        textwrap.dedent(
            """
            class Greeter:
                def greet(self, name: str) -> str:
                    return "Hello, " + name
            """
        ),
        encoding="utf-8",
    )
    (submissions / "bob").mkdir()

    config = tmp_path / "grader_config.yml"
    config.write_text(
        "submissions_dir: submissions\ntests_dir: grading\ngrades_dir: grades\ntimeout_seconds: 60\n",
        encoding="utf-8",
    )
    return tmp_path, config


def test_pipeline_grades_every_submission(project, monkeypatch, capsys):
    root, config = project
    monkeypatch.setattr("sys.argv", ["main.py", f"--config={config}"])

    assert main.main() == 0

    alice = json.loads((root / "submissions" / "alice" / GRADE_OUTPUT_FILENAME).read_text(encoding="utf-8"))
    bob = json.loads((root / "submissions" / "bob" / GRADE_OUTPUT_FILENAME).read_text(encoding="utf-8"))
    assert (alice["total_score"], alice["max_score"]) == (1, 1)
    assert alice["code_execution_passed"] is True
    assert bob["total_score"] == 0
    assert "The class 'Greeter' was not found within the submission" in bob["overall_feedback"]
    assert (root / "grades" / GRADES_SUMMARY_FILENAME).exists()

    out = capsys.readouterr().out
    assert "GRADING COMPLETE" in out
    assert "Tests passed: 1/2" in out

    monkeypatch.setattr("sys.argv", ["main.py", "--summary", f"--config={config}"])
    assert main.main() == 0
    assert "Student: alice" in capsys.readouterr().out
