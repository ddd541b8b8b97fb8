"""
Tests for the lecture metadata commands.

Handlers are called directly with decoded operations; the click layer is
exercised separately at the end.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from click.testing import CliRunner
from conftest import lecture_text

from studynotes.cli import cli
from studynotes.commands import run_operation
from studynotes.commands.guide_cmd import run_guide
from studynotes.commands.metadata_cmd import (
    run_chapters,
    run_due,
    run_exam,
    run_get,
    run_history,
    run_init,
    run_list,
    run_set,
    run_tags,
)
from studynotes.config import CourseConfig
from studynotes.models import FieldOverrides, Homework
from studynotes.operations import (
    ChaptersOp,
    DueOp,
    ExamOp,
    GetOp,
    GuideOp,
    HistoryOp,
    InitOp,
    ListOp,
    SetOp,
    TagsOp,
)


def _add_lecture(config: CourseConfig, lecture_id: int, title: str, metadata: list[str] | None = None) -> Path:
    path = config.notes_path / f"lec_{lecture_id:02d}.tex"
    path.write_text(lecture_text(lecture_id, title, metadata=metadata), encoding="utf-8")
    return path


def test_init_creates_log_and_template(course_config: CourseConfig, capsys) -> None:
    assert run_init(course_config, InitOp()) == 0

    captured = capsys.readouterr()
    assert "Metadata system initialized" in captured.out
    assert course_config.log_path.read_text(encoding="utf-8").startswith("# Lecture Metadata Database")
    assert (course_config.metadata_path / "template.txt").exists()


def test_init_keeps_existing_history(course_config: CourseConfig, capsys) -> None:
    run_init(course_config, InitOp())
    with course_config.log_path.open("a", encoding="utf-8") as f:
        f.write("01|||One||||||||\n")

    assert run_init(course_config, InitOp()) == 0

    assert "01|||One" in course_config.log_path.read_text(encoding="utf-8")
    assert "already initialized" in capsys.readouterr().out


def test_set_then_get(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 5, "Cell Signaling")
    overrides = FieldOverrides(date=date(2025, 9, 15), chapters=("3", "4"), homework=Homework("PS 2", date(2025, 9, 20)))

    assert run_set(course_config, SetOp(lecture_id=5, overrides=overrides)) == 0
    out = capsys.readouterr().out
    assert "Updated metadata for Lecture 05" in out
    assert "PS 2 (Due: 2025-09-20)" in out

    assert run_get(course_config, GetOp(lecture_id=5)) == 0
    out = capsys.readouterr().out
    assert "Lecture 05: Cell Signaling" in out
    assert "2025-09-15" in out
    assert "3,4" in out


def test_set_dry_run_leaves_document(course_config: CourseConfig, capsys) -> None:
    path = _add_lecture(course_config, 5, "Cell Signaling")
    before = path.read_text(encoding="utf-8")

    op = SetOp(lecture_id=5, overrides=FieldOverrides(exam="1"), dry_run=True)
    assert run_set(course_config, op) == 0

    captured = capsys.readouterr()
    assert "DRY RUN" in captured.err
    assert "+% Exam: 1" in captured.out
    assert path.read_text(encoding="utf-8") == before
    assert not course_config.log_path.exists()


def test_set_unknown_lecture(course_config: CourseConfig, capsys) -> None:
    assert run_set(course_config, SetOp(lecture_id=99, overrides=FieldOverrides(exam="1"))) == 1
    assert "Lecture 99 not found" in capsys.readouterr().err


def test_get_reports_malformed_lines(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 3, "Membranes", metadata=["% Date: someday", "% Exam: 2"])

    assert run_get(course_config, GetOp(lecture_id=3)) == 0

    captured = capsys.readouterr()
    assert "Skipped malformed metadata" in captured.err
    assert "Exam:" in captured.out


def test_views_over_course(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 1, "Diffusion", ["% Chapters: 3", "% Tags: transport", "% Exam: 1", "% Quiz: 2025-09-12"])
    _add_lecture(course_config, 2, "Osmosis", ["% Chapters: 3,4", "% Tags: transport,water", "% Exam: 1"])
    _add_lecture(
        course_config,
        3,
        "Enzymes",
        ["% Chapters: 10", "% Tags: metabolism", "% Exam: 2", "% Homework: PS 1 (Due: 2025-09-11)"],
    )

    assert run_chapters(course_config, ChaptersOp()) == 0
    out = capsys.readouterr().out
    assert "Chapter 3: Lectures 01 02" in out
    assert out.index("Chapter 4:") < out.index("Chapter 10:")

    assert run_due(course_config, DueOp(today=date(2025, 9, 10))) == 0
    out = capsys.readouterr().out
    assert out.index("Lec 03: PS 1") < out.index("Lec 01: Diffusion")

    assert run_due(course_config, DueOp(today=date(2025, 12, 1))) == 0
    assert "No upcoming due dates after 2025-12-01" in capsys.readouterr().out

    assert run_exam(course_config, ExamOp(exam="1")) == 0
    out = capsys.readouterr().out
    assert "Exam 1 Coverage" in out
    assert "• Chapter 3" in out
    assert "• Chapter 4" in out
    assert "Enzymes" not in out

    assert run_tags(course_config, TagsOp(pattern="trans")) == 0
    out = capsys.readouterr().out
    assert "Found 2 lecture(s)" in out

    assert run_tags(course_config, TagsOp(pattern="genetics")) == 0
    assert "No lectures found with tag: genetics" in capsys.readouterr().out

    assert run_list(course_config, ListOp(exam="2")) == 0
    out = capsys.readouterr().out
    assert "Enzymes" in out
    assert "Osmosis" not in out


def test_bad_regex_is_an_error(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 1, "Diffusion", ["% Tags: transport"])

    assert run_tags(course_config, TagsOp(pattern="(", regex=True)) == 1
    assert "invalid pattern" in capsys.readouterr().err


def test_history_lists_writes(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 1, "Diffusion")
    run_set(course_config, SetOp(lecture_id=1, overrides=FieldOverrides(exam="1")))
    run_set(course_config, SetOp(lecture_id=1, overrides=FieldOverrides(exam="2")))
    capsys.readouterr()

    assert run_history(course_config, HistoryOp(last_n=1)) == 0

    out = capsys.readouterr().out
    assert "Entries: 1 shown" in out


def test_guide_exam_uses_tagged_lectures(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 1, "Diffusion", ["% Exam: 1"])
    _add_lecture(course_config, 2, "Enzymes", ["% Exam: 2"])

    op = GuideOp(kind="exam", exam="1", today=date(2025, 10, 1))
    assert run_guide(course_config, op) == 0

    guide = course_config.guides_path / "exam1_guide.tex"
    content = guide.read_text(encoding="utf-8")
    assert "Lecture 01: Diffusion" in content
    assert "Enzymes" not in content
    assert "1 of 1 lectures extracted" in capsys.readouterr().out


def test_guide_dry_run_writes_nothing(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 1, "Diffusion")

    op = GuideOp(kind="flashcards", today=date(2025, 10, 1), dry_run=True)
    assert run_guide(course_config, op) == 0

    assert "DRY RUN" in capsys.readouterr().err
    assert not course_config.guides_path.exists()


def test_guide_bad_range(course_config: CourseConfig, capsys) -> None:
    _add_lecture(course_config, 1, "Diffusion")

    op = GuideOp(kind="questions", lectures="9-1", today=date(2025, 10, 1))
    assert run_operation(course_config, op) == 1
    assert "Empty lecture range" in capsys.readouterr().err


def test_cli_set_and_alias(course_path: Path) -> None:
    (course_path / "notes" / "lec_05.tex").write_text(lecture_text(5, "Cell Signaling"), encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["--course", str(course_path), "set", "5", "--date", "2025-09-15", "--hw", "PS 2", "--hw-due", "2025-09-20"],
    )
    assert result.exit_code == 0, result.output
    assert "Updated metadata for Lecture 05" in result.output

    result = runner.invoke(cli, ["--course", str(course_path), "show", "5"])
    assert result.exit_code == 0, result.output
    assert "PS 2 (Due: 2025-09-20)" in result.output

    text = (course_path / "notes" / "lec_05.tex").read_text(encoding="utf-8")
    assert r"\lecture{5}{2025-09-15}{Cell Signaling}" in text


def test_cli_rejects_bad_time(course_path: Path) -> None:
    (course_path / "notes" / "lec_05.tex").write_text(lecture_text(5, "Cell Signaling"), encoding="utf-8")

    result = CliRunner().invoke(cli, ["--course", str(course_path), "set", "5", "--time", "9am"])

    assert result.exit_code == 2
    assert "HH:MM" in result.output


def test_cli_clear(course_path: Path) -> None:
    path = course_path / "notes" / "lec_05.tex"
    path.write_text(lecture_text(5, "Cell Signaling", metadata=["% Quiz: 2025-09-22", "% Exam: 1"]), encoding="utf-8")

    result = CliRunner().invoke(cli, ["--course", str(course_path), "set", "5", "--clear", "quiz"])

    assert result.exit_code == 0, result.output
    text = path.read_text(encoding="utf-8")
    assert "% Quiz" not in text
    assert "% Exam: 1" in text
