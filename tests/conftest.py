"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from studynotes.config import CourseConfig, load_config
from studynotes.notes.store import FileRecordStore


def lecture_text(
    lecture_id: int,
    title: str,
    *,
    header_date: str = "2025-01-01",
    metadata: list[str] | None = None,
    body: list[str] | None = None,
) -> str:
    """A minimal lecture document, optionally carrying a metadata block."""
    lines = [
        r"\documentclass{article}",
        r"\input{preamble.tex}",
        rf"\lecture{{{lecture_id}}}{{{header_date}}}{{{title}}}",
    ]
    if metadata is not None:
        lines += ["% METADATA", *metadata]
    lines += ["", r"\begin{document}"]
    lines += body or ["Lecture body."]
    lines += [r"\end{document}", ""]
    return "\n".join(lines)


@pytest.fixture
def course_path(tmp_path: Path) -> Path:
    """An empty course directory (master.tex plus notes/)."""
    course = tmp_path / "course"
    (course / "notes").mkdir(parents=True)
    (course / "master.tex").write_text("\\documentclass{book}\n", encoding="utf-8")
    return course


@pytest.fixture
def course_config(course_path: Path) -> CourseConfig:
    return load_config(course_path)


@pytest.fixture
def file_store(course_config: CourseConfig) -> FileRecordStore:
    return FileRecordStore.from_config(course_config)
