"""Read-only projections over a snapshot of lecture records."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta

from ..errors import StoreIOError
from ..models import Record
from .store import RecordStore

logger = logging.getLogger(__name__)

NUMERIC_LABEL = re.compile(r"^\d+(\.\d+)?$")


@dataclass
class Snapshot:
    """All records readable at one point in time."""

    records: list[Record] = field(default_factory=list)
    failures: list[tuple[int, str]] = field(default_factory=list)  # (lecture id, error)

    @property
    def total(self) -> int:
        return len(self.records) + len(self.failures)

    @property
    def complete(self) -> bool:
        return not self.failures

    def status_line(self) -> str:
        return f"{len(self.records)} of {self.total} lectures read"


@dataclass(frozen=True)
class DueItem:
    """An upcoming homework deadline or quiz."""

    due: date
    kind: str  # "homework" or "quiz"
    lecture_id: int
    description: str


@dataclass
class ExamCoverage:
    exam: str
    lectures: list[Record] = field(default_factory=list)
    chapters: list[str] = field(default_factory=list)


def take_snapshot(store: RecordStore) -> Snapshot:
    """Read every document; unreadable ones are collected, not raised."""
    snapshot = Snapshot()
    for lecture_id in store.ids():
        try:
            snapshot.records.append(store.get(lecture_id))
        except StoreIOError as e:
            logger.warning("Skipping lecture %02d: %s", lecture_id, e)
            snapshot.failures.append((lecture_id, str(e)))
    return snapshot


def chapter_sort_key(label: str) -> tuple:
    """Numbers first in numeric order, then other labels lexically."""
    if NUMERIC_LABEL.match(label):
        return (0, float(label), label)
    return (1, label.lower(), label)


def chapter_map(records: list[Record]) -> dict[str, list[int]]:
    """Map each chapter label to the lectures covering it."""
    mapping: dict[str, list[int]] = {}
    for record in sorted(records, key=lambda r: r.lecture_id):
        for label in dict.fromkeys(record.chapters or ()):
            mapping.setdefault(label, []).append(record.lecture_id)
    return {label: mapping[label] for label in sorted(mapping, key=chapter_sort_key)}


def due_dates(records: list[Record], today: date, within_days: int | None = None) -> list[DueItem]:
    """Homework deadlines and quizzes strictly after `today`, soonest first.

    Ties sort by kind ("homework" before "quiz"), then lecture id.
    """
    horizon = today + timedelta(days=within_days) if within_days is not None else None
    items: list[DueItem] = []
    for record in records:
        hw = record.homework
        if hw is not None and hw.due is not None:
            items.append(DueItem(hw.due, "homework", record.lecture_id, hw.name))
        if record.quiz is not None:
            items.append(DueItem(record.quiz, "quiz", record.lecture_id, record.title))

    items = [i for i in items if i.due > today and (horizon is None or i.due <= horizon)]
    items.sort(key=lambda i: (i.due, i.kind, i.lecture_id))
    return items


def exam_matches(value: str | None, exam: str) -> bool:
    if value is None:
        return False
    value, exam = value.strip(), exam.strip()
    if value.isdigit() and exam.isdigit():
        return int(value) == int(exam)
    return value == exam


def exam_coverage(records: list[Record], exam: str) -> ExamCoverage:
    """Lectures assigned to an exam and the union of their chapters."""
    coverage = ExamCoverage(exam=exam)
    chapters: set[str] = set()
    for record in sorted(records, key=lambda r: r.lecture_id):
        if exam_matches(record.exam, exam):
            coverage.lectures.append(record)
            chapters.update(record.chapters or ())
    coverage.chapters = sorted(chapters, key=chapter_sort_key)
    return coverage


def tag_search(records: list[Record], pattern: str, *, regex: bool = False) -> list[Record]:
    """Lectures whose tags contain `pattern` anywhere, partial words included.

    With regex=True the pattern is an unanchored regular expression; an
    invalid one raises re.error.
    """
    if regex:
        compiled = re.compile(pattern)
        matches = [r for r in records if r.tags and compiled.search(r.tags_text)]
    else:
        matches = [r for r in records if r.tags and pattern in r.tags_text]
    return sorted(matches, key=lambda r: r.lecture_id)


def filter_records(records: list[Record], *, exam: str | None = None, chapter: str | None = None) -> list[Record]:
    """Records matching an exam and/or a chapter label, ascending id."""
    result = []
    for record in sorted(records, key=lambda r: r.lecture_id):
        if exam is not None and not exam_matches(record.exam, exam):
            continue
        if chapter is not None and chapter.strip() not in (record.chapters or ()):
            continue
        result.append(record)
    return result
