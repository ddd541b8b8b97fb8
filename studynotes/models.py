"""Data models for lecture records."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

# Metadata block labels, in serialization order: (Record attribute, label)
FIELD_LABELS: list[tuple[str, str]] = [
    ("date", "Date"),
    ("time", "Time"),
    ("chapters", "Chapters"),
    ("reading", "Reading"),
    ("tags", "Tags"),
    ("homework", "Homework"),
    ("quiz", "Quiz"),
    ("exam", "Exam"),
    ("difficulty", "Difficulty"),
    ("notes", "Notes"),
]

FIELD_NAMES = [name for name, _ in FIELD_LABELS]
LABEL_TO_FIELD = {label.lower(): name for name, label in FIELD_LABELS}

HOMEWORK_PATTERN = re.compile(r"^(?P<name>.*?)\s*\(Due:\s*(?P<due>[^)]*?)\s*\)\s*$")
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


class _Clear(Enum):
    CLEAR = "clear"

    def __repr__(self) -> str:
        return "CLEAR"


# Override value meaning "remove this field", distinct from None ("leave unchanged")
CLEAR = _Clear.CLEAR


@dataclass(frozen=True)
class Homework:
    """A homework assignment attached to a lecture."""

    name: str
    due: date | None = None


def format_homework(hw: Homework) -> str:
    """Pack a homework into its stored form: ``name (Due: YYYY-MM-DD)``."""
    if hw.due is None:
        return hw.name
    return f"{hw.name} (Due: {hw.due.isoformat()})"


def parse_homework(text: str) -> Homework:
    """Unpack a stored homework string.

    Strings that don't carry a valid ``(Due: <date>)`` suffix are taken whole
    as the homework name.
    """
    text = text.strip()
    match = HOMEWORK_PATTERN.match(text)
    if match:
        try:
            due = date.fromisoformat(match.group("due"))
        except ValueError:
            return Homework(name=text)
        return Homework(name=match.group("name"), due=due)
    return Homework(name=text)


def split_labels(value: str) -> tuple[str, ...]:
    """Split a comma-joined field into trimmed, non-empty labels."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Record:
    """Metadata for one lecture document.

    None means the field is absent from the metadata block; an empty string or
    empty tuple means the field line is present with no value.
    """

    lecture_id: int
    title: str = ""  # from the last header marker, never stored
    date: date | None = None
    time: str | None = None  # HH:MM
    chapters: tuple[str, ...] | None = None
    reading: str | None = None
    tags: tuple[str, ...] | None = None
    homework: Homework | None = None
    quiz: date | None = None
    exam: str | None = None  # exam number or label
    difficulty: str | None = None
    notes: str | None = None

    @property
    def padded_id(self) -> str:
        return f"{self.lecture_id:02d}"

    @property
    def tags_text(self) -> str:
        return ",".join(self.tags or ())

    @property
    def chapters_text(self) -> str:
        return ",".join(self.chapters or ())

    def field_text(self, name: str) -> str | None:
        """Serialized value of a metadata field, or None when absent."""
        value = getattr(self, name)
        if value is None:
            return None
        if name in ("chapters", "tags"):
            return ",".join(value)
        if name == "homework":
            return format_homework(value)
        if isinstance(value, date):
            return value.isoformat()
        return value


@dataclass(frozen=True)
class FieldOverrides:
    """Requested changes for a metadata update.

    Each slot is None (leave unchanged), a new value, or CLEAR (remove).
    `homework_due` alone re-dates the existing homework.
    """

    date: date | _Clear | None = None
    time: str | _Clear | None = None
    chapters: tuple[str, ...] | _Clear | None = None
    reading: str | _Clear | None = None
    tags: tuple[str, ...] | _Clear | None = None
    homework: Homework | _Clear | None = None
    homework_due: date | None = None
    quiz: date | _Clear | None = None
    exam: str | _Clear | None = None
    difficulty: str | _Clear | None = None
    notes: str | _Clear | None = None

    def is_empty(self) -> bool:
        return self.homework_due is None and all(getattr(self, name) is None for name in FIELD_NAMES)

    def changed_fields(self) -> list[str]:
        names = [name for name in FIELD_NAMES if getattr(self, name) is not None]
        if self.homework_due is not None and "homework" not in names:
            names.append("homework")
        return names


def merge_record(existing: Record, overrides: FieldOverrides) -> Record:
    """Overlay overrides onto an existing record, one whole field at a time."""
    changes: dict[str, object] = {}
    for name in FIELD_NAMES:
        value = getattr(overrides, name)
        if value is None:
            continue
        changes[name] = None if value is CLEAR else value

    if overrides.homework_due is not None:
        homework = changes.get("homework", existing.homework)
        if homework is None:
            raise ValueError("a homework due date needs a homework name")
        changes["homework"] = replace(homework, due=overrides.homework_due)

    return replace(existing, **changes)
