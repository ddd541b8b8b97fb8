"""Typed operations, decoded once from the command line and dispatched by type."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Union

from .models import FieldOverrides

GuideKind = Literal["exam", "topic", "flashcards", "questions"]


@dataclass(frozen=True)
class InitOp:
    """Create the metadata directory, history log and block template."""


@dataclass(frozen=True)
class SetOp:
    lecture_id: int
    overrides: FieldOverrides = field(default_factory=FieldOverrides)
    dry_run: bool = False


@dataclass(frozen=True)
class GetOp:
    lecture_id: int


@dataclass(frozen=True)
class ListOp:
    exam: str | None = None
    chapter: str | None = None


@dataclass(frozen=True)
class ChaptersOp:
    pass


@dataclass(frozen=True)
class DueOp:
    today: date
    within_days: int | None = None


@dataclass(frozen=True)
class ExamOp:
    exam: str


@dataclass(frozen=True)
class TagsOp:
    pattern: str
    regex: bool = False


@dataclass(frozen=True)
class HistoryOp:
    last_n: int | None = None


@dataclass(frozen=True)
class GuideOp:
    kind: GuideKind
    today: date
    lectures: str | None = None  # range such as "01-05" or "1,3"
    exam: str | None = None
    topic: str | None = None
    dry_run: bool = False


Operation = Union[InitOp, SetOp, GetOp, ListOp, ChaptersOp, DueOp, ExamOp, TagsOp, HistoryOp, GuideOp]
