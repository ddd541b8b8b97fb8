"""Metadata line, header marker and record parsing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..config import DocumentFormat
from ..errors import MalformedRecord, NotFound, StoreIOError
from ..models import LABEL_TO_FIELD, TIME_PATTERN, Record, parse_homework, split_labels
from .document import LectureDocument, parse_document

logger = logging.getLogger(__name__)


@dataclass
class BlockExtra:
    """A block line kept verbatim: unrecognized, or recognized but unusable."""

    line: str
    field: str | None = None  # the field it names, when recognized


@dataclass
class FieldReading:
    """Typed field values read from all metadata blocks of a document."""

    values: dict[str, Any] = field(default_factory=dict)
    extras: list[BlockExtra] = field(default_factory=list)
    issues: list[MalformedRecord] = field(default_factory=list)


def parse_field_line(line: str, fmt: DocumentFormat) -> tuple[str, str] | None:
    """Split ``% Label: value`` into (field name, trimmed value).

    Returns None for lines that aren't a recognized label.
    """
    stripped = line.strip()
    if not stripped.startswith(fmt.comment_prefix):
        return None
    label, sep, rest = stripped[len(fmt.comment_prefix) :].partition(":")
    if not sep:
        return None
    name = LABEL_TO_FIELD.get(label.strip().lower())
    if name is None:
        return None
    return name, rest.strip()


def convert_value(name: str, raw: str) -> Any:
    """Convert a stored field string to its typed value.

    Raises ValueError when the value can't be used for the field.
    """
    if name in ("date", "quiz"):
        if not raw:
            raise ValueError("empty date")
        return date.fromisoformat(raw)
    if name == "time":
        if raw and not TIME_PATTERN.match(raw):
            raise ValueError("expected HH:MM")
        return raw
    if name in ("chapters", "tags"):
        return split_labels(raw)
    if name == "homework":
        return parse_homework(raw)
    return raw


def read_fields(doc: LectureDocument) -> FieldReading:
    """Read every recognized line of every metadata block, later lines winning."""
    reading = FieldReading()
    for block in doc.blocks:
        for offset, line in enumerate(block.lines, 1):
            parsed = parse_field_line(line, doc.fmt)
            if parsed is None:
                reading.extras.append(BlockExtra(line=line))
                continue
            name, raw = parsed
            try:
                reading.values[name] = convert_value(name, raw)
            except ValueError as e:
                reading.extras.append(BlockExtra(line=line, field=name))
                if raw:
                    reading.issues.append(MalformedRecord(name, raw, block.start + offset, str(e)))
    return reading


def brace_arguments(text: str, start: int) -> list[str]:
    """Consecutive `{...}` groups beginning at `start`, nested braces kept intact.

    Stops at the first character that doesn't open a group, or at an
    unbalanced group.
    """
    args: list[str] = []
    pos = start
    while pos < len(text) and text[pos] == "{":
        depth = 0
        for end in range(pos, len(text)):
            if text[end] == "{":
                depth += 1
            elif text[end] == "}":
                depth -= 1
                if depth == 0:
                    break
        else:
            break
        args.append(text[pos + 1 : end])
        pos = end + 1
    return args


def extract_title(lines: list[str], fmt: DocumentFormat) -> str:
    """Title from the last header marker line (later markers are authoritative)."""
    command = f"\\{fmt.header_command}"
    title = ""
    for line in lines:
        index = line.rfind(command + "{")
        if index < 0:
            continue
        args = brace_arguments(line, index + len(command))
        if args:
            title = args[-1].strip()
    return title


def record_from_document(lecture_id: int, doc: LectureDocument, reading: FieldReading | None = None) -> Record:
    reading = reading or read_fields(doc)
    return Record(lecture_id=lecture_id, title=extract_title(doc.body, doc.fmt), **reading.values)


def parse_record(lecture_id: int, text: str, fmt: DocumentFormat) -> Record:
    """Parse a document's text into its Record, logging malformed lines."""
    doc = parse_document(text, fmt)
    reading = read_fields(doc)
    for issue in reading.issues:
        logger.warning("Lecture %02d: skipping %s", lecture_id, issue)
    return record_from_document(lecture_id, doc, reading)


def parse_path(path: Path, lecture_id: int, fmt: DocumentFormat) -> tuple[Record, str]:
    """Read and parse one document; returns the record and the raw text."""
    if not path.is_file():
        raise NotFound(lecture_id, path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StoreIOError(f"Failed to read {path}: {e}", path) from e
    return parse_record(lecture_id, text, fmt), text
