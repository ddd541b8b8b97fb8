"""
Append-only history of metadata writes.

Every `set` appends the full post-merge record as one pipe-delimited line:

    id|date|time|title|chapters|reading|tags|homework|quiz|exam|difficulty|notes

The log is diagnostic only: current state is always re-derived from the
documents. Lines are never rewritten or deduplicated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import StoreIOError
from ..models import FIELD_NAMES, Record

logger = logging.getLogger(__name__)

# Title sits after time; the rest follow the metadata block order
LOG_COLUMNS = ["id", *FIELD_NAMES[:2], "title", *FIELD_NAMES[2:]]
FIELD_COUNT = len(LOG_COLUMNS)

LOG_HEADER = (
    "# Lecture Metadata Database\n"
    "# Format: " + "|".join(c.upper() for c in LOG_COLUMNS) + "\n"
)


@dataclass(frozen=True)
class LogEntry:
    """One history line, fields kept as their stored strings."""

    line_number: int
    values: dict[str, str]

    @property
    def lecture_id(self) -> str:
        return self.values["id"]


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("|", "\\|").replace("\n", " ").replace("\r", " ")


def _split_escaped(line: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    chars = iter(line)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            current.append(nxt)
        elif ch == "|":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def format_log_line(record: Record) -> str:
    """Serialize a record as one log line (no trailing newline), always 12 fields."""
    values = [record.padded_id, *(
        _escape(record.title) if column == "title" else _escape(record.field_text(column) or "")
        for column in LOG_COLUMNS[1:]
    )]
    return "|".join(values)


def parse_log_line(line: str, line_number: int = 0) -> LogEntry | None:
    """Parse a log line; comment, blank and wrong-width lines give None."""
    line = line.rstrip("\r\n")
    if not line.strip() or line.startswith("#"):
        return None
    fields = _split_escaped(line)
    if len(fields) != FIELD_COUNT:
        logger.warning("History line %d has %d fields, expected %d", line_number, len(fields), FIELD_COUNT)
        return None
    return LogEntry(line_number=line_number, values=dict(zip(LOG_COLUMNS, fields)))


def ensure_log(log_path: Path) -> Path:
    """Create the metadata directory and the log header if missing."""
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if not log_path.exists():
            log_path.write_text(LOG_HEADER, encoding="utf-8")
    except OSError as e:
        raise StoreIOError(f"Failed to create history log {log_path}: {e}", log_path) from e
    return log_path


def append_log_line(log_path: Path, record: Record) -> str:
    """Append one record line to the history log."""
    line = format_log_line(record)
    ensure_log(log_path)
    try:
        with log_path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as e:
        raise StoreIOError(f"Failed to append to history log {log_path}: {e}", log_path) from e
    return line


def read_log_lines(lines: list[str], last_n: int | None = None) -> list[LogEntry]:
    entries = []
    for number, line in enumerate(lines, 1):
        entry = parse_log_line(line, number)
        if entry is not None:
            entries.append(entry)
    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def read_log(log_path: Path, last_n: int | None = None) -> list[LogEntry]:
    """Read history entries, oldest first (only the last N when given)."""
    if not log_path.exists():
        return []
    try:
        lines = log_path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise StoreIOError(f"Failed to read history log {log_path}: {e}", log_path) from e
    return read_log_lines(lines, last_n)
