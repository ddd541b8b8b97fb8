"""
Record store over a set of lecture documents.

The documents are the source of truth: every call re-reads them, nothing is
cached. The store also owns the append-only history log.
"""

from __future__ import annotations

import logging
import re
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from ..config import CourseConfig, DocumentFormat
from ..errors import NotFound, StoreIOError
from ..models import Record
from .document import LectureDocument, parse_document
from .history import LogEntry, append_log_line, format_log_line, read_log, read_log_lines
from .parser import parse_path, parse_record

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Lecture records backed by documents, plus a write history."""

    fmt: DocumentFormat

    @abstractmethod
    def ids(self) -> list[int]:
        """Ids of all existing documents, ascending."""
        ...

    @abstractmethod
    def read_text(self, lecture_id: int) -> str:
        """Raw document text; raises NotFound."""
        ...

    @abstractmethod
    def replace_text(self, lecture_id: int, text: str) -> None:
        """Replace a document's text all-or-nothing; raises NotFound or StoreIOError."""
        ...

    @abstractmethod
    def append_log(self, record: Record) -> None:
        """Append a record to the history log."""
        ...

    @abstractmethod
    def history(self, last_n: int | None = None) -> list[LogEntry]:
        ...

    def exists(self, lecture_id: int) -> bool:
        return lecture_id in self.ids()

    def load(self, lecture_id: int) -> LectureDocument:
        return parse_document(self.read_text(lecture_id), self.fmt)

    def get(self, lecture_id: int) -> Record:
        return parse_record(lecture_id, self.read_text(lecture_id), self.fmt)

    def list(self) -> Iterator[Record]:
        """Yield every record in ascending id order, re-scanning on each call."""
        for lecture_id in self.ids():
            yield self.get(lecture_id)


class FileRecordStore(RecordStore):
    """Records stored as `lec_<NN>.<ext>` files in a notes directory."""

    def __init__(self, notes_dir: Path, log_path: Path, fmt: DocumentFormat | None = None):
        self.notes_dir = notes_dir
        self.log_path = log_path
        self.fmt = fmt or DocumentFormat()
        self._name_pattern = re.compile(rf"^lec_(\d{{2,}}){re.escape(self.fmt.extension)}$")

    @classmethod
    def from_config(cls, config: CourseConfig) -> "FileRecordStore":
        return cls(config.notes_path, config.log_path, config.fmt)

    def document_path(self, lecture_id: int) -> Path:
        """Canonical path for a lecture id (two-digit padding)."""
        return self.notes_dir / f"lec_{lecture_id:02d}{self.fmt.extension}"

    def _scan(self) -> dict[int, Path]:
        found: dict[int, Path] = {}
        if not self.notes_dir.is_dir():
            return found
        for path in sorted(self.notes_dir.glob(f"lec_*{self.fmt.extension}")):
            match = self._name_pattern.match(path.name)
            if not match or not path.is_file():
                continue
            lecture_id = int(match.group(1))
            if lecture_id in found:
                logger.warning("Duplicate documents for lecture %02d: %s, %s", lecture_id, found[lecture_id], path)
                continue
            found[lecture_id] = path
        return found

    def ids(self) -> list[int]:
        return sorted(i for i in self._scan() if i > 0)

    def path_for(self, lecture_id: int) -> Path:
        """Existing document path for an id; raises NotFound."""
        canonical = self.document_path(lecture_id)
        if canonical.is_file():
            return canonical
        path = self._scan().get(lecture_id)
        if path is None:
            raise NotFound(lecture_id, canonical)
        return path

    def read_text(self, lecture_id: int) -> str:
        path = self.path_for(lecture_id)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreIOError(f"Failed to read {path}: {e}", path) from e

    def get(self, lecture_id: int) -> Record:
        record, _ = parse_path(self.path_for(lecture_id), lecture_id, self.fmt)
        return record

    def replace_text(self, lecture_id: int, text: str) -> None:
        path = self.path_for(lecture_id)
        # Write atomically (write to temp, then rename over the original)
        temp_path = path.with_name(path.name + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
            shutil.copymode(path, temp_path)
            temp_path.replace(path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise StoreIOError(f"Failed to write {path}: {e}", path) from e

    def append_log(self, record: Record) -> None:
        append_log_line(self.log_path, record)

    def history(self, last_n: int | None = None) -> list[LogEntry]:
        return read_log(self.log_path, last_n)


class MemoryRecordStore(RecordStore):
    """In-memory store: documents keyed by id, history kept as lines."""

    def __init__(self, documents: dict[int, str] | None = None, fmt: DocumentFormat | None = None):
        self.documents: dict[int, str] = dict(documents or {})
        self.log_lines: list[str] = []
        self.fmt = fmt or DocumentFormat()

    def ids(self) -> list[int]:
        return sorted(self.documents)

    def read_text(self, lecture_id: int) -> str:
        try:
            return self.documents[lecture_id]
        except KeyError:
            raise NotFound(lecture_id) from None

    def replace_text(self, lecture_id: int, text: str) -> None:
        if lecture_id not in self.documents:
            raise NotFound(lecture_id)
        self.documents[lecture_id] = text

    def append_log(self, record: Record) -> None:
        self.log_lines.append(format_log_line(record))

    def history(self, last_n: int | None = None) -> list[LogEntry]:
        return read_log_lines(self.log_lines, last_n)
