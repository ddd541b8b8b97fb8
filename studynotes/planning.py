"""
Plan/result types for commands that write to the course directory.

Each write command is split into a compute phase (pure, builds a plan that
can be shown with --dry-run) and an execute phase (performs the write and
returns a result).
"""

from __future__ import annotations

import difflib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from .models import Record


@dataclass
class BasePlan(ABC):
    """Base class for operation plans (diagnostic output)."""

    @abstractmethod
    def summary(self) -> str:
        """Human-readable summary of what would be done."""
        ...


@dataclass
class BaseResult:
    """Base class for operation results (action output)."""

    success: bool = True
    error: str | None = None


@dataclass
class MetadataUpdatePlan(BasePlan):
    """Plan for rewriting one lecture's metadata block."""

    lecture_id: int
    before: Record
    after: Record
    changed_fields: list[str] = field(default_factory=list)
    existing_text: str = ""
    updated_text: str = ""
    header_resynced: bool = False

    def summary(self) -> str:
        lines = [
            f"Metadata Update Plan (lecture {self.lecture_id:02d})",
            f"  Fields requested: {', '.join(self.changed_fields) or 'none'}",
        ]
        for name in self.changed_fields:
            old = self.before.field_text(name)
            new = self.after.field_text(name)
            lines.append(f"  {name}: {old if old is not None else '(absent)'} -> {new if new is not None else '(absent)'}")
        if self.header_resynced:
            lines.append(f"  Header date rewritten to {self.after.field_text('date')}")
        existing_len = len(self.existing_text.encode("utf-8"))
        updated_len = len(self.updated_text.encode("utf-8"))
        lines.append(f"  Size change: {existing_len} -> {updated_len} bytes")
        return "\n".join(lines)

    def diff(self, name: str = "document") -> str:
        return "".join(
            difflib.unified_diff(
                self.existing_text.splitlines(keepends=True),
                self.updated_text.splitlines(keepends=True),
                fromfile=f"a/{name}",
                tofile=f"b/{name}",
            )
        )


@dataclass
class MetadataUpdateResult(BaseResult):
    """Result of a metadata update."""

    record: Record | None = None
    log_line: str = ""


@dataclass
class GuideWritePlan(BasePlan):
    """Plan for writing a generated study-guide file."""

    output_path: Path
    content: str = ""
    lectures_total: int = 0
    lectures_extracted: int = 0

    def summary(self) -> str:
        return (
            f"Study Guide Plan\n  Target: {self.output_path}\n"
            f"  Lectures: {self.lectures_extracted} of {self.lectures_total}\n"
            f"  Size: {len(self.content.encode('utf-8'))} bytes"
        )


@dataclass
class GuideWriteResult(BaseResult):
    """Result of writing a study guide."""

    path: Path | None = None
    bytes_written: int = 0
