"""
Error taxonomy for the lecture record store.

- NotFound: a referenced lecture document does not exist
- MalformedRecord: a recognized metadata line could not be parsed
  (reported as an issue, never aborts a parse)
- StoreIOError: a filesystem read/write/rename failed
- ConfigError: the course configuration file could not be used
"""

from __future__ import annotations

from pathlib import Path


class StudyNotesError(Exception):
    """Base exception for studynotes operations."""


class NotFound(StudyNotesError, LookupError):
    """Raised when a lecture document does not exist."""

    def __init__(self, lecture_id: int, path: Path | None = None):
        message = f"Lecture {lecture_id:02d} not found"
        if path is not None:
            message += f" ({path})"
        super().__init__(message)
        self.lecture_id = lecture_id
        self.path = path


class MalformedRecord(StudyNotesError, ValueError):
    """A recognized metadata line whose value failed to parse."""

    def __init__(self, label: str, value: str, line_number: int, reason: str):
        super().__init__(f"line {line_number}: bad {label} value {value!r} ({reason})")
        self.label = label
        self.value = value
        self.line_number = line_number
        self.reason = reason


class StoreIOError(StudyNotesError, OSError):
    """Raised when reading or replacing a document fails."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class ConfigError(StudyNotesError):
    """Raised when the course configuration file is unreadable or invalid."""

    def __init__(self, message: str, config_path: Path | None = None):
        super().__init__(message)
        self.config_path = config_path
