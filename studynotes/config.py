"""Course directory detection and configuration loading."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

COURSE_MARKER = "master.tex"
CONFIG_NAME = ".studynotes.yml"


@dataclass(frozen=True)
class DocumentFormat:
    """Markup conventions of the lecture documents.

    The store only ever matches these markers; it never interprets the markup.
    """

    extension: str = ".tex"
    comment_prefix: str = "%"
    header_command: str = "lecture"
    block_marker: str = "METADATA"

    @property
    def block_open(self) -> str:
        return f"{self.comment_prefix} {self.block_marker}"


@dataclass
class CourseConfig:
    """Resolved locations for one course directory."""

    root: Path
    notes_dir: str = "notes"
    metadata_dir: str = ".metadata"
    log_name: str = "lectures.db"
    guides_dir: str = "studyGuides"
    fmt: DocumentFormat = field(default_factory=DocumentFormat)

    @property
    def notes_path(self) -> Path:
        return self.root / self.notes_dir

    @property
    def metadata_path(self) -> Path:
        return self.root / self.metadata_dir

    @property
    def log_path(self) -> Path:
        return self.metadata_path / self.log_name

    @property
    def guides_path(self) -> Path:
        return self.root / self.guides_dir


_PATH_KEYS = {"notes_dir", "metadata_dir", "log_name", "guides_dir"}
_FORMAT_KEYS = {f.name for f in fields(DocumentFormat)}


def find_course_root(start: Path) -> Path | None:
    """Find the course directory (holding master.tex) by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / COURSE_MARKER).is_file():
            return p
    return None


def load_config(root: Path) -> CourseConfig:
    """Build the course config, applying `<root>/.studynotes.yml` if present."""
    config_path = root / CONFIG_NAME
    if not config_path.exists():
        return CourseConfig(root=root)

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load {config_path}: {e}", config_path) from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping", config_path)

    path_values: dict[str, str] = {}
    format_values: dict[str, str] = {}
    for key, value in data.items():
        if key in _PATH_KEYS:
            path_values[key] = str(value)
        elif key in _FORMAT_KEYS:
            format_values[key] = str(value)
        else:
            logger.warning("Ignoring unknown config key %r in %s", key, config_path)

    ext = format_values.get("extension")
    if ext and not ext.startswith("."):
        format_values["extension"] = "." + ext

    return CourseConfig(root=root, fmt=DocumentFormat(**format_values), **path_values)
