"""Lecture document parsing, record storage and derived views."""

from .document import LectureDocument, parse_document, render_document
from .extract import extract_block_lines, extract_blocks, extract_definitions, extract_section
from .parser import parse_path, parse_record
from .store import FileRecordStore, MemoryRecordStore, RecordStore
from .views import chapter_map, due_dates, exam_coverage, filter_records, tag_search, take_snapshot
from .writer import compute_upsert_plan, execute_upsert_plan, upsert

__all__ = [
    "LectureDocument",
    "parse_document",
    "render_document",
    "extract_blocks",
    "extract_block_lines",
    "extract_definitions",
    "extract_section",
    "parse_path",
    "parse_record",
    "RecordStore",
    "FileRecordStore",
    "MemoryRecordStore",
    "take_snapshot",
    "chapter_map",
    "due_dates",
    "exam_coverage",
    "filter_records",
    "tag_search",
    "compute_upsert_plan",
    "execute_upsert_plan",
    "upsert",
]
