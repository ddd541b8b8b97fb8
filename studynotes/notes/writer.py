"""
Metadata writer: merge overrides into a lecture and rewrite its block.

compute_upsert_plan is pure; execute_upsert_plan replaces the document and
appends the merged record to the history log.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..models import FIELD_LABELS, FieldOverrides, Record, merge_record
from ..planning import MetadataUpdatePlan, MetadataUpdateResult
from .document import LectureDocument, parse_document, render_document
from .history import format_log_line
from .parser import extract_title, read_fields, record_from_document
from .store import RecordStore

logger = logging.getLogger(__name__)


def serialize_block(record: Record, comment_prefix: str) -> list[str]:
    """Metadata lines for a record, in fixed field order; absent fields omitted."""
    lines = []
    for name, label in FIELD_LABELS:
        value = record.field_text(name)
        if value is None:
            continue
        lines.append(f"{comment_prefix} {label}: {value}" if value else f"{comment_prefix} {label}:")
    return lines


def sync_header_dates(doc: LectureDocument, record: Record) -> bool:
    """Rewrite the date argument of this lecture's header markers in place.

    The id and title arguments are left untouched. Returns True if any line
    changed.
    """
    if record.date is None:
        return False
    pattern = doc.header_pattern()
    new_date = record.date.isoformat()
    changed = False

    def _replace(match):
        arg = match.group("id").strip()
        if not arg.isdigit() or int(arg) != record.lecture_id:
            return match.group(0)
        start, end = match.span("date")
        whole_start = match.start(0)
        text = match.group(0)
        return text[: start - whole_start] + new_date + text[end - whole_start :]

    for i, line in enumerate(doc.body):
        updated = pattern.sub(_replace, line)
        if updated != line:
            doc.body[i] = updated
            changed = True
    return changed


def compute_upsert_plan(store: RecordStore, lecture_id: int, overrides: FieldOverrides) -> MetadataUpdatePlan:
    """Compute the rewritten document for a metadata update without writing.

    Raises NotFound for an unknown id and ValueError for overrides that can't
    be applied (a due date with no homework).
    """
    existing_text = store.read_text(lecture_id)
    doc = parse_document(existing_text, store.fmt)
    reading = read_fields(doc)
    for issue in reading.issues:
        logger.warning("Lecture %02d: skipping %s", lecture_id, issue)

    before = record_from_document(lecture_id, doc, reading)
    merged = merge_record(before, overrides)

    # Stale lines naming a field that now has a value are superseded
    extras = [
        extra.line
        for extra in reading.extras
        if extra.field is None or getattr(merged, extra.field) is None
    ]

    # Header date follows the merged record, never the other way round
    resynced = sync_header_dates(doc, merged)
    updated_text = render_document(doc, serialize_block(merged, store.fmt.comment_prefix) + extras)

    after = replace(merged, title=extract_title(updated_text.splitlines(), store.fmt))

    return MetadataUpdatePlan(
        lecture_id=lecture_id,
        before=before,
        after=after,
        changed_fields=overrides.changed_fields(),
        existing_text=existing_text,
        updated_text=updated_text,
        header_resynced=resynced,
    )


def execute_upsert_plan(store: RecordStore, plan: MetadataUpdatePlan) -> MetadataUpdateResult:
    """Replace the document, then log the full post-merge record.

    Storage failures propagate as StoreIOError; a failed replace leaves the
    original document untouched and nothing is logged.
    """
    store.replace_text(plan.lecture_id, plan.updated_text)
    store.append_log(plan.after)
    logger.info("Updated metadata for lecture %02d", plan.lecture_id)

    return MetadataUpdateResult(success=True, record=plan.after, log_line=format_log_line(plan.after))


def upsert(store: RecordStore, lecture_id: int, overrides: FieldOverrides) -> MetadataUpdateResult:
    """Merge overrides into a lecture's metadata and rewrite it."""
    plan = compute_upsert_plan(store, lecture_id, overrides)
    return execute_upsert_plan(store, plan)
