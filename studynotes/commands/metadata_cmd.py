"""Lecture metadata commands: init, set, get, list, chapters, due, exam, tags, history."""

from __future__ import annotations

import re

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from ..config import CourseConfig
from ..errors import NotFound, StoreIOError
from ..models import FIELD_LABELS, Record
from ..notes.history import LOG_COLUMNS, ensure_log
from ..notes.parser import read_fields, record_from_document
from ..notes.store import FileRecordStore
from ..notes.views import (
    Snapshot,
    chapter_map,
    due_dates,
    exam_coverage,
    filter_records,
    tag_search,
    take_snapshot,
)
from ..notes.writer import compute_upsert_plan, execute_upsert_plan
from ..operations import ChaptersOp, DueOp, ExamOp, GetOp, HistoryOp, InitOp, ListOp, SetOp, TagsOp

TEMPLATE_NAME = "template.txt"


def _template(config: CourseConfig) -> str:
    c = config.fmt.comment_prefix
    return "\n".join(
        [
            config.fmt.block_open,
            f"{c} Date: YYYY-MM-DD",
            f"{c} Time: HH:MM",
            f"{c} Chapters: 3,4,5",
            f"{c} Reading: pp. 120-145",
            f"{c} Tags: cell,signaling,pathways",
            f"{c} Homework: Problem Set 2 (Due: YYYY-MM-DD)",
            f"{c} Quiz: YYYY-MM-DD",
            f"{c} Exam: 1",
            f"{c} Difficulty: ★★★☆☆",
            f"{c} Notes: Focus on receptor types",
            "",
        ]
    )


def _store(config: CourseConfig) -> FileRecordStore:
    return FileRecordStore.from_config(config)


def _report_partial(snapshot: Snapshot, err: Console) -> None:
    if not snapshot.complete:
        err.print(snapshot.status_line(), style="yellow")
        for lecture_id, error in snapshot.failures:
            err.print(f"  lecture {lecture_id:02d}: {escape(error)}", style="dim")


def _print_fields(console: Console, record: Record) -> None:
    for name, label in FIELD_LABELS:
        value = record.field_text(name)
        if value:
            console.print(f"[blue]{label + ':':<12}[/blue]{escape(value)}", highlight=False)


def run_init(config: CourseConfig, op: InitOp) -> int:
    """Create the metadata directory, history log and block template."""
    console = Console()
    err = Console(stderr=True)

    existed = config.log_path.exists()
    try:
        ensure_log(config.log_path)
        template_path = config.metadata_path / TEMPLATE_NAME
        if not template_path.exists():
            template_path.write_text(_template(config), encoding="utf-8")
    except (StoreIOError, OSError) as e:
        err.print(f"Error: {escape(str(e))}", style="bold red")
        return 1

    if existed:
        console.print(f"Metadata system already initialized at {config.metadata_path}", style="yellow")
    else:
        console.print("[green]✓[/green] Metadata system initialized")
    console.print(f"[blue]Metadata template:[/blue] {template_path}")

    if not config.notes_path.is_dir():
        err.print(f"No notes directory yet at {config.notes_path}", style="yellow")
    return 0


def run_set(config: CourseConfig, op: SetOp) -> int:
    """Merge field overrides into a lecture and rewrite its metadata block."""
    console = Console()
    err = Console(stderr=True)
    store = _store(config)

    try:
        plan = compute_upsert_plan(store, op.lecture_id, op.overrides)
    except (NotFound, StoreIOError, ValueError) as e:
        err.print(f"Error: {escape(str(e))}", style="bold red")
        return 1

    if op.overrides.is_empty():
        err.print("No fields given; rewriting the metadata block as it stands", style="dim")

    if op.dry_run:
        err.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        err.print(escape(plan.summary()), highlight=False)
        diff = plan.diff(store.document_path(op.lecture_id).name)
        if diff:
            console.print(Syntax(diff, "diff", theme="ansi_dark", word_wrap=True))
        return 0

    try:
        result = execute_upsert_plan(store, plan)
    except StoreIOError as e:
        err.print(f"Error: {escape(str(e))}", style="bold red")
        return 1

    console.print(f"[green]✓[/green] Updated metadata for Lecture {plan.lecture_id:02d}")
    if plan.header_resynced:
        console.print(f"  Header date set to {plan.after.field_text('date')}", style="dim")
    console.print("")
    console.print("[blue]Metadata:[/blue]")
    _print_fields(console, result.record)
    return 0


def run_get(config: CourseConfig, op: GetOp) -> int:
    """Show one lecture's metadata, including lines that failed to parse."""
    console = Console()
    err = Console(stderr=True)
    store = _store(config)

    try:
        doc = store.load(op.lecture_id)
    except (NotFound, StoreIOError) as e:
        err.print(f"Error: {escape(str(e))}", style="bold red")
        return 1

    reading = read_fields(doc)
    record = record_from_document(op.lecture_id, doc, reading)

    console.print(f"\n[bold blue]Lecture {record.padded_id}: {escape(record.title)}[/bold blue]\n", highlight=False)
    _print_fields(console, record)
    for issue in reading.issues:
        err.print(f"Skipped malformed metadata: {escape(str(issue))}", style="yellow")
    console.print("")
    return 0


def run_list(config: CourseConfig, op: ListOp) -> int:
    """Table of all lectures, optionally filtered by exam or chapter."""
    console = Console()
    err = Console(stderr=True)

    snapshot = take_snapshot(_store(config))
    records = filter_records(snapshot.records, exam=op.exam, chapter=op.chapter)

    table = Table(title="All Lectures")
    table.add_column("Lec", style="cyan", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Title")
    table.add_column("Chapters")
    table.add_column("Exam")
    for r in records:
        table.add_row(
            r.padded_id,
            r.field_text("date") or "",
            r.time or "",
            escape(r.title[:30]),
            escape(r.chapters_text),
            escape(r.exam or ""),
        )

    console.print(table)
    _report_partial(snapshot, err)
    return 0


def run_chapters(config: CourseConfig, op: ChaptersOp) -> int:
    """Chapter to lecture mapping."""
    console = Console()
    err = Console(stderr=True)

    snapshot = take_snapshot(_store(config))
    mapping = chapter_map(snapshot.records)

    console.print("\n[bold blue]Chapter to Lecture Mapping[/bold blue]\n")
    if not mapping:
        console.print("No chapters recorded.", style="yellow")
    for label, ids in mapping.items():
        lectures = " ".join(f"{i:02d}" for i in ids)
        console.print(f"[blue]Chapter {escape(label)}:[/blue] Lectures {lectures}", highlight=False)
    console.print("")
    _report_partial(snapshot, err)
    return 0


def run_due(config: CourseConfig, op: DueOp) -> int:
    """Upcoming homework deadlines and quizzes."""
    console = Console()
    err = Console(stderr=True)

    snapshot = take_snapshot(_store(config))
    items = due_dates(snapshot.records, op.today, within_days=op.within_days)

    if not items:
        console.print(f"No upcoming due dates after {op.today.isoformat()}", style="yellow")
    else:
        table = Table(title="Upcoming Due Dates")
        table.add_column("Date", no_wrap=True)
        table.add_column("Type", style="magenta", no_wrap=True)
        table.add_column("Item")
        for item in items:
            kind = "HW" if item.kind == "homework" else "Quiz"
            table.add_row(item.due.isoformat(), kind, f"Lec {item.lecture_id:02d}: {escape(item.description)}")
        console.print(table)

    _report_partial(snapshot, err)
    return 0


def run_exam(config: CourseConfig, op: ExamOp) -> int:
    """Lectures and chapters covered by one exam."""
    console = Console()
    err = Console(stderr=True)

    snapshot = take_snapshot(_store(config))
    coverage = exam_coverage(snapshot.records, op.exam)

    console.print(f"\n[bold blue]Exam {escape(op.exam)} Coverage[/bold blue]\n", highlight=False)
    if not coverage.lectures:
        console.print(f"No lectures assigned to exam {op.exam}", style="yellow")
        _report_partial(snapshot, err)
        return 0

    console.print("[blue]Lectures:[/blue]")
    for r in coverage.lectures:
        console.print(f"  • {r.padded_id}: {escape(r.title)} (Ch {escape(r.chapters_text)})", highlight=False)
    console.print("")
    console.print("[blue]Chapters:[/blue]")
    for label in coverage.chapters:
        console.print(f"  • Chapter {escape(label)}", highlight=False)
    console.print("")
    console.print("[blue]Generate study guide:[/blue]")
    console.print(f"  studynotes guide exam {op.exam}", highlight=False)
    _report_partial(snapshot, err)
    return 0


def run_tags(config: CourseConfig, op: TagsOp) -> int:
    """Lectures whose tags contain a pattern."""
    console = Console()
    err = Console(stderr=True)

    snapshot = take_snapshot(_store(config))
    try:
        matches = tag_search(snapshot.records, op.pattern, regex=op.regex)
    except re.error as e:
        err.print(f"Error: invalid pattern {escape(repr(op.pattern))}: {escape(str(e))}", style="bold red")
        return 1

    console.print(f"\n[bold blue]Lectures tagged: {escape(op.pattern)}[/bold blue]\n", highlight=False)
    for r in matches:
        date_text = r.field_text("date") or "no date"
        console.print(f"[green]Lecture {r.padded_id}[/green] ({date_text}): {escape(r.title)}", highlight=False)
        console.print(f"  Tags: {escape(r.tags_text)}", highlight=False)
    if matches:
        console.print(f"\nFound {len(matches)} lecture(s)")
    else:
        console.print(f"No lectures found with tag: {escape(op.pattern)}", highlight=False)
    _report_partial(snapshot, err)
    return 0


def run_history(config: CourseConfig, op: HistoryOp) -> int:
    """Show the append-only write history."""
    console = Console()
    err = Console(stderr=True)

    try:
        entries = _store(config).history(op.last_n)
    except StoreIOError as e:
        err.print(f"Error: {escape(str(e))}", style="bold red")
        return 1

    if not entries:
        console.print("No metadata writes recorded.", style="yellow")
        return 0

    table = Table(title="Metadata History")
    table.add_column("#", style="dim", no_wrap=True)
    for column in ("id", "date", "title", "chapters", "tags", "homework", "exam"):
        table.add_column(column)
    for entry in entries:
        table.add_row(
            str(entry.line_number),
            *(escape(entry.values[c]) for c in ("id", "date", "title", "chapters", "tags", "homework", "exam")),
        )
    console.print(table)
    console.print(f"Entries: {len(entries)} shown ({len(LOG_COLUMNS)} fields per line)", style="dim")
    return 0
