"""Study guide command - compile lecture excerpts into guide documents."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from ..config import CourseConfig
from ..guides import (
    GuideBuild,
    build_exam_guide,
    build_flashcards,
    build_questions,
    build_topic_guide,
    compute_guide_plan,
    execute_guide_plan,
    select_lectures,
    topic_filename,
)
from ..notes.store import FileRecordStore, RecordStore
from ..notes.views import exam_coverage, take_snapshot
from ..operations import GuideOp


def _exam_lectures(store: RecordStore, op: GuideOp) -> list[int]:
    """Explicit range first, then lectures tagged for the exam, then everything."""
    if op.lectures:
        return select_lectures(store, op.lectures)
    coverage = exam_coverage(take_snapshot(store).records, op.exam or "")
    if coverage.lectures:
        return [r.lecture_id for r in coverage.lectures]
    return store.ids()


def run_guide(config: CourseConfig, op: GuideOp) -> int:
    """Build one study guide and write it under the guides directory.

    Returns:
        Exit code (0 = written, 1 = bad input or nothing to extract)
    """
    console = Console()
    err = Console(stderr=True)
    store = FileRecordStore.from_config(config)

    try:
        if op.kind == "exam":
            if not op.exam:
                err.print("Error: an exam number is required", style="bold red")
                return 1
            ids = _exam_lectures(store, op)
        else:
            ids = select_lectures(store, op.lectures)
    except ValueError as e:
        err.print(f"Error: {escape(str(e))}", style="bold red")
        return 1

    if not ids:
        err.print("Error: No lectures found in range", style="bold red")
        return 1

    build: GuideBuild
    if op.kind == "exam":
        build = build_exam_guide(store, op.exam, ids, op.today)
        filename = f"exam{op.exam}_guide.tex"
    elif op.kind == "topic":
        if not op.topic:
            err.print("Error: a topic name is required", style="bold red")
            return 1
        build = build_topic_guide(store, op.topic, ids, op.today)
        filename = topic_filename(op.topic)
    elif op.kind == "flashcards":
        build = build_flashcards(store, ids, op.today)
        filename = "flashcards.txt"
    else:
        build = build_questions(store, ids, op.today)
        filename = "all_questions.tex"

    plan = compute_guide_plan(config.guides_path / filename, build)

    if op.dry_run:
        err.print("\n[bold]DRY RUN[/bold] - No changes will be made\n")
        err.print(escape(plan.summary()), highlight=False)
        return 0

    if build.failures:
        err.print(build.status_line(), style="yellow")
        for lecture_id, error in build.failures:
            err.print(f"  lecture {lecture_id:02d}: {escape(error)}", style="dim")
    if build.lectures_extracted == 0:
        err.print("Error: no lectures could be read", style="bold red")
        return 1

    result = execute_guide_plan(plan)
    if not result.success:
        err.print(escape(str(result.error)), style="red")
        return 1

    console.print(f"[green]✓[/green] Created {escape(str(result.path))}")
    console.print(f"  {build.status_line()}", style="dim")
    return 0
