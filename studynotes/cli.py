"""CLI entrypoint for studynotes."""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .commands import run_operation
from .config import CourseConfig, find_course_root, load_config
from .errors import ConfigError
from .models import CLEAR, FIELD_NAMES, TIME_PATTERN, FieldOverrides, Homework, split_labels
from .operations import (
    ChaptersOp,
    DueOp,
    ExamOp,
    GetOp,
    GuideOp,
    HistoryOp,
    InitOp,
    ListOp,
    Operation,
    SetOp,
    TagsOp,
)

ISO_DATE = click.DateTime(formats=["%Y-%m-%d"])
LECTURE_ID = click.IntRange(min=1)

# Alternate command names accepted for muscle memory
ALIASES = {
    "update": "set",
    "show": "get",
    "ls": "list",
    "ch": "chapters",
    "deadlines": "due",
    "e": "exam",
    "tag": "tags",
    "find": "tags",
}


class AliasedGroup(click.Group):
    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: list[str]):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


def configure_logging(verbose: bool) -> None:
    """Route log records through rich on stderr."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    level = logging.DEBUG if verbose else logging.WARNING
    handler.setLevel(level)
    logger = logging.getLogger("studynotes")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)


def _run(ctx: click.Context, op: Operation) -> None:
    config: CourseConfig = ctx.obj["config"]
    sys.exit(run_operation(config, op))


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


@click.group(cls=AliasedGroup)
@click.version_option(__version__, prog_name="studynotes")
@click.option(
    "--course",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Course directory (defaults to the nearest parent holding master.tex)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, course: Path | None, verbose: bool) -> None:
    """studynotes - lecture metadata, due dates and study guides.

    Run inside a course directory (one containing master.tex with lectures
    under notes/lec_NN.tex), or pass --course.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)

    if course is None:
        course = find_course_root(Path.cwd())
        if course is None:
            raise click.ClickException("Not in a course directory (master.tex not found). Pass --course /path/to/course.")

    if not course.exists() or not course.is_dir():
        raise click.BadParameter(f"Directory '{course}' does not exist.", param_hint="--course / -c")

    try:
        ctx.obj["config"] = load_config(course.resolve())
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Initialize the metadata directory and history log."""
    _run(ctx, InitOp())


def _validate_time(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value and not TIME_PATTERN.match(value):
        raise click.BadParameter("expected HH:MM", ctx=ctx, param=param)
    return value


@cli.command("set")
@click.argument("lecture_id", type=LECTURE_ID)
@click.option("--date", "date_", type=ISO_DATE, default=None, help="Lecture date (YYYY-MM-DD)")
@click.option("--time", "time_", type=str, default=None, callback=_validate_time, help="Lecture time (HH:MM)")
@click.option("--chapter", "--chapters", "chapters", type=str, default=None, help='Textbook chapter(s), e.g. "3,4"')
@click.option("--reading", type=str, default=None, help="Reading assignment")
@click.option("--tags", type=str, default=None, help='Topic tags, e.g. "cell,signaling"')
@click.option("--hw", "hw_name", type=str, default=None, help="Homework name")
@click.option("--hw-due", "hw_due", type=ISO_DATE, default=None, help="Homework due date (YYYY-MM-DD)")
@click.option("--quiz", type=ISO_DATE, default=None, help="Quiz date (YYYY-MM-DD)")
@click.option("--exam", type=str, default=None, help="Which exam covers this lecture")
@click.option("--difficulty", type=str, default=None, help="Difficulty rating (e.g. 1-5)")
@click.option("--notes", type=str, default=None, help="Additional notes")
@click.option(
    "--clear",
    "clear_fields",
    multiple=True,
    type=click.Choice(FIELD_NAMES),
    help="Remove a field from the metadata block (repeatable)",
)
@click.option("--dry-run", is_flag=True, help="Show the rewrite without changing the file")
@click.pass_context
def set_cmd(
    ctx: click.Context,
    lecture_id: int,
    date_: datetime | None,
    time_: str | None,
    chapters: str | None,
    reading: str | None,
    tags: str | None,
    hw_name: str | None,
    hw_due: datetime | None,
    quiz: datetime | None,
    exam: str | None,
    difficulty: str | None,
    notes: str | None,
    clear_fields: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Set lecture metadata; unspecified fields keep their values.

    Examples:

        studynotes set 05 --date 2025-09-15 --time 09:00 --chapter "3,4" --tags "cell,signaling"

        studynotes set 05 --hw "Problem Set 2" --hw-due 2025-09-20 --exam 1

        studynotes set 05 --clear quiz --dry-run
    """
    values: dict[str, object] = {
        "date": _as_date(date_),
        "time": time_,
        "chapters": split_labels(chapters) if chapters is not None else None,
        "reading": reading,
        "tags": split_labels(tags) if tags is not None else None,
        "quiz": _as_date(quiz),
        "exam": exam,
        "difficulty": difficulty,
        "notes": notes,
    }
    homework_due = _as_date(hw_due)
    if hw_name is not None:
        values["homework"] = Homework(name=hw_name, due=homework_due)
        homework_due = None

    for name in clear_fields:
        if values.get(name) is not None:
            raise click.BadParameter(f"--clear {name} conflicts with a new value", param_hint="--clear")
        values[name] = CLEAR

    overrides = FieldOverrides(homework_due=homework_due, **values)
    _run(ctx, SetOp(lecture_id=lecture_id, overrides=overrides, dry_run=dry_run))


@cli.command()
@click.argument("lecture_id", type=LECTURE_ID)
@click.pass_context
def get(ctx: click.Context, lecture_id: int) -> None:
    """Show lecture metadata."""
    _run(ctx, GetOp(lecture_id=lecture_id))


@cli.command("list")
@click.option("--exam", type=str, default=None, help="Only lectures covered by this exam")
@click.option("--chapter", type=str, default=None, help="Only lectures covering this chapter")
@click.pass_context
def list_cmd(ctx: click.Context, exam: str | None, chapter: str | None) -> None:
    """List all lectures with metadata."""
    _run(ctx, ListOp(exam=exam, chapter=chapter))


@cli.command()
@click.pass_context
def chapters(ctx: click.Context) -> None:
    """Show the chapter to lecture mapping."""
    _run(ctx, ChaptersOp())


@cli.command()
@click.option("--today", type=ISO_DATE, default=None, help="Reference date (default: today)")
@click.option("--within", "within_days", type=click.IntRange(min=0), default=None, help="Only the next N days")
@click.option("--next-week", is_flag=True, help="Shorthand for --within 7")
@click.pass_context
def due(ctx: click.Context, today: datetime | None, within_days: int | None, next_week: bool) -> None:
    """Show upcoming homework and quiz dates."""
    if next_week:
        within_days = 7
    _run(ctx, DueOp(today=_as_date(today) or date.today(), within_days=within_days))


@cli.command()
@click.argument("exam_number")
@click.pass_context
def exam(ctx: click.Context, exam_number: str) -> None:
    """Show which lectures and chapters an exam covers."""
    _run(ctx, ExamOp(exam=exam_number))


@cli.command()
@click.argument("pattern")
@click.option("--regex", is_flag=True, help="Treat PATTERN as a regular expression")
@click.pass_context
def tags(ctx: click.Context, pattern: str, regex: bool) -> None:
    """Find lectures whose tags contain PATTERN (partial words match)."""
    _run(ctx, TagsOp(pattern=pattern, regex=regex))


@cli.command()
@click.option("--last", "last_n", type=click.IntRange(min=1), default=None, help="Only the last N writes")
@click.pass_context
def history(ctx: click.Context, last_n: int | None) -> None:
    """Show the append-only metadata write history."""
    _run(ctx, HistoryOp(last_n=last_n))


# -----------------------------------------------------------------------------
# Study guides
# -----------------------------------------------------------------------------


@cli.group()
def guide() -> None:
    """Generate study guides from lecture notes.

    Guides are written to studyGuides/; compiling them is up to you.
    """
    pass


_dry_run_option = click.option("--dry-run", is_flag=True, help="Show what would be written")
_today_option = click.option("--today", type=ISO_DATE, default=None, help="Generation date (default: today)")


@guide.command("exam")
@click.argument("exam_number")
@click.argument("lectures", required=False)
@_today_option
@_dry_run_option
@click.pass_context
def guide_exam(ctx: click.Context, exam_number: str, lectures: str | None, today: datetime | None, dry_run: bool) -> None:
    """Exam study guide (LECTURES like 01-10 or 1,3,5; default: lectures tagged for the exam).

    Examples:

        studynotes guide exam 1 01-10
    """
    op = GuideOp(kind="exam", exam=exam_number, lectures=lectures, today=_as_date(today) or date.today(), dry_run=dry_run)
    _run(ctx, op)


@guide.command("topic")
@click.argument("topic")
@click.argument("lectures", required=False)
@_today_option
@_dry_run_option
@click.pass_context
def guide_topic(ctx: click.Context, topic: str, lectures: str | None, today: datetime | None, dry_run: bool) -> None:
    """Topic review guide from mechanism boxes.

    Examples:

        studynotes guide topic "Cell Biology" 03-07
    """
    op = GuideOp(kind="topic", topic=topic, lectures=lectures, today=_as_date(today) or date.today(), dry_run=dry_run)
    _run(ctx, op)


@guide.command("flashcards")
@click.argument("lectures", required=False)
@_today_option
@_dry_run_option
@click.pass_context
def guide_flashcards(ctx: click.Context, lectures: str | None, today: datetime | None, dry_run: bool) -> None:
    """Flashcards from definition boxes (Anki/Quizlet import format)."""
    op = GuideOp(kind="flashcards", lectures=lectures, today=_as_date(today) or date.today(), dry_run=dry_run)
    _run(ctx, op)


@guide.command("questions")
@click.argument("lectures", required=False)
@_today_option
@_dry_run_option
@click.pass_context
def guide_questions(ctx: click.Context, lectures: str | None, today: datetime | None, dry_run: bool) -> None:
    """Collect all review questions into one document."""
    op = GuideOp(kind="questions", lectures=lectures, today=_as_date(today) or date.today(), dry_run=dry_run)
    _run(ctx, op)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
