from datetime import date

from conftest import lecture_text

from studynotes.config import DocumentFormat
from studynotes.models import Homework, format_homework, parse_homework
from studynotes.notes.document import parse_document, render_document
from studynotes.notes.parser import brace_arguments, extract_title, parse_record, read_fields

FMT = DocumentFormat()


def test_parse_record_reads_all_fields() -> None:
    text = lecture_text(
        5,
        "Cell Signaling",
        metadata=[
            "% Date: 2025-09-15",
            "% Time: 09:00",
            "% Chapters: 3,4",
            "% Reading: pp. 120-145",
            "% Tags: cell, signaling",
            "% Homework: Problem Set 2 (Due: 2025-09-20)",
            "% Quiz: 2025-09-22",
            "% Exam: 1",
            "% Difficulty: 3",
            "% Notes: Focus on receptor types",
        ],
    )

    record = parse_record(5, text, FMT)

    assert record.lecture_id == 5
    assert record.title == "Cell Signaling"
    assert record.date == date(2025, 9, 15)
    assert record.time == "09:00"
    assert record.chapters == ("3", "4")
    assert record.reading == "pp. 120-145"
    assert record.tags == ("cell", "signaling")
    assert record.homework == Homework("Problem Set 2", date(2025, 9, 20))
    assert record.quiz == date(2025, 9, 22)
    assert record.exam == "1"
    assert record.difficulty == "3"
    assert record.notes == "Focus on receptor types"


def test_absent_and_empty_fields_are_distinct() -> None:
    text = lecture_text(2, "Intro", metadata=["% Notes:", "% Tags:"])

    record = parse_record(2, text, FMT)

    assert record.notes == ""
    assert record.tags == ()
    assert record.reading is None
    assert record.homework is None


def test_title_comes_from_last_header_marker() -> None:
    text = "\n".join(
        [
            r"\lecture{3}{2025-01-01}{Draft Title}",
            "Some text.",
            r"\lecture{3}{2025-01-01}{Final Title}",
            "",
        ]
    )

    assert extract_title(text.splitlines(), FMT) == "Final Title"
    assert parse_record(3, text, FMT).title == "Final Title"


def test_title_keeps_nested_braces() -> None:
    line = r"\lecture{5}{2025-01-01}{Intro to \textbf{DNA} and \emph{RNA}}"

    assert extract_title([line], FMT) == r"Intro to \textbf{DNA} and \emph{RNA}"


def test_brace_arguments_stop_at_unbalanced_group() -> None:
    assert brace_arguments("{a}{b{c}}{d", 0) == ["a", "b{c}"]
    assert brace_arguments("x{a}", 0) == []


def test_malformed_value_is_reported_not_fatal() -> None:
    text = lecture_text(4, "Membranes", metadata=["% Date: next tuesday", "% Exam: 2"])

    doc = parse_document(text, FMT)
    reading = read_fields(doc)

    assert "date" not in reading.values
    assert reading.values["exam"] == "2"
    assert len(reading.issues) == 1
    assert reading.issues[0].label == "date"
    assert [e.field for e in reading.extras] == ["date"]


def test_unrecognized_block_lines_are_kept_as_extras() -> None:
    text = lecture_text(4, "Membranes", metadata=["% Exam: 2", "% Instructor: Dr. Smith"])

    reading = read_fields(parse_document(text, FMT))

    assert reading.values == {"exam": "2"}
    assert [e.line for e in reading.extras] == ["% Instructor: Dr. Smith\n"]
    assert reading.extras[0].field is None


def test_field_lines_outside_blocks_are_ignored() -> None:
    text = lecture_text(1, "Intro", body=["% Exam: 9", "Body text."])

    record = parse_record(1, text, FMT)

    assert record.exam is None


def test_later_lines_win_across_blocks() -> None:
    text = "\n".join(
        [
            r"\lecture{1}{2025-01-01}{Intro}",
            "% METADATA",
            "% Exam: 1",
            "",
            "% METADATA",
            "% Exam: 2",
            "",
        ]
    )

    assert parse_record(1, text, FMT).exam == "2"


def test_unterminated_block_runs_to_end() -> None:
    text = r"\lecture{1}{2025-01-01}{Intro}" + "\n% METADATA\n% Exam: 3"

    doc = parse_document(text, FMT)

    assert len(doc.blocks) == 1
    assert doc.blocks[0].terminated is False
    assert parse_record(1, text, FMT).exam == "3"


def test_render_without_header_puts_block_first() -> None:
    doc = parse_document("Plain body.\n", FMT)

    assert render_document(doc, ["% Exam: 1"]) == "% METADATA\n% Exam: 1\n\nPlain body.\n"


def test_crlf_documents_keep_their_line_endings() -> None:
    text = "\\lecture{1}{2025-01-01}{Intro}\r\nBody.\r\n"

    doc = parse_document(text, FMT)
    rendered = render_document(doc, ["% Exam: 1"])

    assert rendered == "\\lecture{1}{2025-01-01}{Intro}\r\n% METADATA\r\n% Exam: 1\r\n\r\nBody.\r\n"


def test_homework_pair() -> None:
    hw = parse_homework("Problem Set 2 (Due: 2025-09-20)")
    assert hw == Homework("Problem Set 2", date(2025, 9, 20))
    assert format_homework(hw) == "Problem Set 2 (Due: 2025-09-20)"

    assert parse_homework("Read chapter 3") == Homework("Read chapter 3")
    assert format_homework(Homework("Read chapter 3")) == "Read chapter 3"


def test_homework_with_bad_due_date_keeps_whole_string() -> None:
    assert parse_homework("Essay (Due: soon)") == Homework("Essay (Due: soon)")
