"""Study-guide compilation from lecture excerpts.

Builders return the generated document text; writing it out (and compiling
it) is left to the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from .errors import NotFound, StoreIOError
from .models import Record
from .notes.extract import extract_block_lines, extract_definitions, extract_section
from .notes.parser import parse_record
from .notes.store import RecordStore
from .planning import GuideWritePlan, GuideWriteResult

logger = logging.getLogger(__name__)

RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")
DOCUMENT_END = re.compile(r"\\end\{document\}")

REVIEW_SECTION = "Review Questions"

# (region kind, heading) pulled into the exam guide, in order
EXAM_REGIONS = [
    ("keypoint", "Learning Objectives"),
    ("important", "Important Concepts"),
    ("clinical", "Clinical Correlations"),
]

EXAM_GUIDE_TAIL = r"""
\section{Practice Problems}

% Add your own practice problems here
\begin{enumerate}
    \item
    \item
    \item
\end{enumerate}

\section{Key Terms}

% List important terms to know
\begin{itemize}
    \item
\end{itemize}

\section{Study Checklist}

\begin{enumerate}[label=$\square$]
    \item Review all learning objectives
    \item Complete practice problems
    \item Review clinical correlations
    \item Create concept maps
    \item Test yourself on key terms
    \item Review previous exam questions
\end{enumerate}

\end{document}
"""

TOPIC_GUIDE_TAIL = r"""
\section{Summary}
% Add your summary here

\section{Practice Questions}
\begin{enumerate}
    \item
\end{enumerate}

\end{document}
"""


@dataclass
class GuideBuild:
    """Generated guide text plus how many lectures contributed."""

    content: str
    lectures_total: int = 0
    lectures_extracted: int = 0
    failures: list[tuple[int, str]] = field(default_factory=list)

    def status_line(self) -> str:
        return f"{self.lectures_extracted} of {self.lectures_total} lectures extracted"


def parse_lecture_range(selection: str | None) -> list[int] | None:
    """Parse ``01-05``, ``1,3,5`` or ``7``; None/empty means all lectures."""
    if selection is None or not selection.strip():
        return None
    match = RANGE_PATTERN.match(selection)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start > end:
            raise ValueError(f"Empty lecture range: {selection}")
        return list(range(start, end + 1))
    try:
        return [int(part) for part in selection.split(",") if part.strip()]
    except ValueError:
        raise ValueError(f"Invalid lecture range: {selection!r} (use 01-05 or 1,3,5)") from None


def select_lectures(store: RecordStore, selection: str | None) -> list[int]:
    """Existing lecture ids named by a lecture range; missing ones are skipped."""
    available = store.ids()
    wanted = parse_lecture_range(selection)
    if wanted is None:
        return available
    present = set(available)
    return [i for i in dict.fromkeys(wanted) if i in present]


def _read_lectures(store: RecordStore, ids: list[int], build: GuideBuild) -> list[tuple[Record, str]]:
    build.lectures_total = len(ids)
    loaded = []
    for lecture_id in ids:
        try:
            text = store.read_text(lecture_id)
            record = parse_record(lecture_id, text, store.fmt)
        except (NotFound, StoreIOError) as e:
            logger.warning("Skipping lecture %02d: %s", lecture_id, e)
            build.failures.append((lecture_id, str(e)))
            continue
        loaded.append((record, text))
    build.lectures_extracted = len(loaded)
    return loaded


def _document_head(title: str, generated: date) -> list[str]:
    return [
        r"\documentclass[11pt]{article}",
        r"\input{preamble.tex}",
        "",
        rf"\title{{{title}}}",
        rf"\author{{Generated {generated.isoformat()}}}",
        r"\date{}",
        "",
        r"\begin{document}",
        r"\maketitle",
    ]


def _dedent(lines: list[str]) -> list[str]:
    return [line.lstrip() for line in lines]


def _review_questions(text: str) -> list[str]:
    # Questions stop at the end of the lecture body
    body = DOCUMENT_END.split(text, maxsplit=1)[0]
    return extract_section(body, REVIEW_SECTION)


def build_exam_guide(store: RecordStore, exam: str, ids: list[int], generated: date) -> GuideBuild:
    """Exam guide: objectives, key boxes and review questions per lecture."""
    build = GuideBuild(content="")
    lectures = _read_lectures(store, ids, build)

    lines = _document_head(f"Exam {exam} Study Guide", generated)
    lines += [r"\tableofcontents", r"\newpage", "", r"\section{Overview}", ""]
    if lectures:
        first, last = lectures[0][0].padded_id, lectures[-1][0].padded_id
        lines.append(f"This study guide covers lectures {first} through {last}.")
    lines += ["", r"\section{Key Points by Lecture}", ""]

    for record, text in lectures:
        lines.append(rf"\subsection{{Lecture {record.padded_id}: {record.title}}}")
        lines.append("")
        for kind, heading in EXAM_REGIONS:
            excerpt = extract_block_lines(text, kind)
            if not excerpt:
                continue
            lines.append(rf"\subsubsection*{{{heading}}}")
            lines.extend(_dedent(excerpt))
            lines.append("")

    lines += [r"\section{Review Questions}", ""]
    for record, text in lectures:
        questions = _review_questions(text)
        if not questions:
            continue
        lines.append(rf"\subsection*{{From Lecture {record.padded_id}}}")
        lines.extend(questions)
        lines.append("")

    build.content = "\n".join(lines) + "\n" + EXAM_GUIDE_TAIL
    return build


def build_topic_guide(store: RecordStore, topic: str, ids: list[int], generated: date) -> GuideBuild:
    """Topic guide: mechanism regions from each lecture."""
    build = GuideBuild(content="")
    lectures = _read_lectures(store, ids, build)

    lines = _document_head(f"Topic Review: {topic}", generated)
    lines += ["", r"\section{Overview}", "% Add your overview here", "", r"\section{Key Concepts}", ""]
    for record, text in lectures:
        lines.append(rf"\subsection{{From Lecture {record.padded_id}: {record.title}}}")
        lines.extend(_dedent(extract_block_lines(text, "mechanism")))
        lines.append("")

    build.content = "\n".join(lines) + "\n" + TOPIC_GUIDE_TAIL
    return build


def build_flashcards(store: RecordStore, ids: list[int], generated: date) -> GuideBuild:
    """Plain-text flashcards, one ``Q: ... | A: ...`` line per definition."""
    build = GuideBuild(content="")
    lectures = _read_lectures(store, ids, build)

    lines = [
        "# Flashcards",
        "# Format: Q: question | A: answer",
        f"# Generated {generated.isoformat()}",
        "",
    ]
    for record, text in lectures:
        lines.append(f"## Lecture {record.padded_id}: {record.title}")
        lines.append("")
        for definition in extract_definitions(text):
            lines.append(f"Q: Define: {definition} | A: [Add answer]")
        lines.append("")

    build.content = "\n".join(lines) + "\n"
    return build


def build_questions(store: RecordStore, ids: list[int], generated: date) -> GuideBuild:
    """Every lecture's review questions in one document."""
    build = GuideBuild(content="")
    lectures = _read_lectures(store, ids, build)

    lines = _document_head("All Review Questions", generated)
    lines += ["", r"\section{Questions by Lecture}", ""]
    for record, text in lectures:
        questions = _review_questions(text)
        if not questions:
            continue
        lines.append(rf"\subsection{{Lecture {record.padded_id}: {record.title}}}")
        lines.extend(questions)
        lines.append("")
    lines.append(r"\end{document}")

    build.content = "\n".join(lines) + "\n"
    return build


def topic_filename(topic: str) -> str:
    safe = re.sub(r"\s+", "_", topic.strip()).lower()
    return f"topic_{safe}.tex"


def compute_guide_plan(output_path: Path, build: GuideBuild) -> GuideWritePlan:
    return GuideWritePlan(
        output_path=output_path,
        content=build.content,
        lectures_total=build.lectures_total,
        lectures_extracted=build.lectures_extracted,
    )


def execute_guide_plan(plan: GuideWritePlan) -> GuideWriteResult:
    """Write the guide file (temp file, then rename over the target)."""
    path = plan.output_path
    temp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(plan.content, encoding="utf-8")
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        return GuideWriteResult(success=False, error=f"Failed to write {path}: {e}")
    return GuideWriteResult(success=True, path=path, bytes_written=len(plan.content.encode("utf-8")))
