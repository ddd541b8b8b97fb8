"""Excerpt extraction from lecture documents.

Lines are treated as opaque text: only the region and section markers are
matched, the markup between them is never interpreted.
"""

from __future__ import annotations

import re

# Sectioning commands by level; a section ends at the next marker of equal or higher level
SECTION_LEVELS = {
    "part": -1,
    "chapter": 0,
    "section": 1,
    "subsection": 2,
    "subsubsection": 3,
    "paragraph": 4,
    "subparagraph": 5,
}

SECTION_PATTERN = re.compile(
    r"\\(?P<command>" + "|".join(SECTION_LEVELS) + r")\*?\s*(?:\[[^\]]*\])?\s*\{(?P<title>[^}]*)\}"
)
NESTED_MARKER = re.compile(r"\\(begin|end)\b")


def _open_pattern(kind: str) -> re.Pattern[str]:
    return re.compile(r"\\begin\{" + re.escape(kind) + r"\}")


def _close_pattern(kind: str) -> re.Pattern[str]:
    return re.compile(r"\\end\{" + re.escape(kind) + r"\}")


def _lines(text: str) -> list[str]:
    return text.splitlines()


def extract_blocks(text: str, kind: str) -> list[list[str]]:
    """Interior lines of every `kind` region, one list per occurrence.

    Marker lines themselves are dropped. An empty region gives an empty list;
    an unterminated region runs to the end of the document.
    """
    opener = _open_pattern(kind)
    closer = _close_pattern(kind)
    occurrences: list[list[str]] = []
    current: list[str] | None = None

    for line in _lines(text):
        if current is None:
            if opener.search(line):
                current = []
                if closer.search(line):
                    occurrences.append(current)
                    current = None
            continue
        if closer.search(line):
            occurrences.append(current)
            current = None
        else:
            current.append(line)

    if current is not None:
        occurrences.append(current)
    return occurrences


def extract_block_lines(text: str, kind: str) -> list[str]:
    """All interior lines of all `kind` regions, in document order."""
    return [line for block in extract_blocks(text, kind) for line in block]


def extract_section(text: str, title: str) -> list[str]:
    """Lines under every section titled `title`.

    Each occurrence runs to the next sectioning marker of equal or higher
    level, or to the end of the text.
    """
    wanted = title.strip().lower()
    result: list[str] = []
    level: int | None = None

    for line in _lines(text):
        match = SECTION_PATTERN.search(line)
        if match:
            marker_level = SECTION_LEVELS[match.group("command")]
            if level is not None and marker_level <= level:
                level = None
            if level is None and match.group("title").strip().lower() == wanted:
                level = marker_level
                continue
        if level is not None:
            result.append(line)
    return result


def extract_definitions(text: str) -> list[str]:
    """Non-blank, trimmed lines of `definition` regions.

    Lines carrying a nested region marker (`\\begin` or `\\end`) are skipped.
    """
    return [
        line.strip()
        for line in extract_block_lines(text, "definition")
        if line.strip() and not NESTED_MARKER.search(line)
    ]
