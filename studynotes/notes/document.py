"""Structured view of a lecture document.

A document is split into body lines and metadata blocks. A block runs from
its open-marker line through the next blank line (or EOF); everything else is
body and is rendered back byte-for-byte.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..config import DocumentFormat


@dataclass
class MetadataBlock:
    """One embedded metadata block, interior lines kept verbatim."""

    start: int  # 1-based line number of the open marker
    lines: list[str] = field(default_factory=list)
    terminated: bool = True  # False when the block ran to EOF


@dataclass
class LectureDocument:
    """A lecture document with its metadata blocks lifted out of the body."""

    body: list[str]
    blocks: list[MetadataBlock]
    fmt: DocumentFormat
    newline: str = "\n"

    def header_pattern(self) -> re.Pattern[str]:
        return header_pattern(self.fmt)

    def header_index(self) -> int | None:
        """Index into `body` of the first header marker line."""
        needle = f"\\{self.fmt.header_command}{{"
        for i, line in enumerate(self.body):
            if needle in line:
                return i
        return None

    def body_text(self) -> str:
        return "".join(self.body)


def header_pattern(fmt: DocumentFormat) -> re.Pattern[str]:
    """Match ``\\<command>{id}{date}{title}``."""
    cmd = re.escape(fmt.header_command)
    return re.compile(
        rf"\\{cmd}\{{(?P<id>[^}}]*)\}}\{{(?P<date>[^}}]*)\}}\{{(?P<title>[^}}]*)\}}"
    )


def _detect_newline(lines: list[str]) -> str:
    for line in lines:
        if line.endswith("\r\n"):
            return "\r\n"
        if line.endswith("\n"):
            return "\n"
    return "\n"


def _is_block_open(line: str, fmt: DocumentFormat) -> bool:
    return line.rstrip("\r\n").rstrip() == fmt.block_open


def parse_document(text: str, fmt: DocumentFormat) -> LectureDocument:
    """Split raw text into body lines and metadata blocks."""
    lines = text.splitlines(keepends=True)
    body: list[str] = []
    blocks: list[MetadataBlock] = []

    current: MetadataBlock | None = None
    for number, line in enumerate(lines, 1):
        if current is not None:
            if line.strip() == "":
                blocks.append(current)
                current = None
            else:
                current.lines.append(line)
            continue
        if _is_block_open(line, fmt):
            current = MetadataBlock(start=number)
            continue
        body.append(line)

    if current is not None:
        current.terminated = False
        blocks.append(current)

    return LectureDocument(body=body, blocks=blocks, fmt=fmt, newline=_detect_newline(lines))


def render_document(doc: LectureDocument, block_lines: list[str]) -> str:
    """Serialize the body with a single metadata block after the header line.

    `block_lines` are the interior lines of the new block, without the open
    marker or the terminating blank line.
    """
    nl = doc.newline
    block = [doc.fmt.block_open + nl]
    block.extend(line if line.endswith("\n") else line + nl for line in block_lines)
    block.append(nl)

    body = list(doc.body)
    index = doc.header_index()
    if index is None:
        return "".join(block + body)

    if not body[index].endswith("\n"):
        body[index] += nl
    return "".join(body[: index + 1] + block + body[index + 1 :])
