"""Command implementations and operation dispatch."""

from __future__ import annotations

from typing import Callable

from ..config import CourseConfig
from ..operations import (
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
from .guide_cmd import run_guide
from .metadata_cmd import (
    run_chapters,
    run_due,
    run_exam,
    run_get,
    run_history,
    run_init,
    run_list,
    run_set,
    run_tags,
)

HANDLERS: dict[type, Callable[[CourseConfig, Operation], int]] = {
    InitOp: run_init,
    SetOp: run_set,
    GetOp: run_get,
    ListOp: run_list,
    ChaptersOp: run_chapters,
    DueOp: run_due,
    ExamOp: run_exam,
    TagsOp: run_tags,
    HistoryOp: run_history,
    GuideOp: run_guide,
}


def run_operation(config: CourseConfig, op: Operation) -> int:
    """Run a decoded operation; returns the process exit code."""
    handler = HANDLERS.get(type(op))
    if handler is None:
        raise TypeError(f"Unsupported operation: {type(op).__name__}")
    return handler(config, op)


__all__ = ["HANDLERS", "run_operation"]
