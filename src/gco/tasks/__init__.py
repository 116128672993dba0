"""Task board: parsing, generation, storage and issue import.

Example:
    >>> from gco.tasks import TaskStore, parse_board
    >>> tasks, metadata = parse_board(Path("tasks.md").read_text())
"""

from gco.tasks.board import (
    LineKind,
    classify_line,
    generate_board,
    next_task_id,
    parse_board,
)
from gco.tasks.store import TaskStore
from gco.tasks.sync import IssueRecord, SyncResult, issue_to_task, sync_issues

__all__ = [
    "IssueRecord",
    "LineKind",
    "SyncResult",
    "TaskStore",
    "classify_line",
    "generate_board",
    "issue_to_task",
    "next_task_id",
    "parse_board",
    "sync_issues",
]
