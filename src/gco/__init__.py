"""gco: coordination of several agents working on one codebase.

Tasks live in a markdown board (tasks.md), agent activity in an
append-only journal (.gco-logs/), and a validator reports broken
dependencies, stale assignments and file collisions between agents.
"""

from gco.config import GcoSettings, find_project_root, get_settings, open_project, set_settings
from gco.errors import ExternalServiceError, GcoError, ProjectNotFoundError, TaskNotFoundError
from gco.journal import ActivityJournal, AgentStatusRow
from gco.models import BoardMetadata, Criterion, EntryType, JournalEntry, Task, TaskStatus
from gco.tasks import TaskStore, generate_board, next_task_id, parse_board
from gco.validation import ConsistencyValidator, FileCollision, GitCLI, ValidationIssue

__version__ = "0.1.0"

__all__ = [
    "ActivityJournal",
    "AgentStatusRow",
    "BoardMetadata",
    "ConsistencyValidator",
    "Criterion",
    "EntryType",
    "ExternalServiceError",
    "FileCollision",
    "GcoError",
    "GcoSettings",
    "GitCLI",
    "JournalEntry",
    "ProjectNotFoundError",
    "Task",
    "TaskNotFoundError",
    "TaskStatus",
    "TaskStore",
    "ValidationIssue",
    "find_project_root",
    "generate_board",
    "get_settings",
    "next_task_id",
    "open_project",
    "parse_board",
    "set_settings",
]
