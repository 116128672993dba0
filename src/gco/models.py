"""Entity model for tasks and journal entries.

Example:
    >>> task = Task(id="TASK-001", title="Login form")
    >>> task.status
    <TaskStatus.PENDING: 'pending'>
    >>> task.dependency_ids
    []
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

TASK_ID_PATTERN = re.compile(r"TASK-(\d+)")
# Characters allowed in an agent handle after the "@"
HANDLE_CHARS = r"[\w-]"


def normalize_handle(assigned: str) -> str:
    """Canonical "@name" form of an agent handle, or "" when unassigned.

    Runs of characters a handle cannot hold (spaces, slashes, ...) become
    a single "-", so "john doe" is stored as "@john-doe".

    Example:
        >>> normalize_handle("claude")
        '@claude'
        >>> normalize_handle("@john doe")
        '@john-doe'
    """
    name = re.sub(r"[^\w-]+", "-", assigned.strip().lstrip("@")).strip("-")
    return f"@{name}" if name else ""


class TaskStatus(str, Enum):
    """Status values for tasks on the board."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    REVIEW = "review"
    COMPLETED = "completed"


class EntryType(str, Enum):
    """Kinds of journal entries agents can report."""

    START = "start"
    PROGRESS = "progress"
    DECISION = "decision"
    BLOCK = "block"
    QUESTION = "question"
    ANSWER = "answer"
    COMPLETE = "complete"
    SYSTEM = "system"


@dataclass
class Criterion:
    """One acceptance criterion checkbox."""

    text: str
    done: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"done": self.done, "text": self.text}


@dataclass
class Task:
    """A task record on the board.

    The store performs no validation on these fields; inconsistent
    combinations are reported by the validator instead.

    Attributes:
        id: Identifier of the form TASK-NNN, never reused.
        title: Short title.
        description: Free text, may span several lines.
        status: Current status.
        assigned: Agent handle including the leading "@", or "" if unassigned.
        criteria: Acceptance criteria in display order.
        dependencies: Dependency text as written on the board; task ids
            are extracted with dependency_ids.
        notes: Technical notes, may span several lines.
        completed: Completion timestamp or "".
        blocked_since: Set only while blocked.
        block_reason: Set only while blocked.
        github_issue: Linked issue number, used to deduplicate imports.
        extra_lines: Lines inside the task block that no field claims;
            written back verbatim so hand edits survive regeneration.
        raw_lines: Every line of the block after the header, as read.
    """

    id: str
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    assigned: str = ""
    criteria: list[Criterion] = field(default_factory=list)
    dependencies: str = ""
    notes: str = ""
    completed: str = ""
    blocked_since: str = ""
    block_reason: str = ""
    github_issue: int | None = None
    extra_lines: list[str] = field(default_factory=list)
    raw_lines: list[str] = field(default_factory=list, compare=False, repr=False)

    @property
    def dependency_ids(self) -> list[str]:
        """Task ids referenced in the dependency text.

        Tokens that do not look like TASK-NNN are ignored.
        """
        return [m.group(0) for m in TASK_ID_PATTERN.finditer(self.dependencies)]

    @property
    def agent_name(self) -> str:
        """Assigned handle without the leading "@"."""
        return self.assigned.lstrip("@")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "assigned": self.assigned,
            "criteria": [c.to_dict() for c in self.criteria],
            "dependencies": self.dependencies,
            "notes": self.notes,
            "completed": self.completed,
            "blockedSince": self.blocked_since,
            "blockReason": self.block_reason,
            "githubIssue": self.github_issue,
        }


@dataclass
class BoardMetadata:
    """Summary block at the top of the board.

    Counts are informational only; the generator recomputes them from
    the task list. last_sync is carried over unless replaced.
    """

    last_sync: str = ""
    total: int | None = None
    completed: int | None = None
    in_progress: int | None = None
    pending: int | None = None


@dataclass(frozen=True)
class JournalEntry:
    """An immutable journal entry.

    Attributes:
        time: Wall-clock time of the append, HH:MM:SS.
        agent: Agent handle without "@".
        task_id: Task the entry refers to (or a pseudo id such as SYNC).
        entry_type: Entry kind.
        message: Entry text.
        date: Day of the append (YYYY-MM-DD); only known from the index.
    """

    time: str
    agent: str
    task_id: str
    entry_type: EntryType
    message: str
    date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Index record layout."""
        return {
            "date": self.date,
            "agent": self.agent,
            "taskId": self.task_id,
            "type": self.entry_type.value,
            "message": self.message,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalEntry":
        return cls(
            time=data.get("time", ""),
            agent=data["agent"],
            task_id=data["taskId"],
            entry_type=EntryType(data["type"]),
            message=data.get("message", ""),
            date=data.get("date"),
        )
