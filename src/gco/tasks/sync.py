"""Import of external issues into the task board.

Issues are fetched elsewhere and handed in as IssueRecord values. The
issue number is the deduplication key: an issue already linked to a task
is never imported twice, and closing it completes the linked task.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable

from gco.constants import SYNC_TASK_ID, SYSTEM_AGENT, TIMESTAMP_FORMAT, truncate
from gco.logging import Loggers
from gco.models import Criterion, EntryType, Task, TaskStatus
from gco.tasks.board import CHECKBOX_PATTERN, next_task_id
from gco.tasks.store import TaskStore

if TYPE_CHECKING:
    from gco.journal import ActivityJournal

logger = Loggers.tasks()


@dataclass
class IssueRecord:
    """The subset of an issue needed to build a task."""

    number: int
    title: str
    body: str = ""
    state: str = "open"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IssueRecord":
        return cls(
            number=int(data["number"]),
            title=data.get("title", ""),
            body=data.get("body") or "",
            state=data.get("state", "open"),
        )


@dataclass
class SyncResult:
    """Outcome of one synchronization run."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated)


def issue_to_task(issue: IssueRecord, task_id: str) -> Task:
    """Build a pending task from an issue.

    The description is the first body line and the acceptance criteria
    are the body's checkbox lines.
    """
    criteria = []
    for line in issue.body.splitlines():
        match = CHECKBOX_PATTERN.match(line.strip())
        if match:
            criteria.append(Criterion(text=match[2].strip(), done=match[1] in "xX"))

    first_line = issue.body.split("\n")[0] if issue.body else ""
    return Task(
        id=task_id,
        title=issue.title,
        description=truncate(first_line.strip()),
        status=TaskStatus.PENDING,
        criteria=criteria,
        github_issue=issue.number,
    )


def sync_issues(
    store: TaskStore,
    issues: Iterable[IssueRecord],
    dry_run: bool = False,
    journal: "ActivityJournal | None" = None,
    now: datetime | None = None,
) -> SyncResult:
    """Bring the board in line with a list of issues.

    Args:
        store: Board to update.
        issues: Issues to import.
        dry_run: Compute the result without writing anything.
        journal: If given, a system entry summarizing the run is appended.
        now: Clock value for completion and sync stamps.

    Returns:
        Ids of created and updated tasks plus the unchanged count.
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    tasks, metadata = store.load()
    linked = {t.github_issue: t for t in tasks if t.github_issue is not None}
    result = SyncResult()

    for issue in issues:
        existing = linked.get(issue.number)
        if existing is None:
            task = issue_to_task(issue, next_task_id(tasks))
            tasks.append(task)
            linked[issue.number] = task
            result.created.append(task.id)
            logger.info("issue_imported", issue=issue.number, task_id=task.id, dry_run=dry_run)
        elif issue.state == "closed" and existing.status != TaskStatus.COMPLETED:
            existing.status = TaskStatus.COMPLETED
            existing.completed = stamp
            result.updated.append(existing.id)
            logger.info("issue_closed", issue=issue.number, task_id=existing.id, dry_run=dry_run)
        else:
            result.unchanged += 1

    if dry_run or not result.changed:
        return result

    metadata.last_sync = stamp
    store.save(tasks, metadata)

    if journal is not None:
        journal.append(
            SYSTEM_AGENT,
            SYNC_TASK_ID,
            EntryType.SYSTEM,
            f"Sincronización con GitHub: {len(result.created)} nuevas, "
            f"{len(result.updated)} actualizadas",
        )
    return result
