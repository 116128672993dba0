"""File-backed task store.

The board document is the single source of truth: every operation
re-reads tasks.md, and every mutation regenerates and rewrites it whole.
The store never validates field combinations; writes always succeed and
consistency is reported by the validator.

Example:
    >>> store = TaskStore(settings)
    >>> task = store.add_task(Task(id=store.next_id(), title="Login form"))
    >>> store.update_task(task.id, status=TaskStatus.IN_PROGRESS, assigned="@claude")
    >>> store.find_task(task.id).status
    <TaskStatus.IN_PROGRESS: 'in-progress'>
"""

import dataclasses
from pathlib import Path
from typing import Any

from gco._utils import atomic_write_text, read_text
from gco.config import GcoSettings, get_settings
from gco.errors import TaskNotFoundError
from gco.logging import Loggers
from gco.models import BoardMetadata, Task, TaskStatus, normalize_handle
from gco.tasks.board import generate_board, next_task_id, parse_board

logger = Loggers.tasks()

_UPDATABLE_FIELDS = {f.name for f in dataclasses.fields(Task)} - {"raw_lines"}


class TaskStore:
    """Authoritative task records backed by the board document."""

    def __init__(self, settings: GcoSettings | None = None) -> None:
        """Initialize the store.

        Args:
            settings: Project settings; defaults to get_settings().
        """
        self._settings = settings or get_settings()

    @property
    def path(self) -> Path:
        return self._settings.tasks_file

    def load(self) -> tuple[list[Task], BoardMetadata]:
        """Read and parse the board. A missing file is an empty board."""
        return parse_board(read_text(self.path))

    def save(self, tasks: list[Task], metadata: BoardMetadata | None = None) -> None:
        """Regenerate the full board from tasks and write it."""
        atomic_write_text(self.path, generate_board(tasks, metadata))
        logger.debug("board_written", path=str(self.path), task_count=len(tasks))

    def list_tasks(
        self,
        status: TaskStatus | str | None = None,
        assigned: str | None = None,
    ) -> list[Task]:
        """List tasks with optional filters.

        Args:
            status: Only tasks with this status.
            assigned: Only tasks assigned to this handle (with or without "@").

        Returns:
            Matching tasks in board order.
        """
        tasks, _ = self.load()
        if status is not None:
            tasks = [t for t in tasks if t.status == TaskStatus(status)]
        if assigned is not None:
            handle = normalize_handle(assigned)
            tasks = [t for t in tasks if t.assigned == handle]
        return tasks

    def find_task(self, task_id: str) -> Task | None:
        """Get a task by id, or None if it is not on the board."""
        tasks, _ = self.load()
        return next((t for t in tasks if t.id == task_id), None)

    def next_id(self) -> str:
        """Allocate the next free task id."""
        tasks, _ = self.load()
        return next_task_id(tasks)

    def add_task(self, task: Task) -> Task:
        """Append a task to the board and persist it.

        The assigned handle is stored in its canonical "@name" form.
        """
        task = dataclasses.replace(task, assigned=normalize_handle(task.assigned))
        tasks, metadata = self.load()
        tasks.append(task)
        self.save(tasks, metadata)
        logger.info("task_added", task_id=task.id, title=task.title)
        return task

    def update_task(self, task_id: str, **fields: Any) -> Task:
        """Shallow-merge fields over an existing task and persist the board.

        Args:
            task_id: Task to update.
            **fields: Task attributes to replace.

        Returns:
            The updated task.

        Raises:
            TaskNotFoundError: If task_id is not on the board.
            ValueError: If a field name is not a Task attribute.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}")
        if "status" in fields:
            fields["status"] = TaskStatus(fields["status"])
        if "assigned" in fields:
            fields["assigned"] = normalize_handle(fields["assigned"])

        tasks, metadata = self.load()
        for index, task in enumerate(tasks):
            if task.id == task_id:
                break
        else:
            raise TaskNotFoundError(task_id)

        updated = dataclasses.replace(task, **fields)
        tasks[index] = updated
        self.save(tasks, metadata)
        logger.info("task_updated", task_id=task_id, fields=sorted(fields))
        return updated

    def set_last_sync(self, stamp: str) -> None:
        """Rewrite the board with a new last synchronization stamp."""
        tasks, metadata = self.load()
        metadata.last_sync = stamp
        self.save(tasks, metadata)
