"""Consistency checks over a snapshot of the task board.

The validator is read-only and best-effort. Each check runs in
isolation: an unexpected failure inside one check is reported as a
single error issue and does not hide the results of the others. Git
lookups fail per task, so one unreachable branch only removes that
task's contribution.

Example:
    >>> validator = ConsistencyValidator(GitCLI(root), settings)
    >>> tasks, _ = store.load()
    >>> for issue in validator.validate(tasks):
    ...     print(issue.level.value, issue.task_id, issue.message)
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator

from gco.config import GcoSettings, get_settings
from gco.logging import Loggers
from gco.models import Task, TaskStatus
from gco.validation.git import GitService, branch_name_for

logger = Loggers.validator()


class IssueLevel(str, Enum):
    """Severity of a validation issue."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationIssue:
    """A consistency problem; advisory only, never raised."""

    level: IssueLevel
    task_id: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level.value, "taskId": self.task_id, "message": self.message}

    def render(self) -> str:
        """One-line form used in the journal alerts section."""
        return f"- **{self.level.value}** {self.task_id}: {self.message}"


@dataclass(frozen=True)
class CollisionParty:
    """An agent and task that touched a colliding file."""

    agent: str
    task_id: str

    def __str__(self) -> str:
        return f"{self.agent}({self.task_id})"


@dataclass
class FileCollision:
    """A file changed on the branches of more than one task."""

    file: str
    agents: list[CollisionParty] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"file": self.file, "agents": [str(a) for a in self.agents]}


Check = Callable[[list[Task]], Iterator[ValidationIssue]]


def _active_assigned(tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if t.status == TaskStatus.IN_PROGRESS and t.assigned]


class ConsistencyValidator:
    """Runs the consistency checks against a list of tasks."""

    def __init__(self, git: GitService, settings: GcoSettings | None = None) -> None:
        """Initialize the validator.

        Args:
            git: Source of branch existence and changed files.
            settings: Project settings (branch prefix, main branch).
        """
        self._git = git
        self._settings = settings or get_settings()

    def checks(self) -> list[tuple[str, Check]]:
        """Checks in the order they run."""
        return [
            ("blocked_tasks", self.check_blocked_tasks),
            ("dependencies", self.check_dependencies),
            ("assignments", self.check_assignments),
            ("branches", self.check_branches),
            ("agent_overlap", self.check_agent_overlap),
        ]

    def validate(self, tasks: list[Task]) -> list[ValidationIssue]:
        """Run every check and concatenate their issues."""
        issues: list[ValidationIssue] = []
        for name, check in self.checks():
            try:
                for issue in check(tasks):
                    issues.append(issue)
            except Exception as e:
                logger.exception("validation_check_failed", check=name)
                issues.append(
                    ValidationIssue(IssueLevel.ERROR, "", f"Check '{name}' failed: {e}")
                )
        logger.info("validation_finished", task_count=len(tasks), issue_count=len(issues))
        return issues

    def check_blocked_tasks(self, tasks: list[Task]) -> Iterator[ValidationIssue]:
        for task in tasks:
            if task.status != TaskStatus.BLOCKED:
                continue
            if not task.block_reason:
                yield ValidationIssue(
                    IssueLevel.WARNING, task.id, "Blocked task has no block reason"
                )
            if not task.blocked_since:
                yield ValidationIssue(
                    IssueLevel.INFO, task.id, "Blocked task has no blocked-since date"
                )

    def check_dependencies(self, tasks: list[Task]) -> Iterator[ValidationIssue]:
        """Missing dependencies and cycles back to each task.

        The cycle search is breadth-first from a task's direct
        dependencies; nodes already visited in that search are not
        expanded again, so cycles elsewhere in the graph terminate.
        """
        by_id = {t.id: t for t in tasks}

        for task in tasks:
            dependency_ids = task.dependency_ids
            for dep_id in dependency_ids:
                if dep_id not in by_id:
                    yield ValidationIssue(
                        IssueLevel.ERROR, task.id, f"Dependency {dep_id} does not exist"
                    )

            visited: set[str] = set()
            queue = deque(dependency_ids)
            while queue:
                current = queue.popleft()
                if current == task.id:
                    yield ValidationIssue(
                        IssueLevel.ERROR, task.id, "Circular dependency detected"
                    )
                    break
                if current in visited:
                    continue
                visited.add(current)
                dependency = by_id.get(current)
                if dependency is not None:
                    queue.extend(dependency.dependency_ids)

    def check_assignments(self, tasks: list[Task]) -> Iterator[ValidationIssue]:
        for task in tasks:
            if task.status == TaskStatus.IN_PROGRESS and not task.assigned:
                yield ValidationIssue(
                    IssueLevel.WARNING, task.id, "In-progress task has no assigned agent"
                )
            if task.status == TaskStatus.COMPLETED and not task.completed:
                yield ValidationIssue(
                    IssueLevel.INFO, task.id, "Completed task has no completion date"
                )

    def check_branches(self, tasks: list[Task]) -> Iterator[ValidationIssue]:
        prefix = self._settings.branch_prefix
        for task in _active_assigned(tasks):
            branch = branch_name_for(task, prefix)
            try:
                exists = self._git.branch_exists(branch)
            except Exception as e:
                logger.warning("branch_lookup_failed", task_id=task.id, branch=branch, error=str(e))
                continue
            if not exists:
                yield ValidationIssue(
                    IssueLevel.WARNING,
                    task.id,
                    f"Branch {branch} not found for in-progress task",
                )

    def check_agent_overlap(self, tasks: list[Task]) -> Iterator[ValidationIssue]:
        """One warning per agent holding several in-progress tasks."""
        by_agent: dict[str, list[str]] = {}
        for task in _active_assigned(tasks):
            by_agent.setdefault(task.assigned, []).append(task.id)

        for agent, task_ids in by_agent.items():
            if len(task_ids) > 1:
                joined = ", ".join(task_ids)
                yield ValidationIssue(
                    IssueLevel.WARNING,
                    joined,
                    f"{agent} has multiple tasks in progress: {joined}",
                )

    def check_file_collisions(self, tasks: list[Task]) -> list[FileCollision]:
        """Files changed on the branches of more than one in-progress task.

        Tasks whose diff lookup fails are skipped.
        """
        prefix = self._settings.branch_prefix
        base = self._settings.main_branch
        touched: dict[str, list[CollisionParty]] = {}

        for task in _active_assigned(tasks):
            branch = branch_name_for(task, prefix)
            try:
                files = self._git.changed_files(branch, base)
            except Exception as e:
                logger.debug("diff_lookup_failed", task_id=task.id, branch=branch, error=str(e))
                continue
            party = CollisionParty(agent=task.assigned, task_id=task.id)
            for path in files:
                parties = touched.setdefault(path, [])
                if party not in parties:
                    parties.append(party)

        collisions = [
            FileCollision(file=path, agents=parties)
            for path, parties in touched.items()
            if len({p.task_id for p in parties}) > 1
        ]
        if collisions:
            logger.warning("file_collisions_found", count=len(collisions))
        return collisions
