"""Agent status rows for the journal's status table."""

from gco.config import GcoSettings, get_settings
from gco.constants import NO_BRANCH
from gco.journal.store import AgentStatusRow
from gco.logging import Loggers
from gco.models import Task, TaskStatus
from gco.validation.git import GitService, branch_name_for

logger = Loggers.validator()


def collect_agent_statuses(
    tasks: list[Task],
    git: GitService,
    settings: GcoSettings | None = None,
) -> list[AgentStatusRow]:
    """Build one row per in-progress assigned task.

    A branch that is missing, or whose lookup fails, is shown as
    "(sin rama)".
    """
    settings = settings or get_settings()
    rows = []
    for task in tasks:
        if task.status != TaskStatus.IN_PROGRESS or not task.assigned:
            continue
        branch = branch_name_for(task, settings.branch_prefix)
        try:
            exists = git.branch_exists(branch)
        except Exception as e:
            logger.warning("branch_lookup_failed", task_id=task.id, error=str(e))
            exists = False
        rows.append(
            AgentStatusRow(
                agent=task.assigned,
                task_id=task.id,
                status=TaskStatus.IN_PROGRESS.value,
                status_text="En progreso",
                branch=branch if exists else NO_BRANCH,
            )
        )
    return rows
