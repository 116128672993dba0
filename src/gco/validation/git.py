"""Git boundary used by the validator.

The validator only needs two facts per task: whether its branch exists
and which files the branch changes. GitService is that contract; GitCLI
implements it on top of the git executable. Timeouts are chosen by the
caller constructing the adapter.
"""

import re
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from gco.errors import ErrorCode, ExternalServiceError
from gco.logging import Loggers
from gco.models import Task

logger = Loggers.git()


@runtime_checkable
class GitService(Protocol):
    """Git facts needed per task; calls share no state."""

    def branch_exists(self, branch: str) -> bool: ...

    def changed_files(self, branch: str, base_branch: str) -> list[str]: ...


def branch_name_for(task: Task, prefix: str) -> str:
    """Conventional branch of an assigned task: <prefix>/<agent>/<task id>."""
    return f"{prefix}/{task.agent_name}/{task.id}"


def parse_branch_name(branch: str, prefix: str = "agent") -> tuple[str, str] | None:
    """Split a <prefix>/<agent>/TASK-NNN branch into (agent, task_id)."""
    match = re.fullmatch(rf"{re.escape(prefix)}/([^/]+)/(TASK-\d+)", branch)
    if not match:
        return None
    return match[1], match[2]


class GitCLI:
    """GitService backed by the git command line.

    Example:
        >>> git = GitCLI(Path("."), timeout=10)
        >>> git.branch_exists("agent/claude/TASK-001")
        False
    """

    def __init__(self, repo_root: Path, timeout: float | None = None) -> None:
        self.repo_root = repo_root
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.repo_root,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ExternalServiceError(
                f"git {args[0]} timed out after {self.timeout} seconds",
                error_code=ErrorCode.TIMEOUT,
                details={"args": list(args)},
            )
        except subprocess.CalledProcessError as e:
            raise ExternalServiceError(
                f"git {args[0]} failed: {e.stderr.strip()}",
                details={"args": list(args), "returncode": e.returncode},
            )
        except FileNotFoundError:
            raise ExternalServiceError("git executable not found")
        logger.debug("git_command", args=list(args))
        return result.stdout

    def branch_exists(self, branch: str) -> bool:
        output = self._run("branch", "--list", "--format=%(refname:short)")
        return branch in output.split()

    def changed_files(self, branch: str, base_branch: str) -> list[str]:
        output = self._run("diff", "--name-only", f"{base_branch}...{branch}")
        return [line for line in output.splitlines() if line.strip()]

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD").strip()
