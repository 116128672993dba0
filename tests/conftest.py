"""Shared test fixtures for gco tests.

Provides:
- Temporary project roots with a .gco marker
- Settings isolated from the environment and the global singleton
- FakeGit, an in-memory GitService
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from gco.config import GcoSettings, SettingsContext, reload_settings
from gco.errors import ExternalServiceError
from gco.models import Task, TaskStatus


class FakeGit:
    """In-memory GitService.

    Args:
        branches: Branch names that exist.
        changes: Changed files per branch.
        failing: Branches whose lookups raise ExternalServiceError.
    """

    def __init__(
        self,
        branches: set[str] | None = None,
        changes: dict[str, list[str]] | None = None,
        failing: set[str] | None = None,
    ):
        self.branches = branches or set()
        self.changes = changes or {}
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    def branch_exists(self, branch: str) -> bool:
        self.calls.append(("branch_exists", branch))
        if branch in self.failing:
            raise ExternalServiceError(f"lookup failed for {branch}")
        return branch in self.branches

    def changed_files(self, branch: str, base_branch: str) -> list[str]:
        self.calls.append(("changed_files", branch))
        if branch in self.failing:
            raise ExternalServiceError(f"diff failed for {branch}")
        return list(self.changes.get(branch, []))


class FixedClock:
    """Clock returning a settable datetime."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_task(task_id: str, **fields) -> Task:
    """Build a task with a default title."""
    fields.setdefault("title", f"Title of {task_id}")
    return Task(id=task_id, **fields)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Fixture providing a project directory with a .gco marker."""
    root = tmp_path / "shop"
    (root / ".gco").mkdir(parents=True)
    return root


@pytest.fixture
def settings(project_root: Path) -> Generator[GcoSettings, None, None]:
    """Fixture providing settings rooted at the temporary project."""
    with patch.dict(os.environ, {}, clear=True):
        test_settings = GcoSettings(project_root=project_root)
    with SettingsContext(test_settings):
        yield test_settings
    reload_settings()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 5, 9, 30, 0))


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def in_progress_task():
    """Factory for in-progress tasks assigned to an agent."""

    def _make(task_id: str, agent: str) -> Task:
        return make_task(task_id, status=TaskStatus.IN_PROGRESS, assigned=f"@{agent}")

    return _make
