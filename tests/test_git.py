"""Tests for the git adapter and branch naming."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gco.errors import ErrorCode, ExternalServiceError
from gco.validation import GitCLI, GitService, branch_name_for, parse_branch_name
from tests.conftest import FakeGit, make_task


class TestBranchNames:
    def test_branch_name_strips_at_sign(self):
        task = make_task("TASK-004", assigned="@claude")
        assert branch_name_for(task, "agent") == "agent/claude/TASK-004"

    def test_parse_branch_name(self):
        assert parse_branch_name("agent/aider/TASK-012") == ("aider", "TASK-012")

    def test_parse_with_custom_prefix(self):
        assert parse_branch_name("bots/aider/TASK-012", prefix="bots") == ("aider", "TASK-012")
        assert parse_branch_name("agent/aider/TASK-012", prefix="bots") is None

    @pytest.mark.parametrize(
        "branch",
        ["develop", "agent/aider", "agent/aider/fix-login", "feature/agent/aider/TASK-1"],
    )
    def test_parse_rejects_other_branches(self, branch):
        assert parse_branch_name(branch) is None


class TestGitCLI:
    """Tests for GitCLI with subprocess.run patched."""

    @pytest.fixture
    def git(self, tmp_path: Path) -> GitCLI:
        return GitCLI(tmp_path, timeout=5)

    @staticmethod
    def _completed(stdout: str) -> MagicMock:
        result = MagicMock()
        result.stdout = stdout
        return result

    def test_satisfies_protocol(self, git):
        assert isinstance(git, GitService)
        assert isinstance(FakeGit(), GitService)

    def test_branch_exists(self, git, tmp_path):
        with patch("gco.validation.git.subprocess.run") as run:
            run.return_value = self._completed("develop\nagent/claude/TASK-001\n")
            assert git.branch_exists("agent/claude/TASK-001")
            assert not git.branch_exists("agent/claude/TASK-002")

        args, kwargs = run.call_args
        assert args[0][:2] == ["git", "branch"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["timeout"] == 5
        assert kwargs["check"] is True

    def test_changed_files(self, git):
        with patch("gco.validation.git.subprocess.run") as run:
            run.return_value = self._completed("src/app.js\n\nsrc/login.js\n")
            files = git.changed_files("agent/claude/TASK-001", "develop")

        assert files == ["src/app.js", "src/login.js"]
        assert run.call_args[0][0] == [
            "git",
            "diff",
            "--name-only",
            "develop...agent/claude/TASK-001",
        ]

    def test_current_branch(self, git):
        with patch("gco.validation.git.subprocess.run") as run:
            run.return_value = self._completed("develop\n")
            assert git.current_branch() == "develop"

    def test_command_failure(self, git):
        error = subprocess.CalledProcessError(128, ["git", "diff"], stderr="fatal: bad revision\n")
        with patch("gco.validation.git.subprocess.run", side_effect=error):
            with pytest.raises(ExternalServiceError) as exc_info:
                git.changed_files("agent/claude/TASK-001", "develop")

        assert "bad revision" in exc_info.value.message
        assert exc_info.value.error_code == ErrorCode.SERVICE_UNAVAILABLE
        assert exc_info.value.details["returncode"] == 128

    def test_timeout(self, git):
        error = subprocess.TimeoutExpired(["git", "branch"], 5)
        with patch("gco.validation.git.subprocess.run", side_effect=error):
            with pytest.raises(ExternalServiceError) as exc_info:
                git.branch_exists("develop")

        assert exc_info.value.error_code == ErrorCode.TIMEOUT

    def test_git_missing(self, git):
        with patch("gco.validation.git.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(ExternalServiceError, match="not found"):
                git.branch_exists("develop")
