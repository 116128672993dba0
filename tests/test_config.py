"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from gco.config import (
    GcoSettings,
    SettingsContext,
    ensure_project,
    find_project_root,
    get_settings,
    reload_settings,
    set_context_settings,
    set_settings,
)
from gco.errors import ErrorCode, ProjectNotFoundError


class TestGcoSettings:
    """Tests for GcoSettings class."""

    def test_default_values(self, project_root: Path):
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.main_branch == "develop"
        assert settings.branch_prefix == "agent"
        assert settings.log_level == "warning"
        assert settings.log_format == "console"
        assert settings.auto_archive is False
        assert not settings.github.is_configured

    def test_derived_paths(self, project_root: Path):
        """Test derived file paths."""
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.project_name == "shop"
        assert settings.gco_dir == project_root / ".gco"
        assert settings.config_file == project_root / ".gco" / "config.json"
        assert settings.tasks_file == project_root / "tasks.md"
        assert settings.logs_dir == project_root / ".gco-logs"
        assert settings.current_log_file == project_root / ".gco-logs" / "current.md"
        assert settings.log_index_file == project_root / ".gco-logs" / "index.json"
        assert settings.develop_log_file == project_root / "DEVELOP_LOG.md"

    def test_project_root_expansion(self):
        """Test that ~ is expanded in project_root."""
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root="~/shop")

        assert settings.project_root == Path.home() / "shop"

    def test_env_override(self, project_root: Path):
        with patch.dict(os.environ, {"GCO_MAIN_BRANCH": "main"}, clear=True):
            settings = GcoSettings(project_root=project_root)
        assert settings.main_branch == "main"

    def test_nested_env(self, project_root: Path):
        """Nested GitHub settings use the double-underscore delimiter."""
        env = {
            "GCO_GITHUB__OWNER": "acme",
            "GCO_GITHUB__REPO": "shop",
            "GCO_GITHUB__TOKEN": "ghp_test",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.github.token == "ghp_test"
        assert settings.github.is_configured

    def test_invalid_log_level(self, project_root: Path):
        with patch.dict(os.environ, {"GCO_LOG_LEVEL": "loud"}, clear=True):
            with pytest.raises(ValueError):
                GcoSettings(project_root=project_root)


class TestProjectConfigFile:
    """Tests for .gco/config.json loading."""

    @pytest.fixture
    def write_config(self, project_root: Path, monkeypatch):
        monkeypatch.chdir(project_root)

        def _write(data: dict) -> None:
            (project_root / ".gco" / "config.json").write_text(json.dumps(data), encoding="utf-8")

        return _write

    def test_values_are_loaded(self, project_root: Path, write_config):
        write_config({"main_branch": "main", "github": {"owner": "acme", "repo": "shop"}})
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.main_branch == "main"
        assert settings.github.owner == "acme"

    def test_found_from_subdirectory(self, project_root: Path, write_config, monkeypatch):
        write_config({"branch_prefix": "bots"})
        nested = project_root / "src" / "components"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings()

        assert settings.branch_prefix == "bots"
        assert settings.project_root == project_root.resolve()

    def test_explicit_root_outside_cwd(self, project_root: Path, tmp_path: Path, monkeypatch):
        """The config file is read from project_root, not the working directory."""
        (project_root / ".gco" / "config.json").write_text(
            json.dumps({"main_branch": "main"}), encoding="utf-8"
        )
        sibling = tmp_path / "elsewhere"
        sibling.mkdir()
        monkeypatch.chdir(sibling)

        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.main_branch == "main"

    def test_cwd_project_does_not_leak(self, project_root: Path, tmp_path: Path, monkeypatch):
        """Another project's config in the working directory is ignored."""
        other = tmp_path / "other"
        (other / ".gco").mkdir(parents=True)
        (other / ".gco" / "config.json").write_text(
            json.dumps({"branch_prefix": "bots"}), encoding="utf-8"
        )
        monkeypatch.chdir(other)

        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.branch_prefix == "agent"

    def test_root_from_environment(self, project_root: Path, tmp_path: Path, monkeypatch):
        (project_root / ".gco" / "config.json").write_text(
            json.dumps({"main_branch": "main"}), encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, {"GCO_PROJECT_ROOT": str(project_root)}, clear=True):
            settings = GcoSettings()

        assert settings.project_root == project_root
        assert settings.main_branch == "main"

    def test_env_wins_over_file(self, project_root: Path, write_config):
        write_config({"main_branch": "main"})
        with patch.dict(os.environ, {"GCO_MAIN_BRANCH": "trunk"}, clear=True):
            settings = GcoSettings(project_root=project_root)
        assert settings.main_branch == "trunk"

    def test_unknown_keys_are_ignored(self, project_root: Path, write_config):
        write_config({"mainBranch": "main", "autoArchive": True})
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root)

        assert settings.main_branch == "develop"
        assert settings.auto_archive is False


class TestProjectDiscovery:
    def test_find_from_root(self, project_root: Path):
        assert find_project_root(project_root) == project_root.resolve()

    def test_find_from_subdirectory(self, project_root: Path):
        nested = project_root / "a" / "b"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == project_root.resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_project_root(tmp_path / "nowhere") is None

    def test_ensure_project(self, project_root: Path):
        assert ensure_project(project_root) == project_root.resolve()

    def test_ensure_project_missing(self, tmp_path: Path):
        bare = tmp_path / "bare"
        bare.mkdir()
        with pytest.raises(ProjectNotFoundError) as exc_info:
            ensure_project(bare)

        assert exc_info.value.error_code == ErrorCode.PROJECT_NOT_FOUND
        assert "gco init" in exc_info.value.message


class TestSettingsManagement:
    """Tests for the settings singleton and context."""

    def test_context_takes_precedence(self, project_root: Path):
        """Test that context settings override the global singleton."""
        with patch.dict(os.environ, {}, clear=True):
            global_settings = GcoSettings(project_root=project_root, main_branch="main")
            context_settings = GcoSettings(project_root=project_root, main_branch="trunk")

        set_settings(global_settings)
        try:
            assert get_settings() is global_settings
            with SettingsContext(context_settings) as s:
                assert s is context_settings
                assert get_settings() is context_settings
            assert get_settings() is global_settings
        finally:
            reload_settings()

    def test_reload_creates_new_instance(self, project_root: Path):
        with patch.dict(os.environ, {}, clear=True):
            custom = GcoSettings(project_root=project_root)
        set_settings(custom)

        reloaded = reload_settings()

        assert reloaded is not custom

    def test_set_context_settings(self, project_root: Path):
        """Test setting and clearing context settings directly."""
        with patch.dict(os.environ, {}, clear=True):
            custom = GcoSettings(project_root=project_root, branch_prefix="bots")

        try:
            set_context_settings(custom)
            assert get_settings() is custom
            set_context_settings(None)
            assert get_settings() is not custom
        finally:
            reload_settings()
