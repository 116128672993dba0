"""Tests for logging configuration."""

import io
import json
import os
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import structlog

from gco.config import GcoSettings, get_settings, open_project, reload_settings
from gco.errors import ProjectNotFoundError
from gco.logging import Loggers, bind_context, configure_logging


@pytest.fixture
def stderr(monkeypatch) -> io.StringIO:
    """Replace stderr with a buffer that outlives the test.

    Loggers cached after configure_logging keep writing to it. The buffer
    is installed on the sys seen by gco.logging, because pytest's capture
    reinstalls its own sys.stderr when the call phase starts.
    """
    buffer = io.StringIO()
    monkeypatch.setattr("gco.logging.sys", SimpleNamespace(stderr=buffer))
    yield buffer
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def _last_record(buffer: io.StringIO) -> dict:
    return json.loads(buffer.getvalue().strip().splitlines()[-1])


class TestConfigureLogging:
    def test_json_output(self, project_root, stderr):
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root, log_level="info", log_format="json")
        configure_logging(settings)
        bind_context(project="shop")

        structlog.get_logger("gco.test").info("board_loaded", task_count=3)

        record = _last_record(stderr)
        assert record["event"] == "board_loaded"
        assert record["project"] == "shop"
        assert record["task_count"] == 3
        assert record["level"] == "info"

    def test_level_filters_debug(self, project_root, stderr):
        with patch.dict(os.environ, {}, clear=True):
            settings = GcoSettings(project_root=project_root, log_level="warning", log_format="json")
        configure_logging(settings)

        structlog.get_logger("gco.test").debug("hidden")

        assert "hidden" not in stderr.getvalue()

    def test_component_loggers(self):
        for factory in (Loggers.tasks, Loggers.journal, Loggers.validator, Loggers.git, Loggers.config):
            assert factory() is not None


class TestOpenProject:
    def test_configures_settings_and_logging(self, project_root: Path, stderr):
        (project_root / ".gco" / "config.json").write_text(
            json.dumps({"main_branch": "main", "log_level": "info", "log_format": "json"}),
            encoding="utf-8",
        )
        nested = project_root / "src"
        nested.mkdir()

        try:
            with patch.dict(os.environ, {}, clear=True):
                settings = open_project(nested)

            assert settings.project_root == project_root.resolve()
            assert settings.main_branch == "main"
            assert get_settings() is settings

            structlog.get_logger("gco.test").info("task_added", task_id="TASK-001")
            assert _last_record(stderr)["project"] == "shop"
        finally:
            reload_settings()

    def test_missing_project(self, tmp_path: Path):
        with pytest.raises(ProjectNotFoundError):
            open_project(tmp_path)
