"""Settings mixins for project layout and logging.

ProjectSettingsMixin: project root discovery and the on-disk layout of
the board, journal and config files.
LoggingSettingsMixin: log verbosity and output format.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from gco.constants import (
    CONFIG_FILE,
    CURRENT_LOG_FILE,
    DEVELOP_LOG_FILE,
    GCO_DIR,
    GCO_LOGS_DIR,
    LOG_INDEX_FILE,
    TASKS_FILE,
)


def find_project_root(start: Path) -> Path | None:
    """Walk up from start looking for a directory holding a .gco marker.

    Args:
        start: Directory to begin the search from.

    Returns:
        The first ancestor (or start itself) containing .gco, or None.
    """
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / GCO_DIR).is_dir():
            return candidate
    return None


def _default_project_root() -> Path:
    cwd = Path.cwd()
    return find_project_root(cwd) or cwd


class ProjectSettingsMixin(BaseModel):
    """Settings for the project location and derived file paths."""

    project_root: Path = Field(
        default_factory=_default_project_root,
        title="Project Root",
        description="Directory holding .gco, tasks.md and the journal",
    )

    @field_validator("project_root", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand ~ in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @property
    def project_name(self) -> str:
        return self.project_root.name

    @property
    def gco_dir(self) -> Path:
        return self.project_root / GCO_DIR

    @property
    def config_file(self) -> Path:
        return self.gco_dir / CONFIG_FILE

    @property
    def tasks_file(self) -> Path:
        """The task board document."""
        return self.project_root / TASKS_FILE

    @property
    def logs_dir(self) -> Path:
        """Directory for the current journal partition, archives and index."""
        return self.project_root / GCO_LOGS_DIR

    @property
    def current_log_file(self) -> Path:
        return self.logs_dir / CURRENT_LOG_FILE

    @property
    def log_index_file(self) -> Path:
        return self.logs_dir / LOG_INDEX_FILE

    @property
    def develop_log_file(self) -> Path:
        """Public copy of the current journal partition."""
        return self.project_root / DEVELOP_LOG_FILE


class LoggingSettingsMixin(BaseModel):
    """Settings for log output."""

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )
