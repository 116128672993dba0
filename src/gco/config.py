"""Configuration for gco projects.

Settings Management:
    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

Settings Loading Priority (highest to lowest):
    1. Constructor arguments
    2. Environment variables (GCO_* prefix, GCO_GITHUB__TOKEN for nested)
    3. Project config (<project_root>/.gco/config.json)
    4. .env file
    5. Default values
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Generator, Tuple, Type

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings as PydanticBaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gco.constants import CONFIG_FILE, GCO_DIR
from gco.errors import ProjectNotFoundError
from gco.logging import Loggers, bind_context, configure_logging
from gco.settings_mixins import (
    LoggingSettingsMixin,
    ProjectSettingsMixin,
    find_project_root,
)

logger = Loggers.config()

__all__ = [
    "GcoSettings",
    "GitHubSettings",
    "SettingsContext",
    "ensure_project",
    "find_project_root",
    "get_settings",
    "open_project",
    "set_settings",
    "set_context_settings",
    "reload_settings",
]


class GitHubSettings(BaseModel):
    """Repository coordinates used by issue synchronization."""

    owner: str = ""
    repo: str = ""
    token: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.owner and self.repo)


class GcoSettings(ProjectSettingsMixin, LoggingSettingsMixin, PydanticBaseSettings):
    """Settings for a gco project.

    Mixins provide organized settings:
    - ProjectSettingsMixin: project root and file layout
    - LoggingSettingsMixin: log level and format
    """

    model_config = SettingsConfigDict(
        env_prefix="GCO_",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    main_branch: str = Field(
        default="develop",
        description="Branch agent branches are diffed and merged against",
    )
    branch_prefix: str = Field(
        default="agent",
        description="First segment of agent branch names (<prefix>/<agent>/<task>)",
    )
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    auto_archive: bool = Field(
        default=False,
        description="Archive the journal partition automatically at day end",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Layer the project's .gco/config.json between env and .env.

        The config file belongs to the project_root being configured:
        an explicit root (constructor argument or GCO_PROJECT_ROOT) is
        used as given, otherwise the root is discovered from the working
        directory. Nothing is added when the file does not exist.
        """
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]

        explicit_root = init_settings().get("project_root") or env_settings().get("project_root")
        if explicit_root:
            root: Path | None = Path(explicit_root).expanduser()
        else:
            root = find_project_root(Path.cwd())

        if root is not None:
            json_file = root / GCO_DIR / CONFIG_FILE
            if json_file.exists():
                logger.debug("project_config_found", path=str(json_file))
                sources.append(
                    JsonConfigSettingsSource(settings_cls, json_file=json_file)
                )

        sources.append(dotenv_settings)
        return tuple(sources)


def ensure_project(start: Path | None = None) -> Path:
    """Return the project root above start, or raise ProjectNotFoundError."""
    start = start or Path.cwd()
    root = find_project_root(start)
    if root is None:
        logger.warning("project_not_found", start=str(start))
        raise ProjectNotFoundError(str(start))
    return root


def open_project(start: Path | None = None) -> GcoSettings:
    """Prepare one invocation against the project above start.

    Finds the project root, loads its settings, makes them the global
    settings, configures logging from them and binds the project name to
    every later log event.

    Raises:
        ProjectNotFoundError: If no .gco directory exists above start.
    """
    root = ensure_project(start)
    settings = GcoSettings(project_root=root)
    set_settings(settings)
    configure_logging(settings)
    bind_context(project=settings.project_name)
    logger.debug("project_opened", root=str(root))
    return settings


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[GcoSettings | None] = ContextVar(
    "settings_context", default=None
)

_settings_instance: GcoSettings | None = None


def get_settings() -> GcoSettings:
    """Get the current settings instance.

    Resolution order: context variable, then global singleton, then a
    fresh GcoSettings created on first access.
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = GcoSettings()
    return _settings_instance


def set_settings(settings: GcoSettings) -> None:
    """Set the global settings instance."""
    global _settings_instance
    _settings_instance = settings


def set_context_settings(settings: GcoSettings | None) -> Token:
    """Set settings for the current context.

    Returns:
        Token that can be used to reset the context variable.
    """
    return _settings_context.set(settings)


@contextmanager
def SettingsContext(settings: GcoSettings) -> Generator[GcoSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            store = TaskStore()  # Uses test_settings
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> GcoSettings:
    """Clear the global singleton and context, then rebuild settings."""
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()
