"""structlog setup for gco.

configure_logging() is called once per invocation by open_project();
until then structlog's defaults apply. Module loggers come from the
Loggers factory so each component logs under its own name:

    logger = Loggers.journal()
    logger.info("journal_entry_appended", task_id="TASK-001")
"""

import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from gco.config import GcoSettings

_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}


def _renderer(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(settings: "GcoSettings | None" = None) -> None:
    """Install the processor chain for settings.log_level and settings.log_format.

    Output goes to stderr so that stdout stays free for command output.
    """
    level = _LEVELS[settings.log_level] if settings is not None else _LEVELS["warning"]
    log_format = settings.log_format if settings is not None else "console"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            *_renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_context(**kwargs: object) -> None:
    """Attach key-value pairs to every later log call in this context.

    Example:
        bind_context(project="shop")
        logger.info("board_loaded")  # includes project="shop"
    """
    structlog.contextvars.bind_contextvars(**kwargs)


class Loggers:
    """Named loggers for gco components."""

    @staticmethod
    def tasks() -> structlog.stdlib.BoundLogger:
        """Board parsing, the task store and issue sync."""
        return get_logger("gco.tasks")

    @staticmethod
    def journal() -> structlog.stdlib.BoundLogger:
        return get_logger("gco.journal")

    @staticmethod
    def validator() -> structlog.stdlib.BoundLogger:
        """Consistency checks and agent status collection."""
        return get_logger("gco.validator")

    @staticmethod
    def git() -> structlog.stdlib.BoundLogger:
        return get_logger("gco.git")

    @staticmethod
    def config() -> structlog.stdlib.BoundLogger:
        return get_logger("gco.config")
