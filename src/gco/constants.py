"""Shared constants for gco."""

GCO_DIR = ".gco"
GCO_LOGS_DIR = ".gco-logs"
CONFIG_FILE = "config.json"
TASKS_FILE = "tasks.md"
DEVELOP_LOG_FILE = "DEVELOP_LOG.md"
CURRENT_LOG_FILE = "current.md"
LOG_INDEX_FILE = "index.json"

# Timestamp layouts used inside the markdown documents
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"

STATUS_ICONS = {
    "pending": "⏳",
    "in-progress": "🟡",
    "blocked": "🔴",
    "completed": "✅",
    "review": "👀",
}

# Placeholders written by the board generator for empty fields
EMPTY_FIELD = "(vacío)"
NO_DEPENDENCIES = "Ninguna"
NO_BRANCH = "(sin rama)"

# Agent and task id used for entries that are not tied to a task
SYSTEM_AGENT = "sistema"
SYNC_TASK_ID = "SYNC"


def truncate(text: str, max_length: int = 200) -> str:
    """Cut text to max_length characters."""
    return text[:max_length]
