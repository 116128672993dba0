"""Append-only activity journal.

The journal keeps two views in sync:

    {project_root}/
    ├── DEVELOP_LOG.md          # public copy of current.md
    └── .gco-logs/
        ├── current.md          # today's partition (markdown)
        ├── index.json          # one record per append
        └── YYYY-MM-DD.md       # archived partitions

Entries in current.md are blocks of the form

    ### [HH:MM:SS] @agent - TASK-NNN - type
    message

and are only ever appended; archive() moves the whole partition away.
"""

import json
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from gco._utils import append_text, atomic_write_json, atomic_write_text, read_text
from gco.config import GcoSettings, get_settings
from gco.constants import DATE_FORMAT, STATUS_ICONS, TIME_FORMAT
from gco.logging import Loggers
from gco.models import EntryType, JournalEntry, normalize_handle

logger = Loggers.journal()

TABLE_HEADER = (
    "| Agente | Tarea | Estado | Rama | Última Actividad | Bloqueos |\n"
    "|--------|-------|--------|------|------------------|----------|"
)
TABLE_END = "\n---\n\n## 🚨"
ALERTS_HEADER = "## 🚨 Alertas de Consistencia (auto-generado por `gco validate`)\n"
ALERTS_END = "\n---\n\n## 📝"

ENTRY_PATTERN = re.compile(
    r"### \[(\d{2}:\d{2}:\d{2})\] @([\w-]+) - (\S+) - (\w+)\n(.*?)(?=\n### |\n## |\Z)",
    re.DOTALL,
)
PARTITION_DATE_PATTERN = re.compile(r"^# DEVELOP_LOG - (\d{4}-\d{2}-\d{2})", re.MULTILINE)
# Message lines that would read as an entry or section heading; one extra
# leading backslash is added on write and removed on read
HEADING_LINE = re.compile(r"^(\\*#{2,3} )", re.MULTILINE)
ESCAPED_HEADING_LINE = re.compile(r"^\\(\\*#{2,3} )", re.MULTILINE)


def render_header(date: str, project_name: str) -> str:
    """Fixed header of a fresh journal partition."""
    return f"""# DEVELOP_LOG - {date}

> Proyecto: {project_name}
> Agente responsable de actualizar: CUALQUIER agente que trabaje

---

## 📊 Estado de Agents (auto-generado por `gco status`)

{TABLE_HEADER}

---

{ALERTS_HEADER}
---

## 📝 Entradas de Log (cronológico, más reciente abajo)

"""


@dataclass
class AgentStatusRow:
    """One row of the agent status table."""

    agent: str
    task_id: str
    status: str
    status_text: str
    branch: str
    last_activity: str = "-"
    blocks: str = "Ninguno"

    def render(self) -> str:
        icon = STATUS_ICONS.get(self.status, "⏳")
        return (
            f"| {self.agent} | {self.task_id} | {icon} {self.status_text} | "
            f"`{self.branch}` | {self.last_activity} | {self.blocks} |"
        )


class ActivityJournal:
    """Chronological record of agent activity.

    Example:
        >>> journal = ActivityJournal(settings)
        >>> journal.append("claude", "TASK-001", EntryType.START, "Starting login form")
        >>> [e.message for e in journal.entries_for("TASK-001")]
        ['Starting login form']
    """

    def __init__(
        self,
        settings: GcoSettings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the journal.

        Args:
            settings: Project settings; defaults to get_settings().
            clock: Source of wall-clock time for entries and archive names.
        """
        self._settings = settings or get_settings()
        self._clock = clock

    @property
    def current_path(self) -> Path:
        return self._settings.current_log_file

    @property
    def index_path(self) -> Path:
        return self._settings.log_index_file

    def _fresh_header(self) -> str:
        return render_header(self._clock().strftime(DATE_FORMAT), self._settings.project_name)

    def ensure(self) -> None:
        """Create the current partition and the index if they are missing."""
        self._settings.logs_dir.mkdir(parents=True, exist_ok=True)
        if not self.current_path.exists():
            atomic_write_text(self.current_path, self._fresh_header())
            logger.debug("journal_partition_created", path=str(self.current_path))
        if not self.index_path.exists():
            atomic_write_json(self.index_path, {"entries": []})

    def _refresh_public_copy(self) -> None:
        if self.current_path.exists():
            atomic_write_text(self._settings.develop_log_file, read_text(self.current_path))

    def _rotate_stale_partition(self, today: str) -> None:
        # Archive under the partition's own date, not today's
        match = PARTITION_DATE_PATTERN.search(self.read_current())
        if match and match[1] != today:
            self.archive(match[1])

    def _load_index(self) -> list[dict]:
        if not self.index_path.exists():
            return []
        return json.loads(self.index_path.read_text(encoding="utf-8")).get("entries", [])

    def append(
        self,
        agent: str,
        task_id: str,
        entry_type: EntryType | str,
        message: str,
    ) -> JournalEntry:
        """Append an entry to the current partition and the index.

        The index is read before anything is written, so an unreadable
        index leaves both files untouched. Message lines that would read
        as a markdown heading ("## ", "### ") are escaped with a backslash
        in current.md and unescaped by entries_for; the index keeps the
        message as given.

        Args:
            agent: Agent handle, with or without "@".
            task_id: Task the entry refers to.
            entry_type: Entry kind.
            message: Entry text; must not be empty.

        Returns:
            The appended entry.

        Raises:
            ValueError: On an empty message or agent, an unknown entry
                type, or an index file that is not valid JSON.
        """
        if not message.strip():
            raise ValueError("Journal message must not be empty")
        entry_type = EntryType(entry_type)
        agent_name = normalize_handle(agent).lstrip("@")
        if not agent_name:
            raise ValueError("Journal agent must not be empty")
        now = self._clock()
        entry = JournalEntry(
            time=now.strftime(TIME_FORMAT),
            agent=agent_name,
            task_id=task_id,
            entry_type=entry_type,
            message=message,
            date=now.strftime(DATE_FORMAT),
        )
        entries = self._load_index()
        entries.append(entry.to_dict())
        body = HEADING_LINE.sub(r"\\\1", message)

        if self._settings.auto_archive:
            self._rotate_stale_partition(entry.date)
        self.ensure()
        append_text(
            self.current_path,
            f"### [{entry.time}] @{entry.agent} - {entry.task_id} - {entry_type.value}\n"
            f"{body}\n\n",
        )
        self._refresh_public_copy()
        atomic_write_json(self.index_path, {"entries": entries})

        logger.info(
            "journal_entry_appended",
            agent=entry.agent,
            task_id=task_id,
            entry_type=entry_type.value,
        )
        return entry

    def read_current(self) -> str:
        """Raw text of the current partition ("" if absent)."""
        return read_text(self.current_path)

    def entries_for(self, task_id: str) -> list[JournalEntry]:
        """Entries of the current partition for task_id, in append order."""
        content = self.read_current()
        date_match = PARTITION_DATE_PATTERN.search(content)
        date = date_match[1] if date_match else None
        entries = []
        for match in ENTRY_PATTERN.finditer(content):
            if match[3] != task_id:
                continue
            try:
                entry_type = EntryType(match[4])
            except ValueError:
                logger.debug("journal_entry_skipped", entry_type=match[4])
                continue
            entries.append(
                JournalEntry(
                    time=match[1],
                    agent=match[2],
                    task_id=match[3],
                    entry_type=entry_type,
                    message=ESCAPED_HEADING_LINE.sub(r"\1", match[5].strip()),
                    date=date,
                )
            )
        return entries

    def index_entries(
        self,
        task_id: str | None = None,
        agent: str | None = None,
    ) -> list[JournalEntry]:
        """Entries recorded in the index, across archives, with optional filters."""
        entries = [JournalEntry.from_dict(record) for record in self._load_index()]
        if task_id is not None:
            entries = [e for e in entries if e.task_id == task_id]
        if agent is not None:
            name = normalize_handle(agent).lstrip("@")
            entries = [e for e in entries if e.agent == name]
        return entries

    def _replace_region(self, start_marker: str, end_marker: str, body: str) -> bool:
        content = self.read_current()
        start = content.find(start_marker)
        if start == -1:
            return False
        end = content.find(end_marker, start)
        if end == -1:
            return False
        content = content[: start + len(start_marker)] + body + content[end:]
        atomic_write_text(self.current_path, content)
        self._refresh_public_copy()
        return True

    def update_status_table(self, rows: Iterable[AgentStatusRow]) -> bool:
        """Replace the agent status table rows.

        Returns:
            False, leaving the file untouched, if the table header or the
            following section marker is missing.
        """
        body = "".join(f"{row.render()}\n" for row in rows)
        replaced = self._replace_region(TABLE_HEADER + "\n", TABLE_END, body)
        if not replaced:
            logger.debug("status_table_not_found", path=str(self.current_path))
        return replaced

    def update_alerts(self, lines: Iterable[str]) -> bool:
        """Replace the consistency alerts section with the given lines.

        Same no-op rule as update_status_table.
        """
        lines = list(lines)
        body = "\n" + "\n".join(lines) + "\n" if lines else ""
        return self._replace_region(ALERTS_HEADER, ALERTS_END, body)

    def archive(self, date: str | None = None) -> Path | None:
        """Move the current partition into a dated file and start a fresh one.

        Content is appended when an archive for the same day exists.

        Args:
            date: Archive name (YYYY-MM-DD); defaults to today.

        Returns:
            Path of the archive, or None if there was nothing to archive.
        """
        content = self.read_current()
        if not content.strip():
            return None

        date = date or self._clock().strftime(DATE_FORMAT)
        archive_path = self._settings.logs_dir / f"{date}.md"
        if archive_path.exists():
            atomic_write_text(archive_path, read_text(archive_path) + "\n" + content)
        else:
            atomic_write_text(archive_path, content)

        atomic_write_text(self.current_path, self._fresh_header())
        self._refresh_public_copy()
        logger.info("journal_archived", path=str(archive_path))
        return archive_path
