"""Activity journal for agent reports.

Example:
    >>> from gco.journal import ActivityJournal
    >>> journal = ActivityJournal(settings)
    >>> journal.ensure()
    >>> journal.append("claude", "TASK-001", "start", "Picking up the login form")
"""

from gco.journal.store import ActivityJournal, AgentStatusRow, render_header

__all__ = [
    "ActivityJournal",
    "AgentStatusRow",
    "render_header",
]
