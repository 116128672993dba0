"""Task board format: parsing and generation of tasks.md.

The board is a markdown document. Each task starts with a header line

    ## TASK-001 [STATUS:pending] [ASSIGNED:@claude]

followed by bold-label field lines and a closing ``---``. Parsing never
fails: every line is first classified into a LineKind, then fed to a
small accumulator whose state is the field region currently being read
(description, criteria or notes). Lines no field claims are kept on the
task and written back by the generator.

Example:
    >>> tasks, meta = parse_board(text)
    >>> text == generate_board(tasks, meta)  # for canonical documents
    True
"""

import re
from datetime import datetime
from enum import Enum
from typing import Iterable, NamedTuple

from gco.constants import EMPTY_FIELD, NO_DEPENDENCIES, TIMESTAMP_FORMAT
from gco.models import (
    HANDLE_CHARS,
    TASK_ID_PATTERN,
    BoardMetadata,
    Criterion,
    Task,
    TaskStatus,
    normalize_handle,
)

HEADER_PATTERN = re.compile(
    r"^## (TASK-\d+)\s+"
    r"\[STATUS:(pending|in-progress|blocked|completed|review)\]\s+"
    rf"\[ASSIGNED:(@{HANDLE_CHARS}+)?\]"
)
CHECKBOX_PATTERN = re.compile(r"^- \[([ xX])\]\s*(.+)$")
LAST_SYNC_PATTERN = re.compile(r">\s*Última sincronización:\s*(.+)")
TOTALS_PATTERN = re.compile(
    r">\s*Total tareas:\s*(\d+)\s*\|\s*Completadas:\s*(\d+)\s*\|"
    r"\s*En progreso:\s*(\d+)\s*\|\s*Pendientes:\s*(\d+)"
)


class LineKind(Enum):
    """Classification of a single board line."""

    HEADER = "header"
    TITLE = "title"
    DESCRIPTION = "description"
    CRITERIA = "criteria"
    DEPENDENCIES = "dependencies"
    NOTES = "notes"
    COMPLETED = "completed"
    BLOCKED_SINCE = "blocked_since"
    BLOCK_REASON = "block_reason"
    GITHUB_ISSUE = "github_issue"
    CHECKBOX = "checkbox"
    SEPARATOR = "separator"
    BLANK = "blank"
    TEXT = "text"


class ClassifiedLine(NamedTuple):
    kind: LineKind
    groups: tuple[str, ...] = ()


# Field markers, tried in order; group 1 is the inline value
FIELD_MARKERS: list[tuple[LineKind, re.Pattern[str]]] = [
    (LineKind.TITLE, re.compile(r"^\*\*Título:\*\*\s*(.*)$")),
    (LineKind.DESCRIPTION, re.compile(r"^\*\*Descripción:\*\*\s*(.*)$")),
    (LineKind.CRITERIA, re.compile(r"^\*\*Criterios de aceptación:\*\*\s*(.*)$")),
    (LineKind.DEPENDENCIES, re.compile(r"^\*\*Dependencias:\*\*\s*(.*)$")),
    (LineKind.NOTES, re.compile(r"^\*\*Notas técnicas:\*\*\s*(.*)$")),
    (LineKind.COMPLETED, re.compile(r"^\*\*Completada:\*\*\s*(.*)$")),
    (LineKind.BLOCKED_SINCE, re.compile(r"^\*\*Bloqueada desde:\*\*\s*(.*)$")),
    (LineKind.BLOCK_REASON, re.compile(r"^\*\*Razón bloqueo:\*\*\s*(.*)$")),
    (LineKind.GITHUB_ISSUE, re.compile(r"^\*\*GitHub Issue:\*\*\s*#?(\d+)")),
]

# Single-line fields: attribute name and the placeholder meaning "empty"
SCALAR_FIELDS: dict[LineKind, tuple[str, str | None]] = {
    LineKind.TITLE: ("title", None),
    LineKind.DEPENDENCIES: ("dependencies", NO_DEPENDENCIES),
    LineKind.COMPLETED: ("completed", EMPTY_FIELD),
    LineKind.BLOCKED_SINCE: ("blocked_since", None),
    LineKind.BLOCK_REASON: ("block_reason", None),
}


def classify_line(line: str) -> ClassifiedLine:
    """Classify one line of the board."""
    header = HEADER_PATTERN.match(line)
    if header:
        return ClassifiedLine(LineKind.HEADER, (header[1], header[2], header[3] or ""))

    for kind, pattern in FIELD_MARKERS:
        match = pattern.match(line)
        if match:
            return ClassifiedLine(kind, (match[1].strip(),))

    checkbox = CHECKBOX_PATTERN.match(line)
    if checkbox:
        return ClassifiedLine(LineKind.CHECKBOX, (checkbox[1], checkbox[2].strip()))

    stripped = line.strip()
    if stripped == "---":
        return ClassifiedLine(LineKind.SEPARATOR)
    if not stripped:
        return ClassifiedLine(LineKind.BLANK)
    return ClassifiedLine(LineKind.TEXT)


class Region(Enum):
    """Multi-line field currently being accumulated."""

    NONE = "none"
    DESCRIPTION = "description"
    CRITERIA = "criteria"
    NOTES = "notes"
    CLOSED = "closed"  # after the task's closing ---


# Multi-line fields whose inner blank lines are kept
TEXT_REGIONS = {Region.DESCRIPTION: "description", Region.NOTES: "notes"}


def _continues_text(classified: ClassifiedLine, line: str) -> bool:
    return classified.kind in (LineKind.TEXT, LineKind.CHECKBOX) and line.strip() != EMPTY_FIELD


def _append_line(existing: str, line: str) -> str:
    return f"{existing}\n{line}" if existing else line


def _accumulate(task: Task, region: Region, classified: ClassifiedLine, line: str) -> Region:
    """Apply one classified line to task, returning the next region."""
    kind, groups = classified

    if kind in SCALAR_FIELDS:
        attr, placeholder = SCALAR_FIELDS[kind]
        value = groups[0]
        setattr(task, attr, "" if value == placeholder else value)
        return Region.NONE

    if kind is LineKind.DESCRIPTION:
        task.description = groups[0]
        return Region.DESCRIPTION

    if kind is LineKind.CRITERIA:
        return Region.CRITERIA

    if kind is LineKind.NOTES:
        inline = groups[0]
        if inline and inline != EMPTY_FIELD:
            task.notes = inline
        return Region.NOTES

    if kind is LineKind.GITHUB_ISSUE:
        task.github_issue = int(groups[0])
        return Region.NONE

    if kind is LineKind.SEPARATOR:
        return Region.CLOSED

    if kind is LineKind.BLANK or region is Region.CLOSED:
        return region

    # Remaining kinds: CHECKBOX and TEXT
    if region is Region.CRITERIA and kind is LineKind.CHECKBOX:
        task.criteria.append(Criterion(text=groups[1], done=groups[0] in "xX"))
    elif region is Region.DESCRIPTION:
        task.description = _append_line(task.description, line)
    elif region is Region.NOTES:
        if line.strip() != EMPTY_FIELD:
            task.notes = _append_line(task.notes, line)
    else:
        task.extra_lines.append(line)
    return region


def _read_metadata(line: str, metadata: BoardMetadata) -> None:
    sync = LAST_SYNC_PATTERN.search(line)
    if sync:
        metadata.last_sync = sync[1].strip()
        return
    totals = TOTALS_PATTERN.search(line)
    if totals:
        metadata.total, metadata.completed, metadata.in_progress, metadata.pending = (
            int(g) for g in totals.groups()
        )


def parse_board(text: str) -> tuple[list[Task], BoardMetadata]:
    """Parse board text into tasks and summary metadata.

    Never raises on malformed input. A task runs from its header to the
    next header or the end of the document; lines before the first
    header are only scanned for the summary block.

    Args:
        text: Full board document.

    Returns:
        Tasks in document order and the summary metadata.
    """
    tasks: list[Task] = []
    metadata = BoardMetadata()
    current: Task | None = None
    region = Region.NONE
    pending_blanks = 0

    for line in text.split("\n"):
        classified = classify_line(line)

        if classified.kind is LineKind.HEADER:
            task_id, status, assigned = classified.groups
            current = Task(id=task_id, status=TaskStatus(status), assigned=assigned)
            tasks.append(current)
            region = Region.NONE
            pending_blanks = 0
            continue

        if current is None:
            _read_metadata(line, metadata)
            continue

        current.raw_lines.append(line)

        # Blank lines inside a text field only count if more text follows
        if region in TEXT_REGIONS:
            if classified.kind is LineKind.BLANK:
                pending_blanks += 1
                continue
            if pending_blanks and _continues_text(classified, line):
                attr = TEXT_REGIONS[region]
                value = getattr(current, attr)
                if value:
                    setattr(current, attr, value + "\n" * pending_blanks)
        pending_blanks = 0

        region = _accumulate(current, region, classified, line)

    return tasks, metadata


def next_task_id(tasks: Iterable[Task]) -> str:
    """Return the id following the highest numbered task.

    Ids are zero-padded to three digits and grow past TASK-999 by
    taking more digits.
    """
    highest = 0
    for task in tasks:
        match = TASK_ID_PATTERN.search(task.id)
        if match:
            highest = max(highest, int(match[1]))
    return f"TASK-{highest + 1:03d}"


def _status_counts(tasks: list[Task]) -> tuple[int, int, int]:
    statuses = [TaskStatus(t.status) for t in tasks]
    completed = statuses.count(TaskStatus.COMPLETED)
    in_progress = statuses.count(TaskStatus.IN_PROGRESS)
    pending = sum(
        1
        for s in statuses
        if s in (TaskStatus.PENDING, TaskStatus.BLOCKED, TaskStatus.REVIEW)
    )
    return completed, in_progress, pending


def render_task(task: Task) -> str:
    """Render one task block, including its closing separator."""
    status = TaskStatus(task.status)
    lines = [
        "",
        f"## {task.id} [STATUS:{status.value}] [ASSIGNED:{normalize_handle(task.assigned)}]",
        f"**Título:** {task.title}",
        f"**Descripción:** {task.description}",
        "**Criterios de aceptación:**",
    ]
    lines.extend(f"- [{'x' if c.done else ' '}] {c.text}" for c in task.criteria)
    lines.append(f"**Dependencias:** {task.dependencies or NO_DEPENDENCIES}")
    lines.append("**Notas técnicas:**")
    lines.append(task.notes or EMPTY_FIELD)
    if task.github_issue:
        lines.append(f"**GitHub Issue:** #{task.github_issue}")
    lines.append(f"**Completada:** {task.completed or EMPTY_FIELD}")
    if status is TaskStatus.BLOCKED:
        lines.append(f"**Bloqueada desde:** {task.blocked_since}")
        lines.append(f"**Razón bloqueo:** {task.block_reason}")
    lines.extend(task.extra_lines)
    lines.extend(["", "---", ""])
    return "\n".join(lines)


def generate_board(
    tasks: list[Task],
    metadata: BoardMetadata | None = None,
    now: datetime | None = None,
) -> str:
    """Render the full board document.

    Summary counts are always recomputed from tasks. The last sync stamp
    comes from metadata, falling back to now when metadata has none.

    Args:
        tasks: Tasks in the order they should appear.
        metadata: Previous summary metadata.
        now: Clock value for a missing last sync stamp.

    Returns:
        The board text.
    """
    metadata = metadata or BoardMetadata()
    last_sync = metadata.last_sync or (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    completed, in_progress, pending = _status_counts(tasks)

    parts = [
        "# Backlog de Tareas\n"
        "\n"
        f"> Última sincronización: {last_sync}\n"
        f"> Total tareas: {len(tasks)} | Completadas: {completed} | "
        f"En progreso: {in_progress} | Pendientes: {pending}\n"
        "\n"
        "---\n"
    ]
    parts.extend(render_task(task) for task in tasks)
    parts.append(BOARD_LEGEND)
    return "".join(parts)


BOARD_LEGEND = """
## Leyenda de Estados

- `[STATUS:pending]` - Tarea creada, sin empezar, sin asignar o asignada pero no iniciada
- `[STATUS:in-progress]` - Agente trabajando activamente
- `[STATUS:blocked]` - Bloqueada por dependencias o esperando a otro agente
- `[STATUS:completed]` - Terminada, revisada y mergeada a develop
- `[STATUS:review]` - Terminada, esperando aprobación del humano

## Leyenda de Asignación

- `[ASSIGNED:]` - Sin asignar (cualquier agente puede tomarla)
- `[ASSIGNED:@vscode]` - Asignada a agente VS Code
- `[ASSIGNED:@copilot]` - Asignada a agente Copilot CLI
- `[ASSIGNED:@claude]` - Asignada a agente Claude CLI
- `[ASSIGNED:@cursor]` - Asignada a agente Cursor Agent
- `[ASSIGNED:@windsurf]` - Asignada a agente Windsurf Agent
- `[ASSIGNED:@aider]` - Asignada a agente Aider CLI
- `[ASSIGNED:@codex]` - Asignada a agente OpenAI Codex CLI
- `[ASSIGNED:@nombre]` - Otros agents (extensible)

## Reglas para Agents

> ⚠️ **NO edites este archivo manualmente.** Usa los comandos `gco task` para gestionar tareas.

1. **Crear tarea:** `gco task create --title "Mi tarea"`
2. **Tomar tarea:** El orquestador asigna con `gco assign TASK-XXX agente`
3. **Iniciar trabajo:** `gco task status TASK-XXX in-progress`
4. **Completar tarea:** `gco task status TASK-XXX review`
5. **Bloquear tarea:** `gco task status TASK-XXX blocked`
6. **Nunca borrar tareas:** Solo cambiar status
7. **Ver estado:** `gco status` o `gco task list`

## Ejemplo de Tarea

El formato de cada tarea en este archivo es:

- Encabezado: `## TASK-NNN [STATUS:estado] [ASSIGNED:@agente]`
- Campos: **Título**, **Descripción**, **Criterios de aceptación** (checkboxes), **Dependencias**, **Notas técnicas**, **Completada**
- Separador: `---` al final de cada tarea

Para crear tareas usa: `gco task create --title "Mi tarea"`
Para cambiar estado usa: `gco task status TASK-NNN review`
"""
