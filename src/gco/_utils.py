"""Shared file utilities.

Every gco file is rewritten whole; there is no locking, so the last
writer wins when two invocations overlap.
"""

import json
from pathlib import Path
from typing import Any


def atomic_write_text(path: Path, content: str) -> None:
    """Write text to a file atomically.

    Writes to a temporary sibling first, then renames over the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.replace(path)


def atomic_write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write JSON data to a file atomically."""
    atomic_write_text(path, json.dumps(data, indent=indent, ensure_ascii=False))


def read_text(path: Path) -> str:
    """Read a UTF-8 file, returning an empty string if it is missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def append_text(path: Path, content: str) -> None:
    """Append text to a UTF-8 file, creating it if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(content)
