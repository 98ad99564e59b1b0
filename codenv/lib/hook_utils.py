"""Shared utilities for hook implementations.

Provides:
- Text shaping for terminal messages (truncation, previews, timeouts)
- Path display relative to the project root
- File counting for scope tracking
- Tolerant coercion of loosely-typed JSON values
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def truncate_text(text: str, max_len: int) -> str:
    """Cut `text` to `max_len` characters, ending in '...' when shortened."""
    if len(text) > max_len:
        return text[: max_len - 3] + "..."
    return text


def preview_text(text: str, max_len: int = 100) -> str:
    """Single-line preview: first `max_len` characters, newlines flattened."""
    preview = text[:max_len].replace("\n", " ")
    if len(text) > max_len:
        preview += "..."
    return preview


def format_timeout(ms: int) -> str:
    """Human-readable timeout: whole minutes from 60s up, seconds below."""
    seconds = ms // 1000
    if seconds >= 60:
        return f"{seconds // 60} min"
    return f"{seconds}s"


def format_elapsed(seconds: float) -> str:
    seconds = max(0, int(seconds))
    if seconds >= 60:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds}s"


def relative_display_path(file_path: str, root: Path) -> str:
    """Strip the `root/` prefix from `file_path` if present."""
    prefix = str(root).rstrip("/") + "/"
    if file_path.startswith(prefix):
        return file_path[len(prefix) :]
    return file_path


def count_files(folder: Path, pattern: str = "*.md") -> int:
    """Count files matching `pattern` anywhere under `folder`; 0 if missing."""
    if not folder.is_dir():
        return 0
    try:
        return sum(1 for p in folder.rglob(pattern) if p.is_file())
    except OSError as e:
        logger.warning("Could not count files in %s: %s", folder, e)
        return 0


def as_int(value: Any, default: int) -> int:
    """Coerce a JSON value to int, falling back to `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def as_text(value: Any, default: str) -> str:
    """Coerce a JSON value to a non-empty string, like jq's `// default`."""
    if value is None or value is False or value == "":
        return default
    return str(value)
