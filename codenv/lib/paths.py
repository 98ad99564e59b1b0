#!/usr/bin/env python3
"""
Path resolution for the codenv hooks package.

Package-internal paths resolve relative to this file. Project paths come from
$CLAUDE_PROJECT_DIR, which the host sets during hook execution, falling back
to the current directory for direct invocation.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def get_package_root() -> Path:
    """Root of the codenv package (this file lives in <root>/lib/paths.py)."""
    return Path(__file__).resolve().parent.parent


def get_templates_dir() -> Path:
    return get_package_root() / "hooks" / "templates"


def get_project_dir() -> Path:
    """Project root the host is working in."""
    project_dir = os.environ.get("CLAUDE_PROJECT_DIR")
    if project_dir:
        return Path(project_dir).resolve()
    return Path.cwd().resolve()


def get_project_hooks_dir() -> Path:
    return get_project_dir() / ".claude" / "hooks"


def get_default_log_dir() -> Path:
    return get_project_hooks_dir() / "logs"


def get_git_toplevel(cwd: Path | None = None) -> Path | None:
    """Top of the enclosing git work tree, or None outside a repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git rev-parse failed: %s", e)
        return None
    if result.returncode != 0 or not result.stdout.strip():
        return None
    return Path(result.stdout.strip())


def get_display_root() -> Path:
    """Root that file paths are shown relative to in reminders.

    Priority: $CLAUDE_PROJECT_DIR, then the git work tree, then cwd.
    """
    if os.environ.get("CLAUDE_PROJECT_DIR"):
        return get_project_dir()
    return get_git_toplevel() or Path.cwd().resolve()
