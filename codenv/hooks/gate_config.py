"""
Hook Configuration: Single source of truth for hook behavior.

This module defines:
1. Exit code convention
2. Which hooks run for which host event, and in what order
3. Hook settings (TTLs, thresholds, tool names) with YAML/env overrides

Keyword and regex tables live in trigger_patterns.py.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from codenv.lib.paths import get_default_log_dir, get_project_hooks_dir
from codenv.lib.state_store import DEFAULT_STATE_DIR

# =============================================================================
# EXIT CODES
# =============================================================================
# The host reads allow/block from the exit code alone.

EXIT_ALLOW = 0
EXIT_BLOCK = 1
EXIT_ERROR = 2  # Reserved, never returned by a hook

# =============================================================================
# STATE KEYS
# =============================================================================

PENDING_QUESTION_KEY = "pending_question"
INITIAL_SCOPE_KEY = "initial_scope"

# =============================================================================
# HOOK REGISTRY
# =============================================================================


@dataclass(frozen=True)
class HookSpec:
    """Static description of one hook entry point.

    Attributes:
        name: CLI name, also the per-hook log file stem
        event: Host event the hook is registered for
        blocking: Whether the hook may ever return a deny verdict
        perf_log_floor_ms: Allowed runs faster than this are not written to
            performance.log (blocked runs always are)
    """

    name: str
    event: str
    blocking: bool = False
    perf_log_floor_ms: int = 0


HOOK_SPECS: dict[str, HookSpec] = {
    "check-pending-questions": HookSpec(
        "check-pending-questions", "PreToolUse", blocking=True, perf_log_floor_ms=10
    ),
    "announce-task-dispatch": HookSpec("announce-task-dispatch", "PreToolUse"),
    "enforce-verification": HookSpec("enforce-verification", "UserPromptSubmit", blocking=True),
    "suggest-semantic-search": HookSpec("suggest-semantic-search", "UserPromptSubmit"),
    "suggest-code-mode": HookSpec("suggest-code-mode", "UserPromptSubmit"),
    "detect-mcp-workflow": HookSpec("detect-mcp-workflow", "UserPromptSubmit"),
    "detect-scope-growth": HookSpec("detect-scope-growth", "PostToolUse"),
    "remind-cdn-versioning": HookSpec("remind-cdn-versioning", "PostToolUse"),
    "report-task-completion": HookSpec("report-task-completion", "PostToolUse"),
}

# Execution order per host event. Blocking hooks first so a block stops the
# advisories from running.
GATE_EXECUTION_ORDER: dict[str, list[str]] = {
    "UserPromptSubmit": [
        "enforce-verification",
        "suggest-semantic-search",
        "suggest-code-mode",
        "detect-mcp-workflow",
    ],
    "PreToolUse": [
        "check-pending-questions",
        "announce-task-dispatch",
    ],
    "PostToolUse": [
        "detect-scope-growth",
        "remind-cdn-versioning",
        "report-task-completion",
    ],
}

# =============================================================================
# SETTINGS
# =============================================================================

CONFIG_ENV_VAR = "CODENV_HOOKS_CONFIG"
STATE_DIR_ENV_VAR = "CODENV_HOOKS_STATE_DIR"
LOG_DIR_ENV_VAR = "CODENV_HOOKS_LOG_DIR"


class HookSettings(BaseModel):
    """Tunable constants. None of these are invariants; override per project."""

    state_dir: Path = DEFAULT_STATE_DIR
    log_dir: Path = Field(default_factory=get_default_log_dir)
    state_enabled: bool = True

    # Pending-question gate
    question_tool: str = "AskUserQuestion"
    pending_question_ttl: int = 300

    # Verification gate
    min_evidence_categories: int = 2
    log_prompt_chars: int = 200

    # Scope growth
    initial_scope_ttl: int = 7200
    scope_growth_threshold: int = 150
    scope_tools: list[str] = Field(default_factory=lambda: ["Edit", "Write"])
    scope_file_pattern: str = "*.md"

    # CDN reminder
    cdn_tools: list[str] = Field(default_factory=lambda: ["Edit", "Write"])
    cdn_watch_dir: str = "src/2_javascript/"
    cdn_file_suffix: str = ".js"
    cdn_update_command: str = "python3 .claude/hooks/scripts/update_html_versions.py"

    # Task dispatch
    dispatch_tool: str = "Task"
    verbose_dispatch_threshold: int = 3
    dispatch_description_max: int = 50
    dispatch_prompt_preview: int = 100
    agent_state_ttl: int = 86400


def get_config_path() -> Path | None:
    """YAML config location: $CODENV_HOOKS_CONFIG, else the project hooks dir."""
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)
    candidate = get_project_hooks_dir() / "config.yaml"
    return candidate if candidate.exists() else None


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Returns:
        Config dict, or empty dict if the file is missing or unreadable.
    """
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"WARNING: Failed to read hook config {path}: {e}", file=sys.stderr)
        return {}
    if not isinstance(config, dict):
        print(f"WARNING: Hook config {path} is not a mapping, ignoring", file=sys.stderr)
        return {}
    return config


def load_settings(config_path: Path | None = None) -> HookSettings:
    """Defaults, then YAML file, then environment overrides.

    An invalid config never stops a hook: the defaults are used instead.
    """
    path = config_path or get_config_path()
    data = load_config_file(path) if path else {}

    env_overrides: dict[str, Any] = {}
    if os.environ.get(STATE_DIR_ENV_VAR):
        env_overrides["state_dir"] = os.environ[STATE_DIR_ENV_VAR]
    if os.environ.get(LOG_DIR_ENV_VAR):
        env_overrides["log_dir"] = os.environ[LOG_DIR_ENV_VAR]

    try:
        return HookSettings.model_validate({**data, **env_overrides})
    except ValidationError as e:
        print(f"WARNING: Invalid hook config, using defaults: {e}", file=sys.stderr)
        return HookSettings.model_validate(env_overrides)
