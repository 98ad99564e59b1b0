"""
Advisory hooks. None of these ever deny.

- suggest_semantic_search: code-exploration prompts → semantic search hint
- suggest_code_mode: MCP-flavoured prompts → Code Mode reminder with example
- detect_mcp_workflow: multi-platform / multi-step prompts → workflow example
- detect_scope_growth: Edit/Write after the spec folder outgrew its estimate
- remind_cdn_versioning: Edit/Write of site JavaScript → cache-busting reminder
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from codenv.hooks.gate_config import INITIAL_SCOPE_KEY
from codenv.hooks.trigger_patterns import (
    CODE_EXPLORATION_PATTERNS,
    CROSS_PLATFORM_PATTERNS,
    SEQUENTIAL_PATTERNS,
    code_mode_category,
    count_platform_mentions,
    first_match,
)
from codenv.lib.gate_model import GateResult
from codenv.lib.hook_utils import as_int, as_text, count_files, relative_display_path
from codenv.lib.paths import get_display_root, get_project_dir

if TYPE_CHECKING:
    from codenv.hooks.runtime import HookRuntime
    from codenv.hooks.schemas import HookContext


def suggest_semantic_search(ctx: HookContext, rt: HookRuntime) -> GateResult:
    if not ctx.prompt:
        return GateResult.allow()

    pattern = first_match(CODE_EXPLORATION_PATTERNS, ctx.prompt_lower)
    if pattern is None:
        return GateResult.allow(metadata={"outcome": "no match"})

    return GateResult.allow(
        system_message=rt.render("semantic_search.suggestion"),
        metadata={"outcome": f"suggested ({pattern})"},
    )


def suggest_code_mode(ctx: HookContext, rt: HookRuntime) -> GateResult:
    if not ctx.prompt:
        return GateResult.allow()

    category = code_mode_category(ctx.prompt_lower)
    if category is None:
        return GateResult.allow(metadata={"outcome": "Category: none"})

    msg = rt.render(
        "code_mode.reminder",
        {
            "category": category.label,
            "usage_example": rt.render(category.example_template),
        },
    )
    return GateResult.allow(
        system_message=msg, metadata={"outcome": f"Category: {category.label}"}
    )


def _workflow_example(mentions: dict[str, int], has_sequential: bool) -> str:
    total = sum(mentions.values())
    if mentions["Figma"] and mentions["Webflow"]:
        return "mcp_workflow.example.design_to_cms"
    if mentions["Webflow"] and mentions["Chrome DevTools"]:
        return "mcp_workflow.example.cms_browser"
    if total >= 3:
        return "mcp_workflow.example.multi_platform"
    if has_sequential:
        return "mcp_workflow.example.sequential"
    return "mcp_workflow.example.generic"


def detect_mcp_workflow(ctx: HookContext, rt: HookRuntime) -> GateResult:
    """Suggest Code Mode for prompts that chain MCP operations.

    `total` counts keyword occurrences, not distinct platforms: a prompt
    naming Webflow twice already counts as multi-platform.
    """
    if not ctx.prompt:
        return GateResult.allow()

    text = ctx.prompt_lower
    mentions = count_platform_mentions(text)
    total = sum(mentions.values())
    has_sequential = first_match(SEQUENTIAL_PATTERNS, text) is not None
    has_cross_platform = first_match(CROSS_PLATFORM_PATTERNS, text) is not None

    workflow_type = None
    if total >= 2:
        workflow_type = "Multi-Platform Workflow"
    elif has_sequential and total >= 1:
        workflow_type = "Sequential Multi-Step Operations"
    elif has_cross_platform and total >= 1:
        workflow_type = "Cross-Platform Integration"

    if workflow_type is None:
        return GateResult.allow(metadata={"outcome": "- No workflow detected"})

    detected = [name for name, count in mentions.items() if count > 0]
    platforms_line = f"  Platforms Detected: [{', '.join(detected)}]\n" if detected else ""

    msg = rt.render(
        "mcp_workflow.suggestion",
        {
            "workflow_type": workflow_type,
            "platforms_line": platforms_line,
            "example": rt.render(_workflow_example(mentions, has_sequential)),
        },
    )
    return GateResult.allow(
        system_message=msg,
        metadata={
            "outcome": f"- Detected: {workflow_type} (Platforms: {total})",
            "platforms": detected,
        },
    )


def _scope_recommendations(level: int) -> str:
    lines = []
    if level == 1:
        lines.append("  • Upgrading to Level 2 (add plan.md)")
    if level <= 2:
        lines.append("  • Adding tasks.md for tracking")
        lines.append("  • Adding checklist.md for validation")
    return "\n".join(lines)


def detect_scope_growth(ctx: HookContext, rt: HookRuntime) -> GateResult:
    """PostToolUse: warn when the spec folder grew past the threshold.

    Growth ratio is `current * 100 // initial`, compared strictly against
    `scope_growth_threshold` (150 → more than 50% growth).
    """
    settings = rt.settings
    if ctx.tool_name not in settings.scope_tools:
        return GateResult.allow()

    initial = rt.store.read(INITIAL_SCOPE_KEY, settings.initial_scope_ttl)
    if not initial:
        return GateResult.allow(metadata={"outcome": "no initial scope"})

    initial_files = as_int(initial.get("files_count"), 0)
    level = as_int(initial.get("level"), 2)
    spec_folder = as_text(initial.get("spec_folder"), "")

    if not spec_folder or initial_files <= 0:
        return GateResult.allow(metadata={"outcome": "no initial scope"})

    folder = Path(spec_folder)
    if not folder.is_absolute():
        folder = get_project_dir() / folder
    current_files = count_files(folder, settings.scope_file_pattern)
    if current_files <= 0:
        return GateResult.allow(metadata={"outcome": "spec folder empty"})

    ratio = current_files * 100 // initial_files
    if ratio <= settings.scope_growth_threshold:
        return GateResult.allow(metadata={"outcome": f"ratio {ratio}%"})

    msg = rt.render(
        "scope_growth.warning",
        {
            "initial_files": initial_files,
            "current_files": current_files,
            "growth_pct": ratio - 100,
            "recommendations": _scope_recommendations(level),
        },
    )
    rt.logger.info(
        "SCOPE GROWTH %s: %d -> %d files (+%d%%)",
        spec_folder,
        initial_files,
        current_files,
        ratio - 100,
    )
    return GateResult.warn(
        system_message=msg,
        metadata={"outcome": f"warned: ratio {ratio}%", "growth_ratio": ratio},
    )


def remind_cdn_versioning(ctx: HookContext, rt: HookRuntime) -> GateResult:
    """PostToolUse: after editing site JavaScript, remind to bump ?v= params."""
    settings = rt.settings
    if not ctx.tool_name or not ctx.file_path:
        return GateResult.allow()
    if ctx.tool_name not in settings.cdn_tools:
        return GateResult.allow()

    file_path = ctx.file_path
    if not file_path.endswith(settings.cdn_file_suffix) or settings.cdn_watch_dir not in file_path:
        return GateResult.allow()

    rel_path = relative_display_path(file_path, get_display_root())

    rt.logger.info(
        "CDN VERSION REMINDER\nTool: %s\nFile: %s\nAction: Modified JavaScript file in %s\n"
        "Reminder: Run %s",
        ctx.tool_name,
        rel_path,
        settings.cdn_watch_dir,
        settings.cdn_update_command,
    )

    msg = rt.render(
        "cdn.reminder",
        {"file_path": rel_path, "update_command": settings.cdn_update_command},
    )
    return GateResult.allow(system_message=msg, metadata={"outcome": f"reminded: {rel_path}"})
