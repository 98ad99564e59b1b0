"""
Sub-agent dispatch visibility.

- announce_task_dispatch: PreToolUse on the dispatch tool. Prints a compact
  line for one or two running agents and a bordered block from the verbose
  threshold up. Records the agent for the completion hook.
- report_task_completion: PostToolUse on the dispatch tool. Resolves the
  agent recorded at dispatch and reports how long it ran.

Both are informational and always allow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codenv.lib.agent_tracking import AgentDescriptor
from codenv.lib.gate_model import GateResult
from codenv.lib.hook_utils import (
    as_int,
    as_text,
    format_elapsed,
    format_timeout,
    preview_text,
    truncate_text,
)

if TYPE_CHECKING:
    from codenv.hooks.runtime import HookRuntime
    from codenv.hooks.schemas import HookContext

BOX_WIDTH = 61  # Inner width between the │ borders


def _box_row(text: str, indent: str = " ") -> str:
    return f"│{indent}{text:<{BOX_WIDTH - len(indent) - 1}} │"


def format_compact(agent: AgentDescriptor, desc_short: str) -> str:
    return f'\n🚀 Launching: {agent.subagent_type} ({agent.model}) → "{desc_short}"\n'


def format_verbose(
    agent: AgentDescriptor, count: int, desc_short: str, prompt: str, preview_len: int = 100
) -> str:
    border = "─" * BOX_WIDTH
    lines = [
        "",
        f"┌{border}┐",
        _box_row(f"🚀 PARALLEL DISPATCH (Agent #{count})"),
        f"├{border}┤",
        _box_row(
            f"{count}. {agent.subagent_type} ({agent.model}, {format_timeout(agent.timeout_ms)})"
        ),
        _box_row(f'"{desc_short}"', indent="    └─ "),
        _box_row(""),
    ]
    if prompt:
        lines.append(_box_row("Task Preview:"))
        lines.append(_box_row(preview_text(prompt, preview_len), indent=" > "))
        lines.append(_box_row(""))
    lines.append(_box_row("⏳ Executing..."))
    lines.append(f"└{border}┘")
    lines.append("")
    return "\n".join(lines)


def announce_task_dispatch(ctx: HookContext, rt: HookRuntime) -> GateResult:
    settings = rt.settings
    if ctx.tool_name != settings.dispatch_tool:
        return GateResult.allow()

    tracker = rt.tracker
    agent = AgentDescriptor(
        agent_id=tracker.generate_agent_id(),
        description=as_text(ctx.input_value("description"), "Sub-agent"),
        model=as_text(ctx.input_value("model"), "inherit"),
        timeout_ms=as_int(ctx.input_value("timeout"), 300000),
        subagent_type=as_text(ctx.input_value("subagent_type"), "general-purpose"),
        started_at=rt.clock(),
    )
    prompt = as_text(ctx.input_value("prompt"), "")

    count = max(1, tracker.start(agent))
    desc_short = truncate_text(agent.description, settings.dispatch_description_max)

    if count < settings.verbose_dispatch_threshold:
        msg = format_compact(agent, desc_short)
    else:
        msg = format_verbose(
            agent, count, desc_short, prompt, settings.dispatch_prompt_preview
        )

    rt.logger.info(
        "DISPATCH agent=%s type=%s model=%s count=%d",
        agent.agent_id,
        agent.subagent_type,
        agent.model,
        count,
    )
    return GateResult.allow(
        system_message=msg,
        metadata={
            "outcome": f"dispatched {agent.agent_id} (count={count})",
            "agent_id": agent.agent_id,
        },
    )


def report_task_completion(ctx: HookContext, rt: HookRuntime) -> GateResult:
    if ctx.tool_name != rt.settings.dispatch_tool:
        return GateResult.allow()

    description = as_text(ctx.input_value("description"), "Sub-agent")
    agent = rt.tracker.finish(description)
    if agent is None:
        return GateResult.allow(metadata={"outcome": "no matching dispatch"})

    elapsed = rt.clock() - agent.started_at
    rt.logger.info(
        "COMPLETE agent=%s type=%s elapsed=%.1fs",
        agent.agent_id,
        agent.subagent_type,
        elapsed,
    )
    desc_short = truncate_text(agent.description, rt.settings.dispatch_description_max)
    msg = f'✅ Completed: {agent.subagent_type} → "{desc_short}" ({format_elapsed(elapsed)})'
    return GateResult.allow(
        system_message=msg,
        metadata={"outcome": f"completed {agent.agent_id}", "agent_id": agent.agent_id},
    )
