"""
Blocking gates.

Functions:
- check_pending_question: PreToolUse - blocks every tool but the question
  tool while a mandatory question is unanswered
- enforce_verification: UserPromptSubmit - blocks completion claims that
  carry no browser verification evidence

Both fail open: missing tool name, missing prompt, or missing state allow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codenv.hooks.gate_config import PENDING_QUESTION_KEY
from codenv.hooks.trigger_patterns import detect_completion_claim, evidence_categories
from codenv.lib.gate_model import GateResult
from codenv.lib.hook_utils import as_text

if TYPE_CHECKING:
    from codenv.hooks.runtime import HookRuntime
    from codenv.hooks.schemas import HookContext


def check_pending_question(ctx: HookContext, rt: HookRuntime) -> GateResult:
    """PreToolUse: hold all tools until the pending question is answered.

    The question tool is how the user answers, so it always passes and
    clears the pending state. There is no renewal: once the state is older
    than its TTL it stops blocking even if the file is still there.
    """
    tool_name = ctx.tool_name
    if not tool_name:
        return GateResult.allow(metadata={"outcome": "allowed: no tool name"})

    settings = rt.settings

    if tool_name == settings.question_tool:
        rt.store.clear(PENDING_QUESTION_KEY)
        rt.logger.info("%s used - cleared %s state", tool_name, PENDING_QUESTION_KEY)
        return GateResult.allow(metadata={"outcome": f"cleared: {tool_name}"})

    if not rt.store.exists_unexpired(PENDING_QUESTION_KEY, settings.pending_question_ttl):
        return GateResult.allow(metadata={"outcome": f"allowed: {tool_name}"})

    pending = rt.store.read(PENDING_QUESTION_KEY, settings.pending_question_ttl) or {}
    question_type = as_text(pending.get("type"), "UNKNOWN")
    question = as_text(pending.get("question"), "Pending question")
    asked_at = as_text(pending.get("asked_at"), "unknown")

    rt.logger.info("BLOCKED: %s (pending: %s)", tool_name, question_type)

    msg = rt.render(
        "pending_question.block",
        {
            "tool_name": tool_name,
            "question_type": question_type,
            "asked_at": asked_at,
            "question": question,
            "question_tool": settings.question_tool,
        },
    )
    return GateResult.deny(
        system_message=msg,
        metadata={
            "outcome": f"blocked: {tool_name}",
            "pending_question": {"type": question_type, "asked_at": asked_at},
        },
    )


def enforce_verification(ctx: HookContext, rt: HookRuntime) -> GateResult:
    """UserPromptSubmit: no completion claim without fresh browser evidence.

    A claim ("it's done", "layout fixed", ...) needs matches from at least
    `min_evidence_categories` distinct evidence categories in the same prompt.
    """
    if not ctx.prompt:
        return GateResult.allow(metadata={"outcome": "allowed: no prompt"})

    text = ctx.prompt_lower
    if not detect_completion_claim(text):
        return GateResult.allow(metadata={"outcome": "allowed: no claim"})

    found = evidence_categories(text)
    if len(found) >= rt.settings.min_evidence_categories:
        return GateResult.allow(
            metadata={"outcome": "allowed: verified", "evidence": sorted(found)}
        )

    excerpt = ctx.prompt[: rt.settings.log_prompt_chars]
    rt.logger.info(
        "VERIFICATION ENFORCEMENT TRIGGERED\n"
        "Prompt (first %d chars): %s...\n"
        "Reason: Completion claim without verification evidence (found: %s)",
        rt.settings.log_prompt_chars,
        excerpt,
        ", ".join(sorted(found)) or "none",
    )

    return GateResult.deny(
        system_message=rt.render("verification.block"),
        metadata={"outcome": "BLOCKED", "evidence": sorted(found)},
    )
