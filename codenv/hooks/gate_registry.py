"""
Gate Registry: maps hook names to their check functions.

Every check has the signature `check(ctx: HookContext, rt: HookRuntime) -> GateResult`.
Which hooks run for which event is configured in gate_config.py.
"""

from collections.abc import Callable

from codenv.hooks import gates, suggestions, task_dispatch
from codenv.hooks.runtime import HookRuntime
from codenv.hooks.schemas import HookContext
from codenv.lib.gate_model import GateResult

GateCheck = Callable[[HookContext, HookRuntime], GateResult]

GATE_CHECKS: dict[str, GateCheck] = {
    "check-pending-questions": gates.check_pending_question,
    "enforce-verification": gates.enforce_verification,
    "suggest-semantic-search": suggestions.suggest_semantic_search,
    "suggest-code-mode": suggestions.suggest_code_mode,
    "detect-mcp-workflow": suggestions.detect_mcp_workflow,
    "detect-scope-growth": suggestions.detect_scope_growth,
    "remind-cdn-versioning": suggestions.remind_cdn_versioning,
    "announce-task-dispatch": task_dispatch.announce_task_dispatch,
    "report-task-completion": task_dispatch.report_task_completion,
}
