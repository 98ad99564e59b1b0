"""Pending-question gate: every tool but the question tool is held while a
mandatory question is unanswered."""

from codenv.hooks.gate_config import PENDING_QUESTION_KEY
from codenv.hooks.gates import check_pending_question
from codenv.hooks.unified_logger import get_hook_logger
from codenv.lib.gate_model import GateVerdict
from conftest import tool_event


def _ask(store, **payload) -> None:
    base = {
        "type": "SPEC_FOLDER",
        "question": "Which spec folder should this work go in?",
        "asked_at": "2025-11-25 14:03:07",
    }
    base.update(payload)
    store.write(PENDING_QUESTION_KEY, base)


def test_no_pending_question_allows(runtime) -> None:
    result = check_pending_question(tool_event("Bash", command="ls"), runtime)
    assert result.verdict == GateVerdict.ALLOW
    assert result.system_message is None


def test_pending_question_blocks_other_tools(runtime, store, clock) -> None:
    """Question asked 10 seconds ago: Bash is blocked and the message names it."""
    _ask(store)
    clock.advance(10)

    result = check_pending_question(tool_event("Bash", command="ls"), runtime)

    assert result.verdict == GateVerdict.DENY
    assert "Blocked Tool: Bash" in result.system_message
    assert "Question Type: SPEC_FOLDER" in result.system_message
    assert "Which spec folder" in result.system_message
    assert "Use the AskUserQuestion tool" in result.system_message
    assert result.outcome == "blocked: Bash"
    assert store.path_for(PENDING_QUESTION_KEY).exists(), "blocking must not consume the question"


def test_question_tool_passes_and_clears_state(runtime, store) -> None:
    _ask(store)

    result = check_pending_question(tool_event("AskUserQuestion"), runtime)

    assert result.verdict == GateVerdict.ALLOW
    assert not store.path_for(PENDING_QUESTION_KEY).exists()

    # The next tool call is no longer held
    after = check_pending_question(tool_event("Read", file_path="/x"), runtime)
    assert after.verdict == GateVerdict.ALLOW


def test_question_tool_without_pending_state_allows(runtime) -> None:
    result = check_pending_question(tool_event("AskUserQuestion"), runtime)
    assert result.verdict == GateVerdict.ALLOW


def test_expired_question_stops_blocking(runtime, store, clock) -> None:
    _ask(store)
    clock.advance(301)
    result = check_pending_question(tool_event("Edit"), runtime)
    assert result.verdict == GateVerdict.ALLOW


def test_blocking_does_not_renew_the_question(runtime, store, clock) -> None:
    """Repeated blocked calls never push expiry out."""
    _ask(store)
    for _ in range(5):
        clock.advance(60)
        check_pending_question(tool_event("Bash"), runtime)
    clock.advance(1)
    assert check_pending_question(tool_event("Bash"), runtime).verdict == GateVerdict.ALLOW


def test_missing_tool_name_allows(runtime, store) -> None:
    _ask(store)
    result = check_pending_question(tool_event(""), runtime)
    assert result.verdict == GateVerdict.ALLOW


def test_missing_payload_fields_use_defaults(runtime, store) -> None:
    store.write(PENDING_QUESTION_KEY, {})
    result = check_pending_question(tool_event("Grep"), runtime)
    assert result.verdict == GateVerdict.DENY
    assert "Question Type: UNKNOWN" in result.system_message
    assert "Asked At: unknown" in result.system_message
    assert "Question: Pending question" in result.system_message


def test_custom_question_tool(runtime, store) -> None:
    runtime.settings.question_tool = "AskFollowup"
    _ask(store)
    assert check_pending_question(tool_event("AskUserQuestion"), runtime).verdict == GateVerdict.DENY
    assert check_pending_question(tool_event("AskFollowup"), runtime).verdict == GateVerdict.ALLOW


def test_block_is_logged(runtime, store, settings) -> None:
    runtime.logger = get_hook_logger("check-pending-questions", settings.log_dir)
    _ask(store)
    check_pending_question(tool_event("Bash"), runtime)
    log = (settings.log_dir / "check-pending-questions.log").read_text()
    assert "BLOCKED: Bash (pending: SPEC_FOLDER)" in log


def test_clear_is_logged(runtime, store, settings) -> None:
    runtime.logger = get_hook_logger("check-pending-questions", settings.log_dir)
    _ask(store)
    check_pending_question(tool_event("AskUserQuestion"), runtime)
    log = (settings.log_dir / "check-pending-questions.log").read_text()
    assert "AskUserQuestion used - cleared pending_question state" in log
