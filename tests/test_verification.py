"""Verification gate: completion claims need browser evidence."""

import pytest

from codenv.hooks.gates import enforce_verification
from codenv.hooks.trigger_patterns import detect_completion_claim, evidence_categories
from codenv.lib.gate_model import GateVerdict
from conftest import prompt_event


def test_bare_claim_is_blocked(runtime) -> None:
    result = enforce_verification(prompt_event("it's done"), runtime)
    assert result.verdict == GateVerdict.DENY
    assert result.system_message.startswith("🔴 BLOCKED - VERIFICATION REQUIRED")
    assert result.outcome == "BLOCKED"


def test_claim_with_two_evidence_categories_allowed(runtime) -> None:
    prompt = "it's done, tested in chrome at 375px, console clear"
    result = enforce_verification(prompt_event(prompt), runtime)
    assert result.verdict == GateVerdict.ALLOW, result.metadata
    assert set(result.metadata["evidence"]) >= {"browser_test", "console_clear"}


def test_one_evidence_category_is_not_enough(runtime) -> None:
    result = enforce_verification(prompt_event("the layout is fixed, tested in firefox"), runtime)
    assert result.verdict == GateVerdict.DENY
    assert result.metadata["evidence"] == ["browser_test"]


def test_repeated_evidence_counts_once(runtime) -> None:
    prompt = "it's fixed. tested in chrome. tested in safari. tested in firefox."
    assert enforce_verification(prompt_event(prompt), runtime).verdict == GateVerdict.DENY


def test_prompt_without_claim_allows(runtime) -> None:
    result = enforce_verification(prompt_event("please refactor the nav menu"), runtime)
    assert result.verdict == GateVerdict.ALLOW
    assert result.system_message is None


def test_empty_prompt_allows(runtime) -> None:
    assert enforce_verification(prompt_event(""), runtime).verdict == GateVerdict.ALLOW


def test_threshold_is_configurable(runtime) -> None:
    runtime.settings.min_evidence_categories = 1
    result = enforce_verification(prompt_event("looks fixed, I refreshed page"), runtime)
    assert result.verdict == GateVerdict.ALLOW


@pytest.mark.parametrize(
    "prompt",
    [
        "It's done",
        "the animation works now",
        "done",
        "Fixed\nshould be good",
        "everything is working",
        "looks ready to ship",
    ],
)
def test_completion_claims_detected(prompt) -> None:
    assert detect_completion_claim(prompt.lower())


def test_line_start_anchor_matches_later_lines() -> None:
    """`^done` matches at the start of any line, not only the first."""
    assert detect_completion_claim("some context\ndone")


def test_claim_does_not_span_lines() -> None:
    assert not detect_completion_claim("it is\nall complete")


def test_evidence_categories() -> None:
    text = "opened browser, mobile viewport test passed, devtools showed no errors"
    assert evidence_categories(text) == {"observation", "viewport_test", "console_clear"}
