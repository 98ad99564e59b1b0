"""
Trigger Patterns: keyword and regex tables for prompt and file-path hooks.

These tables are product decisions about which phrases trigger a hook. Keep
them literal; matching is deliberately approximate and is expected to both
over- and under-trigger.

All prompt patterns are matched against the lower-cased prompt, one line at
a time (`^` anchors at every line start, `.` never crosses a newline).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

# =============================================================================
# VERIFICATION GATE
# =============================================================================

COMPLETION_CLAIM_PATTERNS: tuple[str, ...] = (
    r"(is|it's|looks|seems).*(complete|done|fixed|working|ready)",
    r"(animation|layout|video|form|feature).*(works|working|fixed)",
    r"^(done|ready|complete|fixed|working)",
    r"(all|everything).*(works|working|good|fixed)",
)

# Each category counts once, however many times it matches
EVIDENCE_PATTERNS: dict[str, str] = {
    "browser_test": r"tested in (chrome|firefox|safari|browser)",
    "console_clear": r"(devtools|console).*(clear|no errors)",
    "viewport_test": r"(1920px|375px|768px|viewport|mobile|desktop).*test",
    "observation": r"(saw|watched|observed|opened browser|refreshed page)",
}

# =============================================================================
# SEMANTIC SEARCH SUGGESTION
# =============================================================================

CODE_EXPLORATION_PATTERNS: tuple[str, ...] = (
    "find.*code",
    "find.*implementation",
    "find.*function",
    "find.*component",
    "where.*implement",
    "where.*handle",
    "where.*defined",
    "where is",
    "locate.*code",
    "locate.*function",
    "search.*codebase",
    "explore.*code",
    "how.*implement",
    "show.*implementation",
    "what.*handles",
    "which.*file",
    "which.*component",
    "look for",
    "understand.*code",
    "analyze.*code",
    "explain.*implementation",
)

# =============================================================================
# CODE MODE SUGGESTION
# =============================================================================


@dataclass(frozen=True)
class PatternCategory:
    label: str
    patterns: tuple[str, ...]
    example_template: str


# Checked in order; the first category with a match wins
CODE_MODE_CATEGORIES: tuple[PatternCategory, ...] = (
    PatternCategory(
        "CMS Operations (Webflow)",
        (
            "webflow",
            "cms collection",
            "publish site",
            "update content",
            "webflow item",
            "cms item",
            "collection field",
            "webflow page",
            "webflow component",
        ),
        "code_mode.example.cms",
    ),
    PatternCategory(
        "Design Tools (Figma)",
        (
            "figma",
            "design file",
            "get component",
            "design system",
            "figma export",
            "design token",
            "figma comment",
            "team component",
        ),
        "code_mode.example.design",
    ),
    PatternCategory(
        "Browser Automation (Chrome DevTools)",
        (
            "chrome devtools",
            "screenshot",
            "navigate page",
            "browser automation",
            "test page",
            "click element",
            "fill form",
            "evaluate script",
        ),
        "code_mode.example.browser",
    ),
    PatternCategory(
        "Multi-Tool Workflow",
        (
            "workflow",
            "pipeline",
            "integrate",
            "automate",
            "from.*to",
            "then update",
            "then create",
            "first.*then",
            "after.*update",
        ),
        "code_mode.example.workflow",
    ),
)

# =============================================================================
# MCP WORKFLOW DETECTION
# =============================================================================

# (substring counted, display name)
MCP_PLATFORMS: tuple[tuple[str, str], ...] = (
    ("webflow", "Webflow"),
    ("figma", "Figma"),
    ("chrome", "Chrome DevTools"),
    ("semantic", "Semantic Search"),
)

SEQUENTIAL_PATTERNS: tuple[str, ...] = (
    "first.*then",
    "then.*update",
    "then.*create",
    "after.*create",
    "after.*update",
    "next.*publish",
    "next.*update",
    "finally.*update",
    "and then",
)

CROSS_PLATFORM_PATTERNS: tuple[str, ...] = (
    "from.*to",
    "into.*and",
    "between.*and",
    "integrate.*with",
    "sync.*with",
    "pipeline",
    "workflow",
    "automate",
    "automation",
)

# =============================================================================
# MATCHING
# =============================================================================

_compiled: dict[str, re.Pattern[str]] = {}


def _compile(pattern: str) -> re.Pattern[str]:
    compiled = _compiled.get(pattern)
    if compiled is None:
        compiled = re.compile(pattern, re.IGNORECASE | re.MULTILINE)
        _compiled[pattern] = compiled
    return compiled


def matches(pattern: str, text: str) -> bool:
    return _compile(pattern).search(text) is not None


def first_match(patterns: Iterable[str], text: str) -> str | None:
    """First pattern in `patterns` that matches `text`, or None."""
    for pattern in patterns:
        if matches(pattern, text):
            return pattern
    return None


def detect_completion_claim(text: str) -> bool:
    return first_match(COMPLETION_CLAIM_PATTERNS, text) is not None


def evidence_categories(text: str) -> set[str]:
    """Names of the evidence categories found in `text`."""
    return {name for name, pattern in EVIDENCE_PATTERNS.items() if matches(pattern, text)}


def code_mode_category(text: str) -> PatternCategory | None:
    for category in CODE_MODE_CATEGORIES:
        if first_match(category.patterns, text) is not None:
            return category
    return None


def count_platform_mentions(text: str) -> dict[str, int]:
    """Non-overlapping occurrences of each platform keyword, by display name."""
    return {name: text.count(keyword) for keyword, name in MCP_PLATFORMS}
