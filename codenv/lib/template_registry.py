"""Template Registry: Centralized management of hook message templates.

Provides:
- Template specification with required/optional variables
- Rendering with placeholder validation
- Category-based filtering (block messages, advisories, usage examples)
- Environment variable overrides for template paths

Usage:
    from codenv.lib.template_registry import TemplateRegistry

    registry = TemplateRegistry.instance()
    content = registry.render("cdn.reminder", {"file_path": "...", "update_command": "..."})

Exit behavior: Functions raise exceptions. Callers handle graceful degradation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from codenv.lib.paths import get_templates_dir
from codenv.lib.template_loader import load_template


class TemplateCategory(Enum):
    """Distinguishes template purpose."""

    BLOCK_MESSAGE = "block_message"  # Shown when a tool call or prompt is blocked
    ADVISORY = "advisory"  # Non-blocking suggestion or warning
    USAGE_EXAMPLE = "usage_example"  # Code snippet embedded in an advisory


@dataclass(frozen=True)
class TemplateSpec:
    """Specification for a hook message template.

    Attributes:
        name: Unique identifier, e.g., "pending_question.block"
        category: What kind of template
        filename: Template file name, e.g., "pending-question-block.md"
        required_vars: Variables that MUST be provided to render
        optional_vars: Variables that MAY be provided (default to empty string)
        description: Human-readable purpose
        env_override: Env var name to override template path
    """

    name: str
    category: TemplateCategory
    filename: str
    required_vars: tuple[str, ...] = ()
    optional_vars: tuple[str, ...] = ()
    description: str = ""
    env_override: str | None = None


def _example(name: str, filename: str, description: str) -> TemplateSpec:
    return TemplateSpec(
        name=name,
        category=TemplateCategory.USAGE_EXAMPLE,
        filename=filename,
        description=description,
    )


# =============================================================================
# TEMPLATE SPECIFICATIONS
# =============================================================================

TEMPLATE_SPECS: dict[str, TemplateSpec] = {
    # --- Blocking gates ---
    "pending_question.block": TemplateSpec(
        name="pending_question.block",
        category=TemplateCategory.BLOCK_MESSAGE,
        filename="pending-question-block.md",
        required_vars=("tool_name", "question_type", "asked_at", "question"),
        optional_vars=("question_tool",),
        description="Block message while a mandatory question is pending",
        env_override="CODENV_PENDING_QUESTION_TEMPLATE",
    ),
    "verification.block": TemplateSpec(
        name="verification.block",
        category=TemplateCategory.BLOCK_MESSAGE,
        filename="verification-block.md",
        description="Block message for completion claims without browser evidence",
        env_override="CODENV_VERIFICATION_TEMPLATE",
    ),
    # --- Advisories ---
    "semantic_search.suggestion": TemplateSpec(
        name="semantic_search.suggestion",
        category=TemplateCategory.ADVISORY,
        filename="semantic-search-suggestion.md",
        description="Hint to use semantic search for code exploration",
    ),
    "code_mode.reminder": TemplateSpec(
        name="code_mode.reminder",
        category=TemplateCategory.ADVISORY,
        filename="code-mode-reminder.md",
        required_vars=("category", "usage_example"),
        description="Reminder to route MCP tool calls through Code Mode",
    ),
    "mcp_workflow.suggestion": TemplateSpec(
        name="mcp_workflow.suggestion",
        category=TemplateCategory.ADVISORY,
        filename="mcp-workflow-suggestion.md",
        required_vars=("workflow_type", "example"),
        optional_vars=("platforms_line",),
        description="Multi-step MCP workflow detected",
    ),
    "scope_growth.warning": TemplateSpec(
        name="scope_growth.warning",
        category=TemplateCategory.ADVISORY,
        filename="scope-growth-warning.md",
        required_vars=("initial_files", "current_files", "growth_pct", "recommendations"),
        description="Spec folder grew well past its initial size",
    ),
    "cdn.reminder": TemplateSpec(
        name="cdn.reminder",
        category=TemplateCategory.ADVISORY,
        filename="cdn-reminder.md",
        required_vars=("file_path", "update_command"),
        description="Run the HTML version updater after JavaScript edits",
        env_override="CODENV_CDN_REMINDER_TEMPLATE",
    ),
    # --- Code Mode usage examples (no variables; braces are literal) ---
    "code_mode.example.cms": _example(
        "code_mode.example.cms", "code-mode-example-cms.md", "Webflow CMS calls"
    ),
    "code_mode.example.design": _example(
        "code_mode.example.design", "code-mode-example-design.md", "Figma calls"
    ),
    "code_mode.example.browser": _example(
        "code_mode.example.browser", "code-mode-example-browser.md", "Chrome DevTools calls"
    ),
    "code_mode.example.workflow": _example(
        "code_mode.example.workflow", "code-mode-example-workflow.md", "Two-platform chain"
    ),
    # --- MCP workflow examples ---
    "mcp_workflow.example.design_to_cms": _example(
        "mcp_workflow.example.design_to_cms",
        "mcp-workflow-example-design-to-cms.md",
        "Figma design data into Webflow CMS",
    ),
    "mcp_workflow.example.cms_browser": _example(
        "mcp_workflow.example.cms_browser",
        "mcp-workflow-example-cms-browser.md",
        "Webflow site checked in Chrome DevTools",
    ),
    "mcp_workflow.example.multi_platform": _example(
        "mcp_workflow.example.multi_platform",
        "mcp-workflow-example-multi-platform.md",
        "Three platforms chained",
    ),
    "mcp_workflow.example.sequential": _example(
        "mcp_workflow.example.sequential",
        "mcp-workflow-example-sequential.md",
        "Sequential operations on one platform",
    ),
    "mcp_workflow.example.generic": _example(
        "mcp_workflow.example.generic",
        "mcp-workflow-example-generic.md",
        "Generic multi-step pattern with error handling",
    ),
}


@dataclass
class RenderedTemplate:
    """Result of rendering a template with metadata."""

    content: str
    spec: TemplateSpec
    variables_used: dict[str, Any]


# =============================================================================
# TEMPLATE REGISTRY
# =============================================================================


class TemplateRegistry:
    """Central registry for hook templates.

    Singleton pattern - use instance() to get the shared instance.
    Use reset() or configure() for test isolation.
    """

    _instance: ClassVar[TemplateRegistry | None] = None

    def __init__(self) -> None:
        self._specs: dict[str, TemplateSpec] = TEMPLATE_SPECS.copy()
        self._templates_dir: Path = get_templates_dir()

    @classmethod
    def instance(cls) -> TemplateRegistry:
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton for test isolation."""
        cls._instance = None

    @classmethod
    def configure(cls, templates_dir: Path | None = None) -> TemplateRegistry:
        """Reset and reconfigure registry. Returns new instance."""
        cls.reset()
        instance = cls()
        if templates_dir:
            instance._templates_dir = templates_dir
        cls._instance = instance
        return instance

    @property
    def templates_dir(self) -> Path:
        return self._templates_dir

    def get_spec(self, name: str) -> TemplateSpec:
        """Get template specification by name.

        Raises:
            KeyError: Template not found
        """
        if name not in self._specs:
            raise KeyError(f"Template not found: {name}")
        return self._specs[name]

    def list_templates(self, category: TemplateCategory | None = None) -> list[str]:
        """List all template names, optionally filtered by category."""
        if category is None:
            return list(self._specs.keys())
        return [name for name, spec in self._specs.items() if spec.category == category]

    def render(self, name: str, variables: dict[str, Any] | None = None) -> str:
        """Render a template by name with variables.

        Raises:
            KeyError: Template not found
            ValueError: Required variable missing
            FileNotFoundError: Template file not found
        """
        return self.render_with_metadata(name, variables).content

    def render_with_metadata(
        self, name: str, variables: dict[str, Any] | None = None
    ) -> RenderedTemplate:
        spec = self.get_spec(name)
        variables = variables or {}

        missing = [var for var in spec.required_vars if var not in variables]
        if missing:
            raise ValueError(f"Template '{name}' missing required variables: {', '.join(missing)}")

        complete_vars = dict(variables)
        for var in spec.optional_vars:
            if var not in complete_vars:
                complete_vars[var] = ""

        template_path = self._resolve_template_path(spec)
        content = load_template(template_path, complete_vars)

        return RenderedTemplate(content=content, spec=spec, variables_used=variables)

    def _resolve_template_path(self, spec: TemplateSpec) -> Path:
        """Resolve actual template path, checking env override.

        Priority:
        1. Environment variable (if set and file exists)
        2. Default path in templates_dir

        Raises:
            FileNotFoundError: If resolved path doesn't exist
        """
        if spec.env_override:
            override = os.environ.get(spec.env_override)
            if override:
                path = Path(override)
                if not path.is_absolute():
                    path = self._templates_dir / path
                if not path.exists():
                    raise FileNotFoundError(
                        f"Template override {spec.env_override}={override} points to "
                        f"non-existent file: {path}"
                    )
                return path

        default = self._templates_dir / spec.filename
        if not default.exists():
            raise FileNotFoundError(f"Template not found: {default}")
        return default
