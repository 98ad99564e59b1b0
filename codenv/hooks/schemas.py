from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Input Schemas (Context) ---


class HookContext(BaseModel):
    """
    Normalized input context for all hooks.

    Built once per invocation by HookRouter.normalize_input() from whatever
    payload shape the host sent.
    """

    hook_event: str = Field(
        ..., description="Host event name (PreToolUse, PostToolUse, UserPromptSubmit)."
    )
    hook_name: str | None = Field(None, description="Hook being run, e.g. check-pending-questions.")
    session_id: str | None = None

    # Tool events
    tool_name: str | None = None
    tool_input: dict[str, Any] = Field(default_factory=dict)
    file_path: str | None = None

    # Prompt events
    prompt: str | None = None

    cwd: str | None = None

    # Raw Input (for fallback/passthrough)
    raw_input: dict[str, Any] = Field(default_factory=dict)

    @property
    def prompt_lower(self) -> str:
        return (self.prompt or "").lower()

    def input_value(self, key: str) -> Any:
        """Value from tool_input, treating null as absent."""
        return self.tool_input.get(key)


# --- Output Schemas ---


class CanonicalHookOutput(BaseModel):
    """
    Merged result of one or more hooks, before it is turned into an exit code.
    """

    verdict: Literal["allow", "deny", "warn"] = "allow"
    system_message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def blocked(self) -> bool:
        return self.verdict == "deny"
