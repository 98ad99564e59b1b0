"""Shared fixtures for hook tests.

Every test gets its own state and log directory under tmp_path and a clock
it can move by hand, so TTL behaviour is checked without sleeping.
"""

from pathlib import Path

import pytest

from codenv.hooks.gate_config import HookSettings
from codenv.hooks.router import HookRouter
from codenv.hooks.runtime import HookRuntime
from codenv.hooks.schemas import HookContext
from codenv.hooks.unified_logger import close_hook_loggers
from codenv.lib.output import CollectingSink
from codenv.lib.state_store import FileStateStore
from codenv.lib.template_registry import TemplateRegistry


class FakeClock:
    def __init__(self, start: float = 1_732_550_400.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(tmp_path / "project"))
    for var in (
        "CODENV_HOOKS_CONFIG",
        "CODENV_HOOKS_STATE_DIR",
        "CODENV_HOOKS_LOG_DIR",
        "CODENV_PENDING_QUESTION_TEMPLATE",
        "CODENV_VERIFICATION_TEMPLATE",
        "CODENV_CDN_REMINDER_TEMPLATE",
    ):
        monkeypatch.delenv(var, raising=False)
    TemplateRegistry.reset()
    yield
    TemplateRegistry.reset()
    close_hook_loggers()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> HookSettings:
    return HookSettings(state_dir=tmp_path / "state", log_dir=tmp_path / "logs")


@pytest.fixture
def store(settings: HookSettings, clock: FakeClock) -> FileStateStore:
    return FileStateStore(settings.state_dir, clock=clock)


@pytest.fixture
def runtime(settings: HookSettings, store: FileStateStore, clock: FakeClock) -> HookRuntime:
    return HookRuntime(settings=settings, store=store, clock=clock)


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def router(settings, store, sink, clock) -> HookRouter:
    return HookRouter(settings=settings, store=store, sink=sink, clock=clock)


def tool_event(tool_name: str, **tool_input) -> HookContext:
    return HookContext(hook_event="PreToolUse", tool_name=tool_name, tool_input=tool_input)


def prompt_event(prompt: str) -> HookContext:
    return HookContext(hook_event="UserPromptSubmit", prompt=prompt)
