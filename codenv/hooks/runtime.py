"""Per-invocation dependencies handed to every hook check.

Hooks never reach for globals: the router builds a HookRuntime with the
state store, settings, clock, and logger, and passes it alongside the
HookContext. Degraded environments get a NullStateStore here instead of a
hook silently skipping its work.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from codenv.hooks.gate_config import HookSettings
from codenv.lib.agent_tracking import AGENT_MAP_FILENAME, AgentTracker
from codenv.lib.state_store import Clock, FileStateStore, NullStateStore, StateStore
from codenv.lib.template_registry import TemplateRegistry


@dataclass
class HookRuntime:
    settings: HookSettings
    store: StateStore
    clock: Clock = time.time
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("codenv.hooks"))
    templates: TemplateRegistry = field(default_factory=TemplateRegistry.instance)

    @property
    def agent_map_path(self) -> Path | None:
        if isinstance(self.store, NullStateStore):
            return None
        return self.settings.state_dir / AGENT_MAP_FILENAME

    @property
    def tracker(self) -> AgentTracker:
        return AgentTracker(
            self.store,
            self.agent_map_path,
            clock=self.clock,
            state_ttl=self.settings.agent_state_ttl,
        )

    def render(self, template: str, variables: dict | None = None) -> str:
        return self.templates.render(template, variables)


def build_state_store(settings: HookSettings, clock: Clock = time.time) -> StateStore:
    """File-backed store, or the null store when state is switched off."""
    if not settings.state_enabled:
        return NullStateStore()
    return FileStateStore(settings.state_dir, clock=clock)
