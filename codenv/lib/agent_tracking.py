"""Sub-agent dispatch tracking.

The dispatch announcer records each launched agent in two places:

1. The `active_agents` state record, used to count concurrently running
   agents. An agent counts as running until its own timeout elapses or the
   completion hook removes it.
2. An append-only correlation file (`agent_description_map.txt`) with one
   `description|agent_id` line per dispatch. The host gives the completion
   hook only the tool input, so the agent is found again by description,
   first match wins.

Both are best-effort: if state or the correlation file is unavailable the
dispatch still proceeds with a count of 1.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout
from pydantic import BaseModel, ValidationError

from codenv.lib.state_store import Clock, StateStore

logger = logging.getLogger(__name__)

ACTIVE_AGENTS_KEY = "active_agents"
AGENT_MAP_FILENAME = "agent_description_map.txt"
LOCK_TIMEOUT_SECONDS = 2


class AgentDescriptor(BaseModel):
    agent_id: str
    description: str
    model: str = "inherit"
    timeout_ms: int = 300000
    subagent_type: str = "general-purpose"
    started_at: float

    def is_running(self, now: float) -> bool:
        return now < self.started_at + self.timeout_ms / 1000


def _map_key(description: str) -> str:
    # One record per line, '|' separates the id
    return description.replace("\n", " ").replace("\r", " ")


class AgentTracker:
    def __init__(
        self,
        store: StateStore,
        map_path: Path | None,
        clock: Clock = time.time,
        state_ttl: float = 86400,
    ):
        self.store = store
        self.map_path = map_path
        self.clock = clock
        self.state_ttl = state_ttl

    def generate_agent_id(self) -> str:
        return f"agent_{int(self.clock())}_{uuid.uuid4().hex[:6]}"

    def active_agents(self) -> list[AgentDescriptor]:
        """Agents dispatched and not yet timed out or completed."""
        payload = self.store.read(ACTIVE_AGENTS_KEY, self.state_ttl) or {}
        now = self.clock()
        agents: list[AgentDescriptor] = []
        for raw in payload.get("agents", []):
            try:
                agent = AgentDescriptor.model_validate(raw)
            except ValidationError:
                continue
            if agent.is_running(now):
                agents.append(agent)
        return agents

    def _save(self, agents: list[AgentDescriptor]) -> None:
        self.store.write(
            ACTIVE_AGENTS_KEY, {"agents": [a.model_dump() for a in agents]}
        )

    def start(self, agent: AgentDescriptor) -> int:
        """Record a dispatch. Returns the number of agents now running (>= 1)."""
        agents = self.active_agents()
        agents.append(agent)
        self._save(agents)
        self.record_mapping(agent.description, agent.agent_id)
        return len(agents)

    def finish(self, description: str) -> AgentDescriptor | None:
        """Resolve a completed dispatch by description and stop tracking it."""
        agent_id = self.pop_mapping(description)
        agents = self.active_agents()

        match = None
        for agent in agents:
            if agent_id is not None and agent.agent_id == agent_id:
                match = agent
                break
        if match is None and agent_id is None:
            match = next((a for a in agents if a.description == description), None)

        if match is not None:
            agents.remove(match)
            self._save(agents)
        return match

    # --- Correlation file ---

    def _lock(self) -> FileLock | None:
        if self.map_path is None:
            return None
        lock_path = self.map_path.with_suffix(self.map_path.suffix + ".lock")
        return FileLock(lock_path, timeout=LOCK_TIMEOUT_SECONDS)

    def record_mapping(self, description: str, agent_id: str) -> bool:
        lock = self._lock()
        if lock is None or self.map_path is None:
            return False
        try:
            self.map_path.parent.mkdir(parents=True, exist_ok=True)
            with lock:
                with self.map_path.open("a", encoding="utf-8") as f:
                    f.write(f"{_map_key(description)}|{agent_id}\n")
        except (OSError, Timeout) as e:
            logger.warning("Could not record agent mapping: %s", e)
            return False
        return True

    def pop_mapping(self, description: str) -> str | None:
        """Remove and return the first agent id recorded for `description`."""
        lock = self._lock()
        if lock is None or self.map_path is None:
            return None
        key = _map_key(description)
        try:
            with lock:
                if not self.map_path.exists():
                    return None
                lines = self.map_path.read_text(encoding="utf-8").splitlines()
                for i, line in enumerate(lines):
                    desc, sep, agent_id = line.rpartition("|")
                    if sep and desc == key:
                        del lines[i]
                        body = "".join(f"{ln}\n" for ln in lines)
                        self.map_path.write_text(body, encoding="utf-8")
                        return agent_id
        except (OSError, Timeout, UnicodeDecodeError) as e:
            logger.warning("Could not read agent mapping: %s", e)
        return None

    def mappings(self) -> list[tuple[str, str]]:
        if self.map_path is None or not self.map_path.exists():
            return []
        result: list[tuple[str, str]] = []
        try:
            for line in self.map_path.read_text(encoding="utf-8").splitlines():
                desc, sep, agent_id = line.rpartition("|")
                if sep:
                    result.append((desc, agent_id))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read agent mapping: %s", e)
        return result

    def summary(self) -> dict[str, Any]:
        return {
            "active": [a.model_dump() for a in self.active_agents()],
            "pending_mappings": len(self.mappings()),
        }
