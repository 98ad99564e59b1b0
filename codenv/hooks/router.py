#!/usr/bin/env python3
"""
Hook Router: the single entry point for every hook.

The host invokes one command per tool-call event:

    codenv-hook run check-pending-questions   < event.json
    codenv-hook event PreToolUse              < event.json

`run` executes one hook; `event` executes every hook registered for a host
event (gate_config.GATE_EXECUTION_ORDER), stopping at the first block.

Architecture:
- Parses one JSON object from stdin; malformed input becomes an empty event.
- Normalizes it into a HookContext (tool name, tool input, file path, prompt).
- Builds a HookRuntime (settings, state store, clock, per-hook logger).
- Runs gate functions from gate_registry; a gate that raises is reported and
  treated as allow.
- Writes messages to stderr and maps the verdict to the exit code
  (0 = allow, 1 = block).

State administration subcommands (`state`, `scope`, `agents`) write and
inspect the records the hooks read.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from codenv.hooks.gate_config import (
    EXIT_ALLOW,
    EXIT_BLOCK,
    GATE_EXECUTION_ORDER,
    HOOK_SPECS,
    INITIAL_SCOPE_KEY,
    HookSettings,
    load_settings,
)
from codenv.hooks.gate_registry import GATE_CHECKS
from codenv.hooks.runtime import HookRuntime, build_state_store
from codenv.hooks.schemas import CanonicalHookOutput, HookContext
from codenv.hooks.unified_logger import get_hook_logger, log_performance
from codenv.lib.gate_model import GateResult, GateVerdict
from codenv.lib.hook_utils import count_files
from codenv.lib.output import NullSink, OutputSink, StreamSink
from codenv.lib.state_store import Clock, StateStore

# Payload shapes differ between hosts and versions; first present key wins
TOOL_NAME_KEYS = ("tool_name", "toolName", "tool", "name")
FILE_PATH_KEYS = ("filePath", "file_path", "path", "notebook_path")


class HookRouter:
    def __init__(
        self,
        settings: HookSettings | None = None,
        store: StateStore | None = None,
        sink: OutputSink | None = None,
        clock: Clock = time.time,
    ):
        self.settings = settings or load_settings()
        self.clock = clock
        self.store = store if store is not None else build_state_store(self.settings, clock)
        if sink is None:
            # No stderr (detached host process): messages are dropped, verdicts still hold
            sink = StreamSink() if sys.stderr is not None else NullSink()
        self.sink = sink

    @staticmethod
    def _normalize_json_field(value: Any) -> Any:
        """Normalize a field that may be a JSON string to its parsed form."""
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value

    def normalize_input(
        self,
        raw_input: dict[str, Any],
        hook_event: str | None = None,
        hook_name: str | None = None,
    ) -> HookContext:
        """Create a normalized HookContext from raw input."""
        event = raw_input.get("hook_event_name")
        if not isinstance(event, str) or not event:
            event = hook_event
        if not event and hook_name in HOOK_SPECS:
            event = HOOK_SPECS[hook_name].event

        tool_name = None
        for key in TOOL_NAME_KEYS:
            value = raw_input.get(key)
            if isinstance(value, str) and value:
                tool_name = value
                break

        tool_input = self._normalize_json_field(raw_input.get("tool_input"))
        if not isinstance(tool_input, dict):
            tool_input = {}
        parameters = self._normalize_json_field(raw_input.get("parameters"))
        if not isinstance(parameters, dict):
            parameters = {}

        file_path = None
        for source in (tool_input, parameters):
            for key in FILE_PATH_KEYS:
                value = source.get(key)
                if isinstance(value, str) and value:
                    file_path = value
                    break
            if file_path:
                break

        prompt = raw_input.get("prompt")

        return HookContext(
            hook_event=event or "unknown",
            hook_name=hook_name,
            session_id=raw_input.get("session_id") if isinstance(raw_input.get("session_id"), str) else None,
            tool_name=tool_name,
            tool_input=tool_input or parameters,
            file_path=file_path,
            prompt=prompt if isinstance(prompt, str) else None,
            cwd=raw_input.get("cwd") if isinstance(raw_input.get("cwd"), str) else None,
            raw_input=raw_input,
        )

    def runtime_for(self, hook_name: str) -> HookRuntime:
        return HookRuntime(
            settings=self.settings,
            store=self.store,
            clock=self.clock,
            logger=get_hook_logger(hook_name, self.settings.log_dir),
        )

    def run_gate(self, hook_name: str, ctx: HookContext) -> GateResult:
        """Run one gate with timing and fail-open error handling."""
        check = GATE_CHECKS.get(hook_name)
        if check is None:
            return GateResult.allow(metadata={"outcome": f"unknown hook {hook_name}"})

        spec = HOOK_SPECS.get(hook_name)
        start = time.monotonic()
        try:
            result = check(ctx.model_copy(update={"hook_name": hook_name}), self.runtime_for(hook_name))
        except Exception as e:
            error_msg = f"Hook '{hook_name}' failed: {e}"
            print(f"WARNING: {error_msg}", file=sys.stderr)
            result = GateResult.allow(
                metadata={
                    "outcome": "error",
                    "errors": [error_msg],
                    "tracebacks": [traceback.format_exc()],
                }
            )

        if result.verdict == GateVerdict.DENY and spec is not None and not spec.blocking:
            # Advisory hooks never block
            result.verdict = GateVerdict.WARN

        duration_ms = int((time.monotonic() - start) * 1000)
        floor = spec.perf_log_floor_ms if spec else 0
        if result.verdict == GateVerdict.DENY or duration_ms >= floor:
            log_performance(self.settings.log_dir, hook_name, duration_ms, result.outcome)

        result.metadata.setdefault("duration_ms", duration_ms)
        return result

    def execute_hook(self, hook_name: str, ctx: HookContext) -> CanonicalHookOutput:
        merged = CanonicalHookOutput()
        self._merge_result(merged, hook_name, self.run_gate(hook_name, ctx))
        return merged

    def execute_hooks(self, ctx: HookContext) -> CanonicalHookOutput:
        """Run all configured hooks for the event and merge results."""
        merged = CanonicalHookOutput()
        for hook_name in GATE_EXECUTION_ORDER.get(ctx.hook_event, []):
            result = self.run_gate(hook_name, ctx)
            self._merge_result(merged, hook_name, result)
            if result.verdict == GateVerdict.DENY:
                break
        return merged

    @staticmethod
    def _merge_result(target: CanonicalHookOutput, hook_name: str, source: GateResult) -> None:
        """Merge source into target (in-place)."""
        if source.verdict == GateVerdict.DENY:
            target.verdict = "deny"
        elif source.verdict == GateVerdict.WARN and target.verdict == "allow":
            target.verdict = "warn"

        if source.system_message:
            target.system_message = (
                f"{target.system_message}\n{source.system_message}"
                if target.system_message
                else source.system_message
            )

        target.metadata.setdefault("hooks", {})[hook_name] = source.to_json()

    def emit(self, output: CanonicalHookOutput) -> int:
        """Write the message to the sink and return the exit code."""
        if output.system_message:
            self.sink.emit(output.system_message)
        return EXIT_BLOCK if output.blocked else EXIT_ALLOW


# --- Input ---


def read_stdin_event() -> dict[str, Any]:
    """One JSON object from stdin; anything else is treated as an empty event."""
    try:
        if sys.stdin is None or sys.stdin.isatty():
            return {}
        data = sys.stdin.read()
    except (OSError, ValueError) as e:
        print(f"WARNING: Failed to read stdin: {e}", file=sys.stderr)
        return {}

    if not data.strip():
        return {}
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        print(f"WARNING: Hook input is not valid JSON: {e}", file=sys.stderr)
        return {}
    return raw if isinstance(raw, dict) else {}


# --- Subcommands ---


def _read_context(
    router: HookRouter, hook_event: str | None = None, hook_name: str | None = None
) -> HookContext:
    """Context for the stdin event; input that fails validation becomes an empty event."""
    raw = read_stdin_event()
    try:
        return router.normalize_input(raw, hook_event=hook_event, hook_name=hook_name)
    except ValidationError as e:
        print(f"WARNING: Hook input rejected, treating as empty: {e}", file=sys.stderr)
        return router.normalize_input({}, hook_event=hook_event, hook_name=hook_name)


def _cmd_run(args: argparse.Namespace, router: HookRouter) -> int:
    ctx = _read_context(router, hook_name=args.hook)
    return router.emit(router.execute_hook(args.hook, ctx))


def _cmd_event(args: argparse.Namespace, router: HookRouter) -> int:
    ctx = _read_context(router, hook_event=args.event)
    return router.emit(router.execute_hooks(ctx))


def _cmd_state(args: argparse.Namespace, router: HookRouter) -> int:
    store = router.store
    if args.action == "set":
        try:
            payload = json.loads(args.data)
        except json.JSONDecodeError as e:
            print(f"ERROR: --data is not valid JSON: {e}", file=sys.stderr)
            return EXIT_BLOCK
        if not isinstance(payload, dict):
            print("ERROR: --data must be a JSON object", file=sys.stderr)
            return EXIT_BLOCK
        return EXIT_ALLOW if store.write(args.key, payload) else EXIT_BLOCK

    if args.action == "get":
        payload = store.read(args.key, args.ttl)
        if payload is None:
            return EXIT_BLOCK
        print(json.dumps(payload, indent=2))
        return EXIT_ALLOW

    if args.action == "clear":
        return EXIT_ALLOW if store.clear(args.key) else EXIT_BLOCK

    # list
    for key in getattr(store, "keys", list)():
        age = store.age(key)
        age_text = "?" if age is None else f"{int(age)}s"
        print(f"{key}\t{age_text}")
    return EXIT_ALLOW


def _cmd_scope(args: argparse.Namespace, router: HookRouter) -> int:
    folder = Path(args.folder).resolve()
    files_count = count_files(folder, router.settings.scope_file_pattern)
    payload = {
        "spec_folder": str(folder),
        "files_count": files_count,
        "level": args.level,
        "recorded_at": time.strftime("%Y-%m-%d %H:%M:%S"),
    }
    if not router.store.write(INITIAL_SCOPE_KEY, payload):
        print("WARNING: initial scope not recorded (state unavailable)", file=sys.stderr)
        return EXIT_BLOCK
    print(f"Initial scope: {files_count} files in {folder} (level {args.level})")
    return EXIT_ALLOW


def _cmd_agents(args: argparse.Namespace, router: HookRouter) -> int:
    runtime = router.runtime_for("announce-task-dispatch")
    print(json.dumps(runtime.tracker.summary(), indent=2))
    return EXIT_ALLOW


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codenv-hook", description="Hook Router")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run one hook on the event read from stdin")
    run.add_argument("hook", choices=sorted(GATE_CHECKS))
    run.set_defaults(func=_cmd_run)

    event = sub.add_parser("event", help="Run every hook registered for a host event")
    event.add_argument("event", choices=sorted(GATE_EXECUTION_ORDER))
    event.set_defaults(func=_cmd_event)

    state = sub.add_parser("state", help="Inspect or modify named hook state")
    state_sub = state.add_subparsers(dest="action", required=True)
    s_set = state_sub.add_parser("set")
    s_set.add_argument("key")
    s_set.add_argument("--data", default="{}", help="JSON object payload")
    s_get = state_sub.add_parser("get")
    s_get.add_argument("key")
    s_get.add_argument("--ttl", type=float, default=300)
    s_clear = state_sub.add_parser("clear")
    s_clear.add_argument("key")
    state_sub.add_parser("list")
    state.set_defaults(func=_cmd_state)

    scope = sub.add_parser("scope", help="Record the initial spec folder size")
    scope_sub = scope.add_subparsers(dest="action", required=True)
    s_init = scope_sub.add_parser("init")
    s_init.add_argument("folder")
    s_init.add_argument("--level", type=int, default=2)
    scope.set_defaults(func=_cmd_scope)

    agents = sub.add_parser("agents", help="Show tracked sub-agent dispatches")
    agents.set_defaults(func=_cmd_agents)

    return parser


# --- Main Entry Point ---


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    router = HookRouter(settings=load_settings(args.config))
    try:
        return args.func(args, router)
    except ValueError as e:
        # Invalid state key and similar usage errors from admin commands
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_BLOCK


if __name__ == "__main__":
    sys.exit(main())
