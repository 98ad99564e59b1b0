"""Output sinks for user-visible hook messages.

Hooks talk to the user only through standard error; the router writes every
message through an `OutputSink` so tests and degraded environments can swap
the destination.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class OutputSink(Protocol):
    def emit(self, text: str) -> None: ...


class StreamSink:
    """Write messages to a text stream (stderr unless told otherwise)."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def emit(self, text: str) -> None:
        stream = self._stream or sys.stderr
        try:
            stream.write(text if text.endswith("\n") else text + "\n")
            stream.flush()
        except (OSError, ValueError):
            # Closed or broken stream: the message is lost, the verdict is not
            pass


class NullSink:
    def emit(self, text: str) -> None:
        pass


class CollectingSink:
    """Keep messages in memory, for callers that render them elsewhere."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def emit(self, text: str) -> None:
        self.messages.append(text)

    @property
    def text(self) -> str:
        return "\n".join(self.messages)
