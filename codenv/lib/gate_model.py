from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GateVerdict(Enum):
    """Verdict of a gate check."""

    ALLOW = "allow"
    DENY = "deny"
    WARN = "warn"  # Advisory: message shown, tool proceeds


@dataclass
class GateResult:
    """Result of a single hook check, independent of how the host reads it."""

    verdict: GateVerdict
    system_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(
        cls,
        system_message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "GateResult":
        """Factory method for ALLOW verdict."""
        return cls(
            verdict=GateVerdict.ALLOW,
            system_message=system_message,
            metadata=metadata or {},
        )

    @classmethod
    def deny(
        cls,
        system_message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "GateResult":
        """Factory method for DENY verdict."""
        return cls(
            verdict=GateVerdict.DENY,
            system_message=system_message,
            metadata=metadata or {},
        )

    @classmethod
    def warn(
        cls,
        system_message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "GateResult":
        """Factory method for WARN verdict."""
        return cls(
            verdict=GateVerdict.WARN,
            system_message=system_message,
            metadata=metadata or {},
        )

    @property
    def outcome(self) -> str:
        """Short outcome label for the performance log."""
        return str(self.metadata.get("outcome") or self.verdict.value)

    def to_json(self) -> dict[str, Any]:
        """Serialize to canonical JSON format."""
        return {
            "verdict": self.verdict.value,
            "system_message": self.system_message,
            "metadata": self.metadata,
        }
