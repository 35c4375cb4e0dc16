"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any workbook format or lookup protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

# Persisted cell values. An empty string means "unknown, needs checking".
EMPTY = ""
REGISTERED = "Registered"
NOT_REGISTERED = "Not Registered"

TERMINAL_STATUSES = frozenset({REGISTERED, NOT_REGISTERED})


class ProbeOutcome(Enum):
    """Tri-state answer of an availability probe."""

    AVAILABLE = "available"
    REGISTERED = "registered"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    """Value returned by a probe; errors carry a human-readable message."""

    outcome: ProbeOutcome
    message: Optional[str] = None

    @classmethod
    def available(cls) -> "ProbeResult":
        return cls(ProbeOutcome.AVAILABLE)

    @classmethod
    def registered(cls) -> "ProbeResult":
        return cls(ProbeOutcome.REGISTERED)

    @classmethod
    def error(cls, message: str) -> "ProbeResult":
        return cls(ProbeOutcome.ERROR, message)

    @property
    def is_error(self) -> bool:
        return self.outcome is ProbeOutcome.ERROR

    def status(self) -> Optional[str]:
        """Return the persisted status for this result, or None on error."""

        if self.outcome is ProbeOutcome.AVAILABLE:
            return NOT_REGISTERED
        if self.outcome is ProbeOutcome.REGISTERED:
            return REGISTERED
        return None


@dataclass(frozen=True)
class SourceRow:
    """One data row of the input grid, as handed to the matrix builder."""

    position: int
    domain: str
    cells: Mapping[int, str]


@dataclass(frozen=True)
class UnresolvedCell:
    """A (domain, column) pair whose status is still empty."""

    row: int
    domain: str
    column: int
    extension: str


@dataclass(frozen=True)
class Observation:
    """One processed cell, emitted for console output and logging."""

    domain: str
    extension: str
    full_domain: str
    result: ProbeResult
