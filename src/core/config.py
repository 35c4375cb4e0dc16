"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Optional


@dataclass(frozen=True)
class DelayPolicy:
    """Randomized pause before each probe, in milliseconds."""

    min_ms: int = 30
    max_ms: int = 500

    def __post_init__(self) -> None:
        if self.min_ms < 0 or self.max_ms < self.min_ms:
            raise ValueError(f"Invalid delay range: {self.min_ms}..{self.max_ms} ms")

    def next_delay(self, rng: Optional[random.Random] = None) -> float:
        """Return the next delay in seconds."""

        if self.max_ms == 0:
            return 0.0
        source = rng or random
        return source.randint(self.min_ms, self.max_ms) / 1000.0


NO_DELAY = DelayPolicy(min_ms=0, max_ms=0)


@dataclass(frozen=True)
class PersistencePolicy:
    """Bounded retry settings for writing the reconciled grid."""

    attempts: int = 2
    retry_delay_ms: int = 500

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("persistence attempts must be at least 1")
