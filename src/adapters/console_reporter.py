"""Console output for per-cell observations.

Keeping formatting here prevents drift between the CLI and tests, and keeps
the core free of any print calls.
"""

from __future__ import annotations

from typing import Callable

from core.models import Observation, ProbeOutcome


def format_observation(observation: Observation) -> str:
    """Return the console line for one processed cell."""

    result = observation.result
    if result.outcome is ProbeOutcome.AVAILABLE:
        return f"[NOT REGISTERED] {observation.full_domain}"
    if result.outcome is ProbeOutcome.REGISTERED:
        return f"[REGISTERED] {observation.full_domain}"
    return f"[ERROR CHECKING] {observation.full_domain}: {result.message or 'unknown error'}"


class ConsoleReporter:
    """Observer that prints each observation as it is determined."""

    def __init__(self, write: Callable[[str], None] = print) -> None:
        self._write = write
        self.lines_written = 0

    def __call__(self, observation: Observation) -> None:
        self._write(format_observation(observation))
        self.lines_written += 1
