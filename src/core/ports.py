"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for probe and workbook adapters so that
the core can be reused with different lookup protocols and file formats.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from core.models import ProbeResult

Grid = List[List[str]]
Snapshot = Sequence[Sequence[Optional[str]]]


class AvailabilityProbe(Protocol):
    """Registration lookup for a fully-qualified domain name.

    Implementations must never raise: every failure mode collapses to
    ``ProbeResult.error``.
    """

    def check(self, full_domain: str) -> ProbeResult:
        ...


class GridStorePort(Protocol):
    """Read and write a rectangular grid of cells for one workbook."""

    def read_grid(self) -> Grid:
        ...

    def write_grid(self, snapshot: Snapshot) -> None:
        ...
