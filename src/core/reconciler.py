"""Core reconciliation pipeline.

This module is integration-agnostic. It only relies on the probe port and on
callables for delays and observations, so any lookup protocol or frontend can
drive it without changes here.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import random
import time
from typing import Callable, Iterable, List, Optional, Tuple

from core.config import DelayPolicy
from core.matrix import StatusMatrix
from core.models import Observation, ProbeResult, UnresolvedCell
from core.ports import AvailabilityProbe
from core.tabular import compose_domain

LOGGER = logging.getLogger(__name__)

Observer = Callable[[Observation], None]


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation pass."""

    matrix: StatusMatrix
    resolved: int = 0
    errors: int = 0
    observations: List[Observation] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.resolved + self.errors


class ReconciliationEngine:
    """Probes every unresolved cell and merges the results into the matrix."""

    def __init__(
        self,
        probe: AvailabilityProbe,
        delay_policy: DelayPolicy,
        observer: Optional[Observer] = None,
        max_workers: int = 1,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
        compose: Callable[[str, str], str] = compose_domain,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._probe = probe
        self._delay = delay_policy
        self._observer = observer
        self._max_workers = max_workers
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._compose = compose

    def reconcile(self, matrix: StatusMatrix) -> ReconcileReport:
        """Resolve all empty cells; already-recorded cells are never touched."""

        report = ReconcileReport(matrix=matrix)
        pending = [(cell, self._compose(cell.domain, cell.extension)) for cell in matrix.unresolved_cells()]
        if not pending:
            LOGGER.info("Nothing to check: all %s rows are resolved", len(matrix))
            return report

        LOGGER.info("Checking %s unresolved cells across %s rows", len(pending), len(matrix))
        for cell, full_domain, result in self._run(pending):
            self._merge(report, cell, full_domain, result)

        LOGGER.info("Reconciliation finished: resolved=%s, errors=%s", report.resolved, report.errors)
        return report

    def _run(
        self, pending: List[Tuple[UnresolvedCell, str]]
    ) -> Iterable[Tuple[UnresolvedCell, str, ProbeResult]]:
        if self._max_workers == 1:
            for cell, full_domain in pending:
                yield cell, full_domain, self._check(full_domain)
            return

        # Results are consumed in submission order so observations stay
        # deterministic even though probes overlap.
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            results = executor.map(self._check, [full_domain for _, full_domain in pending])
            for (cell, full_domain), result in zip(pending, results):
                yield cell, full_domain, result

    def _check(self, full_domain: str) -> ProbeResult:
        delay = self._delay.next_delay(self._rng)
        if delay:
            self._sleep(delay)
        try:
            return self._probe.check(full_domain)
        except Exception as exc:
            LOGGER.exception("Probe raised for %s", full_domain)
            return ProbeResult.error(str(exc) or exc.__class__.__name__)

    def _merge(
        self,
        report: ReconcileReport,
        cell: UnresolvedCell,
        full_domain: str,
        result: ProbeResult,
    ) -> None:
        status = result.status()
        if status is None:
            report.errors += 1
            LOGGER.warning("Check failed for %s: %s", full_domain, result.message)
        else:
            report.matrix.set_status(cell.row, cell.column, status)
            report.resolved += 1
            LOGGER.debug("%s -> %s", full_domain, status)

        observation = Observation(
            domain=cell.domain,
            extension=cell.extension,
            full_domain=full_domain,
            result=result,
        )
        report.observations.append(observation)
        if self._observer is not None:
            self._observer(observation)
