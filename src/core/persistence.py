"""Bounded-retry persistence step (core domain)."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from core.config import PersistencePolicy
from core.errors import PersistenceError
from core.ports import GridStorePort, Snapshot

LOGGER = logging.getLogger(__name__)


def persist(
    store: GridStorePort,
    snapshot: Snapshot,
    policy: PersistencePolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Write the snapshot, retrying up to ``policy.attempts`` times.

    Returns the attempt number that succeeded. Stores write atomically, so a
    failed attempt leaves the previous file intact.
    """

    last_error: Optional[Exception] = None
    for attempt in range(1, policy.attempts + 1):
        try:
            store.write_grid(snapshot)
        except Exception as exc:
            last_error = exc
            LOGGER.warning("Save attempt %s/%s failed: %s", attempt, policy.attempts, exc)
            if attempt < policy.attempts and policy.retry_delay_ms:
                sleep(policy.retry_delay_ms / 1000.0)
            continue
        if attempt > 1:
            LOGGER.info("Save succeeded on attempt %s", attempt)
        return attempt

    raise PersistenceError(
        f"Could not save after {policy.attempts} attempt(s): {last_error}",
        attempts=policy.attempts,
    ) from last_error
