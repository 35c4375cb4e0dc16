"""DNS availability probe.

A name that resolves is registered. A definite "no such name" answer from the
resolver means it is likely available. Anything else (temporary resolver
failure, timeout) is reported as an error so the cell is retried next run.
"""

from __future__ import annotations

import socket
import threading
from typing import Any, Callable, Dict

from core.models import ProbeResult

# EAI_NODATA is not defined on every platform.
_NOT_FOUND_CODES = {
    code
    for code in (getattr(socket, "EAI_NONAME", None), getattr(socket, "EAI_NODATA", None))
    if code is not None
}


class DnsProbe:
    """Probe adapter backed by the system resolver.

    getaddrinfo has no timeout of its own, so each lookup runs on its own
    daemon thread and the wait is bounded here. A stuck lookup only holds its
    own thread; later lookups start immediately.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        resolve: Callable[..., Any] = socket.getaddrinfo,
    ) -> None:
        self._timeout = timeout_seconds
        self._resolve = resolve

    def check(self, full_domain: str) -> ProbeResult:
        outcome: Dict[str, BaseException] = {}
        done = threading.Event()

        def lookup() -> None:
            try:
                self._resolve(full_domain, None)
            except Exception as exc:
                outcome["error"] = exc
            finally:
                done.set()

        threading.Thread(target=lookup, name=f"dns-probe:{full_domain}", daemon=True).start()
        if not done.wait(self._timeout):
            return ProbeResult.error(f"lookup timed out after {self._timeout:g}s")

        exc = outcome.get("error")
        if exc is None:
            return ProbeResult.registered()
        if isinstance(exc, socket.gaierror):
            if exc.errno in _NOT_FOUND_CODES:
                return ProbeResult.available()
            return ProbeResult.error(f"resolver error: {exc.strerror or exc}")
        return ProbeResult.error(str(exc) or exc.__class__.__name__)
