"""RDAP availability probe.

RDAP answers 200 for registered domains and 404 for unknown ones. Any other
status or a network failure becomes an error result.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.parse
import urllib.request

from core.models import ProbeResult

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://rdap.org/domain/"
USER_AGENT = "domainsheet/1.0"


class RdapProbe:
    """Probe adapter that queries an RDAP domain endpoint."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout_seconds: float = 10.0) -> None:
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._timeout = timeout_seconds

    def _endpoint(self, full_domain: str) -> str:
        return f"{self._base_url}{urllib.parse.quote(full_domain)}"

    def check(self, full_domain: str) -> ProbeResult:
        request = urllib.request.Request(self._endpoint(full_domain), method="GET")
        request.add_header("Accept", "application/rdap+json")
        request.add_header("User-Agent", USER_AGENT)
        # A blocking call is fine here; the engine serializes or pools probes.
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                status = response.status
        except urllib.error.HTTPError as e:
            if e.code == 404:
                return ProbeResult.available()
            return ProbeResult.error(f"RDAP error {e.code}")
        except (urllib.error.URLError, OSError, ValueError) as e:
            reason = getattr(e, "reason", None) or e
            return ProbeResult.error(f"RDAP request failed: {reason}")

        if status == 200:
            return ProbeResult.registered()
        LOGGER.debug("Unexpected RDAP status %s for %s", status, full_domain)
        return ProbeResult.error(f"RDAP status {status}")
