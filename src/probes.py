"""Availability probe factory for domainsheet.

Selecting the adapter here keeps the reconciliation core independent from
how a lookup is performed.
"""

from __future__ import annotations

import logging

from adapters.dns_probe import DnsProbe
from adapters.rdap_probe import RdapProbe
from core.ports import AvailabilityProbe

PROBE_METHODS = ("dns", "rdap")


def build_probe(method: str, timeout_seconds: float, rdap_base_url: str) -> AvailabilityProbe:
    """Create the probe adapter named by ``method``.

    Fails fast on an unknown method so a typo in config.json never silently
    falls back to a different protocol.
    """

    logger = logging.getLogger(__name__)
    if method == "dns":
        logger.info("Using DNS probe (timeout %ss)", timeout_seconds)
        return DnsProbe(timeout_seconds=timeout_seconds)
    if method == "rdap":
        logger.info("Using RDAP probe at %s", rdap_base_url)
        return RdapProbe(base_url=rdap_base_url, timeout_seconds=timeout_seconds)
    raise RuntimeError(f"probe.method must be one of {', '.join(PROBE_METHODS)}, got {method!r}")
