"""Static configuration for domainsheet.

All user-editable settings (probe method, delays, retries, logging) live in a
single JSON file for quick edits without touching Python. The file path can
be overridden with DOMAINSHEET_CONFIG (a .env file is honored).
"""

import json
import os

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

# config.json at the project root is optional; the env override is not.
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")
CONFIG_PATH = os.getenv("DOMAINSHEET_CONFIG") or DEFAULT_CONFIG_PATH


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        if CONFIG_PATH == DEFAULT_CONFIG_PATH:
            return {}
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Probe selection switches adapters without changing core logic.
# - PROBE_METHOD: "dns" (system resolver) or "rdap" (HTTP lookup)
# - PROBE_TIMEOUT_SECONDS: per-lookup bound enforced by the probe adapter
_probe = _CONFIG.get("probe", {})
PROBE_METHOD = str(_probe.get("method", "dns")).lower()
PROBE_TIMEOUT_SECONDS = float(_probe.get("timeout_seconds", 10))
RDAP_BASE_URL = _probe.get("rdap_base_url", "https://rdap.org/domain/")

# Randomized pause before each lookup to avoid bursting the lookup service.
_delay = _CONFIG.get("delay", {})
DELAY_MIN_MS = int(_delay.get("min_ms", 30))
DELAY_MAX_MS = int(_delay.get("max_ms", 500))

# Parallel lookups; 1 keeps the strictly sequential behavior.
_concurrency = _CONFIG.get("concurrency", {})
MAX_WORKERS = int(_concurrency.get("max_workers", 1))

# Save retries: the workbook may be briefly locked by another program.
_persistence = _CONFIG.get("persistence", {})
SAVE_ATTEMPTS = int(_persistence.get("attempts", 2))
SAVE_RETRY_DELAY_MS = int(_persistence.get("retry_delay_ms", 500))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {"enabled": True, "level": "INFO"})
