"""Application entry point for the domainsheet checker."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler
from typing import Callable, Optional

from art import tprint

import settings
from adapters.console_reporter import ConsoleReporter
from adapters.csv_store import CsvTableStore
from adapters.excel_store import ExcelWorkbookStore
from core.config import DelayPolicy, PersistencePolicy
from core.errors import MalformedInputError, PersistenceError
from core.models import EMPTY, NOT_REGISTERED, REGISTERED
from core.persistence import persist
from core.ports import AvailabilityProbe, GridStorePort
from core.reconciler import Observer, ReconcileReport, ReconciliationEngine
from core.tabular import build_matrix
from probes import build_probe

NAME = "DOMAINSHEET"
FONT = "tarty-1"

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/domainsheet.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def open_store(path: str) -> GridStorePort:
    """Pick the workbook adapter from the file suffix."""

    suffix = os.path.splitext(path)[1].lower()
    if suffix in EXCEL_SUFFIXES:
        return ExcelWorkbookStore(path)
    if suffix in CSV_SUFFIXES:
        return CsvTableStore(path)
    supported = ", ".join(sorted(EXCEL_SUFFIXES | CSV_SUFFIXES))
    raise ValueError(f"Unsupported file type {suffix or '(none)'!r}; expected one of {supported}")


def run_reconciliation(
    store: GridStorePort,
    probe: AvailabilityProbe,
    delay_policy: DelayPolicy,
    persistence_policy: PersistencePolicy,
    observer: Optional[Observer] = None,
    max_workers: int = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> ReconcileReport:
    """Read, reconcile, and persist one workbook.

    Nothing is written when the input is malformed or the run is interrupted;
    the grid is saved once, as a whole, after every cell has been processed.
    """

    grid = store.read_grid()
    matrix = build_matrix(grid)

    engine = ReconciliationEngine(
        probe,
        delay_policy,
        observer=observer,
        max_workers=max_workers,
        sleep=sleep,
    )
    report = engine.reconcile(matrix)

    persist(store, matrix.snapshot(), persistence_policy, sleep=sleep)
    return report


def summary_lines(report: ReconcileReport) -> list[str]:
    """Describe the run and the workbook's tracked cells after it."""

    counts = report.matrix.counts()
    return [
        f"Checked {report.processed} cell(s): {report.resolved} resolved, {report.errors} failed",
        f"Tracked cells: {counts.get(REGISTERED, 0)} registered, "
        f"{counts.get(NOT_REGISTERED, 0)} not registered, {counts.get(EMPTY, 0)} still unknown",
    ]


def _run(path: str) -> int:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    if not os.path.isfile(path):
        print(f"Error: File not found at '{path}'.")
        return EXIT_FAILURE

    try:
        store = open_store(path)
    except ValueError as exc:
        print(f"Error: {exc}")
        return EXIT_FAILURE

    delay_policy = DelayPolicy(min_ms=settings.DELAY_MIN_MS, max_ms=settings.DELAY_MAX_MS)
    persistence_policy = PersistencePolicy(
        attempts=settings.SAVE_ATTEMPTS,
        retry_delay_ms=settings.SAVE_RETRY_DELAY_MS,
    )
    probe = build_probe(settings.PROBE_METHOD, settings.PROBE_TIMEOUT_SECONDS, settings.RDAP_BASE_URL)
    reporter = ConsoleReporter()

    logger.info("Starting domainsheet for %s", path)
    try:
        report = run_reconciliation(
            store,
            probe,
            delay_policy,
            persistence_policy,
            observer=reporter,
            max_workers=settings.MAX_WORKERS,
        )
    except MalformedInputError as exc:
        print(f"Error: {exc}")
        return EXIT_FAILURE
    except PersistenceError as exc:
        print(f"Error: {exc}")
        logger.error("Results were not saved after %s attempt(s)", exc.attempts)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("Interrupted; the workbook was left unchanged.")
        return EXIT_INTERRUPTED

    print(f"Workbook updated: {os.path.abspath(path)}")
    for line in summary_lines(report):
        print(line)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="domainsheet",
        description="Fill in unknown domain availability cells in a workbook.",
        epilog="Example: domainsheet domains.xlsx",
    )
    parser.add_argument("path", help="Path to the .xlsx or .csv workbook to update in place")

    args = parser.parse_args(argv)
    return _run(args.path)


if __name__ == "__main__":
    sys.exit(main())
