from __future__ import annotations

from pathlib import Path

import pytest

import app
from adapters.csv_store import CsvTableStore
from adapters.excel_store import ExcelWorkbookStore
from core.config import NO_DELAY, PersistencePolicy
from core.errors import MalformedInputError
from core.models import ProbeResult


class FakeProbe:
    def __init__(self, answers: dict[str, ProbeResult]) -> None:
        self._answers = answers
        self.calls: list[str] = []

    def check(self, full_domain: str) -> ProbeResult:
        self.calls.append(full_domain)
        return self._answers.get(full_domain, ProbeResult.registered())


class FakeStore:
    def __init__(self, grid: list[list[str]]) -> None:
        self._grid = grid
        self.writes: list[list[list[str | None]]] = []

    def read_grid(self) -> list[list[str]]:
        return [list(row) for row in self._grid]

    def write_grid(self, snapshot) -> None:
        self.writes.append([list(row) for row in snapshot])


def _run(store, probe) -> app.ReconcileReport:
    return app.run_reconciliation(
        store,
        probe,
        NO_DELAY,
        PersistencePolicy(attempts=2, retry_delay_ms=0),
        sleep=lambda _: None,
    )


def test_partial_failures_stay_blank_in_output(tmp_path: Path) -> None:
    path = tmp_path / "domains.csv"
    path.write_text(
        "Domain,.com,.net,Notes\n"
        "foo,,Registered,first\n"
        ",,,spacer\n"
        "bar,,,\n",
        encoding="utf-8",
    )
    probe = FakeProbe({"foo.com": ProbeResult.available(), "bar.net": ProbeResult.error("timeout")})

    report = _run(CsvTableStore(str(path)), probe)

    assert report.resolved == 2
    assert report.errors == 1
    assert path.read_text(encoding="utf-8").splitlines() == [
        "Domain,.com,.net,Notes",
        "foo,Not Registered,Registered,first",
        ",,,spacer",
        "bar,Registered,,",
    ]


def test_second_run_checks_nothing_and_keeps_output(tmp_path: Path) -> None:
    path = tmp_path / "domains.csv"
    path.write_text(",.com,.net\nfoo,,\nbar,Registered,\n", encoding="utf-8")

    _run(CsvTableStore(str(path)), FakeProbe({}))
    first = path.read_text(encoding="utf-8")
    probe = FakeProbe({})
    report = _run(CsvTableStore(str(path)), probe)

    assert probe.calls == []
    assert report.processed == 0
    assert path.read_text(encoding="utf-8") == first


def test_no_extension_headers_fails_without_probe_or_write() -> None:
    store = FakeStore([["Domain", "", ""], ["foo", "", ""]])
    probe = FakeProbe({})

    with pytest.raises(MalformedInputError):
        _run(store, probe)

    assert probe.calls == []
    assert store.writes == []


def test_snapshot_handed_to_store_matches_input_shape() -> None:
    store = FakeStore([["", ".com", "x"], ["foo", "", "a"], ["", "", ""]])

    _run(store, FakeProbe({}))

    assert store.writes == [[[None, None, None], [None, "Registered", None], [None, None, None]]]


def test_summary_lines_count_tracked_cells_after_run() -> None:
    store = FakeStore([["", ".com", ".net"], ["foo", "", "Registered"], ["bar", "", ""]])
    probe = FakeProbe({"foo.com": ProbeResult.available(), "bar.com": ProbeResult.error("timeout")})

    report = _run(store, probe)

    assert app.summary_lines(report) == [
        "Checked 3 cell(s): 2 resolved, 1 failed",
        "Tracked cells: 2 registered, 1 not registered, 1 still unknown",
    ]


def test_open_store_picks_adapter_by_suffix() -> None:
    assert isinstance(app.open_store("domains.xlsx"), ExcelWorkbookStore)
    assert isinstance(app.open_store("DOMAINS.CSV"), CsvTableStore)
    with pytest.raises(ValueError):
        app.open_store("domains.ods")


def test_main_reports_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = tmp_path / "missing.xlsx"

    code = app.main([str(missing)])

    assert code == app.EXIT_FAILURE
    assert f"Error: File not found at '{missing}'." in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []


def test_main_requires_path_argument() -> None:
    with pytest.raises(SystemExit) as excinfo:
        app.main([])
    assert excinfo.value.code == 2


def test_main_reports_malformed_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "domains.csv"
    path.write_text("Domain,,\nfoo,,\n", encoding="utf-8")

    code = app.main([str(path)])

    assert code == app.EXIT_FAILURE
    assert "No valid extension columns" in capsys.readouterr().out
    assert path.read_text(encoding="utf-8") == "Domain,,\nfoo,,\n"
