from __future__ import annotations

import re
import zipfile
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from adapters.csv_store import CsvTableStore
from adapters.excel_store import ExcelWorkbookStore
from core.errors import MalformedInputError


def _write_xlsx(path: Path, rows: list[list[object]]) -> None:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    other = workbook.create_sheet("notes")
    other["A1"] = "untouched"
    workbook.save(path)


def test_excel_store_reads_first_sheet_as_text(tmp_path: Path) -> None:
    path = tmp_path / "domains.xlsx"
    _write_xlsx(path, [[None, ".com", ".net"], ["foo", None, "Registered"], [42, None, None]])

    grid = ExcelWorkbookStore(str(path)).read_grid()

    assert grid == [["", ".com", ".net"], ["foo", "", "Registered"], ["42", "", ""]]


def test_excel_store_writes_only_snapshot_cells(tmp_path: Path) -> None:
    path = tmp_path / "domains.xlsx"
    _write_xlsx(path, [["Domain", ".com", "Notes"], ["foo", None, "keep"], ["bar", "Registered", None]])

    snapshot = [
        [None, None, None],
        [None, "Not Registered", None],
        [None, "Registered", None],
    ]
    ExcelWorkbookStore(str(path)).write_grid(snapshot)

    workbook = load_workbook(path)
    sheet = workbook.worksheets[0]
    assert sheet["B2"].value == "Not Registered"
    assert sheet["B3"].value == "Registered"
    assert sheet["C2"].value == "keep"
    assert sheet["A1"].value == "Domain"
    assert workbook["notes"]["A1"].value == "untouched"
    assert [p.name for p in tmp_path.iterdir()] == ["domains.xlsx"]


def test_excel_store_writes_unresolved_cells_as_blank(tmp_path: Path) -> None:
    path = tmp_path / "domains.xlsx"
    _write_xlsx(path, [[None, ".com"], ["foo", None]])

    ExcelWorkbookStore(str(path)).write_grid([[None, None], [None, ""]])

    assert load_workbook(path).worksheets[0]["B2"].value is None


def test_excel_store_rejects_non_workbook(tmp_path: Path) -> None:
    path = tmp_path / "broken.xlsx"
    path.write_text("not a zip", encoding="utf-8")

    with pytest.raises(MalformedInputError):
        ExcelWorkbookStore(str(path)).read_grid()


def test_csv_store_pads_rows_on_read(tmp_path: Path) -> None:
    path = tmp_path / "domains.csv"
    path.write_text(",.com,.net\nfoo,,Registered\nbar\n", encoding="utf-8")

    grid = CsvTableStore(str(path)).read_grid()

    assert grid == [["", ".com", ".net"], ["foo", "", "Registered"], ["bar", "", ""]]


def test_csv_store_overlays_snapshot_and_keeps_other_cells(tmp_path: Path) -> None:
    path = tmp_path / "domains.csv"
    path.write_text("Domain,.com,notes\nfoo,,keep me\n", encoding="utf-8")

    CsvTableStore(str(path)).write_grid([[None, None, None], [None, "Registered", None]])

    assert path.read_text(encoding="utf-8").splitlines() == [
        "Domain,.com,notes",
        "foo,Registered,keep me",
    ]
    assert [p.name for p in tmp_path.iterdir()] == ["domains.csv"]


def _cache_formula_result(path: Path, ref: str, cached: str) -> None:
    """Give a formula cell a cached string result, as Excel does on save."""

    with zipfile.ZipFile(path) as archive:
        entries = {name: archive.read(name) for name in archive.namelist()}

    def with_cache(match: re.Match[str]) -> str:
        attrs = re.sub(r'\s+t="[^"]*"', "", match.group(1))
        return f'<c r="{ref}"{attrs} t="str">{match.group(2)}<v>{cached}</v></c>'

    sheet = "xl/worksheets/sheet1.xml"
    xml = entries[sheet].decode("utf-8")
    xml = re.sub(rf'<c r="{ref}"([^>]*)>(<f>.*?</f>).*?</c>', with_cache, xml, count=1)
    entries[sheet] = xml.encode("utf-8")

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)


def test_excel_store_keeps_formula_with_cached_status(tmp_path: Path) -> None:
    path = tmp_path / "domains.xlsx"
    formula = '=IF(1=1,"Registered","")'
    _write_xlsx(path, [[None, ".com", ".net"], ["foo", formula, None]])
    _cache_formula_result(path, "B2", "Registered")
    store = ExcelWorkbookStore(str(path))

    assert store.read_grid()[1][1] == "Registered"

    store.write_grid([[None, None, None], [None, "Registered", "Not Registered"]])

    sheet = load_workbook(path).worksheets[0]
    assert sheet["B2"].value == formula
    assert sheet["C2"].value == "Not Registered"


def test_excel_store_keeps_formula_without_cached_result(tmp_path: Path) -> None:
    path = tmp_path / "domains.xlsx"
    formula = '=UPPER("registered")'
    _write_xlsx(path, [[None, ".com"], ["foo", formula]])
    store = ExcelWorkbookStore(str(path))

    grid = store.read_grid()
    assert grid[1][1] == formula

    store.write_grid([[None, None], [None, grid[1][1]]])

    assert load_workbook(path).worksheets[0]["B2"].value == formula


def test_csv_store_keeps_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "domains.csv"
    path.write_bytes(b"\xef\xbb\xbfDomain,.com\r\nfoo,\r\n")

    store = CsvTableStore(str(path))
    assert store.read_grid()[0] == ["Domain", ".com"]
    store.write_grid([[None, None], [None, "Registered"]])

    data = path.read_bytes()
    assert data.startswith(b"\xef\xbb\xbf")
    assert data.count(b"\xef\xbb\xbf") == 1
    assert data[3:].decode("utf-8").splitlines() == ["Domain,.com", "foo,Registered"]


def test_csv_store_does_not_add_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "domains.csv"
    path.write_bytes(b"Domain,.com\nfoo,\n")

    CsvTableStore(str(path)).write_grid([[None, None], [None, "Not Registered"]])

    data = path.read_bytes()
    assert not data.startswith(b"\xef\xbb\xbf")
    assert data.decode("utf-8").splitlines() == ["Domain,.com", "foo,Not Registered"]
