"""Excel workbook adapter.

Implements the core GridStorePort on top of openpyxl. Only the first
worksheet is read, and only snapshot cells are written back so formatting,
formulas, and other sheets survive a run.
"""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Any
import zipfile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.errors import MalformedInputError
from core.ports import Grid, Snapshot

LOGGER = logging.getLogger(__name__)

MACRO_SUFFIXES = {".xlsm"}


def _cell_text(value: Any, formula: Any = None) -> str:
    if value is not None:
        return str(value)
    if isinstance(formula, str) and formula.startswith("="):
        return formula
    return ""


def _current_text(grid: Grid, row: int, column: int) -> str:
    if row >= len(grid) or column >= len(grid[row]):
        return ""
    return grid[row][column].strip()


class ExcelWorkbookStore:
    """Read and atomically rewrite the first worksheet of an .xlsx file."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._keep_vba = os.path.splitext(path)[1].lower() in MACRO_SUFFIXES

    def _load(self, **kwargs: Any) -> Any:
        try:
            workbook = load_workbook(self._path, **kwargs)
        except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
            raise MalformedInputError(f"Cannot read workbook {self._path}: {exc}") from exc
        if not workbook.worksheets:
            workbook.close()
            raise MalformedInputError("No worksheet found in the workbook")
        return workbook

    def read_grid(self) -> Grid:
        """Return the first worksheet as text cells (None becomes "").

        Formula cells read as their cached result, matching what a user sees.
        A formula without a cached result (e.g. never opened in Excel) reads as
        its formula text, so it counts as recorded and is never overwritten.
        """

        values = self._load(data_only=True)
        formulas = self._load(keep_vba=self._keep_vba)
        try:
            grid = [
                [_cell_text(value, formula) for value, formula in zip(value_row, formula_row)]
                for value_row, formula_row in zip(
                    values.worksheets[0].iter_rows(values_only=True),
                    formulas.worksheets[0].iter_rows(values_only=True),
                )
            ]
        finally:
            values.close()
            formulas.close()
        LOGGER.info("Read %s rows from %s", len(grid), self._path)
        return grid

    def write_grid(self, snapshot: Snapshot) -> None:
        """Write non-None snapshot cells and atomically replace the file."""

        # Unchanged text (including cached formula results) is left alone.
        current = self.read_grid()
        workbook = self._load(keep_vba=self._keep_vba)
        worksheet = workbook.worksheets[0]
        for row_index, row in enumerate(snapshot, start=1):
            for column_index, value in enumerate(row, start=1):
                if value is None:
                    continue
                if _current_text(current, row_index - 1, column_index - 1) == value:
                    continue
                # Unresolved cells go back as true blanks, not empty strings.
                worksheet.cell(row=row_index, column=column_index).value = value or None

        directory = os.path.dirname(os.path.abspath(self._path))
        suffix = os.path.splitext(self._path)[1]
        handle, temp_path = tempfile.mkstemp(prefix=".domainsheet-", suffix=suffix, dir=directory)
        os.close(handle)
        try:
            workbook.save(temp_path)
            os.replace(temp_path, self._path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
        LOGGER.info("Saved %s", self._path)
