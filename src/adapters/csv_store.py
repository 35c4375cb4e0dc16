"""CSV table adapter.

Implements the core GridStorePort for plain comma-separated files. Rows are
padded to a rectangle on read so column positions are stable.
"""

from __future__ import annotations

import codecs
import csv
import logging
import os
import tempfile

from core.errors import MalformedInputError
from core.ports import Grid, Snapshot
from core.tabular import merge_snapshot

LOGGER = logging.getLogger(__name__)


class CsvTableStore:
    """Read and atomically rewrite a UTF-8 CSV file."""

    def __init__(self, path: str, encoding: str = "utf-8-sig") -> None:
        self._path = path
        self._encoding = encoding

    def read_grid(self) -> Grid:
        try:
            with open(self._path, "r", encoding=self._encoding, newline="") as handle:
                rows = [list(row) for row in csv.reader(handle)]
        except UnicodeDecodeError as exc:
            raise MalformedInputError(f"{self._path} is not valid {self._encoding} text") from exc
        width = max((len(row) for row in rows), default=0)
        grid = [row + [""] * (width - len(row)) for row in rows]
        LOGGER.info("Read %s rows from %s", len(grid), self._path)
        return grid

    def _write_encoding(self) -> str:
        """Return an encoding that keeps the file's byte order mark as found."""

        if self._encoding.lower().replace("_", "-") != "utf-8-sig":
            return self._encoding
        with open(self._path, "rb") as handle:
            has_bom = handle.read(len(codecs.BOM_UTF8)) == codecs.BOM_UTF8
        return "utf-8-sig" if has_bom else "utf-8"

    def write_grid(self, snapshot: Snapshot) -> None:
        merged = merge_snapshot(self.read_grid(), snapshot)
        encoding = self._write_encoding()
        directory = os.path.dirname(os.path.abspath(self._path))
        handle, temp_path = tempfile.mkstemp(prefix=".domainsheet-", suffix=".csv", dir=directory)
        try:
            with os.fdopen(handle, "w", encoding=encoding, newline="") as output:
                csv.writer(output).writerows(merged)
            os.replace(temp_path, self._path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
        LOGGER.info("Saved %s", self._path)
