"""Status matrix (core domain).

The matrix holds one status per (row, tracked column). Rows are keyed by their
grid position so duplicate domain names never share or overwrite cells.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from core.errors import InvariantViolation, MalformedInputError
from core.models import EMPTY, TERMINAL_STATUSES, SourceRow, UnresolvedCell


class StatusMatrix:
    """Domains x extension columns -> cell status."""

    def __init__(
        self,
        rows: Dict[int, str],
        extension_columns: Dict[int, str],
        cells: Dict[int, Dict[int, str]],
        shape: Tuple[int, int],
    ) -> None:
        self._rows = rows
        self._extension_columns = extension_columns
        self._cells = cells
        self._shape = shape
        self._lock = threading.Lock()

    @classmethod
    def build(
        cls,
        rows: Iterable[SourceRow],
        extension_columns: Mapping[int, str],
        shape: Optional[Tuple[int, int]] = None,
    ) -> "StatusMatrix":
        """Construct the matrix from parsed rows and tracked columns.

        Rows with a blank domain are skipped. Missing cells default to empty,
        and existing text is kept verbatim after trimming.
        """

        if not extension_columns:
            raise MalformedInputError("No valid extension columns found in the header row")

        columns = dict(sorted(extension_columns.items()))
        domains: Dict[int, str] = {}
        cells: Dict[int, Dict[int, str]] = {}
        for row in rows:
            domain = row.domain.strip()
            if not domain:
                continue
            domains[row.position] = domain
            cells[row.position] = {
                column: (row.cells.get(column) or EMPTY).strip() for column in columns
            }

        if shape is None:
            height = max(domains, default=0) + 1
            width = max(columns) + 1
            shape = (height, width)
        return cls(domains, columns, cells, shape)

    @property
    def domains(self) -> List[str]:
        return list(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def status(self, row: int, column: int) -> str:
        """Return the current status of one tracked cell."""

        try:
            return self._cells[row][column]
        except KeyError:
            raise KeyError(f"Cell ({row}, {column}) is not tracked") from None

    def unresolved_cells(self) -> Iterator[UnresolvedCell]:
        """Yield empty cells in row order, then ascending column order."""

        for row, domain in self._rows.items():
            for column, extension in self._extension_columns.items():
                if self._cells[row][column] == EMPTY:
                    yield UnresolvedCell(row=row, domain=domain, column=column, extension=extension)

    def set_status(self, row: int, column: int, status: str) -> None:
        """Move an empty cell to a terminal status.

        Raises InvariantViolation if the cell already holds a value or the
        status is not terminal. The check and write are atomic so concurrent
        writers cannot overwrite each other.
        """

        if status not in TERMINAL_STATUSES:
            raise InvariantViolation(f"Refusing non-terminal status {status!r}")
        with self._lock:
            current = self.status(row, column)
            if current != EMPTY:
                raise InvariantViolation(
                    f"Cell ({row}, {column}) for {self._rows[row]!r} already holds {current!r}"
                )
            self._cells[row][column] = status

    def counts(self) -> Dict[str, int]:
        """Return the number of cells per status (empty included)."""

        totals: Dict[str, int] = {}
        for row_cells in self._cells.values():
            for value in row_cells.values():
                totals[value] = totals.get(value, 0) + 1
        return totals

    def snapshot(self) -> List[List[Optional[str]]]:
        """Return the full grid; untracked positions are None (leave as is)."""

        height, width = self._shape
        grid: List[List[Optional[str]]] = [[None] * width for _ in range(height)]
        for row, row_cells in self._cells.items():
            for column, value in row_cells.items():
                grid[row][column] = value
        return grid
