"""Grid parsing and domain composition (core domain).

Header convention: a header cell in row 1 (from column 2 on) is tracked only
when, trimmed and lower-cased, it starts with "." (".com", ".co.uk"). Other
headers such as "Notes" are ignored. Domains are joined to extensions by plain
concatenation, since the extension already carries its separator.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from core.errors import MalformedInputError
from core.matrix import StatusMatrix
from core.models import SourceRow

SEPARATOR = "."
DOMAIN_COLUMN = 0
HEADER_ROW = 0


def normalize_extension(raw: str) -> Optional[str]:
    """Return the lower-cased extension for a dotted header cell, or None."""

    text = raw.strip().lower()
    if not text.startswith(SEPARATOR) or not text.strip(SEPARATOR):
        return None
    if any(ch.isspace() for ch in text):
        return None
    return text


def compose_domain(domain: str, extension: str) -> str:
    """Join a domain and a normalized extension into a probe-able name."""

    return f"{domain.strip().rstrip(SEPARATOR)}{extension}"


def parse_extension_columns(header: Sequence[str]) -> Dict[int, str]:
    """Map column positions of the header row to extension tokens."""

    columns: Dict[int, str] = {}
    for column, cell in enumerate(header):
        if column == DOMAIN_COLUMN:
            continue
        extension = normalize_extension(cell or "")
        if extension:
            columns[column] = extension
    return columns


def parse_grid(grid: Sequence[Sequence[str]]) -> Tuple[List[SourceRow], Dict[int, str], Tuple[int, int]]:
    """Split a raw grid into data rows, tracked columns, and its shape."""

    if not grid or not any(len(row) for row in grid):
        raise MalformedInputError("The table is empty")

    width = max(len(row) for row in grid)
    extension_columns = parse_extension_columns(grid[HEADER_ROW])

    rows: List[SourceRow] = []
    for position, raw_row in enumerate(grid):
        if position == HEADER_ROW:
            continue
        domain = (raw_row[DOMAIN_COLUMN] if raw_row else "") or ""
        cells = {
            column: (raw_row[column] if column < len(raw_row) else "") or ""
            for column in extension_columns
        }
        rows.append(SourceRow(position=position, domain=domain, cells=cells))
    return rows, extension_columns, (len(grid), width)


def build_matrix(grid: Sequence[Sequence[str]]) -> StatusMatrix:
    """Parse a raw grid and build the status matrix in one step."""

    rows, extension_columns, shape = parse_grid(grid)
    return StatusMatrix.build(rows, extension_columns, shape=shape)


def merge_snapshot(
    grid: Sequence[Sequence[str]],
    snapshot: Sequence[Sequence[Optional[str]]],
) -> List[List[str]]:
    """Overlay snapshot values onto the original grid, keeping its shape."""

    merged: List[List[str]] = []
    for position, raw_row in enumerate(grid):
        row = list(raw_row)
        overlay = snapshot[position] if position < len(snapshot) else []
        for column, value in enumerate(overlay):
            if value is None:
                continue
            while len(row) <= column:
                row.append("")
            row[column] = value
        merged.append(row)
    return merged
