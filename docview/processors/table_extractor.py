# docview/processors/table_extractor.py
"""
Table Extractor.

Normalizes heterogeneous raw table payloads into a fixed-column
header/row matrix (TableModel). Producers disagree on where the grid lives
(grid / data / rows / table / cells), on cell shapes (plain values or dicts),
and on whether the header row is repeated inside the grid.
"""

import logging
import math
import re
from typing import Any, Optional

from docview.models.types import TableModel, to_int

# Module logger
logger = logging.getLogger(__name__)

# Grid field names in priority order
GRID_KEYS = ("grid", "data", "rows", "table", "cells")
HEADER_KEYS = ("headers", "header")

# Dict cell fields holding the display text, in priority order
CELL_TEXT_KEYS = ("text", "value", "display", "key")

# Fraction of positional header matches for a grid row to count as a
# duplicated header row
HEADER_MATCH_RATIO = 0.6

# Positioned cells beyond these bounds are dropped
MAX_TABLE_ROWS = 1000
MAX_TABLE_COLS = 100

_RE_WHITESPACE = re.compile(r"\s+")


def cell_to_text(cell: Any) -> str:
    """
    Coerce one raw cell to display text.

    Strings pass through; numbers are stringified; dict cells use their
    text/value/display/key field. Anything else becomes "".
    """
    if cell is None or isinstance(cell, bool):
        return ""
    if isinstance(cell, str):
        return cell
    if isinstance(cell, (int, float)):
        return _format_number(cell)
    if isinstance(cell, dict):
        for key in CELL_TEXT_KEYS:
            value = cell.get(key)
            if isinstance(value, str):
                return value
            if key == "value" and isinstance(value, (int, float)) and not isinstance(value, bool):
                return _format_number(value)
    return ""


def _format_number(value: float) -> str:
    # 3.0 -> "3" (matches how the extraction UI displays numbers)
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _normalize_header(value: str) -> str:
    return _RE_WHITESPACE.sub(" ", value.strip()).lower()


def headers_roughly_equal(a: list[str], b: list[str]) -> bool:
    """
    True if two header rows match position by position for a majority of columns.

    Comparison is case- and whitespace-insensitive; blank cells never count
    as a match.
    """
    if len(a) != len(b):
        return False
    same = sum(
        1
        for x, y in zip(a, b)
        if _normalize_header(x) == _normalize_header(y) and _normalize_header(x)
    )
    return same >= max(1, math.floor(len(a) * HEADER_MATCH_RATIO))


def _cells_to_matrix(cells: list[dict]) -> list[list[str]]:
    """
    Lay out positioned cells ({row, col, text, row_span?, col_span?}) as a matrix.

    Spanning cells repeat their text only in their top-left slot. The matrix
    never exceeds MAX_TABLE_ROWS x MAX_TABLE_COLS: cells positioned outside
    are dropped and spans are cut at the bounds.
    """
    positioned = []
    n_rows = 0
    n_cols = 0
    dropped = 0
    for cell in cells:
        row = to_int(cell.get("row"))
        col = to_int(cell.get("col"))
        if row is None or col is None or row < 0 or col < 0:
            continue
        if row >= MAX_TABLE_ROWS or col >= MAX_TABLE_COLS:
            dropped += 1
            continue
        row_span = max(1, to_int(cell.get("row_span")) or 1)
        col_span = max(1, to_int(cell.get("col_span")) or 1)
        positioned.append((row, col, cell_to_text(cell)))
        n_rows = max(n_rows, min(row + row_span, MAX_TABLE_ROWS))
        n_cols = max(n_cols, min(col + col_span, MAX_TABLE_COLS))

    if dropped:
        logger.debug(
            "Dropped %d table cells outside %dx%d", dropped, MAX_TABLE_ROWS, MAX_TABLE_COLS,
        )

    matrix = [["" for _ in range(n_cols)] for _ in range(n_rows)]
    for row, col, text in positioned:
        matrix[row][col] = text
    return matrix


def _is_positioned_cell_list(grid: list) -> bool:
    return bool(grid) and all(
        isinstance(c, dict) and "row" in c and "col" in c for c in grid
    )


def _read_grid(payload: Any) -> list[list[str]]:
    """Find the grid in a payload and coerce it to a string matrix."""
    if isinstance(payload, list):
        grid = payload
    elif isinstance(payload, dict):
        grid = []
        for key in GRID_KEYS:
            value = payload.get(key)
            if isinstance(value, list) and value:
                grid = value
                break
    else:
        return []

    if _is_positioned_cell_list(grid):
        return _cells_to_matrix(grid)

    matrix = []
    for row in grid:
        if isinstance(row, (list, tuple)):
            matrix.append([cell_to_text(c) for c in row])
        elif isinstance(row, dict):
            # Row objects without positional cells carry no usable columns
            matrix.append([])
    return matrix


def _read_headers(payload: Any) -> list[str]:
    if not isinstance(payload, dict):
        return []
    for key in HEADER_KEYS:
        value = payload.get(key)
        if isinstance(value, list) and value:
            headers = [cell_to_text(h) for h in value]
            return [h for h in headers if h]
    return []


def _pad(row: list[str], col_count: int) -> list[str]:
    return (row + [""] * max(0, col_count - len(row)))[:col_count]


def extract_table(payload: Any) -> TableModel:
    """
    Normalize a raw table payload.

    Header handling:
    - No explicit headers: the first grid row becomes the header if it looks
      tabular (same width as the second row, or there is no second row).
    - Explicit headers and a first grid row that roughly equals them: the
      duplicated header row is skipped.
    - Otherwise every grid row is data.

    Args:
        payload: Raw table payload (dict, list, or anything else)

    Returns:
        TableModel whose headers and rows all have exactly col_count entries.
        An empty model for missing or undecodable payloads.
    """
    if payload is None:
        return TableModel(headers=[""], rows=[], col_count=1)

    headers = _read_headers(payload)
    matrix = _read_grid(payload)

    data_start = 0
    if not headers and matrix:
        first = matrix[0]
        second = matrix[1] if len(matrix) > 1 else []
        looks_tabular = len(first) > 0 and (len(second) == 0 or len(second) == len(first))
        if looks_tabular:
            headers = [h.strip() for h in first]
            data_start = 1
    elif headers and matrix:
        first = matrix[0]
        if len(first) == len(headers) and headers_roughly_equal(first, headers):
            logger.debug("Grid repeats the header row, skipping it")
            data_start = 1

    col_count = max([len(headers), 1] + [len(r) for r in matrix])

    normalized_headers = _pad(headers, col_count) if headers else [""] * col_count
    rows = [_pad(r, col_count) for r in matrix[data_start:]]
    return TableModel(headers=normalized_headers, rows=rows, col_count=col_count)


def table_payload(tables: Optional[list], table_index: Optional[int]) -> Any:
    """Look up a table payload by index; None when out of range."""
    index = table_index if table_index is not None else 0
    if not isinstance(tables, list) or not 0 <= index < len(tables):
        return None
    return tables[index]
