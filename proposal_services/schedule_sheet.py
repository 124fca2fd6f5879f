"""
proposal_services.schedule_sheet -- Read the approved-events schedule workbook.

The schedule sheet is an .xlsx file with one event per row under a header
row naming at least ``Date`` and ``Month`` (``Activity`` and ``id`` are
optional).  This module only turns cells into ``ScheduleRow`` text
records; date parsing and skipping of malformed rows is done by
``proposal_engines.schedule.normalize_schedule``.

Supports:
  - sheet by index (0-based) or name; default is the active sheet
  - header auto-detection over the first rows
  - blank rows are dropped
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import openpyxl

from proposal_engines.schedule import ScheduleRow
from proposal_kernel.logging_config import get_logger

logger = get_logger("services.schedule_sheet")

_HEADER_KEYWORDS = frozenset({"date", "month", "activity", "id"})
_HEADER_SEARCH_ROWS = 15
_CANONICAL_HEADERS = {"date": "Date", "month": "Month", "activity": "Activity", "id": "id"}


def _cell_value(row: Any, col_idx: int) -> Any:
    """Cell value from an openpyxl row; blanks become ``""``, whole floats ints."""
    if col_idx >= len(row):
        return ""
    value = row[col_idx].value
    if value is None:
        return ""
    if isinstance(value, float) and value == int(value):
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _header_key(value: Any) -> str:
    text = re.sub(r"\s+", " ", str(value)).strip()
    return _CANONICAL_HEADERS.get(text.lower(), text)


def _detect_header_row(rows: list) -> int:
    """Index of the first row naming both ``Date`` and ``Month``; 0 if none."""
    for index, row in enumerate(rows[:_HEADER_SEARCH_ROWS]):
        names = {
            str(_cell_value(row, c)).lower()
            for c in range(len(row))
        }
        if {"date", "month"} <= (names & _HEADER_KEYWORDS):
            return index
    return 0


def _get_sheet(workbook: Any, sheet: int | str | None) -> Any:
    if sheet is None:
        return workbook.active
    if isinstance(sheet, int):
        return workbook.worksheets[sheet]
    return workbook[sheet]


def read_schedule_sheet(
    source_path: Path | str,
    sheet: int | str | None = None,
) -> list[ScheduleRow]:
    """
    Read every non-blank data row of the schedule workbook.

    Raises:
        FileNotFoundError: If ``source_path`` does not exist.
        KeyError: If ``sheet`` names a worksheet the workbook lacks.
        IndexError: If ``sheet`` is an index past the last worksheet.
    """
    source_path = Path(source_path)
    if not source_path.exists():
        raise FileNotFoundError(f"Schedule sheet not found: {source_path}")

    workbook = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
    try:
        worksheet = _get_sheet(workbook, sheet)
        rows = list(worksheet.iter_rows())
        if not rows:
            return []

        header_index = _detect_header_row(rows)
        header_row = rows[header_index]
        headers = [
            _header_key(_cell_value(header_row, c)) or f"Column_{c + 1}"
            for c in range(len(header_row))
        ]

        records: list[ScheduleRow] = []
        for row in rows[header_index + 1:]:
            values = [_cell_value(row, c) for c in range(len(headers))]
            if all(v == "" for v in values):
                continue
            records.append(ScheduleRow.from_mapping(dict(zip(headers, values))))
    finally:
        workbook.close()

    logger.info("schedule_sheet_read", extra={
        "source_path": str(source_path),
        "header_row": header_index,
        "row_count": len(records),
    })
    return records
