"""
Module: proposal_engines.schedule
Responsibility:
    Normalize rows of the externally maintained schedule sheet
    (``Date`` = ``"12"`` or ``"12-14"``, ``Month`` = ``"Mar'24"``) into
    ``DateRangedEntity`` values for conflict detection.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import proposal_kernel/domain, proposal_kernel.exceptions,
    proposal_kernel.logging_config and sibling engine modules.

Invariants enforced:
    - Month token: letters, apostrophe, two-digit year (``Mar'24``,
      ``march'24``, ``Sept'24``).  The letters must be a prefix of the full
      month name, at least three long.  Year is 2000 + yy.
    - Day field: one day or a hyphenated range within that month.
    - Dates must exist on the calendar and the range must not run
      backwards.  Plain ``datetime.date`` arithmetic; no timezones.

Failure modes:
    - ``normalize_schedule_row`` raises MalformedScheduleRowError.
    - ``normalize_schedule`` never raises for a bad row: it logs
      ``schedule_row_skipped`` at WARNING and drops the row.

Usage:
    from proposal_engines.schedule import ScheduleRow, normalize_schedule

    rows = [ScheduleRow("13-15", "Mar'24", "Sports Day", row_id="r1")]
    entities = normalize_schedule(rows)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from proposal_engines.entities import (
    SOURCE_SCHEDULE,
    DateRangedEntity,
    schedule_entity_id,
)
from proposal_engines.tracer import traced_engine
from proposal_kernel.exceptions import MalformedScheduleRowError
from proposal_kernel.logging_config import get_logger

logger = get_logger("engines.schedule")

MONTH_NAMES: tuple[str, ...] = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

_MONTH_TOKEN = re.compile(r"^\s*([a-z]{3,})\s*'\s*(\d{2})\s*$", re.IGNORECASE)
_DAY_FIELD = re.compile(r"^\s*(\d{1,2})\s*(?:-\s*(\d{1,2})\s*)?$")


@dataclass(frozen=True)
class ScheduleRow:
    """One raw row of the schedule sheet, as text."""

    day_field: str
    month_year_field: str
    label: str = ""
    row_id: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ScheduleRow:
        """Build from a sheet record keyed by ``Date``/``Month``/``Activity``/``id``."""
        row_id = data.get("id")
        return cls(
            day_field=_text(data.get("Date")),
            month_year_field=_text(data.get("Month")),
            label=_text(data.get("Activity")),
            row_id=_row_id(row_id),
        )


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _row_id(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _row_key(row_id: str | None, index: int) -> str:
    explicit = _row_id(row_id)
    if explicit is None:
        return f"#{index}"
    if explicit.startswith("#"):
        return f"#{explicit}"
    return explicit


def parse_month_token(token: str, row_id: str = "") -> tuple[int, int]:
    """Return ``(year, month)`` for a token like ``"Mar'24"``."""
    match = _MONTH_TOKEN.match(token)
    if match is None:
        raise MalformedScheduleRowError(
            row_id, "Month", token, "expected <month>'<yy>",
        )
    letters = match.group(1).lower()
    for index, name in enumerate(MONTH_NAMES, start=1):
        if name.startswith(letters):
            return 2000 + int(match.group(2)), index
    raise MalformedScheduleRowError(row_id, "Month", token, "unknown month name")


def parse_day_field(field: str, row_id: str = "") -> tuple[int, int]:
    """Return ``(first_day, last_day)`` for ``"12"`` or ``"12-14"``."""
    match = _DAY_FIELD.match(field)
    if match is None:
        raise MalformedScheduleRowError(
            row_id, "Date", field, "expected a day or a day range",
        )
    first = int(match.group(1))
    last = int(match.group(2)) if match.group(2) is not None else first
    return first, last


def normalize_schedule_row(row: ScheduleRow, index: int = 0) -> DateRangedEntity:
    """Convert one row to an entity or raise MalformedScheduleRowError.

    The entity ID is ``"schedule:<row_id>"``.  A row without an ID is keyed
    ``"#<index>"`` by position; an explicit ID starting with ``#`` gets one
    more ``#`` so the two key spaces never meet.
    """
    key = _row_key(row.row_id, index)
    year, month = parse_month_token(row.month_year_field, key)
    first, last = parse_day_field(row.day_field, key)

    try:
        start = date(year, month, first)
        end = date(year, month, last)
    except ValueError as exc:
        raise MalformedScheduleRowError(key, "Date", row.day_field, str(exc)) from exc

    if end < start:
        raise MalformedScheduleRowError(
            key, "Date", row.day_field, "range ends before it starts",
        )

    return DateRangedEntity(
        entity_id=schedule_entity_id(key),
        start_date=start,
        end_date=end,
        label=row.label,
        source=SOURCE_SCHEDULE,
    )


@traced_engine("schedule", "1.0", fingerprint_fields=("rows",))
def normalize_schedule(rows: Iterable[ScheduleRow]) -> list[DateRangedEntity]:
    """Normalize every well-formed row; malformed rows are logged and skipped."""
    if rows is None:
        raise TypeError("rows must be an iterable of ScheduleRow, not None")

    entities: list[DateRangedEntity] = []
    skipped = 0
    for index, row in enumerate(rows):
        try:
            entities.append(normalize_schedule_row(row, index))
        except MalformedScheduleRowError as exc:
            skipped += 1
            logger.warning("schedule_row_skipped", extra={
                "row_id": exc.row_id,
                "field": exc.field,
                "value": exc.value,
                "reason": exc.reason,
                "error_code": exc.code,
            })

    logger.debug("schedule_normalized", extra={
        "entity_count": len(entities),
        "skipped_count": skipped,
    })
    return entities
