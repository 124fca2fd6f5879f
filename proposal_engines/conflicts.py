"""
Module: proposal_engines.conflicts
Responsibility:
    Find every dated entity (proposal or schedule row) that shares at
    least one calendar day with another entity.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import proposal_kernel/domain and sibling engine modules.

Invariants enforced:
    - Symmetry: if A is flagged because of B, B is flagged because of A.
    - An entity never conflicts with itself; a bucket needs two distinct
      IDs before anything in it is flagged.
    - Cost is linear in the total number of entity-days.

Failure modes:
    - TypeError when the entity collection is None (programmer error).
    - ValueError / KeyError from ``ConflictCalendar`` on duplicate adds
      and unknown removals.

Usage:
    from proposal_engines.conflicts import detect_conflicts

    flagged = detect_conflicts(entities)   # frozenset of entity IDs
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from proposal_engines.entities import DateRangedEntity, entity_from_proposal
from proposal_engines.schedule import ScheduleRow, normalize_schedule
from proposal_engines.tracer import traced_engine
from proposal_kernel.domain.proposal import Proposal
from proposal_kernel.logging_config import get_logger

logger = get_logger("engines.conflicts")


def bucket_by_day(entities: Iterable[DateRangedEntity]) -> dict[date, set[str]]:
    """Map each occupied calendar day to the IDs occupying it."""
    if entities is None:
        raise TypeError("entities must be an iterable, not None")
    buckets: dict[date, set[str]] = defaultdict(set)
    for entity in entities:
        for day in entity.days():
            buckets[day].add(entity.entity_id)
    return buckets


@traced_engine("conflicts", "1.0", fingerprint_fields=("entities",))
def detect_conflicts(entities: Iterable[DateRangedEntity]) -> frozenset[str]:
    """IDs of every entity sharing a day with some other entity."""
    buckets = bucket_by_day(entities)
    flagged: set[str] = set()
    for ids in buckets.values():
        if len(ids) > 1:
            flagged.update(ids)

    logger.debug("conflicts_detected", extra={
        "days_scanned": len(buckets),
        "flagged_count": len(flagged),
    })
    return frozenset(flagged)


def detect_schedule_conflicts(
    proposals: Iterable[Proposal],
    schedule_rows: Iterable[ScheduleRow],
) -> frozenset[str]:
    """Run detection over proposals merged with the normalized schedule sheet.

    Malformed schedule rows are skipped (see ``normalize_schedule``).
    """
    if proposals is None or schedule_rows is None:
        raise TypeError("proposals and schedule_rows must be iterables, not None")
    entities = [entity_from_proposal(p) for p in proposals]
    entities.extend(normalize_schedule(schedule_rows))
    return detect_conflicts(entities)


class ConflictCalendar:
    """
    Incremental conflict detector.

    Contract:
        Holds one entity per ID.  Every mutation touches only the buckets
        of the days the changed entity covers.
    Guarantees:
        - ``conflicting_ids()`` always equals
          ``detect_conflicts(self.entities())``.
    Non-goals:
        - Not thread-safe; callers serialize access.
    """

    def __init__(self, entities: Iterable[DateRangedEntity] = ()) -> None:
        self._entities: dict[str, DateRangedEntity] = {}
        self._buckets: dict[date, set[str]] = defaultdict(set)
        self._clash_days: set[date] = set()
        for entity in entities:
            self.add(entity)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def entities(self) -> list[DateRangedEntity]:
        return list(self._entities.values())

    def add(self, entity: DateRangedEntity) -> None:
        if entity.entity_id in self._entities:
            raise ValueError(f"entity {entity.entity_id!r} is already on the calendar")
        self._entities[entity.entity_id] = entity
        for day in entity.days():
            ids = self._buckets[day]
            ids.add(entity.entity_id)
            if len(ids) > 1:
                self._clash_days.add(day)

    def remove(self, entity_id: str) -> DateRangedEntity:
        entity = self._entities.pop(entity_id)
        for day in entity.days():
            ids = self._buckets[day]
            ids.discard(entity_id)
            if len(ids) < 2:
                self._clash_days.discard(day)
            if not ids:
                del self._buckets[day]
        return entity

    def replace(self, entity: DateRangedEntity) -> None:
        """Add ``entity``, first removing any entity with the same ID."""
        if entity.entity_id in self._entities:
            self.remove(entity.entity_id)
        self.add(entity)

    def conflicting_ids(self) -> frozenset[str]:
        flagged: set[str] = set()
        for day in self._clash_days:
            flagged.update(self._buckets[day])
        return frozenset(flagged)

    def conflicts_on(self, day: date) -> frozenset[str]:
        """IDs clashing on ``day``; empty when fewer than two entities occupy it."""
        if day not in self._clash_days:
            return frozenset()
        return frozenset(self._buckets[day])

    def clash_days(self) -> dict[date, frozenset[str]]:
        """Every day with a clash, mapped to the IDs involved, in date order."""
        return {
            day: frozenset(self._buckets[day])
            for day in sorted(self._clash_days)
        }
