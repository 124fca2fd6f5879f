"""
Module: proposal_engines.entities
Responsibility:
    The common date-ranged shape that proposals and external schedule rows
    are normalized into before conflict detection.

Architecture position:
    Engines -- pure value objects, zero I/O.
    May only import proposal_kernel/domain.

Invariants enforced:
    - ``end_date >= start_date``.
    - Identifiers from the two sources never collide: proposals use
      ``str(proposal_id)``, schedule rows use ``"schedule:<id>"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from proposal_kernel.domain.proposal import Proposal

SOURCE_PROPOSAL = "proposal"
SOURCE_SCHEDULE = "schedule"

SCHEDULE_ID_PREFIX = "schedule:"


@dataclass(frozen=True)
class DateRangedEntity:
    """
    Anything occupying an inclusive range of calendar days.

    Contract:
        Frozen dataclass; the only input shape the conflict detector sees.
    Guarantees:
        - ``end_date >= start_date``.
    """

    entity_id: str
    start_date: date
    end_date: date
    label: str = ""
    source: str = SOURCE_PROPOSAL

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"{self.entity_id}: end_date {self.end_date} precedes "
                f"start_date {self.start_date}"
            )

    @property
    def span_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def days(self) -> Iterator[date]:
        """Every calendar day in the range, inclusive."""
        for offset in range(self.span_days):
            yield self.start_date + timedelta(days=offset)


def entity_from_proposal(proposal: Proposal) -> DateRangedEntity:
    return DateRangedEntity(
        entity_id=str(proposal.proposal_id),
        start_date=proposal.start_date,
        end_date=proposal.end_date,
        label=proposal.title,
        source=SOURCE_PROPOSAL,
    )


def schedule_entity_id(row_key: object) -> str:
    return f"{SCHEDULE_ID_PREFIX}{row_key}"
