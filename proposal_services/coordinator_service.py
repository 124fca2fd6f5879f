"""
proposal_services.coordinator_service -- Coordinator and approver dashboards.

Responsibility:
    Answer the read-only dashboard questions: which proposals clash with
    each other or with the external schedule sheet, how many proposals
    sit in each status and category, and what a given role must act on.

Architecture position:
    Services -- reads a point-in-time snapshot through
    ``ProposalRepository.list_all`` and hands it to the pure engines.

Invariants enforced:
    - Read-only: never saves, never changes a proposal.
    - Each call works on a single snapshot, so counts and conflict sets
      returned by one call are mutually consistent.
"""

from __future__ import annotations

from typing import Iterable

from proposal_engines.conflicts import ConflictCalendar, detect_schedule_conflicts
from proposal_engines.entities import entity_from_proposal
from proposal_engines.schedule import ScheduleRow, normalize_schedule
from proposal_engines.stats import (
    ProposalStats,
    aggregate_stats,
    count_by_category,
    recent_actionable,
)
from proposal_kernel.domain.proposal import Proposal
from proposal_kernel.domain.workflow import awaiting_queue
from proposal_kernel.logging_config import get_logger
from proposal_kernel.services.proposal_repository import ProposalRepository

logger = get_logger("services.coordinator")


class CoordinatorService:
    """Dashboard queries over the proposal store."""

    def __init__(self, repository: ProposalRepository) -> None:
        self._repository = repository

    def conflicts(self, schedule_rows: Iterable[ScheduleRow] = ()) -> frozenset[str]:
        """IDs of proposals and schedule rows sharing a day with something else."""
        proposals = self._repository.list_all()
        flagged = detect_schedule_conflicts(proposals, schedule_rows)
        logger.info("coordinator_conflicts_computed", extra={
            "proposal_count": len(proposals),
            "flagged_count": len(flagged),
        })
        return flagged

    def calendar(self, schedule_rows: Iterable[ScheduleRow] = ()) -> ConflictCalendar:
        """Incremental calendar seeded with every proposal and schedule row."""
        calendar = ConflictCalendar(
            entity_from_proposal(p) for p in self._repository.list_all()
        )
        for entity in normalize_schedule(schedule_rows):
            calendar.replace(entity)
        return calendar

    def stats(self) -> ProposalStats:
        return aggregate_stats(self._repository.list_all())

    def categories(self) -> dict[str, int]:
        return count_by_category(self._repository.list_all())

    def recent(self, limit: int = 5) -> list[Proposal]:
        return recent_actionable(self._repository.list_all(), limit)

    def awaiting(self, role: str) -> list[Proposal]:
        """Open proposals waiting on ``role``, oldest first."""
        return awaiting_queue(self._repository.list_all(), role)
