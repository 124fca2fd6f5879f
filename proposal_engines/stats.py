"""
Module: proposal_engines.stats
Responsibility:
    Dashboard counters over a point-in-time snapshot of proposals:
    per-status counts, per-category counts, and the short list of
    proposals that still need attention.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``total`` equals the sum of the per-status counts.
    - ``approved`` counts only ``approved``; ``completed`` is reported on
      its own and ``finalized`` covers both.

Failure modes:
    - TypeError when the proposal collection is None.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from proposal_engines.tracer import traced_engine
from proposal_kernel.domain.proposal import Proposal, ProposalStatus

UNCATEGORIZED = "uncategorized"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ProposalStats:
    """Per-status proposal counts."""

    approved: int = 0
    pending: int = 0
    rejected: int = 0
    review: int = 0
    completed: int = 0
    total: int = 0

    @property
    def open(self) -> int:
        return self.pending + self.review

    @property
    def finalized(self) -> int:
        return self.approved + self.completed


@traced_engine("stats", "1.0")
def aggregate_stats(proposals: Iterable[Proposal]) -> ProposalStats:
    if proposals is None:
        raise TypeError("proposals must be an iterable, not None")
    counts = Counter(p.status for p in proposals)
    return ProposalStats(
        approved=counts[ProposalStatus.APPROVED],
        pending=counts[ProposalStatus.PENDING],
        rejected=counts[ProposalStatus.REJECTED],
        review=counts[ProposalStatus.REVIEW],
        completed=counts[ProposalStatus.COMPLETED],
        total=sum(counts.values()),
    )


def count_by_category(proposals: Iterable[Proposal]) -> dict[str, int]:
    """Proposals per event category, most frequent first.

    Blank categories are counted under ``"uncategorized"``.
    """
    if proposals is None:
        raise TypeError("proposals must be an iterable, not None")
    counts = Counter(
        (p.category.strip() or UNCATEGORIZED) for p in proposals
    )
    return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))


def recent_actionable(proposals: Iterable[Proposal], limit: int = 5) -> list[Proposal]:
    """Open proposals, ``pending`` before ``review``, newest submission first."""
    if proposals is None:
        raise TypeError("proposals must be an iterable, not None")
    if limit < 0:
        raise ValueError("limit must be non-negative")
    rank = {ProposalStatus.PENDING: 0, ProposalStatus.REVIEW: 1}
    open_proposals = [p for p in proposals if p.status in rank]
    open_proposals.sort(
        key=lambda p: (rank[p.status], -(p.created_at or _EPOCH).timestamp())
    )
    return open_proposals[:limit]
