"""Tests for dashboard statistics."""

from dataclasses import replace

import pytest

from proposal_engines.stats import (
    ProposalStats,
    aggregate_stats,
    count_by_category,
    recent_actionable,
)
from proposal_kernel.domain.proposal import ProposalStatus


@pytest.fixture
def mixed(make_proposal, deterministic_clock):
    proposals = []
    for status, category in [
        (ProposalStatus.PENDING, "seminar"),
        (ProposalStatus.PENDING, "workshop"),
        (ProposalStatus.REVIEW, "seminar"),
        (ProposalStatus.REJECTED, "cultural"),
        (ProposalStatus.APPROVED, "seminar"),
        (ProposalStatus.COMPLETED, ""),
    ]:
        deterministic_clock.advance(60)
        proposal = make_proposal(title=f"{status.value}-{category}", category=category)
        proposals.append(replace(proposal, status=status))
    return proposals


class TestAggregateStats:
    def test_counts(self, mixed):
        stats = aggregate_stats(mixed)

        assert stats == ProposalStats(
            approved=1, pending=2, rejected=1, review=1, completed=1, total=6,
        )
        assert stats.open == 3
        assert stats.finalized == 2

    def test_empty(self):
        assert aggregate_stats([]) == ProposalStats()

    def test_accepts_generators(self, mixed):
        assert aggregate_stats(p for p in mixed).total == 6

    def test_none_is_programmer_error(self):
        with pytest.raises(TypeError):
            aggregate_stats(None)


class TestCountByCategory:
    def test_most_frequent_first(self, mixed):
        assert list(count_by_category(mixed).items()) == [
            ("seminar", 3),
            ("cultural", 1),
            ("uncategorized", 1),
            ("workshop", 1),
        ]


class TestRecentActionable:
    def test_pending_before_review_newest_first(self, mixed):
        recent = recent_actionable(mixed)

        assert [p.title for p in recent] == [
            "pending-workshop",
            "pending-seminar",
            "review-seminar",
        ]

    def test_limit(self, mixed):
        assert len(recent_actionable(mixed, limit=1)) == 1
        assert recent_actionable(mixed, limit=0) == []

    def test_negative_limit(self, mixed):
        with pytest.raises(ValueError):
            recent_actionable(mixed, limit=-1)
