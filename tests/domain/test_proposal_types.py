"""Tests for the proposal value objects."""

from dataclasses import FrozenInstanceError
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from proposal_kernel.domain.proposal import (
    ACTIONABLE_STATUSES,
    TERMINAL_STATUSES,
    AuditMessage,
    FinancialBreakdown,
    LineItem,
    Proposal,
    ProposalStatus,
    SponsorshipEntry,
)

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _proposal(**overrides) -> Proposal:
    fields = dict(
        proposal_id=uuid4(),
        submitter_id=uuid4(),
        title="Workshop",
        start_date=date(2024, 3, 12),
        end_date=date(2024, 3, 12),
    )
    fields.update(overrides)
    return Proposal(**fields)


class TestStatusVocabulary:
    def test_statuses_partitioned(self):
        assert ACTIONABLE_STATUSES | TERMINAL_STATUSES == set(ProposalStatus)
        assert not ACTIONABLE_STATUSES & TERMINAL_STATUSES

    def test_string_values(self):
        assert ProposalStatus("review") is ProposalStatus.REVIEW


class TestProposal:
    def test_single_day_allowed(self):
        assert _proposal().start_date == _proposal().end_date

    def test_frozen(self):
        proposal = _proposal()
        with pytest.raises(FrozenInstanceError):
            proposal.status = ProposalStatus.APPROVED

    def test_with_transition_appends_message(self):
        first = AuditMessage("hod", "approved by hod", NOW)
        proposal = _proposal(messages=(first,), awaiting_role="hod")
        second = AuditMessage("dean", "approved by dean", NOW)

        moved = proposal.with_transition(ProposalStatus.PENDING, "chair", second)

        assert moved.messages == (first, second)
        assert moved.awaiting_role == "chair"
        assert proposal.messages == (first,)

    def test_string_status_coerced(self):
        proposal = _proposal(status="approved")
        assert proposal.status is ProposalStatus.APPROVED
        assert proposal.is_terminal

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            _proposal(status="archived")

    def test_open_and_terminal_flags(self):
        assert _proposal(status=ProposalStatus.REVIEW).is_open
        assert _proposal(status=ProposalStatus.COMPLETED).is_terminal
        assert _proposal().last_message is None


class TestFinancialBreakdown:
    def test_totals(self):
        breakdown = FinancialBreakdown(
            line_items=(
                LineItem("Venue", "Hall", "rent", Decimal("2"), Decimal("1500.50")),
                LineItem("Food", "Lunch", "catering", Decimal("120"), Decimal("85")),
            ),
            sponsorships=(
                SponsorshipEntry("IEEE", Decimal("5000")),
                SponsorshipEntry("Alumni", Decimal("2500.25")),
            ),
        )

        assert breakdown.line_items[0].amount == Decimal("3001.00")
        assert breakdown.estimated_total == Decimal("13201.00")
        assert breakdown.sponsorship_total == Decimal("7500.25")

    def test_empty_totals_are_zero(self):
        assert FinancialBreakdown().estimated_total == Decimal("0")
        assert FinancialBreakdown().sponsorship_total == Decimal("0")
