"""
Proposal domain types (``proposal_kernel.domain.proposal``).

Responsibility
--------------
Pure value objects for an event proposal: the closed status vocabulary,
the action vocabulary, the append-only audit message, and the financial
breakdown that rides along with a proposal through the approval chain.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/``, ``services/``, or outer layers.

Invariants enforced
-------------------
* ``end_date >= start_date`` on every ``Proposal``.
* ``messages`` is a tuple; new snapshots only ever extend it.
* Terminal statuses (``rejected``, ``approved``, ``completed``) have no
  actor-initiated outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4


# =========================================================================
# Status and action vocabulary
# =========================================================================


class ProposalStatus(str, Enum):
    """Proposal lifecycle states."""

    PENDING = "pending"
    REVIEW = "review"
    REJECTED = "rejected"
    APPROVED = "approved"
    COMPLETED = "completed"


ACTIONABLE_STATUSES: frozenset[ProposalStatus] = frozenset({
    ProposalStatus.PENDING,
    ProposalStatus.REVIEW,
})

TERMINAL_STATUSES: frozenset[ProposalStatus] = frozenset({
    ProposalStatus.REJECTED,
    ProposalStatus.APPROVED,
    ProposalStatus.COMPLETED,
})


class ProposalAction(str, Enum):
    """Actions an approver can take on a proposal."""

    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_CLARIFICATION = "request_clarification"


# Actions whose payload text is mandatory.
TEXT_REQUIRED_ACTIONS: frozenset[ProposalAction] = frozenset({
    ProposalAction.REJECT,
    ProposalAction.REQUEST_CLARIFICATION,
})

SUBMITTER_ROLE = "convener"


# =========================================================================
# Audit messages
# =========================================================================


@dataclass(frozen=True)
class AuditMessage:
    """One entry of a proposal's append-only message log. Immutable."""

    author_role: str
    text: str
    timestamp: datetime
    author_id: UUID | None = None


# =========================================================================
# Financial breakdown (carried, never interpreted by the workflow)
# =========================================================================


@dataclass(frozen=True)
class LineItem:
    """A single estimated or actual expense line."""

    category: str
    sub_category: str
    item_type: str
    quantity: Decimal
    cost: Decimal
    status: str = "estimated"

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.cost


@dataclass(frozen=True)
class SponsorshipEntry:
    """Funding contributed by a sponsor."""

    sponsor: str
    amount: Decimal


@dataclass(frozen=True)
class FinancialBreakdown:
    """Line items and sponsorship entries of a proposal."""

    line_items: tuple[LineItem, ...] = ()
    sponsorships: tuple[SponsorshipEntry, ...] = ()

    @property
    def estimated_total(self) -> Decimal:
        return sum((item.amount for item in self.line_items), Decimal("0"))

    @property
    def sponsorship_total(self) -> Decimal:
        return sum((s.amount for s in self.sponsorships), Decimal("0"))


# =========================================================================
# Proposal snapshot
# =========================================================================


@dataclass(frozen=True)
class Proposal:
    """Immutable snapshot of an event proposal.

    Contract:
        Produced by the repository or by ``WorkflowEngine.act``; never
        mutated in place.  ``version`` is the optimistic-concurrency token
        read with the snapshot and checked by the repository on save.

    Guarantees:
        ``end_date >= start_date``.
        ``status`` is a ``ProposalStatus``; plain strings are coerced and
        unknown values raise ``ValueError``.
    """

    proposal_id: UUID
    submitter_id: UUID
    title: str
    start_date: date
    end_date: date
    category: str = ""
    description: str = ""
    submitter_role: str = SUBMITTER_ROLE
    status: ProposalStatus = ProposalStatus.PENDING
    awaiting_role: str | None = None
    messages: tuple[AuditMessage, ...] = ()
    financial: FinancialBreakdown = field(default_factory=FinancialBreakdown)
    version: int = 0
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ProposalStatus(self.status))
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} precedes start_date {self.start_date}"
            )

    @property
    def is_open(self) -> bool:
        """True while the proposal can still be acted on."""
        return self.status in ACTIONABLE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def last_message(self) -> AuditMessage | None:
        return self.messages[-1] if self.messages else None

    def with_transition(
        self,
        status: ProposalStatus,
        awaiting_role: str | None,
        message: AuditMessage,
    ) -> Proposal:
        """Return a new snapshot with the (status, awaiting, message) triple applied."""
        return replace(
            self,
            status=status,
            awaiting_role=awaiting_role,
            messages=self.messages + (message,),
        )


def new_proposal_id() -> UUID:
    return uuid4()
