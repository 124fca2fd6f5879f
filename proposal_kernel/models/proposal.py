"""
Module: proposal_kernel.models.proposal
Responsibility: ORM persistence for proposals and their message log.

Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ value objects only.

Invariants enforced:
    - Status values limited to the closed ProposalStatus vocabulary
      (DB check constraint).
    - ``version`` is the optimistic-concurrency token; only the repository
      changes it, via a version-conditioned UPDATE.
    - Messages are append-only: UNIQUE(proposal_id, seq), and ORM listeners
      forbid UPDATE/DELETE.

Failure modes:
    - IntegrityError on a duplicate (proposal_id, seq) message.
    - ImmutabilityViolationError on message UPDATE/DELETE.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from proposal_kernel.db.base import Base, UUIDString
from proposal_kernel.domain.proposal import (
    AuditMessage,
    FinancialBreakdown,
    LineItem,
    Proposal,
    ProposalStatus,
    SponsorshipEntry,
)
from proposal_kernel.exceptions import ImmutabilityViolationError


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for DateTime(timezone=True).
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def financial_to_json(financial: FinancialBreakdown) -> dict[str, Any]:
    """Serialize a breakdown with Decimals as strings."""
    return {
        "line_items": [
            {
                "category": item.category,
                "sub_category": item.sub_category,
                "type": item.item_type,
                "quantity": str(item.quantity),
                "cost": str(item.cost),
                "status": item.status,
            }
            for item in financial.line_items
        ],
        "sponsorships": [
            {"sponsor": s.sponsor, "amount": str(s.amount)}
            for s in financial.sponsorships
        ],
    }


def financial_from_json(data: dict[str, Any] | None) -> FinancialBreakdown:
    if not data:
        return FinancialBreakdown()
    return FinancialBreakdown(
        line_items=tuple(
            LineItem(
                category=row["category"],
                sub_category=row.get("sub_category", ""),
                item_type=row.get("type", ""),
                quantity=Decimal(row["quantity"]),
                cost=Decimal(row["cost"]),
                status=row.get("status", "estimated"),
            )
            for row in data.get("line_items", [])
        ),
        sponsorships=tuple(
            SponsorshipEntry(sponsor=row["sponsor"], amount=Decimal(row["amount"]))
            for row in data.get("sponsorships", [])
        ),
    )


class ProposalModel(Base):
    """Persistent proposal header.

    Contract:
        Mutated only by ``SqlAlchemyProposalRepository.save`` with a
        version-conditioned UPDATE.
    """

    __tablename__ = "proposals"

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'review', 'rejected', 'approved', 'completed')",
            name="ck_proposals_valid_status",
        ),
        CheckConstraint(
            "end_date >= start_date",
            name="ck_proposals_date_order",
        ),
        Index("ix_proposals_awaiting_status", "awaiting_role", "status"),
        Index("ix_proposals_dates", "start_date", "end_date"),
    )

    proposal_id: Mapped[UUID] = mapped_column(
        UUIDString(), nullable=False, unique=True,
    )
    submitter_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    submitter_role: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    start_date: Mapped[date] = mapped_column(nullable=False)
    end_date: Mapped[date] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    awaiting_role: Mapped[str | None] = mapped_column(String(50), nullable=True)
    financial: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Proposal {self.proposal_id} status={self.status} "
            f"awaiting={self.awaiting_role} v{self.version}>"
        )

    def to_dto(self, messages: list[ProposalMessageModel] | None = None) -> Proposal:
        """Convert ORM model (plus its ordered messages) to a frozen snapshot."""
        return Proposal(
            proposal_id=self.proposal_id,
            submitter_id=self.submitter_id,
            submitter_role=self.submitter_role,
            title=self.title,
            category=self.category,
            description=self.description,
            start_date=self.start_date,
            end_date=self.end_date,
            status=ProposalStatus(self.status),
            awaiting_role=self.awaiting_role,
            messages=tuple(m.to_dto() for m in messages or ()),
            financial=financial_from_json(self.financial),
            version=self.version,
            created_at=_aware(self.created_at),
        )

    @classmethod
    def from_dto(cls, dto: Proposal) -> ProposalModel:
        """Create ORM model from a snapshot (messages are stored separately)."""
        return cls(
            proposal_id=dto.proposal_id,
            submitter_id=dto.submitter_id,
            submitter_role=dto.submitter_role,
            title=dto.title,
            category=dto.category,
            description=dto.description,
            start_date=dto.start_date,
            end_date=dto.end_date,
            status=dto.status.value,
            awaiting_role=dto.awaiting_role,
            financial=financial_to_json(dto.financial),
            version=dto.version,
            created_at=dto.created_at,
        )


class ProposalMessageModel(Base):
    """Persistent proposal message. Append-only.

    Contract:
        Messages are immutable once created -- no UPDATE, no DELETE.
    """

    __tablename__ = "proposal_messages"

    __table_args__ = (
        UniqueConstraint("proposal_id", "seq", name="uq_proposal_messages_seq"),
        Index("ix_proposal_messages_proposal_id", "proposal_id"),
    )

    proposal_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("proposals.proposal_id"),
        nullable=False,
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    author_role: Mapped[str] = mapped_column(String(50), nullable=False)
    author_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProposalMessage {self.proposal_id}#{self.seq} by {self.author_role}>"

    def to_dto(self) -> AuditMessage:
        return AuditMessage(
            author_role=self.author_role,
            author_id=self.author_id,
            text=self.text,
            timestamp=_aware(self.created_at),
        )

    @classmethod
    def from_dto(cls, proposal_id: UUID, seq: int, dto: AuditMessage) -> ProposalMessageModel:
        return cls(
            proposal_id=proposal_id,
            seq=seq,
            author_role=dto.author_role,
            author_id=dto.author_id,
            text=dto.text,
            created_at=dto.timestamp,
        )


# =============================================================================
# ORM-Level Immutability for Messages (Append-Only)
# =============================================================================


@event.listens_for(ProposalMessageModel, "before_update")
def prevent_message_update(mapper, connection, target):
    """Prevent updates to proposal message records."""
    raise ImmutabilityViolationError(
        entity_type="ProposalMessage",
        entity_id=f"{target.proposal_id}#{target.seq}",
        reason="Proposal messages are append-only -- cannot modify",
    )


@event.listens_for(ProposalMessageModel, "before_delete")
def prevent_message_delete(mapper, connection, target):
    """Prevent deletion of proposal message records."""
    raise ImmutabilityViolationError(
        entity_type="ProposalMessage",
        entity_id=f"{target.proposal_id}#{target.seq}",
        reason="Proposal messages are append-only -- cannot delete",
    )
