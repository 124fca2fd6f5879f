"""
proposal_kernel.services.proposal_repository -- Proposal store adapter.

Responsibility:
    Loads and saves ``Proposal`` snapshots.  ``save`` is conditioned on the
    snapshot's ``version`` so a stale snapshot can never overwrite a newer
    state.

Architecture position:
    Kernel > Services.  May import from domain/, models/, db/.
    ``ProposalRepository`` is the capability the rest of the kernel
    depends on; ``SqlAlchemyProposalRepository`` is the shipped adapter.

Invariants enforced:
    - Optimistic concurrency: UPDATE ... WHERE version = :expected; zero
      rows updated means another writer got there first.
    - Append-only messages: only messages beyond those already stored are
      inserted, in the same transaction as the header update.

Failure modes:
    - ProposalNotFoundError if the proposal does not exist.
    - ConflictWriteError on version mismatch.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from proposal_kernel.domain.proposal import Proposal
from proposal_kernel.exceptions import ConflictWriteError, ProposalNotFoundError
from proposal_kernel.logging_config import get_logger
from proposal_kernel.models.proposal import (
    ProposalMessageModel,
    ProposalModel,
    financial_to_json,
)

logger = get_logger("services.proposal_repository")


class ProposalRepository(Protocol):
    """Narrow interface to the proposal system of record."""

    def load(self, proposal_id: UUID) -> Proposal:
        ...

    def save(self, proposal: Proposal) -> Proposal:
        ...

    def add(self, proposal: Proposal) -> Proposal:
        ...

    def list_all(self) -> list[Proposal]:
        ...


class SqlAlchemyProposalRepository:
    """``ProposalRepository`` backed by a SQLAlchemy session.

    The caller owns the transaction (see ``db.engine.session_scope``);
    this class only flushes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, proposal: Proposal) -> Proposal:
        """Insert a new proposal and its initial messages."""
        self._session.add(ProposalModel.from_dto(proposal))
        for seq, message in enumerate(proposal.messages):
            self._session.add(
                ProposalMessageModel.from_dto(proposal.proposal_id, seq, message)
            )
        self._session.flush()
        logger.info(
            "proposal_added",
            extra={
                "proposal_id": str(proposal.proposal_id),
                "status": proposal.status.value,
                "awaiting_role": proposal.awaiting_role,
            },
        )
        return proposal

    def load(self, proposal_id: UUID) -> Proposal:
        model = self._session.execute(
            select(ProposalModel)
            .where(ProposalModel.proposal_id == proposal_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if model is None:
            raise ProposalNotFoundError(str(proposal_id))
        return model.to_dto(self._messages_for(proposal_id))

    def list_all(self) -> list[Proposal]:
        """Point-in-time snapshot of every proposal, oldest first."""
        models = self._session.execute(
            select(ProposalModel)
            .order_by(ProposalModel.created_at, ProposalModel.title)
            .execution_options(populate_existing=True)
        ).scalars().all()

        by_proposal: dict[UUID, list[ProposalMessageModel]] = defaultdict(list)
        for message in self._session.execute(
            select(ProposalMessageModel).order_by(
                ProposalMessageModel.proposal_id, ProposalMessageModel.seq,
            )
        ).scalars():
            by_proposal[message.proposal_id].append(message)

        return [m.to_dto(by_proposal.get(m.proposal_id, [])) for m in models]

    def save(self, proposal: Proposal) -> Proposal:
        """Persist ``proposal`` if nobody has saved since it was loaded.

        Returns:
            The snapshot with its new ``version``.

        Raises:
            ProposalNotFoundError: no such proposal.
            ConflictWriteError: ``proposal.version`` is stale.
        """
        expected = proposal.version
        result = self._session.execute(
            update(ProposalModel)
            .where(
                ProposalModel.proposal_id == proposal.proposal_id,
                ProposalModel.version == expected,
            )
            .values(
                status=proposal.status.value,
                awaiting_role=proposal.awaiting_role,
                title=proposal.title,
                category=proposal.category,
                description=proposal.description,
                start_date=proposal.start_date,
                end_date=proposal.end_date,
                financial=financial_to_json(proposal.financial),
                version=expected + 1,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            exists = self._session.execute(
                select(func.count())
                .select_from(ProposalModel)
                .where(ProposalModel.proposal_id == proposal.proposal_id)
            ).scalar_one()
            if not exists:
                raise ProposalNotFoundError(str(proposal.proposal_id))
            logger.warning(
                "proposal_save_conflict",
                extra={
                    "proposal_id": str(proposal.proposal_id),
                    "expected_version": expected,
                },
            )
            raise ConflictWriteError(str(proposal.proposal_id), expected)

        stored = self._session.execute(
            select(func.count())
            .select_from(ProposalMessageModel)
            .where(ProposalMessageModel.proposal_id == proposal.proposal_id)
        ).scalar_one()
        new_messages = proposal.messages[stored:]
        for offset, message in enumerate(new_messages):
            self._session.add(
                ProposalMessageModel.from_dto(
                    proposal.proposal_id, stored + offset, message,
                )
            )
        self._session.flush()

        logger.info(
            "proposal_saved",
            extra={
                "proposal_id": str(proposal.proposal_id),
                "status": proposal.status.value,
                "awaiting_role": proposal.awaiting_role,
                "version": expected + 1,
                "messages_appended": len(new_messages),
            },
        )
        return replace(proposal, version=expected + 1)

    def _messages_for(self, proposal_id: UUID) -> list[ProposalMessageModel]:
        return list(
            self._session.execute(
                select(ProposalMessageModel)
                .where(ProposalMessageModel.proposal_id == proposal_id)
                .order_by(ProposalMessageModel.seq)
            ).scalars()
        )
