"""
proposal_kernel.services.approval_service -- Approval chain orchestration.

Responsibility:
    Imperative shell around the pure ``WorkflowEngine``: load a proposal,
    apply an action, save it back under optimistic concurrency, and log
    the outcome.  Also handles submission and post-event settlement.

Architecture position:
    Kernel > Services.  May import from domain/, services/, logging_config.

Invariants enforced:
    - Legality is decided only by ``WorkflowEngine``; this service never
      re-derives who may act.
    - On ``ConflictWriteError`` the action is re-validated against a fresh
      snapshot before being retried (bounded by ``max_attempts``), so a
      racing approver cannot act on an already-moved proposal.

Failure modes:
    - Denied actions are returned as ``ActionResult`` with ``error`` set.
    - ProposalNotFoundError propagates from the repository.
    - ConflictWriteError propagates once ``max_attempts`` is exhausted.
    - InvalidStateError from ``settle`` on a non-approved proposal.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from uuid import UUID

from proposal_kernel.domain.clock import Clock, SystemClock
from proposal_kernel.domain.proposal import FinancialBreakdown, Proposal, ProposalAction
from proposal_kernel.domain.settlement import settle
from proposal_kernel.domain.workflow import ActionPayload, ActionResult, WorkflowEngine
from proposal_kernel.exceptions import ConflictWriteError
from proposal_kernel.logging_config import LogContext, get_logger
from proposal_kernel.services.proposal_repository import ProposalRepository

logger = get_logger("services.approval_service")

DEFAULT_MAX_ATTEMPTS = 3


class ProposalApprovalService:
    """Drives proposals through the approval chain."""

    def __init__(
        self,
        repository: ProposalRepository,
        engine: WorkflowEngine,
        clock: Clock | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._repository = repository
        self._engine = engine
        self._clock = clock or SystemClock()
        self._max_attempts = max_attempts

    def submit(
        self,
        *,
        submitter_id: UUID,
        title: str,
        start_date: date,
        end_date: date,
        category: str = "",
        description: str = "",
        financial: FinancialBreakdown | None = None,
    ) -> Proposal:
        """Create and store a new proposal awaiting the first chain role."""
        proposal = self._engine.submit(
            submitter_id=submitter_id,
            title=title,
            start_date=start_date,
            end_date=end_date,
            category=category,
            description=description,
            financial=financial,
        )
        self._repository.add(proposal)
        logger.info(
            "proposal_submitted",
            extra={
                "proposal_id": str(proposal.proposal_id),
                "submitter_id": str(submitter_id),
                "awaiting_role": proposal.awaiting_role,
            },
        )
        return proposal

    def act(
        self,
        proposal_id: UUID,
        actor_role: str,
        action: ProposalAction | str,
        payload: ActionPayload | str | None = None,
        actor_id: UUID | None = None,
    ) -> ActionResult:
        """Apply an action to the stored proposal and persist the result."""
        if isinstance(payload, str):
            payload = ActionPayload(payload)

        with LogContext.bind(
            proposal_id=str(proposal_id),
            actor_role=actor_role,
            actor_id=str(actor_id) if actor_id is not None else None,
        ):
            for attempt in range(1, self._max_attempts + 1):
                snapshot = self._repository.load(proposal_id)
                result = self._engine.act(snapshot, actor_role, action, payload, actor_id)

                if not result.success:
                    logger.info(
                        "workflow_action_denied",
                        extra={
                            "action": result.action,
                            "error_code": result.error.code,
                            "reason": result.reason,
                            "attempt": attempt,
                        },
                    )
                    return result

                try:
                    saved = self._repository.save(result.proposal)
                except ConflictWriteError:
                    if attempt == self._max_attempts:
                        logger.error(
                            "workflow_action_conflict_exhausted",
                            extra={"action": result.action, "attempts": attempt},
                        )
                        raise
                    logger.info(
                        "conflict_write_retry",
                        extra={"action": result.action, "attempt": attempt},
                    )
                    continue

                logger.info(
                    "workflow_action_applied",
                    extra={
                        "action": result.action,
                        "from_status": snapshot.status.value,
                        "to_status": saved.status.value,
                        "from_awaiting": snapshot.awaiting_role,
                        "to_awaiting": saved.awaiting_role,
                        "version": saved.version,
                    },
                )
                return replace(result, proposal=saved)

        raise AssertionError("unreachable")  # pragma: no cover

    def settle(
        self,
        proposal_id: UUID,
        actor_role: str,
        actor_id: UUID | None = None,
        note: str = "",
    ) -> Proposal:
        """Mark an approved proposal completed once its event is settled."""
        snapshot = self._repository.load(proposal_id)
        completed = settle(snapshot, actor_role, self._clock, actor_id, note)
        saved = self._repository.save(completed)
        logger.info(
            "proposal_settled",
            extra={
                "proposal_id": str(proposal_id),
                "actor_role": actor_role,
                "version": saved.version,
            },
        )
        return saved
