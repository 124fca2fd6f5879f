"""
Approval workflow engine (``proposal_kernel.domain.workflow``).

Responsibility
--------------
The single place that decides whether a role may act on a proposal and
what the proposal looks like afterwards.  Presentation layers call
``WorkflowEngine.act`` (or ``can_act``) and render the result; they never
re-derive legality themselves.

Architecture position
---------------------
**Kernel domain layer** -- pure.  ZERO I/O.  Time enters only through the
injected ``Clock``; persistence is the caller's responsibility.

Invariants enforced
-------------------
* Only the role named by ``awaiting_role`` may act.
* Terminal statuses accept no action (``InvalidStateError``).
* An open proposal without a routable ``awaiting_role`` is surfaced as
  ``RoutingError``; the engine never guesses a target role.
* Clarification requests do not advance the chain.
* Each transition commits (status, awaiting_role, message) together or
  not at all: the input snapshot is never modified.

Failure modes
-------------
Denials are returned inside ``ActionResult.error``, in this order:
``InvalidStateError`` -> ``RoutingError`` -> ``UnauthorizedActorError``
-> ``ValidationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable
from uuid import UUID

from proposal_kernel.domain.clock import Clock, SystemClock
from proposal_kernel.domain.proposal import (
    SUBMITTER_ROLE,
    TEXT_REQUIRED_ACTIONS,
    AuditMessage,
    FinancialBreakdown,
    Proposal,
    ProposalAction,
    ProposalStatus,
    new_proposal_id,
)
from proposal_kernel.domain.role_chain import RoleChainConfig, normalize_role
from proposal_kernel.exceptions import (
    InvalidStateError,
    RoutingError,
    UnauthorizedActorError,
    ValidationError,
    WorkflowError,
)


@dataclass(frozen=True)
class ActionPayload:
    """Free text accompanying an action: a rejection reason or a clarification comment."""

    text: str = ""


@dataclass(frozen=True)
class ActionResult:
    """Outcome of ``WorkflowEngine.act``.

    On success ``proposal`` is the new snapshot and ``message`` the audit
    entry that was appended.  On denial ``proposal`` is the untouched input
    and ``error`` names the reason.
    """

    success: bool
    proposal: Proposal
    action: str
    message: AuditMessage | None = None
    error: WorkflowError | None = None

    @classmethod
    def applied(
        cls, proposal: Proposal, action: ProposalAction, message: AuditMessage,
    ) -> ActionResult:
        return cls(success=True, proposal=proposal, action=action.value, message=message)

    @classmethod
    def denied(
        cls, proposal: Proposal, action: str, error: WorkflowError,
    ) -> ActionResult:
        return cls(success=False, proposal=proposal, action=action, error=error)

    @property
    def reason(self) -> str:
        return str(self.error) if self.error is not None else ""

    def unwrap(self) -> tuple[Proposal, AuditMessage]:
        """Return (new snapshot, audit message) or raise the denial."""
        if self.error is not None:
            raise self.error
        assert self.message is not None
        return self.proposal, self.message


class WorkflowEngine:
    """Role-gated state machine for event proposals."""

    def __init__(self, chain: RoleChainConfig, clock: Clock | None = None) -> None:
        self._chain = chain
        self._clock = clock or SystemClock()

    @property
    def chain(self) -> RoleChainConfig:
        return self._chain

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
        proposal_id: UUID | None = None,
        submitter_role: str = SUBMITTER_ROLE,
    ) -> Proposal:
        """Create a proposal in ``pending``, awaiting the first node of the chain."""
        return Proposal(
            proposal_id=proposal_id or new_proposal_id(),
            submitter_id=submitter_id,
            submitter_role=normalize_role(submitter_role),
            title=title,
            start_date=start_date,
            end_date=end_date,
            category=category,
            description=description,
            status=ProposalStatus.PENDING,
            awaiting_role=self._chain.first_role(),
            financial=financial or FinancialBreakdown(),
            created_at=self._clock.now(),
        )

    def check(
        self,
        proposal: Proposal,
        actor_role: str,
        action: ProposalAction | str,
        payload: ActionPayload | None = None,
    ) -> WorkflowError | None:
        """Return the reason ``action`` would be denied, or None if it is legal."""
        pid = str(proposal.proposal_id)
        action_name = action.value if isinstance(action, ProposalAction) else str(action)

        if proposal.is_terminal:
            return InvalidStateError(pid, proposal.status.value, action_name)

        awaiting = proposal.awaiting_role
        if awaiting is None:
            return RoutingError(pid, proposal.status.value)
        if not self._chain.contains(awaiting):
            return RoutingError(pid, proposal.status.value, awaiting)

        role = normalize_role(actor_role)
        if role != normalize_role(awaiting):
            return UnauthorizedActorError(pid, role, awaiting)

        try:
            parsed = ProposalAction(action_name)
        except ValueError:
            return ValidationError(pid, action_name, "unknown action")

        if parsed in TEXT_REQUIRED_ACTIONS:
            text = payload.text if payload is not None else ""
            if not text or not text.strip():
                noun = "reason" if parsed is ProposalAction.REJECT else "comment"
                return ValidationError(pid, parsed.value, f"a non-empty {noun} is required")
        return None

    def can_act(
        self,
        proposal: Proposal,
        actor_role: str,
        action: ProposalAction | str = ProposalAction.APPROVE,
    ) -> bool:
        """True if ``actor_role`` may currently act on ``proposal``.

        Payload checks are skipped so UIs can decide whether to show the
        action buttons before any text is typed.
        """
        error = self.check(proposal, actor_role, action, ActionPayload(text="-"))
        return error is None

    def act(
        self,
        proposal: Proposal,
        actor_role: str,
        action: ProposalAction | str,
        payload: ActionPayload | None = None,
        actor_id: UUID | None = None,
    ) -> ActionResult:
        """Apply ``action`` by ``actor_role`` to ``proposal``.

        Pure apart from the generated timestamp.  Never raises for a denied
        action; see ``ActionResult.error``.
        """
        action_name = action.value if isinstance(action, ProposalAction) else str(action)
        error = self.check(proposal, actor_role, action_name, payload)
        if error is not None:
            return ActionResult.denied(proposal, action_name, error)

        parsed = ProposalAction(action_name)
        role = normalize_role(actor_role)
        now = self._clock.now()

        if parsed is ProposalAction.APPROVE:
            next_role = self._chain.next_role(role)
            status = ProposalStatus.APPROVED if next_role is None else ProposalStatus.PENDING
            text = f"approved by {role}"
        elif parsed is ProposalAction.REJECT:
            next_role = None
            status = ProposalStatus.REJECTED
            text = payload.text  # type: ignore[union-attr]
        else:
            # The chain stays pinned on the requesting role.
            next_role = proposal.awaiting_role
            status = ProposalStatus.REVIEW
            text = payload.text  # type: ignore[union-attr]

        message = AuditMessage(
            author_role=role,
            author_id=actor_id,
            text=text,
            timestamp=now,
        )
        return ActionResult.applied(
            proposal.with_transition(status, next_role, message), parsed, message,
        )

    def approve(self, proposal: Proposal, actor_role: str, actor_id: UUID | None = None) -> ActionResult:
        return self.act(proposal, actor_role, ProposalAction.APPROVE, actor_id=actor_id)

    def reject(
        self, proposal: Proposal, actor_role: str, reason: str, actor_id: UUID | None = None,
    ) -> ActionResult:
        return self.act(
            proposal, actor_role, ProposalAction.REJECT, ActionPayload(reason), actor_id,
        )

    def request_clarification(
        self, proposal: Proposal, actor_role: str, comment: str, actor_id: UUID | None = None,
    ) -> ActionResult:
        return self.act(
            proposal,
            actor_role,
            ProposalAction.REQUEST_CLARIFICATION,
            ActionPayload(comment),
            actor_id,
        )


def awaiting_queue(proposals: Iterable[Proposal], role: str) -> list[Proposal]:
    """Open proposals currently waiting on ``role``, oldest submission first."""
    wanted = normalize_role(role)
    queue = [
        p for p in proposals
        if p.is_open and p.awaiting_role is not None
        and normalize_role(p.awaiting_role) == wanted
    ]
    return sorted(queue, key=_submission_order)


def _submission_order(proposal: Proposal) -> tuple[bool, float]:
    created = proposal.created_at
    return (created is None, created.timestamp() if created is not None else 0.0)
