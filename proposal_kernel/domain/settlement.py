"""
Post-event settlement (``proposal_kernel.domain.settlement``).

Responsibility
--------------
The one transition out of ``approved``: once the event has happened and
its bills are settled, the proposal becomes ``completed``.  This action is
external to the approval chain; ``WorkflowEngine`` never initiates it.

Architecture position
---------------------
**Kernel domain layer** -- pure.  ZERO I/O.
"""

from __future__ import annotations

from uuid import UUID

from proposal_kernel.domain.clock import Clock
from proposal_kernel.domain.proposal import AuditMessage, Proposal, ProposalStatus
from proposal_kernel.domain.role_chain import normalize_role
from proposal_kernel.exceptions import InvalidStateError


def settle(
    proposal: Proposal,
    actor_role: str,
    clock: Clock,
    actor_id: UUID | None = None,
    note: str = "",
) -> Proposal:
    """Mark an approved proposal as completed.

    Raises:
        InvalidStateError: if the proposal is not ``approved``.
    """
    if proposal.status is not ProposalStatus.APPROVED:
        raise InvalidStateError(
            str(proposal.proposal_id), proposal.status.value, "settle",
        )
    role = normalize_role(actor_role)
    text = f"settled by {role}"
    if note.strip():
        text = f"{text}: {note.strip()}"
    message = AuditMessage(
        author_role=role,
        author_id=actor_id,
        text=text,
        timestamp=clock.now(),
    )
    return proposal.with_transition(ProposalStatus.COMPLETED, None, message)
