"""
Pure domain layer of the proposal kernel.

Value objects, the role chain and the workflow engine.  Nothing in this
package performs I/O or imports SQLAlchemy.
"""

from proposal_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SequentialClock,
    SystemClock,
)
from proposal_kernel.domain.proposal import (
    ACTIONABLE_STATUSES,
    TERMINAL_STATUSES,
    AuditMessage,
    FinancialBreakdown,
    LineItem,
    Proposal,
    ProposalAction,
    ProposalStatus,
    SponsorshipEntry,
)
from proposal_kernel.domain.role_chain import (
    RoleChain,
    RoleChainConfig,
    RoleChainNode,
    normalize_role,
)
from proposal_kernel.domain.settlement import settle
from proposal_kernel.domain.workflow import (
    ActionPayload,
    ActionResult,
    WorkflowEngine,
    awaiting_queue,
)

__all__ = [
    "ACTIONABLE_STATUSES",
    "TERMINAL_STATUSES",
    "ActionPayload",
    "ActionResult",
    "AuditMessage",
    "Clock",
    "DeterministicClock",
    "FinancialBreakdown",
    "LineItem",
    "Proposal",
    "ProposalAction",
    "ProposalStatus",
    "RoleChain",
    "RoleChainConfig",
    "RoleChainNode",
    "SequentialClock",
    "SponsorshipEntry",
    "SystemClock",
    "WorkflowEngine",
    "awaiting_queue",
    "normalize_role",
    "settle",
]
