"""Imperative shell of the proposal kernel: repository and approval service."""

from proposal_kernel.services.approval_service import ProposalApprovalService
from proposal_kernel.services.proposal_repository import (
    ProposalRepository,
    SqlAlchemyProposalRepository,
)

__all__ = [
    "ProposalApprovalService",
    "ProposalRepository",
    "SqlAlchemyProposalRepository",
]
