"""SQLAlchemy models for the reference proposal repository."""

from proposal_kernel.models.proposal import ProposalMessageModel, ProposalModel

__all__ = [
    "ProposalMessageModel",
    "ProposalModel",
]
