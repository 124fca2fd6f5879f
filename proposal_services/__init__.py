"""
proposal_services -- Read-side orchestration over the proposal store.

Responsibility:
    Compose the pure engines (proposal_engines/) with a
    ``ProposalRepository`` snapshot to answer coordinator and approver
    dashboard questions.

Architecture position:
    Services -- orchestration over engines + kernel.

    Dependency direction:
        proposal_services/ -> proposal_engines/  (allowed)
        proposal_services/ -> proposal_kernel/   (allowed)
        proposal_engines/  -> proposal_services/ (FORBIDDEN)
        proposal_kernel/   -> proposal_services/ (FORBIDDEN)
"""

from proposal_services.coordinator_service import CoordinatorService
from proposal_services.schedule_sheet import read_schedule_sheet

__all__ = [
    "CoordinatorService",
    "read_schedule_sheet",
]
