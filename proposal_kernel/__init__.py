"""
Proposal Kernel

Approval-chain engine for institutional event proposals:
- Role-gated workflow state machine (approve / reject / request clarification)
- Append-only audit message log
- Optimistic-concurrency persistence adapter
"""

__version__ = "0.1.0"
