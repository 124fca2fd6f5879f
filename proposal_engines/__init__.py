"""
Module: proposal_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines used by
    the coordinator and approver dashboards.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import proposal_kernel/domain (and sibling engine modules).
    MUST NOT import proposal_kernel.db, proposal_kernel.models or
    proposal_kernel.services.

Invariants enforced:
    - Purity: engines never read the clock.  Dates come from the inputs.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from proposal_engines import detect_conflicts, aggregate_stats
    from proposal_engines.schedule import ScheduleRow
"""

from proposal_engines.conflicts import (
    ConflictCalendar,
    bucket_by_day,
    detect_conflicts,
    detect_schedule_conflicts,
)
from proposal_engines.entities import DateRangedEntity, entity_from_proposal
from proposal_engines.schedule import (
    ScheduleRow,
    normalize_schedule,
    normalize_schedule_row,
    parse_day_field,
    parse_month_token,
)
from proposal_engines.stats import (
    ProposalStats,
    aggregate_stats,
    count_by_category,
    recent_actionable,
)
from proposal_engines.tracer import traced_engine

__all__ = [
    "ConflictCalendar",
    "DateRangedEntity",
    "ProposalStats",
    "ScheduleRow",
    "aggregate_stats",
    "bucket_by_day",
    "count_by_category",
    "detect_conflicts",
    "detect_schedule_conflicts",
    "entity_from_proposal",
    "normalize_schedule",
    "normalize_schedule_row",
    "parse_day_field",
    "parse_month_token",
    "recent_actionable",
    "traced_engine",
]
