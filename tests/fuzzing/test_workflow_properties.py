"""
Hypothesis property tests for the workflow state machine and the
conflict detector.

Properties:
- awaiting_role is set exactly while a proposal is open
- Denied actions never change the snapshot
- The message log only grows, one entry per applied action
- Detection is symmetric and agrees with a pairwise overlap check
- The incremental calendar agrees with batch detection after any edit sequence
"""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from proposal_engines.conflicts import ConflictCalendar, detect_conflicts
from proposal_engines.entities import DateRangedEntity
from proposal_kernel.domain.clock import DeterministicClock
from proposal_kernel.domain.proposal import ProposalAction, ProposalStatus
from proposal_kernel.domain.role_chain import RoleChain
from proposal_kernel.domain.workflow import ActionPayload, WorkflowEngine

ROLES = ("hod", "dean", "chair", "vice_chair")

# The autouse logging fixtures are function-scoped.
FIXTURE_CHECK = [HealthCheck.function_scoped_fixture]

actor_roles = st.sampled_from(ROLES + ("convener", "registrar"))
actions = st.sampled_from(list(ProposalAction))
texts = st.sampled_from(["", "  ", "budget too high", "need venue details"])
steps = st.lists(st.tuples(actor_roles, actions, texts), max_size=12)


def _engine() -> WorkflowEngine:
    return WorkflowEngine(
        RoleChain(ROLES),
        DeterministicClock(datetime(2024, 1, 1, tzinfo=timezone.utc)),
    )


def _fresh(engine: WorkflowEngine):
    return engine.submit(
        submitter_id=uuid4(),
        title="Fuzzed",
        start_date=date(2024, 1, 10),
        end_date=date(2024, 1, 12),
    )


class TestWorkflowProperties:
    @given(steps)
    @settings(max_examples=200, deadline=None, suppress_health_check=FIXTURE_CHECK)
    def test_invariants_hold_for_any_action_sequence(self, sequence):
        engine = _engine()
        proposal = _fresh(engine)

        for role, action, text in sequence:
            before = proposal
            result = engine.act(proposal, role, action, ActionPayload(text))

            if result.success:
                proposal = result.proposal
                assert len(proposal.messages) == len(before.messages) + 1
                assert proposal.messages[:-1] == before.messages
                assert proposal.last_message.author_role == role
            else:
                assert result.proposal is before
                assert result.message is None

            assert (proposal.awaiting_role is not None) == proposal.is_open
            if proposal.awaiting_role is not None:
                assert proposal.awaiting_role in ROLES

    @given(steps)
    @settings(max_examples=100, deadline=None, suppress_health_check=FIXTURE_CHECK)
    def test_approval_progresses_along_chain(self, sequence):
        engine = _engine()
        proposal = _fresh(engine)

        for role, action, text in sequence:
            before = proposal
            result = engine.act(proposal, role, action, ActionPayload(text))
            if not result.success:
                continue
            proposal = result.proposal
            if action is ProposalAction.APPROVE:
                index = ROLES.index(before.awaiting_role)
                if index + 1 < len(ROLES):
                    assert proposal.status is ProposalStatus.PENDING
                    assert proposal.awaiting_role == ROLES[index + 1]
                else:
                    assert proposal.status is ProposalStatus.APPROVED
            elif action is ProposalAction.REJECT:
                assert proposal.status is ProposalStatus.REJECTED
                assert proposal.last_message.text == text
            else:
                assert proposal.awaiting_role == before.awaiting_role


@st.composite
def entities(draw):
    count = draw(st.integers(min_value=0, max_value=8))
    result = []
    for i in range(count):
        start = date(2024, 1, 1) + timedelta(days=draw(st.integers(0, 30)))
        span = draw(st.integers(0, 5))
        result.append(DateRangedEntity(f"e{i}", start, start + timedelta(days=span)))
    return result


def _pairwise(items: list[DateRangedEntity]) -> set[str]:
    flagged = set()
    for a in items:
        for b in items:
            if a.entity_id != b.entity_id and a.start_date <= b.end_date and b.start_date <= a.end_date:
                flagged.add(a.entity_id)
    return flagged


class TestConflictProperties:
    @given(entities())
    @settings(max_examples=200, deadline=None, suppress_health_check=FIXTURE_CHECK)
    def test_matches_pairwise_overlap(self, items):
        assert detect_conflicts(items) == _pairwise(items)

    @given(entities(), st.randoms(use_true_random=False))
    @settings(max_examples=100, deadline=None, suppress_health_check=FIXTURE_CHECK)
    def test_order_independent(self, items, rnd):
        shuffled = list(items)
        rnd.shuffle(shuffled)
        assert detect_conflicts(items) == detect_conflicts(shuffled)

    @given(entities(), st.lists(st.integers(0, 7), max_size=5))
    @settings(max_examples=100, deadline=None, suppress_health_check=FIXTURE_CHECK)
    def test_calendar_matches_batch_after_removals(self, items, removals):
        calendar = ConflictCalendar(items)
        for index in removals:
            entity_id = f"e{index}"
            if entity_id in calendar:
                calendar.remove(entity_id)
        assert calendar.conflicting_ids() == detect_conflicts(calendar.entities())
