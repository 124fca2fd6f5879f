"""
Pytest fixtures for the proposal kernel test suite.

Provides:
- Structured logging configuration and log capture
- Deterministic clock, default role chain and workflow engine
- SQLite in-memory database sessions for the repository adapter
- An in-memory ``ProposalRepository`` for service tests

Environment Variables:
- DATABASE_URL: database for the repository tests.  Defaults to an
  in-memory SQLite database.
"""

import json
import logging
import os
from dataclasses import replace
from datetime import date, datetime, timezone
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from proposal_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from proposal_kernel.domain.clock import DeterministicClock
from proposal_kernel.domain.proposal import Proposal
from proposal_kernel.domain.role_chain import RoleChain
from proposal_kernel.domain.workflow import WorkflowEngine
from proposal_kernel.exceptions import ConflictWriteError, ProposalNotFoundError
from proposal_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_SUBMITTER_ID = uuid4()

DEFAULT_ROLES = ("hod", "dean", "chair", "vice_chair")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture proposal_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, approval_service):
            approval_service.act(...)
            logs = captured_logs()
            assert any(r["message"] == "workflow_action_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("proposal_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def chain() -> RoleChain:
    """The shipped four-role chain."""
    return RoleChain(DEFAULT_ROLES)


@pytest.fixture
def short_chain() -> RoleChain:
    """Three-role chain used by the walkthrough scenarios."""
    return RoleChain.from_roles("hod", "dean", "chair", name="short")


@pytest.fixture
def workflow(chain, deterministic_clock) -> WorkflowEngine:
    return WorkflowEngine(chain, deterministic_clock)


@pytest.fixture
def make_proposal(workflow):
    """Factory for freshly submitted proposals."""

    def _make(
        title: str = "Tech Symposium",
        start: date = date(2024, 3, 12),
        end: date = date(2024, 3, 14),
        category: str = "seminar",
        engine: WorkflowEngine | None = None,
    ) -> Proposal:
        return (engine or workflow).submit(
            submitter_id=TEST_SUBMITTER_ID,
            title=title,
            start_date=start,
            end_date=end,
            category=category,
        )

    return _make


# =============================================================================
# In-memory repository
# =============================================================================


class InMemoryProposalRepository:
    """``ProposalRepository`` over a dict, with the same version contract.

    ``conflicts_to_inject`` makes the next N saves fail with
    ConflictWriteError after bumping the stored version, simulating a
    concurrent writer that got there first.
    """

    def __init__(self) -> None:
        self.rows: dict[UUID, Proposal] = {}
        self.conflicts_to_inject = 0
        self.save_calls = 0

    def add(self, proposal: Proposal) -> Proposal:
        self.rows[proposal.proposal_id] = proposal
        return proposal

    def load(self, proposal_id: UUID) -> Proposal:
        try:
            return self.rows[proposal_id]
        except KeyError:
            raise ProposalNotFoundError(str(proposal_id)) from None

    def list_all(self) -> list[Proposal]:
        return list(self.rows.values())

    def save(self, proposal: Proposal) -> Proposal:
        self.save_calls += 1
        current = self.load(proposal.proposal_id)
        if self.conflicts_to_inject:
            self.conflicts_to_inject -= 1
            self.rows[proposal.proposal_id] = replace(current, version=current.version + 1)
            raise ConflictWriteError(str(proposal.proposal_id), proposal.version)
        if current.version != proposal.version:
            raise ConflictWriteError(str(proposal.proposal_id), proposal.version)
        saved = replace(proposal, version=proposal.version + 1)
        self.rows[proposal.proposal_id] = saved
        return saved


@pytest.fixture
def memory_repository() -> InMemoryProposalRepository:
    return InMemoryProposalRepository()


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", "sqlite:///:memory:")


@pytest.fixture
def db_engine():
    """Fresh engine and schema per test."""
    engine = init_engine_from_url(get_database_url())
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()
