"""
Typed errors with machine-readable codes.

Every exception in proposal_kernel.exceptions must carry a unique
UPPER_SNAKE ``code`` and descend from ProposalKernelError, so callers
never need to match on message text.
"""

import inspect
import re

import proposal_kernel.exceptions as exceptions_module
from proposal_kernel.exceptions import (
    ConflictWriteError,
    InvalidStateError,
    MalformedScheduleRowError,
    ProposalKernelError,
    RoutingError,
    UnauthorizedActorError,
    ValidationError,
    WorkflowError,
)

CODE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


def _exception_classes() -> list[type]:
    return [
        obj for _, obj in inspect.getmembers(exceptions_module, inspect.isclass)
        if issubclass(obj, Exception) and obj.__module__ == exceptions_module.__name__
    ]


class TestErrorCodes:
    def test_all_exceptions_have_codes(self):
        for cls in _exception_classes():
            assert issubclass(cls, ProposalKernelError), cls.__name__
            assert "code" in vars(cls), f"{cls.__name__} does not define its own code"
            assert CODE_PATTERN.match(cls.code), f"{cls.__name__}.code = {cls.code!r}"

    def test_codes_unique(self):
        codes = [cls.code for cls in _exception_classes()]
        assert len(codes) == len(set(codes))

    def test_workflow_denials_share_base(self):
        for cls in (UnauthorizedActorError, InvalidStateError, RoutingError, ValidationError):
            assert issubclass(cls, WorkflowError)


class TestStructuredAttributes:
    def test_conflict_write(self):
        exc = ConflictWriteError("p-1", 3)
        assert (exc.proposal_id, exc.expected_version) == ("p-1", 3)

    def test_malformed_row(self):
        exc = MalformedScheduleRowError("r1", "Month", "13th'24", "expected <month>'<yy>")
        assert exc.field == "Month"
        assert "13th'24" in str(exc)

    def test_routing_error_message_distinguishes_cases(self):
        assert "no awaiting role" in str(RoutingError("p", "pending"))
        assert "not in the chain" in str(RoutingError("p", "pending", "registrar"))
