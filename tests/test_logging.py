"""Tests for the structured logging system (proposal_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from proposal_kernel.domain.proposal import ProposalStatus
from proposal_kernel.exceptions import UnauthorizedActorError
from proposal_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_all_logs(stream)[0]
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "proposal_kernel.test"
        assert "ts" in record

    def test_extra_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        pid = uuid4()
        get_logger("test").info("saved", extra={
            "proposal_ref": pid,
            "status": ProposalStatus.REVIEW,
            "on": date(2024, 3, 12),
            "amount": Decimal("12.50"),
            "ids": frozenset({"b", "a"}),
        })

        record = _parse_all_logs(stream)[0]
        assert record["proposal_ref"] == str(pid)
        assert record["status"] == "review"
        assert record["on"] == "2024-03-12"
        assert record["amount"] == "12.50"
        assert record["ids"] == ["a", "b"]

    def test_kernel_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise UnauthorizedActorError("p-1", "dean", "hod")
        except UnauthorizedActorError:
            get_logger("test").error("denied", exc_info=True)

        record = _parse_all_logs(stream)[0]
        assert record["exc_code"] == "UNAUTHORIZED_ACTOR"
        assert record["exc_type"] == "UnauthorizedActorError"
        assert record["exc_awaiting_role"] == "hod"
        assert "traceback" in record


class TestLogContext:
    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", actor_role="dean")
        get_logger("test").info("msg")

        record = _parse_all_logs(stream)[0]
        assert record["correlation_id"] == "abc-123"
        assert record["actor_role"] == "dean"

    def test_bind_restores_previous_values(self):
        LogContext.set(proposal_id="outer")
        with LogContext.bind(proposal_id="inner", actor_id=uuid4()):
            assert LogContext.get_all()["proposal_id"] == "inner"
            assert "actor_id" in LogContext.get_all()
        assert LogContext.get_all() == {"proposal_id": "outer"}

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare")

        record = _parse_all_logs(stream)[0]
        assert "correlation_id" not in record
        assert "proposal_id" not in record


class TestConfigureLogging:
    def test_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)
        get_logger("test").info("once")

        assert len(_parse_all_logs(stream)) == 1

    def test_level_respected(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        assert [r["message"] for r in _parse_all_logs(stream)] == ["shown"]
