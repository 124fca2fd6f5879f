"""
proposal_engines.tracer -- Engine invocation tracer emitting PROPOSAL_ENGINE_TRACE.

Responsibility:
    Provide ``@traced_engine``, a decorator that wraps pure engine calls
    with one structured trace record: engine_name, engine_version,
    input_fingerprint (SHA-256 of selected arguments), and duration_ms.

Architecture position:
    Engines -- support for the pure calculation layer.  Emits a log
    record only; no other side effects.  Logs under
    ``proposal_kernel.engines.tracer`` so it is picked up by the kernel's
    logging configuration without importing it.

Invariants enforced:
    - The fingerprint is deterministic: sets are sorted, dict keys are
      sorted, dates are ISO formatted, enums use their value, dataclasses
      are fingerprinted by their fields.  One-shot iterables (generators,
      map objects) are never consumed; they fingerprint as
      "<unmaterialized:TypeName>".
    - Arguments are bound to the wrapped signature first, so positional
      and keyword calls of the same inputs produce the same fingerprint.

Failure modes:
    - A fingerprint field missing from the call is recorded as "null".
    - Exceptions from the wrapped engine propagate; no trace is emitted.

Usage:
    from proposal_engines.tracer import traced_engine

    @traced_engine("conflicts", "1.0", fingerprint_fields=("entities",))
    def detect_conflicts(entities):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_logger = logging.getLogger("proposal_kernel.engines.tracer")

TRACE_TYPE = "PROPOSAL_ENGINE_TRACE"


def _canonicalize(value: Any) -> str:
    """Stable string form of ``value`` for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        body = ",".join(
            f"{f.name}:{_canonicalize(getattr(value, f.name))}" for f in fields(value)
        )
        return f"{type(value).__name__}(" + body + ")"
    if isinstance(value, dict):
        items = sorted(((str(k), v) for k, v in value.items()), key=lambda kv: kv[0])
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonicalize(v) for v in value)) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    if isinstance(value, Iterable):
        return f"<unmaterialized:{type(value).__name__}>"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """16-hex-char SHA-256 prefix over the named ``arguments``."""
    parts = [
        f"{name}={_canonicalize(arguments.get(name))}"
        for name in fingerprint_fields
    ]
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits PROPOSAL_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "conflicts").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names included in the input
            fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                try:
                    bound = signature.bind(*args, **kwargs)
                except TypeError:
                    # Let the call itself raise the signature error.
                    return func(*args, **kwargs)
                bound.apply_defaults()
                fp = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                TRACE_TYPE,
                extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
