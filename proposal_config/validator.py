"""
Configuration validator (``proposal_config.validator``).

Responsibility
--------------
Checks a ``RoleChainDef`` before it is turned into a kernel ``RoleChain``.

Invariants enforced
-------------------
* The chain has a name and at least one node.
* Role names are non-empty, unique, and never the reserved ``submitter``.
* Declared predecessors form a simple path: the first node follows the
  submitter, every later node follows the node before it.

Failure modes
-------------
Returns a list of error strings; callers MUST NOT build a chain from a
definition that produced any.
"""

from __future__ import annotations

from proposal_config.schema import RoleChainDef
from proposal_kernel.domain.role_chain import SUBMITTER, normalize_role


def validate_role_chain_def(definition: RoleChainDef) -> list[str]:
    errors: list[str] = []

    if not definition.name.strip():
        errors.append("chain name must not be empty")
    if not definition.nodes:
        errors.append("chain must contain at least one role")
        return errors

    seen: set[str] = set()
    expected_predecessor = SUBMITTER
    for position, node in enumerate(definition.nodes):
        role = normalize_role(node.role)
        if not role:
            errors.append(f"node {position}: role name must not be empty")
        elif role == SUBMITTER:
            errors.append(f"node {position}: {SUBMITTER!r} is reserved")
        elif role in seen:
            errors.append(f"node {position}: duplicate role {role!r}")
        seen.add(role)

        if node.predecessor is not None:
            predecessor = normalize_role(node.predecessor)
            if predecessor != expected_predecessor:
                errors.append(
                    f"node {position} ({role!r}): predecessor {predecessor!r} "
                    f"does not match {expected_predecessor!r}"
                )
        expected_predecessor = role

    return errors
