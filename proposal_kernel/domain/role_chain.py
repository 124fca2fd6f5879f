"""
Role chain (``proposal_kernel.domain.role_chain``).

Responsibility
--------------
Static description of which role follows which in the approval chain.
The chain is installation configuration (see ``proposal_config``), never
computed at runtime.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* The chain is a simple path: non-empty, no duplicate roles.  A linear
  sequence without duplicates cannot contain a cycle.
* Role names are normalized once (stripped, lower-cased) at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from proposal_kernel.exceptions import InvalidRoleChainError, UnknownRoleError

SUBMITTER = "submitter"


def normalize_role(role: str) -> str:
    """Canonical spelling of a role name (``" Dean "`` -> ``"dean"``)."""
    return role.strip().lower()


@dataclass(frozen=True)
class RoleChainNode:
    """One approving position in the chain."""

    role: str
    predecessor: str


class RoleChainConfig(Protocol):
    """Capability the workflow engine consumes to route proposals."""

    def first_role(self) -> str:
        """Role that receives a freshly submitted proposal."""
        ...

    def next_role(self, current_role: str) -> str | None:
        """Role after ``current_role``, or None at the end of the chain."""
        ...

    def is_terminal(self, role: str) -> bool:
        """True if approving at ``role`` fully approves the proposal."""
        ...

    def contains(self, role: str) -> bool:
        """True if ``role`` is a node of the chain."""
        ...


class RoleChain:
    """Linear approval chain, e.g. ``hod -> dean -> chair -> vice_chair``.

    Contract:
        Implements ``RoleChainConfig``.  Lookups of roles that are not in
        the chain raise ``UnknownRoleError``.
    """

    def __init__(self, roles: tuple[str, ...] | list[str], name: str = "default"):
        normalized = tuple(normalize_role(r) for r in roles)
        errors: list[str] = []
        if not normalized:
            errors.append("chain has no roles")
        if any(not r for r in normalized):
            errors.append("role names must be non-empty")
        seen: set[str] = set()
        for role in normalized:
            if role in seen:
                errors.append(f"role {role!r} appears more than once")
            seen.add(role)
        if SUBMITTER in seen:
            errors.append(f"{SUBMITTER!r} is reserved for the chain entry point")
        if errors:
            raise InvalidRoleChainError(name, errors)

        self._name = name
        self._roles = normalized
        self._index = {role: i for i, role in enumerate(normalized)}

    @classmethod
    def from_roles(cls, *roles: str, name: str = "default") -> RoleChain:
        return cls(roles, name=name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def roles(self) -> tuple[str, ...]:
        return self._roles

    @property
    def nodes(self) -> tuple[RoleChainNode, ...]:
        predecessors = (SUBMITTER,) + self._roles[:-1]
        return tuple(
            RoleChainNode(role=role, predecessor=pred)
            for role, pred in zip(self._roles, predecessors)
        )

    def contains(self, role: str) -> bool:
        return normalize_role(role) in self._index

    def first_role(self) -> str:
        return self._roles[0]

    def next_role(self, current_role: str) -> str | None:
        i = self._position(current_role)
        if i + 1 < len(self._roles):
            return self._roles[i + 1]
        return None

    def is_terminal(self, role: str) -> bool:
        return self._position(role) == len(self._roles) - 1

    def _position(self, role: str) -> int:
        try:
            return self._index[normalize_role(role)]
        except KeyError:
            raise UnknownRoleError(role, self._roles) from None

    def __repr__(self) -> str:
        return f"<RoleChain {self._name}: {' -> '.join(self._roles)}>"
