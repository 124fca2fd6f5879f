"""
Configuration schema (``proposal_config.schema``).

Responsibility
--------------
Frozen dataclasses describing a role-chain definition as written in YAML,
before it is validated and turned into a kernel ``RoleChain``.

Architecture position
---------------------
**Config layer** -- pure data.  No dependency on kernel services, models
or engines.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChainNodeDef:
    """One approving role of a chain as declared in YAML."""

    role: str
    label: str = ""
    predecessor: str | None = None


@dataclass(frozen=True)
class RoleChainDef:
    """A named, versioned role chain.

    ``checksum`` is the SHA-256 of the source mapping, used to tell which
    chain definition governed a given approval.
    """

    name: str
    nodes: tuple[ChainNodeDef, ...]
    version: int = 1
    description: str = ""
    checksum: str = ""

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(node.role for node in self.nodes)
