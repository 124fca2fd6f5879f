"""
Configuration loader (``proposal_config.loader``).

Responsibility
--------------
Loads role-chain YAML files and parses them into the frozen dataclasses
of ``proposal_config.schema``.  Runtime callers go through
``proposal_config.get_role_chain()`` instead.

Invariants enforced
-------------------
* Required keys have no silent defaults; a missing key raises ``KeyError``.
* ``compute_checksum`` is deterministic for identical input.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* ``nodes`` not a list  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from proposal_config.schema import ChainNodeDef, RoleChainDef


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_node(data: dict[str, Any]) -> ChainNodeDef:
    predecessor = data.get("predecessor")
    return ChainNodeDef(
        role=str(data["role"]),
        label=str(data.get("label", "")),
        predecessor=None if predecessor is None else str(predecessor),
    )


def parse_role_chain(data: dict[str, Any]) -> RoleChainDef:
    """
    Parse a ``RoleChainDef`` from the mapping under the ``role_chain`` key.

    The file-level wrapper key is optional so fragments can be written
    either way.
    """
    body = data.get("role_chain", data)
    nodes_raw = body["nodes"]
    if not isinstance(nodes_raw, list):
        raise ValueError(
            f"role_chain.nodes must be a list, got {type(nodes_raw).__name__}"
        )
    return RoleChainDef(
        name=str(body["name"]),
        nodes=tuple(parse_node(node) for node in nodes_raw),
        version=int(body.get("version", 1)),
        description=str(body.get("description", "")),
        checksum=compute_checksum(body),
    )


def load_role_chain_file(path: Path) -> RoleChainDef:
    return parse_role_chain(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
