"""
proposal_config -- single public entrypoint for approval-chain configuration.

Responsibility:
    Provides ``get_role_chain()``, the one way runtime code obtains the
    approval chain.  YAML loading and validation are internal.

Architecture position:
    Configuration -- sits above ``proposal_kernel``.  The kernel MUST
    NEVER import from ``proposal_config``; it only consumes the
    ``RoleChainConfig`` capability this package produces.

Invariants enforced:
    - A chain is only built from a definition that passed
      ``validate_role_chain_def``.
    - Same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- no ``<name>.yaml`` in the config directory.
    - ``InvalidRoleChainError`` -- validation failures.
    - ``KeyError`` / ``yaml.YAMLError`` -- malformed files.

Audit relevance:
    Every successful ``get_role_chain()`` call emits a
    ``PROPOSAL_CONFIG_TRACE`` record with the chain name, version,
    checksum and roles.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from proposal_config.loader import load_role_chain_file
from proposal_config.schema import ChainNodeDef, RoleChainDef
from proposal_config.validator import validate_role_chain_def
from proposal_kernel.domain.role_chain import RoleChain
from proposal_kernel.exceptions import InvalidRoleChainError

_logger = logging.getLogger("proposal_kernel.config")

CONFIG_DIR_ENV = "PROPOSAL_CONFIG_DIR"

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "chains"


def resolve_config_dir(config_dir: Path | None = None) -> Path:
    """Explicit argument, then ``$PROPOSAL_CONFIG_DIR``, then the shipped chains."""
    if config_dir is not None:
        return Path(config_dir)
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return _DEFAULT_CONFIG_DIR


def load_role_chain_def(name: str = "default", config_dir: Path | None = None) -> RoleChainDef:
    """Load and validate ``<name>.yaml`` without building the kernel chain."""
    path = resolve_config_dir(config_dir) / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Role chain configuration not found: {path}")

    definition = load_role_chain_file(path)
    errors = validate_role_chain_def(definition)
    if errors:
        raise InvalidRoleChainError(definition.name or name, errors)
    return definition


def get_role_chain(name: str = "default", config_dir: Path | None = None) -> RoleChain:
    """The public configuration entrypoint: a validated ``RoleChain``."""
    definition = load_role_chain_def(name, config_dir)
    chain = RoleChain(definition.roles, name=definition.name)

    _logger.info(
        "PROPOSAL_CONFIG_TRACE",
        extra={
            "trace_type": "PROPOSAL_CONFIG_TRACE",
            "chain_name": definition.name,
            "chain_version": definition.version,
            "checksum": definition.checksum,
            "roles": list(chain.roles),
        },
    )
    return chain


__all__ = [
    "CONFIG_DIR_ENV",
    "ChainNodeDef",
    "RoleChainDef",
    "get_role_chain",
    "load_role_chain_def",
    "resolve_config_dir",
    "validate_role_chain_def",
]
