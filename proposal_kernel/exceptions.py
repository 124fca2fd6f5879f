"""
Typed Exception Hierarchy for the Proposal Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every denial of a workflow action has to be shown to an end user with a
specific reason ("awaiting Dean, not you", "rejection reason required").
Generic exceptions like ValueError force callers to parse error messages,
which is fragile and untestable.

Every exception in this module:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example - WRONG way to handle errors:
    result = engine.act(proposal, "dean", "approve")
    if "not awaiting" in str(result.error):   # FRAGILE
        ...

Example - RIGHT way:
    result = engine.act(proposal, "dean", "approve")
    if isinstance(result.error, UnauthorizedActorError):
        show(f"Waiting on {result.error.awaiting_role}")
        api_response(code=result.error.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from ProposalKernelError:

    ProposalKernelError (base)
    |
    +-- WorkflowError
    |   +-- UnauthorizedActorError
    |   +-- InvalidStateError
    |   +-- RoutingError
    |   +-- ValidationError
    |
    +-- ProposalError
    |   +-- ProposalNotFoundError
    |
    +-- ConcurrencyError
    |   +-- ConflictWriteError
    |
    +-- ScheduleError
    |   +-- MalformedScheduleRowError
    |
    +-- RoleChainError
    |   +-- UnknownRoleError
    |   +-- InvalidRoleChainError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                    | When Raised
-------------|-------------------------|---------------------------------------
Workflow     | UNAUTHORIZED_ACTOR      | Actor role != proposal's awaiting role
             | INVALID_STATE           | Action against a terminal status
             | ROUTING_ERROR           | awaiting role null on an open proposal
             | VALIDATION_ERROR        | Missing reason/comment, unknown action
-------------|-------------------------|---------------------------------------
Proposal     | PROPOSAL_NOT_FOUND      | Repository has no such proposal
-------------|-------------------------|---------------------------------------
Concurrency  | CONFLICT_WRITE          | Version mismatch on save
-------------|-------------------------|---------------------------------------
Schedule     | MALFORMED_SCHEDULE_ROW  | Unparsable day/month token (internal)
-------------|-------------------------|---------------------------------------
Role chain   | UNKNOWN_ROLE            | Role is not part of the chain
             | INVALID_ROLE_CHAIN      | Empty chain, duplicate role, bad YAML
-------------|-------------------------|---------------------------------------
Immutability | IMMUTABILITY_VIOLATION  | Updating/deleting a proposal message

===============================================================================
PROPAGATION
===============================================================================

1. WorkflowError subclasses are RETURNED by ``WorkflowEngine.act`` inside
   an ``ActionResult``; they are only raised when a caller opts in via
   ``ActionResult.unwrap()``.

2. MalformedScheduleRowError never leaves the schedule normalizer: the
   row is logged and skipped.

3. ConflictWriteError is raised by the repository.  The approval service
   retries by re-reading and re-validating:

    try:
        repo.save(updated)
    except ConflictWriteError as e:
        log.info("stale snapshot", extra={"expected": e.expected_version})
        fresh = repo.load(e.proposal_id)

===============================================================================
"""


class ProposalKernelError(Exception):
    """
    Base exception for all proposal kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROPOSAL_KERNEL_ERROR"


# Workflow-related exceptions


class WorkflowError(ProposalKernelError):
    """Base exception for denied workflow actions."""

    code: str = "WORKFLOW_ERROR"


class UnauthorizedActorError(WorkflowError):
    """Actor's role is not the role the proposal is awaiting."""

    code: str = "UNAUTHORIZED_ACTOR"

    def __init__(self, proposal_id: str, actor_role: str, awaiting_role: str):
        self.proposal_id = proposal_id
        self.actor_role = actor_role
        self.awaiting_role = awaiting_role
        super().__init__(
            f"Proposal {proposal_id} is awaiting {awaiting_role}, "
            f"not {actor_role}"
        )


class InvalidStateError(WorkflowError):
    """Action attempted against a proposal in a terminal status."""

    code: str = "INVALID_STATE"

    def __init__(self, proposal_id: str, status: str, action: str):
        self.proposal_id = proposal_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} proposal {proposal_id}: status is {status}"
        )


class RoutingError(WorkflowError):
    """
    Proposal is open but has no awaiting role.

    A data-integrity anomaly.  Never auto-resolved; the engine does not
    guess a target role.
    """

    code: str = "ROUTING_ERROR"

    def __init__(
        self,
        proposal_id: str,
        status: str,
        awaiting_role: str | None = None,
    ):
        self.proposal_id = proposal_id
        self.status = status
        self.awaiting_role = awaiting_role
        if awaiting_role is None:
            detail = "has no awaiting role"
        else:
            detail = f"is awaiting {awaiting_role!r}, which is not in the chain"
        super().__init__(f"Proposal {proposal_id} is {status} but {detail}")


class ValidationError(WorkflowError):
    """Required payload is missing or the action is not recognised."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, proposal_id: str, action: str, reason: str):
        self.proposal_id = proposal_id
        self.action = action
        self.reason = reason
        super().__init__(f"Invalid {action} on proposal {proposal_id}: {reason}")


# Proposal-related exceptions


class ProposalError(ProposalKernelError):
    """Base exception for proposal store errors."""

    code: str = "PROPOSAL_ERROR"


class ProposalNotFoundError(ProposalError):
    """Proposal with given ID was not found."""

    code: str = "PROPOSAL_NOT_FOUND"

    def __init__(self, proposal_id: str):
        self.proposal_id = proposal_id
        super().__init__(f"Proposal not found: {proposal_id}")


# Concurrency-related exceptions


class ConcurrencyError(ProposalKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ConflictWriteError(ConcurrencyError):
    """Optimistic-concurrency version mismatch on save."""

    code: str = "CONFLICT_WRITE"

    def __init__(self, proposal_id: str, expected_version: int):
        self.proposal_id = proposal_id
        self.expected_version = expected_version
        super().__init__(
            f"Conflicting write on proposal {proposal_id}: "
            f"version {expected_version} is stale"
        )


# Schedule-related exceptions


class ScheduleError(ProposalKernelError):
    """Base exception for schedule feed errors."""

    code: str = "SCHEDULE_ERROR"


class MalformedScheduleRowError(ScheduleError):
    """A schedule row has an unparsable day or month token."""

    code: str = "MALFORMED_SCHEDULE_ROW"

    def __init__(self, row_id: str, field: str, value: str, reason: str):
        self.row_id = row_id
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Malformed schedule row {row_id}: {field}={value!r} ({reason})"
        )


# Role-chain exceptions


class RoleChainError(ProposalKernelError):
    """Base exception for role chain errors."""

    code: str = "ROLE_CHAIN_ERROR"


class UnknownRoleError(RoleChainError):
    """Role is not a node of the configured chain."""

    code: str = "UNKNOWN_ROLE"

    def __init__(self, role: str, chain_roles: tuple[str, ...]):
        self.role = role
        self.chain_roles = chain_roles
        super().__init__(
            f"Role {role!r} is not in the approval chain {list(chain_roles)}"
        )


class InvalidRoleChainError(RoleChainError):
    """Role chain definition violates the simple-path invariant."""

    code: str = "INVALID_ROLE_CHAIN"

    def __init__(self, chain_name: str, errors: list[str]):
        self.chain_name = chain_name
        self.errors = errors
        super().__init__(
            f"Invalid role chain {chain_name!r}: " + "; ".join(errors)
        )


# Immutability-related exceptions


class ImmutabilityError(ProposalKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only record.

    Proposal messages are the audit trail of the approval chain and are
    never updated or deleted once written.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
