"""Role allocation core: registry, validation, assignment and reveal."""

from allocation.assignment import (
    assign_roles,
    fisher_yates_shuffle,
    measure_distribution,
    role_histogram,
    verify_assignment,
)
from allocation.errors import (
    AllocationError,
    AlreadyOpen,
    AlreadyRevealed,
    AssignmentIntegrityError,
    ConfirmationRequiredError,
    InputError,
    InvalidConfigurationError,
    NoAssignment,
    NoDialogOpen,
    NotFoundError,
    OutOfOrderReveal,
    RevealBusy,
    RevealNotConfirmed,
    RevealRejected,
)
from allocation.registry import (
    REGISTRY,
    RoleDefinition,
    RoleRegistry,
    Team,
    get_role,
    get_roles,
    get_special_roles,
)
from allocation.reveal import RevealMachine
from allocation.state import Assignment, Player, RevealPhase, RevealState
from allocation.validation import (
    VALIDATION_RULES,
    AggregatedValidationState,
    Severity,
    ValidationResult,
    calculate_villager_count,
    validate_role_configuration,
)

__all__ = [
    "assign_roles",
    "fisher_yates_shuffle",
    "measure_distribution",
    "role_histogram",
    "verify_assignment",
    "AllocationError",
    "AlreadyOpen",
    "AlreadyRevealed",
    "AssignmentIntegrityError",
    "ConfirmationRequiredError",
    "InputError",
    "InvalidConfigurationError",
    "NoAssignment",
    "NoDialogOpen",
    "NotFoundError",
    "OutOfOrderReveal",
    "RevealBusy",
    "RevealNotConfirmed",
    "RevealRejected",
    "REGISTRY",
    "RoleDefinition",
    "RoleRegistry",
    "Team",
    "get_role",
    "get_roles",
    "get_special_roles",
    "RevealMachine",
    "Assignment",
    "Player",
    "RevealPhase",
    "RevealState",
    "VALIDATION_RULES",
    "AggregatedValidationState",
    "Severity",
    "ValidationResult",
    "calculate_villager_count",
    "validate_role_configuration",
]
