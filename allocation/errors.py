"""Exceptions raised by the role allocation core."""

from typing import Any, Optional


class AllocationError(Exception):
    """Base class for all allocation errors."""


class NotFoundError(AllocationError, KeyError):
    """Role id is not present in the registry."""

    def __init__(self, role_id: Any):
        self.role_id = role_id
        super().__init__(f'Role with ID "{role_id}" not found in registry')

    def __str__(self) -> str:
        return self.args[0]


class InputError(AllocationError, ValueError):
    """Player names do not match what the caller promised (count, blanks)."""


class InvalidConfigurationError(AllocationError, ValueError):
    """Role configuration failed validation with at least one ERROR."""

    def __init__(self, validation: Any, message: Optional[str] = None):
        self.validation = validation
        if message is None:
            messages = [e.message for e in validation.errors]
            message = "Invalid role configuration: " + "; ".join(messages)
        super().__init__(message)


class ConfirmationRequiredError(AllocationError):
    """Configuration carries warnings that were not explicitly confirmed."""

    def __init__(self, validation: Any):
        self.validation = validation
        messages = [w.message for w in validation.warnings]
        super().__init__("Confirmation required: " + "; ".join(messages))


class AssignmentIntegrityError(AllocationError):
    """A freshly built assignment does not match its own metadata."""


class RevealRejected(AllocationError):
    """A reveal transition was refused; state is unchanged."""

    reason = "rejected"


class OutOfOrderReveal(RevealRejected):
    reason = "out_of_order"


class AlreadyOpen(RevealRejected):
    reason = "already_open"


class AlreadyRevealed(RevealRejected):
    reason = "already_revealed"


class NoDialogOpen(RevealRejected):
    reason = "no_dialog_open"


class RevealNotConfirmed(RevealRejected):
    reason = "not_confirmed"


class RevealBusy(RevealRejected):
    reason = "busy"


class NoAssignment(RevealRejected):
    reason = "no_assignment"


REJECTIONS = {
    cls.reason: cls
    for cls in (
        OutOfOrderReveal,
        AlreadyOpen,
        AlreadyRevealed,
        NoDialogOpen,
        RevealNotConfirmed,
        RevealBusy,
        NoAssignment,
    )
}
