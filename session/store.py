"""In-memory owner of the active allocation. Nothing is persisted."""

import logging
import random
from typing import Mapping, Optional, Sequence

from allocation.assignment import assign_roles
from allocation.errors import (
    ConfirmationRequiredError,
    InputError,
    InvalidConfigurationError,
    RevealBusy,
)
from allocation.registry import REGISTRY, RoleRegistry
from allocation.reveal import RevealMachine
from allocation.state import Assignment
from allocation.validation import AggregatedValidationState, validate_role_configuration
from session.models import RevealView, SetupRequest, ValidationSummary, reveal_view, validation_to_public

logger = logging.getLogger(__name__)


class RevealSession:
    """
    Holds the one (Assignment, RevealState) pair for a device.
    Allocation is refused on validation errors, and on warnings unless confirmed.
    """

    def __init__(
        self,
        registry: Optional[RoleRegistry] = None,
        rng: Optional[random.Random] = None,
        strict: bool = False,
    ):
        self.registry = registry or REGISTRY
        self.rng = rng
        self.machine = RevealMachine(strict=strict)
        # Last setup inputs; kept across reset so the form can be re-filled
        self.role_config: dict[str, int] = self.registry.default_role_configuration()
        self.player_names: list[str] = []
        self.validation: Optional[AggregatedValidationState] = None

    @property
    def assignment(self) -> Optional[Assignment]:
        return self.machine.assignment

    def validate(self, role_config: Mapping[str, int], total_players: int) -> AggregatedValidationState:
        """Validate without allocating; the verdict is kept as self.validation."""
        self.validation = validate_role_configuration(role_config, total_players, registry=self.registry)
        return self.validation

    def validation_summary(self) -> Optional[ValidationSummary]:
        if self.validation is None:
            return None
        return validation_to_public(self.validation)

    def allocate(
        self,
        role_config: Mapping[str, int],
        player_names: Sequence[str],
        confirmed: bool = False,
    ) -> Assignment:
        """Deal a new assignment, replacing any previous one and restarting the reveal."""
        if not player_names:
            raise InputError("Player names cannot be empty")
        snapshot = dict(role_config)
        validation = self.validate(snapshot, len(player_names))
        if not validation.is_valid:
            raise InvalidConfigurationError(validation)
        if validation.requires_confirmation and not confirmed:
            raise ConfirmationRequiredError(validation)

        assignment = assign_roles(snapshot, player_names, rng=self.rng, registry=self.registry)
        if not self.machine.load(assignment):
            raise RevealBusy("Cannot replace the assignment during a transition")
        self.role_config = snapshot
        self.player_names = [p.name for p in assignment.players]
        return assignment

    def allocate_request(self, request: SetupRequest) -> Assignment:
        return self.allocate(request.role_counts, request.player_names, confirmed=request.confirmed)

    def reallocate(self, confirmed: bool = False) -> Assignment:
        """Deal again with the same names and role counts; nothing from the old deal carries over."""
        if not self.player_names:
            raise InputError("No previous allocation to repeat")
        return self.allocate(self.role_config, self.player_names, confirmed=confirmed)

    def reset(self) -> bool:
        """Drop the assignment and reveal progress; setup inputs are left alone."""
        done = self.machine.reset()
        if done:
            self.validation = None
            logger.info("Session reset")
        return done

    def open_reveal(self, player_index: int) -> bool:
        return self.machine.open_reveal(player_index)

    def confirm_reveal(self) -> bool:
        return self.machine.confirm_reveal()

    def close_dialog(self) -> bool:
        return self.machine.close_dialog()

    def view(self) -> RevealView:
        return reveal_view(self.machine, self.registry)


_active: Optional[RevealSession] = None


def start_session(**kwargs) -> RevealSession:
    """Replace the active session with a new one."""
    global _active
    _active = RevealSession(**kwargs)
    return _active


def get_session() -> Optional[RevealSession]:
    return _active


def end_session() -> None:
    global _active
    if _active is not None:
        _active.reset()
    _active = None
