"""Pydantic request/response models for the setup and reveal screens."""

from pydantic import BaseModel, Field, field_validator, model_validator

from allocation.config import SETTINGS
from allocation.registry import REGISTRY, RoleRegistry
from allocation.reveal import RevealMachine
from allocation.state import RevealPhase
from allocation.validation import AggregatedValidationState, ValidationResult

# Validation constants (no magic numbers in validation)
MAX_PLAYER_NAME_LENGTH = 50


class SetupRequest(BaseModel):
    """What the setup form hands to the session: names in reveal order plus role counts."""

    player_names: list[str] = Field(..., min_length=1, description="Names in reveal order; duplicates allowed")
    role_counts: dict[str, int] = Field(
        default_factory=REGISTRY.default_role_configuration,
        description="Role id -> count for non-villager roles. Villagers fill the rest.",
    )
    total_players: int | None = Field(default=None, ge=1, description="Defaults to len(player_names)")
    confirmed: bool = Field(default=False, description="User accepted the configuration warnings")

    @field_validator("player_names")
    @classmethod
    def names_must_be_filled(cls, v: list[str]) -> list[str]:
        cleaned = []
        for i, name in enumerate(v):
            name = name.strip()
            if not name:
                raise ValueError(f"Player name {i + 1} cannot be empty")
            if len(name) > MAX_PLAYER_NAME_LENGTH:
                raise ValueError(f"Player name {i + 1} is longer than {MAX_PLAYER_NAME_LENGTH} characters")
            cleaned.append(name)
        return cleaned

    @field_validator("role_counts")
    @classmethod
    def role_ids_upper(cls, v: dict[str, int]) -> dict[str, int]:
        return {k.upper(): count for k, count in v.items()}

    @model_validator(mode="after")
    def names_match_total(self) -> "SetupRequest":
        if self.total_players is not None and len(self.player_names) != self.total_players:
            raise ValueError(
                f"player_names length ({len(self.player_names)}) must equal total_players ({self.total_players})"
            )
        if len(self.player_names) > SETTINGS.max_players:
            raise ValueError(f"At most {SETTINGS.max_players} players supported")
        return self

    @property
    def player_count(self) -> int:
        return self.total_players or len(self.player_names)


class ValidationMessage(BaseModel):
    severity: str = Field(..., description="ERROR, WARNING or INFO")
    type: str
    message: str


class ValidationSummary(BaseModel):
    """Drives whether Allocate is enabled and whether a confirmation step is shown."""

    is_valid: bool
    requires_confirmation: bool
    villager_count: int
    errors: list[ValidationMessage] = Field(default_factory=list)
    warnings: list[ValidationMessage] = Field(default_factory=list)
    infos: list[ValidationMessage] = Field(default_factory=list)


def _message(result: ValidationResult) -> ValidationMessage:
    return ValidationMessage(severity=result.severity.value, type=result.type, message=result.message)


def validation_to_public(validation: AggregatedValidationState) -> ValidationSummary:
    return ValidationSummary(
        is_valid=validation.is_valid,
        requires_confirmation=validation.requires_confirmation,
        villager_count=validation.villager_count,
        errors=[_message(e) for e in validation.errors],
        warnings=[_message(w) for w in validation.warnings],
        infos=[_message(i) for i in validation.infos],
    )


class PlayerCard(BaseModel):
    """One card in the reveal list. Never carries a role."""

    index: int
    name: str
    state: str = Field(..., description="revealed, current or upcoming")
    revealed: bool


class DialogView(BaseModel):
    """The open reveal dialog; role fields are set only after the player confirms."""

    player_index: int
    player_name: str
    phase: str
    role_id: str | None = None
    role_name: str | None = None
    role_description: str | None = None
    role_color: str | None = None


class RevealView(BaseModel):
    """Everything the reveal screen renders."""

    assignment_id: str | None = None
    phase: str
    current_player_index: int
    open_dialog_player_index: int | None = None
    is_processing: bool = False
    revealed_count: int = 0
    total_players: int = 0
    complete: bool = False
    cards: list[PlayerCard] = Field(default_factory=list)
    dialog: DialogView | None = None


def reveal_view(machine: RevealMachine, registry: RoleRegistry = REGISTRY) -> RevealView:
    """Project machine state for display; only the confirmed open dialog shows a role."""
    state = machine.state
    assignment = machine.assignment
    phase = machine.phase
    revealed, total = machine.progress()

    cards: list[PlayerCard] = []
    if assignment is not None:
        for p in assignment.players:
            if p.revealed:
                card_state = "revealed"
            elif p.index == state.current_player_index:
                card_state = "current"
            else:
                card_state = "upcoming"
            cards.append(PlayerCard(index=p.index, name=p.name, state=card_state, revealed=p.revealed))

    dialog = None
    player = machine.open_player
    if player is not None:
        role_fields = {}
        if phase == RevealPhase.OPEN_REVEALED:
            role = registry.get_role(player.role)
            role_fields = {
                "role_id": role.id,
                "role_name": role.name,
                "role_description": role.description,
                "role_color": role.color_scheme.primary,
            }
        dialog = DialogView(player_index=player.index, player_name=player.name, phase=phase.value, **role_fields)

    return RevealView(
        assignment_id=assignment.id if assignment else None,
        phase=phase.value,
        current_player_index=state.current_player_index,
        open_dialog_player_index=state.open_dialog_player_index,
        is_processing=state.is_processing,
        revealed_count=revealed,
        total_players=total,
        complete=machine.is_complete,
        cards=cards,
        dialog=dialog,
    )
