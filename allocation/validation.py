"""Multi-role validation: composable rules over a role-count configuration."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from allocation.config import SETTINGS
from allocation.registry import REGISTRY, RoleRegistry, Team


class Severity(str, Enum):
    """How a rule violation affects allocation."""

    ERROR = "ERROR"  # blocks allocation
    WARNING = "WARNING"  # requires confirmation
    INFO = "INFO"  # advisory only


# Shared by the two rules that report a configuration with no villagers
NO_VILLAGERS_KEY = "villagers:none"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one failing rule. Passing rules return None instead."""

    severity: Severity
    type: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    key: str = ""
    is_valid: bool = False

    @property
    def dedup_key(self) -> str:
        return self.key or self.type


@dataclass(frozen=True)
class AggregatedValidationState:
    """Verdict over all rules for one configuration."""

    is_valid: bool
    has_errors: bool
    has_warnings: bool
    errors: tuple[ValidationResult, ...]
    warnings: tuple[ValidationResult, ...]
    villager_count: int
    requires_confirmation: bool
    infos: tuple[ValidationResult, ...] = ()

    def error_types(self) -> list[str]:
        return [e.type for e in self.errors]

    def warning_types(self) -> list[str]:
        return [w.type for w in self.warnings]


RuleOutcome = Union[ValidationResult, list[ValidationResult], None]
ValidationRule = Callable[[Mapping[str, int], int, RoleRegistry], RuleOutcome]


def is_whole_count(value: object) -> bool:
    """True for a real int; bools, floats and strings are not counts."""
    return isinstance(value, int) and not isinstance(value, bool)


def role_count(role_config: Mapping[str, int], role_id: str) -> int:
    """
    Configured count for role_id; keys are matched case-insensitively.
    A value that is not a whole number reads as 0 here; invalid_count_rule reports it.
    """
    value = role_config.get(role_id)
    if value is None:
        for key, v in role_config.items():
            if isinstance(key, str) and key.upper() == role_id:
                value = v
                break
    return value if is_whole_count(value) else 0


def special_role_total(role_config: Mapping[str, int], registry: RoleRegistry = REGISTRY) -> int:
    """Sum of all configured non-villager role counts."""
    return sum(role_count(role_config, r.id) for r in registry.get_special_roles())


def calculate_villager_count(
    role_config: Mapping[str, int],
    total_players: int,
    registry: RoleRegistry = REGISTRY,
) -> int:
    """Players left over after special roles; negative when over-allocated."""
    return total_players - special_role_total(role_config, registry)


def _role_label(role_id: str, registry: RoleRegistry) -> str:
    return registry.get_role(role_id).name if role_id in registry else str(role_id)


def invalid_count_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """ERROR for total_players or any configured count that is not a whole number."""
    results = []
    if not is_whole_count(total_players):
        results.append(
            ValidationResult(
                severity=Severity.ERROR,
                type="InvalidCountRule",
                message=f"Player count must be a whole number (got {total_players!r})",
                details={"totalPlayers": total_players},
                key="InvalidCountRule:totalPlayers",
            )
        )
    for role_id, count in role_config.items():
        if is_whole_count(count):
            continue
        results.append(
            ValidationResult(
                severity=Severity.ERROR,
                type="InvalidCountRule",
                message=f"{_role_label(role_id, registry)} count must be a whole number (got {count!r})",
                details={"roleId": role_id, "count": count},
                key=f"InvalidCountRule:{role_id}",
            )
        )
    return results or None


def negative_count_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """ERROR for every configured count below zero, villager and unknown keys included."""
    results = []
    for role_id, count in role_config.items():
        if not is_whole_count(count) or count >= 0:
            continue
        label = _role_label(role_id, registry)
        results.append(
            ValidationResult(
                severity=Severity.ERROR,
                type="NegativeCountRule",
                message=f"{label} count cannot be negative (currently: {count})",
                details={"roleId": str(role_id).upper(), "count": count},
                key=f"NegativeCountRule:{str(role_id).upper()}",
            )
        )
    return results or None


def total_role_count_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """ERROR when special roles outnumber players."""
    total_roles = special_role_total(role_config, registry)
    if total_roles <= total_players:
        return None
    excess = total_roles - total_players
    return ValidationResult(
        severity=Severity.ERROR,
        type="TotalRoleCountRule",
        message=(
            f"Total roles ({total_roles}) cannot exceed total players ({total_players}). "
            f"Reduce role counts by {excess}."
        ),
        details={"totalRoles": total_roles, "totalPlayers": total_players, "excess": excess},
    )


def individual_min_max_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """One ERROR per role whose count is outside its registry constraints."""
    results = []
    for role in registry.get_special_roles():
        count = role_count(role_config, role.id)
        c = role.constraints
        details = {"roleId": role.id, "count": count, "min": c.min, "max": c.max}
        if count < c.min:
            message = f"{role.name} count ({count}) is below minimum ({c.min})"
        elif c.max is not None and count > c.max:
            message = (
                f"{role.name} count ({count}) exceeds maximum ({c.max}). "
                f"Reduce {role.name} count by {count - c.max}."
            )
        else:
            continue
        results.append(
            ValidationResult(
                severity=Severity.ERROR,
                type="IndividualMinMaxRule",
                message=message,
                details=details,
                key=f"IndividualMinMaxRule:{role.id}",
            )
        )
    return results or None


def minimum_villagers_rule(
    role_config: Mapping[str, int],
    total_players: int,
    registry: RoleRegistry,
    min_villagers: Optional[int] = None,
) -> RuleOutcome:
    """ERROR when over-allocated; WARNING at zero villagers or below the threshold."""
    if min_villagers is None:
        min_villagers = SETTINGS.min_villagers
    villager_count = calculate_villager_count(role_config, total_players, registry)
    if villager_count < 0:
        return ValidationResult(
            severity=Severity.ERROR,
            type="MinimumVillagersRule",
            message=(
                f"Configuration allocates {abs(villager_count)} more roles than players. "
                "Reduce special role counts."
            ),
            details={"villagerCount": villager_count, "totalPlayers": total_players},
        )
    if villager_count == 0:
        return ValidationResult(
            severity=Severity.WARNING,
            type="MinimumVillagersRule",
            message=(
                "Configuration leaves 0 villagers. All players assigned special roles. "
                "Consider adding villagers for balanced gameplay."
            ),
            details={"villagerCount": 0, "totalPlayers": total_players},
            key=NO_VILLAGERS_KEY,
        )
    if villager_count < min_villagers:
        return ValidationResult(
            severity=Severity.WARNING,
            type="MinimumVillagersRule",
            message=(
                f"Configuration leaves only {villager_count} villager(s). "
                "Consider reducing special roles for better balance."
            ),
            details={
                "villagerCount": villager_count,
                "minVillagers": min_villagers,
                "totalPlayers": total_players,
            },
        )
    return None


def all_special_roles_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """WARNING when every player gets a special role."""
    if calculate_villager_count(role_config, total_players, registry) != 0:
        return None
    return ValidationResult(
        severity=Severity.WARNING,
        type="AllSpecialRolesRule",
        message=(
            "All players assigned special roles. No villagers in game. "
            "This configuration may affect gameplay balance."
        ),
        details={"villagerCount": 0, "totalPlayers": total_players},
        key=NO_VILLAGERS_KEY,
    )


def unknown_role_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """ERROR for each configured id the registry does not know."""
    results = []
    for role_id in role_config:
        if role_id in registry:
            continue
        results.append(
            ValidationResult(
                severity=Severity.ERROR,
                type="UnknownRoleRule",
                message=f'Unknown role "{role_id}"',
                details={"roleId": role_id},
                key=f"UnknownRoleRule:{role_id}",
            )
        )
    return results or None


def player_count_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """ERROR when the player count is outside the supported range."""
    low, high = SETTINGS.min_players, SETTINGS.max_players
    if total_players < low:
        message = f"Need at least {low} player(s) to play"
    elif total_players > high:
        message = f"Maximum {high} players supported"
    else:
        return None
    return ValidationResult(
        severity=Severity.ERROR,
        type="PlayerCountRule",
        message=message,
        details={"totalPlayers": total_players, "min": low, "max": high},
    )


def no_mafia_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """WARNING when no mafia-team role is configured."""
    mafia_roles = registry.get_roles_by_team(Team.MAFIA)
    if not mafia_roles or total_players <= 0:
        return None
    if sum(role_count(role_config, r.id) for r in mafia_roles) != 0:
        return None
    return ValidationResult(
        severity=Severity.WARNING,
        type="NoMafiaRule",
        message="No Mafia players (all Villagers). There is no elimination or deduction gameplay.",
        details={"mafiaCount": 0, "totalPlayers": total_players},
    )


def group_size_rule(
    role_config: Mapping[str, int], total_players: int, registry: RoleRegistry
) -> RuleOutcome:
    """INFO for unusually large or small groups."""
    if total_players > SETTINGS.large_group:
        message = (
            f"With {total_players} players, the card list may become crowded on mobile devices."
        )
        kind = "large"
    elif 0 < total_players < SETTINGS.small_group:
        message = (
            f"With only {total_players} players, the game may lack the usual social dynamics."
        )
        kind = "small"
    else:
        return None
    return ValidationResult(
        severity=Severity.INFO,
        type="GroupSizeRule",
        message=message,
        details={"totalPlayers": total_players, "group": kind},
    )


# Evaluated in order; append to extend
VALIDATION_RULES: list[ValidationRule] = [
    invalid_count_rule,
    negative_count_rule,
    total_role_count_rule,
    individual_min_max_rule,
    minimum_villagers_rule,
    all_special_roles_rule,
    unknown_role_rule,
    player_count_rule,
    no_mafia_rule,
    group_size_rule,
]


def _flatten(outcomes: Iterable[RuleOutcome]) -> list[ValidationResult]:
    results: list[ValidationResult] = []
    for outcome in outcomes:
        if outcome is None:
            continue
        if isinstance(outcome, ValidationResult):
            results.append(outcome)
        else:
            results.extend(outcome)
    return results


def _dedup(results: list[ValidationResult]) -> tuple[ValidationResult, ...]:
    """Keep the first result for each dedup key."""
    seen: set[str] = set()
    unique = []
    for r in results:
        if r.dedup_key in seen:
            continue
        seen.add(r.dedup_key)
        unique.append(r)
    return tuple(unique)


def validate_role_configuration(
    role_config: Mapping[str, int],
    total_players: int,
    rules: Optional[Iterable[ValidationRule]] = None,
    registry: Optional[RoleRegistry] = None,
) -> AggregatedValidationState:
    """
    Run every rule against a snapshot of role_config and aggregate by severity.
    Pure: the same inputs always give the same verdict.
    If total_players is not a whole number only invalid_count_rule runs.
    """
    registry = registry or REGISTRY
    snapshot = dict(role_config or {})
    rules = VALIDATION_RULES if rules is None else rules
    if not is_whole_count(total_players):
        rules = [invalid_count_rule]

    results = _flatten(rule(snapshot, total_players, registry) for rule in rules)
    errors = tuple(r for r in results if r.severity == Severity.ERROR)
    warnings = _dedup([r for r in results if r.severity == Severity.WARNING])
    infos = _dedup([r for r in results if r.severity == Severity.INFO])

    return AggregatedValidationState(
        is_valid=not errors,
        has_errors=bool(errors),
        has_warnings=bool(warnings),
        errors=errors,
        warnings=warnings,
        villager_count=(
            calculate_villager_count(snapshot, total_players, registry) if is_whole_count(total_players) else 0
        ),
        requires_confirmation=bool(warnings) and not errors,
        infos=infos,
    )
