"""Assignment engine: expand a role configuration and deal it out with Fisher-Yates."""

import logging
import random
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Mapping, MutableSequence, Optional, Sequence, TypeVar

from allocation.errors import AssignmentIntegrityError, InputError, InvalidConfigurationError
from allocation.registry import MAFIA, REGISTRY, RoleRegistry, Team
from allocation.state import Assignment, Player
from allocation.validation import role_count, validate_role_configuration

logger = logging.getLogger(__name__)

T = TypeVar("T")


def secure_rng() -> random.Random:
    """
    Return a Random backed by OS entropy (random.SystemRandom).
    Falls back to a plain random.Random() (Mersenne Twister) when the platform
    has no entropy source.
    """
    rng = random.SystemRandom()
    try:
        rng.random()
    except NotImplementedError:
        logger.warning("OS randomness unavailable; falling back to random.Random()")
        return random.Random()
    return rng


def fisher_yates_shuffle(items: MutableSequence[T], rng: random.Random) -> MutableSequence[T]:
    """Shuffle items in place: walk from the last index down, swapping with a uniform j in [0, i]."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]
    return items


def build_role_list(
    role_config: Mapping[str, int],
    total_players: int,
    registry: RoleRegistry = REGISTRY,
) -> list[str]:
    """One entry per unit of each special role (priority order), villagers in the remaining slots."""
    roles: list[str] = []
    for role in registry.get_special_roles():
        roles.extend([role.id] * role_count(role_config, role.id))
    villager = registry.villager_role()
    roles.extend([villager.id] * (total_players - len(roles)))
    return roles


def _check_names(player_names: Sequence[str], total_players: int) -> list[str]:
    if isinstance(player_names, str):
        raise InputError("player_names must be a list of names, not a string")
    names = list(player_names)
    if not names:
        raise InputError("Player names cannot be empty")
    if len(names) != total_players:
        raise InputError(
            f"Expected {total_players} player names, got {len(names)}"
        )
    for i, name in enumerate(names):
        if not isinstance(name, str) or not name.strip():
            raise InputError(f"Player name at position {i} must be a non-empty string")
    return [n.strip() for n in names]


def assign_roles(
    role_configuration: Mapping[str, int],
    player_names: Sequence[str],
    total_players: Optional[int] = None,
    rng: Optional[random.Random] = None,
    registry: Optional[RoleRegistry] = None,
) -> Assignment:
    """
    Deal roles to players. total_players defaults to the number of names.
    Re-validates the configuration even if the caller already did.
    Raises InputError on bad names and InvalidConfigurationError on any ERROR.
    """
    registry = registry or REGISTRY
    if total_players is None:
        total_players = len(player_names)
    names = _check_names(player_names, total_players)

    snapshot = dict(role_configuration or {})
    validation = validate_role_configuration(snapshot, total_players, registry=registry)
    if not validation.is_valid:
        raise InvalidConfigurationError(validation)

    roles = build_role_list(snapshot, total_players, registry)
    fisher_yates_shuffle(roles, rng or secure_rng())

    players = tuple(
        Player(id=f"player_{i}", name=name, role=role, index=i, revealed=False)
        for i, (name, role) in enumerate(zip(names, roles))
    )
    role_counts = {r.id: role_count(snapshot, r.id) for r in registry.get_special_roles()}
    role_counts[registry.villager_role().id] = validation.villager_count
    mafia_count = sum(role_counts[r.id] for r in registry.get_roles_by_team(Team.MAFIA))

    assignment = Assignment(
        id=str(uuid.uuid4()),
        players=players,
        created_at=datetime.now(timezone.utc),
        mafia_count=mafia_count,
        villager_count=validation.villager_count,
        role_counts=role_counts,
    )
    verify_assignment(assignment, registry)
    logger.info(
        "Assignment %s created: %d players, %d mafia, %d villagers",
        assignment.id, assignment.total_players, mafia_count, validation.villager_count,
    )
    return assignment


def verify_assignment(assignment: Assignment, registry: Optional[RoleRegistry] = None) -> None:
    """Raise AssignmentIntegrityError if players disagree with the assignment's metadata."""
    registry = registry or REGISTRY
    players = assignment.players
    if [p.index for p in players] != list(range(len(players))):
        raise AssignmentIntegrityError("Player indices are not contiguous from 0")
    if any(p.revealed for p in players):
        raise AssignmentIntegrityError("New assignment has revealed players")
    unknown = [p.role for p in players if p.role not in registry]
    if unknown:
        raise AssignmentIntegrityError(f"Unknown roles dealt: {sorted(set(unknown))}")
    expected = {k: v for k, v in assignment.role_counts.items() if v}
    if dict(role_histogram(assignment)) != expected:
        raise AssignmentIntegrityError("Role count mismatch")
    villager_id = registry.villager_role().id
    if len(assignment.players_by_role(villager_id)) != assignment.villager_count:
        raise AssignmentIntegrityError("Metadata mismatch: villager count")


def role_histogram(assignment: Assignment) -> Counter:
    """Players per role id."""
    return assignment.histogram()


def measure_distribution(
    role_configuration: Mapping[str, int],
    player_names: Sequence[str],
    iterations: int = 1000,
    role_id: str = MAFIA,
    rng: Optional[random.Random] = None,
) -> dict:
    """
    Deal `iterations` times and report, per seat index, how often role_id landed there
    compared with the expected rate count / total_players.
    """
    if iterations <= 0:
        raise InputError("iterations must be positive")
    role_id = role_id.upper()
    rng = rng or secure_rng()
    total = len(player_names)
    hits = [0] * total
    for _ in range(iterations):
        assignment = assign_roles(role_configuration, player_names, rng=rng)
        for p in assignment.players:
            if p.role == role_id:
                hits[p.index] += 1
    expected = role_count(dict(role_configuration), role_id) / total if total else 0.0
    rates = [h / iterations for h in hits]
    return {
        "iterations": iterations,
        "role_id": role_id,
        "expected_rate": expected,
        "rates": rates,
        "max_deviation": max(abs(r - expected) for r in rates) if rates else 0.0,
    }
