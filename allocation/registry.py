"""Role registry: the single source of truth for role definitions."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from allocation.errors import NotFoundError


class Team(str, Enum):
    """Team a role belongs to."""

    MAFIA = "mafia"
    SPECIAL = "special"
    VILLAGER = "villager"


# Role ids of the built-in roles
MAFIA = "MAFIA"
POLICE = "POLICE"
DOCTOR = "DOCTOR"
VILLAGER = "VILLAGER"

# Roles without an explicit priority sort after everything else
DEFAULT_PRIORITY = 999


@dataclass(frozen=True)
class ColorScheme:
    """Display colors for a role (Tailwind color codes)."""

    primary: str
    secondary: str
    border: str
    text: str
    accent: str


@dataclass(frozen=True)
class RoleConstraints:
    """Allowed count range for a role. max=None means unbounded; default=None means computed."""

    min: int = 0
    max: Optional[int] = None
    default: Optional[int] = 0

    def allows(self, count: int) -> bool:
        if count < self.min:
            return False
        return self.max is None or count <= self.max


@dataclass(frozen=True)
class RoleDefinition:
    """Immutable description of one role."""

    id: str
    name: str
    team: Team
    color_scheme: ColorScheme
    constraints: RoleConstraints
    description: str
    priority: int = DEFAULT_PRIORITY
    icon: Optional[str] = None

    @property
    def is_villager(self) -> bool:
        return self.team == Team.VILLAGER


class RoleRegistry:
    """Read-only catalog of roles keyed by upper-case id."""

    def __init__(self, roles: Iterable[RoleDefinition]):
        table: dict[str, RoleDefinition] = {}
        for role in roles:
            key = role.id.upper()
            if key in table:
                raise ValueError(f"Duplicate role id: {role.id}")
            table[key] = role
        villagers = [r for r in table.values() if r.is_villager]
        if len(villagers) != 1:
            raise ValueError("Registry needs exactly one villager-team role")
        self._roles: Mapping[str, RoleDefinition] = MappingProxyType(table)
        self._villager = villagers[0]

    def __contains__(self, role_id: object) -> bool:
        return isinstance(role_id, str) and role_id.upper() in self._roles

    def __iter__(self) -> Iterator[RoleDefinition]:
        return iter(self.get_roles())

    def __len__(self) -> int:
        return len(self._roles)

    def get_role(self, role_id: str) -> RoleDefinition:
        """Return the role for role_id (case-insensitive) or raise NotFoundError."""
        if not isinstance(role_id, str) or not role_id:
            raise NotFoundError(role_id)
        role = self._roles.get(role_id.upper())
        if role is None:
            raise NotFoundError(role_id)
        return role

    def get_roles(self) -> list[RoleDefinition]:
        """Return all roles sorted by priority (ascending)."""
        return sorted(self._roles.values(), key=lambda r: r.priority)

    def get_roles_by_team(self, team: Team | str) -> list[RoleDefinition]:
        """Return roles of one team, sorted by priority; unknown team gives []."""
        try:
            team = Team(team.lower() if isinstance(team, str) else team)
        except ValueError:
            return []
        return [r for r in self.get_roles() if r.team == team]

    def get_special_roles(self) -> list[RoleDefinition]:
        """Return every non-villager role (mafia included), sorted by priority."""
        return [r for r in self.get_roles() if not r.is_villager]

    def get_role_ids(self) -> list[str]:
        return [r.id for r in self.get_roles()]

    def villager_role(self) -> RoleDefinition:
        """Return the role that fills all unassigned slots."""
        return self._villager

    def default_role_configuration(self) -> dict[str, int]:
        """Starting counts for the setup screen: special role id -> default count."""
        return {r.id: r.constraints.default or 0 for r in self.get_special_roles()}


BUILTIN_ROLES = (
    RoleDefinition(
        id=MAFIA,
        name="Mafia",
        team=Team.MAFIA,
        color_scheme=ColorScheme(
            primary="red-600",
            secondary="red-50",
            border="red-500",
            text="red-800",
            accent="red-700",
        ),
        constraints=RoleConstraints(min=0, max=None, default=1),
        description="Eliminate villagers to win",
        priority=1,
    ),
    RoleDefinition(
        id=POLICE,
        name="Police",
        team=Team.SPECIAL,
        color_scheme=ColorScheme(
            primary="blue-600",
            secondary="blue-50",
            border="blue-500",
            text="blue-800",
            accent="blue-700",
        ),
        constraints=RoleConstraints(min=0, max=2, default=0),
        description="Investigate one player each night",
        priority=2,
    ),
    RoleDefinition(
        id=DOCTOR,
        name="Doctor",
        team=Team.SPECIAL,
        color_scheme=ColorScheme(
            primary="green-600",
            secondary="green-50",
            border="green-500",
            text="green-800",
            accent="green-700",
        ),
        constraints=RoleConstraints(min=0, max=2, default=0),
        description="Protect one player each night",
        priority=3,
    ),
    RoleDefinition(
        id=VILLAGER,
        name="Villager",
        team=Team.VILLAGER,
        color_scheme=ColorScheme(
            primary="gray-500",
            secondary="gray-50",
            border="gray-300",
            text="gray-700",
            accent="gray-600",
        ),
        constraints=RoleConstraints(min=0, max=None, default=None),
        description="Work with others to identify Mafia",
        priority=4,
    ),
)

# Process-wide registry, built once at import
REGISTRY = RoleRegistry(BUILTIN_ROLES)


def get_role(role_id: str) -> RoleDefinition:
    """Look up a built-in role by id."""
    return REGISTRY.get_role(role_id)


def get_roles() -> list[RoleDefinition]:
    return REGISTRY.get_roles()


def get_roles_by_team(team: Team | str) -> list[RoleDefinition]:
    return REGISTRY.get_roles_by_team(team)


def get_special_roles() -> list[RoleDefinition]:
    return REGISTRY.get_special_roles()


def get_role_ids() -> list[str]:
    return REGISTRY.get_role_ids()


def default_role_configuration() -> dict[str, int]:
    return REGISTRY.default_role_configuration()
