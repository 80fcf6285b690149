"""Assignment and reveal state types."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Player:
    """A player and their hidden role. index is the reveal order."""

    id: str
    name: str
    role: str
    index: int
    revealed: bool = False


@dataclass(frozen=True)
class Assignment:
    """One finalized, shuffled player-to-role mapping."""

    id: str
    players: tuple[Player, ...]
    created_at: datetime
    mafia_count: int
    villager_count: int
    role_counts: dict[str, int] = field(default_factory=dict)  # role id -> count, villagers included

    @property
    def total_players(self) -> int:
        return len(self.players)

    def get_player(self, index: int) -> Optional[Player]:
        """Return player at index or None."""
        if 0 <= index < len(self.players):
            return self.players[index]
        return None

    def players_by_role(self, role_id: str) -> list[Player]:
        return [p for p in self.players if p.role == role_id]

    def revealed_count(self) -> int:
        return sum(1 for p in self.players if p.revealed)

    def all_revealed(self) -> bool:
        return all(p.revealed for p in self.players)

    def histogram(self) -> Counter:
        """Count of players per role id, as actually dealt."""
        return Counter(p.role for p in self.players)


class RevealPhase(str, Enum):
    """Where the reveal dialog currently is."""

    WAITING = "waiting"
    OPEN_UNREVEALED = "open_unrevealed"
    OPEN_REVEALED = "open_revealed"


@dataclass(frozen=True)
class RevealState:
    """Reveal progress for the active assignment."""

    current_player_index: int = 0
    open_dialog_player_index: Optional[int] = None
    is_processing: bool = False

    @property
    def dialog_open(self) -> bool:
        return self.open_dialog_player_index is not None


INITIAL_REVEAL_STATE = RevealState()
