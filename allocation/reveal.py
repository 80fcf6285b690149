"""Reveal state machine: one dialog at a time, players in index order, double-tap safe."""

import dataclasses
import logging
from typing import Callable, Optional

from allocation.errors import (
    AlreadyOpen,
    AlreadyRevealed,
    NoAssignment,
    NoDialogOpen,
    OutOfOrderReveal,
    REJECTIONS,
    RevealBusy,
    RevealNotConfirmed,
)
from allocation.state import INITIAL_REVEAL_STATE, Assignment, Player, RevealPhase, RevealState

logger = logging.getLogger(__name__)

Listener = Callable[["RevealMachine"], None]


class RevealMachine:
    """
    Drives the private reveal for one assignment.

    WAITING -> open_reveal -> OPEN_UNREVEALED -> confirm_reveal -> OPEN_REVEALED
    -> close_dialog -> WAITING (next player).

    Every mutating call returns True if it changed state and False if it was
    ignored. With strict=True an ignored call raises the matching
    RevealRejected subclass instead. Listeners run while the in-flight flag
    is set, so anything they trigger on this machine is rejected as busy.
    """

    def __init__(self, assignment: Optional[Assignment] = None, strict: bool = False):
        self._assignment = assignment
        self._state = INITIAL_REVEAL_STATE
        self._listeners: list[Listener] = []
        self.strict = strict
        self.last_rejection: Optional[str] = None

    # --- queries ---

    @property
    def assignment(self) -> Optional[Assignment]:
        return self._assignment

    @property
    def state(self) -> RevealState:
        return self._state

    @property
    def phase(self) -> RevealPhase:
        player = self.open_player
        if player is None:
            return RevealPhase.WAITING
        return RevealPhase.OPEN_REVEALED if player.revealed else RevealPhase.OPEN_UNREVEALED

    @property
    def current_player(self) -> Optional[Player]:
        """Player whose turn it is, or None when everyone has revealed."""
        if self._assignment is None:
            return None
        return self._assignment.get_player(self._state.current_player_index)

    @property
    def open_player(self) -> Optional[Player]:
        if self._assignment is None or self._state.open_dialog_player_index is None:
            return None
        return self._assignment.get_player(self._state.open_dialog_player_index)

    @property
    def is_complete(self) -> bool:
        return self._assignment is not None and self._assignment.all_revealed()

    def progress(self) -> tuple[int, int]:
        """(revealed, total)"""
        if self._assignment is None:
            return 0, 0
        return self._assignment.revealed_count(), self._assignment.total_players

    def can_open(self, player_index: int) -> tuple[bool, Optional[str]]:
        """Whether open_reveal(player_index) would succeed, and why not."""
        reason = self._open_blocker(player_index)
        return reason is None, reason

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every successful transition. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- transitions ---

    def load(self, assignment: Assignment) -> bool:
        """Install a fresh assignment; reveal progress starts over."""

        def apply() -> None:
            self._assignment = assignment
            self._state = dataclasses.replace(INITIAL_REVEAL_STATE, is_processing=True)

        return self._run("load", self._busy_blocker(), apply)

    def open_reveal(self, player_index: int) -> bool:
        """Open the dialog for player_index if it is that player's turn."""

        def apply() -> None:
            self._state = dataclasses.replace(self._state, open_dialog_player_index=player_index)

        return self._run("open_reveal", self._open_blocker(player_index), apply)

    def confirm_reveal(self) -> bool:
        """Show the role in the open dialog and mark that player revealed."""

        def apply() -> None:
            index = self._state.open_dialog_player_index
            players = list(self._assignment.players)
            players[index] = dataclasses.replace(players[index], revealed=True)
            self._assignment = dataclasses.replace(self._assignment, players=tuple(players))
            logger.debug("Player %d revealed", index)

        return self._run("confirm_reveal", self._confirm_blocker(), apply)

    def close_dialog(self) -> bool:
        """Close a revealed dialog and move on to the next player."""

        def apply() -> None:
            self._state = dataclasses.replace(
                self._state,
                current_player_index=self._state.current_player_index + 1,
                open_dialog_player_index=None,
            )
            if self._assignment.all_revealed():
                logger.info("All %d players have seen their role", self._assignment.total_players)

        return self._run("close_dialog", self._close_blocker(), apply)

    def reset(self) -> bool:
        """Drop the assignment and all reveal progress."""

        def apply() -> None:
            if self._assignment is not None:
                logger.info("Reveal for assignment %s reset", self._assignment.id)
            self._assignment = None
            self._state = dataclasses.replace(INITIAL_REVEAL_STATE, is_processing=True)

        return self._run("reset", self._busy_blocker(), apply)

    # --- guards ---

    def _busy_blocker(self) -> Optional[str]:
        return RevealBusy.reason if self._state.is_processing else None

    def _open_blocker(self, player_index: int) -> Optional[str]:
        if self._state.is_processing:
            return RevealBusy.reason
        if self._assignment is None:
            return NoAssignment.reason
        if self._state.dialog_open:
            return AlreadyOpen.reason
        player = self._assignment.get_player(player_index)
        if player is not None and player.revealed:
            return AlreadyRevealed.reason
        if player is None or player_index != self._state.current_player_index:
            return OutOfOrderReveal.reason
        return None

    def _confirm_blocker(self) -> Optional[str]:
        if self._state.is_processing:
            return RevealBusy.reason
        if self._assignment is None:
            return NoAssignment.reason
        phase = self.phase
        if phase == RevealPhase.WAITING:
            return NoDialogOpen.reason
        if phase == RevealPhase.OPEN_REVEALED:
            return AlreadyRevealed.reason
        return None

    def _close_blocker(self) -> Optional[str]:
        if self._state.is_processing:
            return RevealBusy.reason
        if self._assignment is None:
            return NoAssignment.reason
        phase = self.phase
        if phase == RevealPhase.WAITING:
            return NoDialogOpen.reason
        if phase == RevealPhase.OPEN_UNREVEALED:
            return RevealNotConfirmed.reason
        return None

    def _run(self, operation: str, blocker: Optional[str], apply: Callable[[], None]) -> bool:
        if blocker is not None:
            return self._reject(operation, blocker)
        self._state = dataclasses.replace(self._state, is_processing=True)
        try:
            apply()
            for listener in list(self._listeners):
                listener(self)
        finally:
            self._state = dataclasses.replace(self._state, is_processing=False)
        self.last_rejection = None
        return True

    def _reject(self, operation: str, reason: str) -> bool:
        self.last_rejection = reason
        logger.debug(
            "Ignored %s (%s) at index %d",
            operation, reason, self._state.current_player_index,
        )
        if self.strict:
            raise REJECTIONS[reason](f"{operation} rejected: {reason}")
        return False
