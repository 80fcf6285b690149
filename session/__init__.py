"""Session layer: the active allocation and its public views."""

from session.models import (
    DialogView,
    PlayerCard,
    RevealView,
    SetupRequest,
    ValidationSummary,
    reveal_view,
    validation_to_public,
)
from session.store import RevealSession, end_session, get_session, start_session

__all__ = [
    "DialogView",
    "PlayerCard",
    "RevealView",
    "SetupRequest",
    "ValidationSummary",
    "reveal_view",
    "validation_to_public",
    "RevealSession",
    "end_session",
    "get_session",
    "start_session",
]
