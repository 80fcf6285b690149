"""Runtime settings for role allocation, read from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Env var names
ENV_MIN_VILLAGERS = "ROLE_REVEAL_MIN_VILLAGERS"
ENV_MIN_PLAYERS = "ROLE_REVEAL_MIN_PLAYERS"
ENV_MAX_PLAYERS = "ROLE_REVEAL_MAX_PLAYERS"
ENV_LARGE_GROUP = "ROLE_REVEAL_LARGE_GROUP"
ENV_SMALL_GROUP = "ROLE_REVEAL_SMALL_GROUP"

DEFAULT_MIN_VILLAGERS = 1
DEFAULT_MIN_PLAYERS = 1
DEFAULT_MAX_PLAYERS = 50
DEFAULT_LARGE_GROUP = 30
DEFAULT_SMALL_GROUP = 3


@dataclass(frozen=True)
class Settings:
    """Thresholds used by the validation rules."""

    min_villagers: int = DEFAULT_MIN_VILLAGERS
    min_players: int = DEFAULT_MIN_PLAYERS
    max_players: int = DEFAULT_MAX_PLAYERS
    large_group: int = DEFAULT_LARGE_GROUP
    small_group: int = DEFAULT_SMALL_GROUP


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: must be non-negative, using %d", name, raw, default)
        return default
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from env (defaults to os.environ).
    Missing or malformed values fall back to the defaults.
    """
    env = os.environ if env is None else env
    min_players = _int_from_env(env, ENV_MIN_PLAYERS, DEFAULT_MIN_PLAYERS)
    max_players = _int_from_env(env, ENV_MAX_PLAYERS, DEFAULT_MAX_PLAYERS)
    if max_players < min_players:
        logger.warning(
            "%s (%d) is below %s (%d); using defaults",
            ENV_MAX_PLAYERS, max_players, ENV_MIN_PLAYERS, min_players,
        )
        min_players, max_players = DEFAULT_MIN_PLAYERS, DEFAULT_MAX_PLAYERS
    return Settings(
        min_villagers=_int_from_env(env, ENV_MIN_VILLAGERS, DEFAULT_MIN_VILLAGERS),
        min_players=min_players,
        max_players=max_players,
        large_group=_int_from_env(env, ENV_LARGE_GROUP, DEFAULT_LARGE_GROUP),
        small_group=_int_from_env(env, ENV_SMALL_GROUP, DEFAULT_SMALL_GROUP),
    )


# Loaded once; validation reads this so results stay deterministic per process
SETTINGS = load_settings()
