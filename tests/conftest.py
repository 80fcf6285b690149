"""Pytest configuration and fixtures."""

import random

import pytest

from allocation.registry import BUILTIN_ROLES, ColorScheme, RoleConstraints, RoleDefinition, RoleRegistry, Team


def make_role(role_id: str, priority: int, team: Team = Team.SPECIAL, max_count=1) -> RoleDefinition:
    """A throwaway role definition for extensibility tests."""
    return RoleDefinition(
        id=role_id,
        name=role_id.title(),
        team=team,
        color_scheme=ColorScheme("purple-600", "purple-50", "purple-500", "purple-800", "purple-700"),
        constraints=RoleConstraints(min=0, max=max_count, default=0),
        description="test role",
        priority=priority,
    )


@pytest.fixture
def builtin_registry():
    return RoleRegistry(BUILTIN_ROLES)


@pytest.fixture
def spy_registry():
    """Built-in roles plus a SPY special role (max 1)."""
    return RoleRegistry(BUILTIN_ROLES + (make_role("SPY", 5),))


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def eight_names():
    return ["Alice", "Bob", "Carol", "Dave", "Eve", "Frank", "Grace", "Henry"]
