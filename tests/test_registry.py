"""Unit tests for the role registry."""

import dataclasses

import pytest

from allocation.errors import NotFoundError
from allocation.registry import (
    BUILTIN_ROLES,
    REGISTRY,
    RoleRegistry,
    Team,
    default_role_configuration,
    get_role,
    get_roles,
    get_roles_by_team,
    get_special_roles,
)


def test_get_role_case_insensitive():
    assert get_role("MAFIA").name == "Mafia"
    assert get_role("mafia") is get_role("Mafia")


def test_get_role_unknown_raises():
    with pytest.raises(NotFoundError):
        get_role("WEREWOLF")
    with pytest.raises(NotFoundError):
        get_role("")
    with pytest.raises(KeyError):
        get_role(None)


def test_roles_sorted_by_priority():
    assert [r.id for r in get_roles()] == ["MAFIA", "POLICE", "DOCTOR", "VILLAGER"]


def test_special_roles_exclude_villager():
    specials = get_special_roles()
    assert [r.id for r in specials] == ["MAFIA", "POLICE", "DOCTOR"]
    assert all(r.team != Team.VILLAGER for r in specials)


def test_roles_by_team():
    assert [r.id for r in get_roles_by_team("special")] == ["POLICE", "DOCTOR"]
    assert [r.id for r in get_roles_by_team(Team.MAFIA)] == ["MAFIA"]
    assert get_roles_by_team("aliens") == []


def test_constraints():
    mafia = get_role("MAFIA").constraints
    assert mafia.max is None
    assert mafia.allows(40)
    police = get_role("POLICE").constraints
    assert police.allows(2)
    assert not police.allows(3)
    assert not police.allows(-1)
    assert get_role("VILLAGER").constraints.default is None


def test_definitions_are_immutable():
    role = get_role("DOCTOR")
    with pytest.raises(dataclasses.FrozenInstanceError):
        role.name = "Medic"
    with pytest.raises(dataclasses.FrozenInstanceError):
        role.constraints.max = 10
    with pytest.raises(TypeError):
        REGISTRY._roles["SPY"] = role


def test_default_role_configuration():
    assert default_role_configuration() == {"MAFIA": 1, "POLICE": 0, "DOCTOR": 0}


def test_registry_rejects_duplicates_and_missing_villager():
    with pytest.raises(ValueError):
        RoleRegistry(BUILTIN_ROLES + (dataclasses.replace(get_role("MAFIA"), id="mafia"),))
    with pytest.raises(ValueError):
        RoleRegistry([dataclasses.replace(get_role("POLICE"), id="SPY")])


def test_new_role_is_data_only(spy_registry):
    registry = spy_registry
    assert "spy" in registry
    assert [r.id for r in registry.get_special_roles()] == ["MAFIA", "POLICE", "DOCTOR", "SPY"]
    assert registry.default_role_configuration()["SPY"] == 0
    assert len(registry) == 5
