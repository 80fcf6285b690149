"""Session store and view model tests."""

import random

import pytest
from pydantic import ValidationError

from allocation.errors import ConfirmationRequiredError, InputError, InvalidConfigurationError
from allocation.state import RevealPhase
from session.models import MAX_PLAYER_NAME_LENGTH, SetupRequest
from session.store import RevealSession, end_session, get_session, start_session


def _make_session(seed: int = 3) -> RevealSession:
    return RevealSession(rng=random.Random(seed))


def _reveal(session: RevealSession, index: int) -> None:
    assert session.open_reveal(index)
    assert session.confirm_reveal()
    assert session.close_dialog()


def test_allocate_standard(eight_names):
    s = _make_session()
    a = s.allocate({"MAFIA": 2}, eight_names)
    assert s.assignment is a
    assert a.total_players == 8
    assert a.mafia_count == 2
    assert a.villager_count == 6
    assert s.player_names == eight_names
    assert s.role_config == {"MAFIA": 2}
    assert s.machine.phase == RevealPhase.WAITING


def test_allocate_refused_on_errors():
    s = _make_session()
    with pytest.raises(InvalidConfigurationError) as exc:
        s.allocate({"MAFIA": 5, "POLICE": 2}, ["A", "B", "C", "D"])
    assert "TotalRoleCountRule" in exc.value.validation.error_types()
    assert s.assignment is None
    assert s.validation is not None and not s.validation.is_valid


def test_allocate_needs_confirmation_for_warnings():
    s = _make_session()
    names = ["A", "B", "C", "D", "E"]
    with pytest.raises(ConfirmationRequiredError):
        s.allocate({"MAFIA": 0}, names)
    assert s.assignment is None

    a = s.allocate({"MAFIA": 0}, names, confirmed=True)
    assert all(p.role == "VILLAGER" for p in a.players)


def test_all_mafia_after_confirmation():
    s = _make_session()
    a = s.allocate({"MAFIA": 5}, ["A", "B", "C", "D", "E"], confirmed=True)
    assert all(p.role == "MAFIA" for p in a.players)
    assert a.villager_count == 0


def test_allocate_rejects_empty_names():
    with pytest.raises(InputError):
        _make_session().allocate({"MAFIA": 1}, [])


def test_reallocate_gives_new_assignment(eight_names):
    s = _make_session()
    first = s.allocate({"MAFIA": 2, "DOCTOR": 1}, eight_names)
    _reveal(s, 0)
    second = s.reallocate()
    assert second.id != first.id
    assert [p.name for p in second.players] == eight_names
    assert second.histogram() == first.histogram()
    assert second.revealed_count() == 0
    assert s.machine.state.current_player_index == 0


def test_reallocate_without_history():
    with pytest.raises(InputError):
        _make_session().reallocate()


def test_reset_mid_reveal(eight_names):
    s = _make_session()
    s.allocate({"MAFIA": 2}, eight_names)
    for i in range(3):
        _reveal(s, i)
    assert s.reset()
    assert s.assignment is None
    assert s.machine.state.current_player_index == 0
    assert s.machine.state.open_dialog_player_index is None
    # Setup inputs survive so the form can be re-filled
    assert s.player_names == eight_names
    assert s.role_config == {"MAFIA": 2}

    again = s.allocate(s.role_config, s.player_names)
    assert not any(p.revealed for p in again.players)


def test_validation_summary():
    s = _make_session()
    assert s.validation_summary() is None
    s.validate({"MAFIA": 5}, 5)
    summary = s.validation_summary()
    assert summary.is_valid
    assert summary.requires_confirmation
    assert summary.villager_count == 0
    assert [w.type for w in summary.warnings] == ["MinimumVillagersRule"]
    assert summary.warnings[0].severity == "WARNING"


def test_view_hides_roles_until_confirmed(eight_names):
    s = _make_session()
    a = s.allocate({"MAFIA": 2}, eight_names)

    view = s.view()
    assert view.assignment_id == a.id
    assert view.phase == "waiting"
    assert view.dialog is None
    assert [c.state for c in view.cards[:2]] == ["current", "upcoming"]
    assert "role" not in view.cards[0].model_dump()

    s.open_reveal(0)
    dialog = s.view().dialog
    assert dialog.player_name == "Alice"
    assert dialog.phase == "open_unrevealed"
    assert dialog.role_id is None and dialog.role_name is None

    s.confirm_reveal()
    dialog = s.view().dialog
    assert dialog.role_id == a.players[0].role
    assert dialog.role_color is not None

    s.close_dialog()
    view = s.view()
    assert view.dialog is None
    assert view.revealed_count == 1
    assert [c.state for c in view.cards[:2]] == ["revealed", "current"]


def test_view_without_assignment():
    view = _make_session().view()
    assert view.assignment_id is None
    assert view.cards == []
    assert view.total_players == 0
    assert not view.complete


def test_setup_request_cleans_input():
    req = SetupRequest(player_names=["  Alice ", "Bob", "Carol"], role_counts={"mafia": 1})
    assert req.player_names == ["Alice", "Bob", "Carol"]
    assert req.role_counts == {"MAFIA": 1}
    assert req.player_count == 3
    assert not req.confirmed


def test_setup_request_defaults_to_registry_configuration():
    req = SetupRequest(player_names=["A", "B", "C"])
    assert req.role_counts == {"MAFIA": 1, "POLICE": 0, "DOCTOR": 0}


def test_setup_request_validation():
    with pytest.raises(ValidationError):
        SetupRequest(player_names=[])
    with pytest.raises(ValidationError):
        SetupRequest(player_names=["A", "  "])
    with pytest.raises(ValidationError):
        SetupRequest(player_names=["x" * (MAX_PLAYER_NAME_LENGTH + 1)])
    with pytest.raises(ValidationError):
        SetupRequest(player_names=["A", "B"], total_players=3)
    with pytest.raises(ValidationError):
        SetupRequest(player_names=[f"P{i}" for i in range(51)])


def test_allocate_request(eight_names):
    s = _make_session()
    req = SetupRequest(player_names=eight_names, role_counts={"MAFIA": 2, "POLICE": 1})
    a = s.allocate_request(req)
    assert a.role_counts["POLICE"] == 1
    assert a.role_counts["VILLAGER"] == 5


def test_active_session_lifecycle(eight_names):
    s = start_session(rng=random.Random(1))
    assert get_session() is s
    s.allocate({"MAFIA": 2}, eight_names)
    end_session()
    assert get_session() is None
    assert s.assignment is None
    end_session()
