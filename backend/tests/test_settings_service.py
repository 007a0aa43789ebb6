"""Tests for competition settings and registration gating."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from robo_rumble.errors import InvalidInputError, NotFoundError
from robo_rumble.services.settings_service import (
    DEFAULT_SETTINGS,
    SettingsService,
    is_registration_open,
)


@pytest.fixture
def repo():
    """In-memory stand-in for the settings table."""
    store = {}
    mock = MagicMock()
    mock.get_setting.side_effect = store.get
    mock.save_setting.side_effect = lambda key, value, updated_by=None: store.__setitem__(key, value)
    return mock


def test_defaults_when_nothing_stored(repo):
    service = SettingsService(repo)
    assert service.get("registration") == DEFAULT_SETTINGS["registration"]
    assert service.registration_open() is True
    assert service.auto_accept() is False
    assert service.max_teams() == 50


def test_update_merges_and_drops_unknown_fields(repo):
    service = SettingsService(repo)
    merged = service.update("registration", {"auto_accept": True, "bogus": 1}, updated_by="admin")
    assert merged["auto_accept"] is True
    assert merged["is_open"] is True
    assert "bogus" not in merged
    assert service.auto_accept() is True


def test_invalid_values_are_rejected_and_not_stored(repo):
    service = SettingsService(repo)
    with pytest.raises(InvalidInputError) as exc:
        service.update("competition", {"max_teams": "fifty"})
    assert exc.value.detail["errors"][0]["field"] == "max_teams"
    repo.save_setting.assert_not_called()
    assert service.max_teams() == 50


def test_boolean_strings_are_parsed(repo):
    service = SettingsService(repo)
    service.update("registration", {"auto_accept": "false", "is_open": "false"})
    assert service.auto_accept() is False
    assert service.registration_open() is False


def test_blank_dates_clear_the_window(repo):
    service = SettingsService(repo)
    merged = service.update("competition", {"registration_start": "", "max_teams": "12"})
    assert merged["registration_start"] is None
    assert service.max_teams() == 12


def test_unknown_key(repo):
    with pytest.raises(NotFoundError):
        SettingsService(repo).get("workshops")


@pytest.mark.parametrize("today,expected", [
    (date(2025, 12, 31), False),
    (date(2026, 1, 1), True),
    (date(2026, 2, 1), True),
    (date(2026, 2, 2), False),
])
def test_registration_window_is_inclusive(today, expected):
    competition = {"registration_start": "2026-01-01", "registration_end": "2026-02-01"}
    assert is_registration_open(competition, {"is_open": True}, today) is expected


def test_switch_off_closes_registration():
    assert is_registration_open({}, {"is_open": False}, date(2026, 1, 1)) is False


def test_malformed_dates_are_ignored():
    competition = {"registration_start": "soon", "registration_end": None}
    assert is_registration_open(competition, {"is_open": True}, date(2026, 1, 1)) is True
