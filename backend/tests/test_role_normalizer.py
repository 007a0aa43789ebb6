"""Tests for team role normalization."""

import pytest

from robo_rumble.utils.role_normalizer import (
    CANONICAL_ROLES,
    is_valid_role,
    normalize_role,
    normalize_role_strict,
    role_from_message,
    sort_by_role,
)


@pytest.mark.parametrize("raw,expected", [
    ("driver", "driver"),
    ("Driver", "driver"),
    ("  PROGRAMMER ", "programmer"),
    ("electronics", "electronics"),
    ("mechanics_designer", "mechanics_designer"),
    ("Mechanics / Designer", "mechanics_designer"),
    ("mechanic", "mechanics_designer"),
    ("designer", "mechanics_designer"),
])
def test_normalize_known_spellings(raw, expected):
    assert normalize_role(raw) == expected


@pytest.mark.parametrize("raw", ["member", "captain", "", None])
def test_normalize_unknown_returns_none(raw):
    assert normalize_role(raw) is None
    assert is_valid_role(raw) is False


def test_strict_raises_on_unknown():
    assert normalize_role_strict("Driver") == "driver"
    with pytest.raises(ValueError, match="Unknown role"):
        normalize_role_strict("member")


def test_canonical_roles():
    assert CANONICAL_ROLES == {"driver", "programmer", "electronics", "mechanics_designer"}


def test_role_from_message():
    assert role_from_message("Role: programmer") == "programmer"
    assert role_from_message("Hi! Role:driver please") == "driver"
    assert role_from_message("I want to join") is None
    assert role_from_message(None) is None


def test_sort_by_role_puts_unknown_last():
    members = [
        {"user_id": "a", "team_role": "member"},
        {"user_id": "b", "team_role": "mechanics_designer"},
        {"user_id": "c", "team_role": "driver"},
        {"user_id": "d", "team_role": "electronics"},
    ]
    assert [m["user_id"] for m in sort_by_role(members)] == ["c", "d", "b", "a"]
