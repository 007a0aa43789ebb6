"""Tests for team status mapping and feature gates."""

import pytest

from robo_rumble.models.status import (
    AcceptanceStatus,
    TeamStatus,
    can_access_preparation,
    can_access_workshops,
    can_participate_in_leaderboard,
    map_status_to_ui,
    parse_team_status,
)


@pytest.mark.parametrize("stored,expected", [
    ("pending", AcceptanceStatus.UNDER_REVIEW),
    ("accepted", AcceptanceStatus.FINAL_ACCEPTED),
    ("rejected", AcceptanceStatus.REJECTED),
    (TeamStatus.ACCEPTED, AcceptanceStatus.FINAL_ACCEPTED),
    (None, AcceptanceStatus.UNDER_REVIEW),
    ("archived", AcceptanceStatus.UNDER_REVIEW),
])
def test_map_status_to_ui(stored, expected):
    assert map_status_to_ui(stored) == expected


def test_parse_team_status_defaults_to_pending():
    assert parse_team_status("bogus") == TeamStatus.PENDING


def test_feature_gates():
    assert can_access_workshops(AcceptanceStatus.FIRST_ACCEPTED)
    assert can_access_workshops(AcceptanceStatus.FINAL_ACCEPTED)
    assert not can_access_workshops(AcceptanceStatus.UNDER_REVIEW)

    assert can_access_preparation(AcceptanceStatus.FINAL_ACCEPTED)
    assert not can_access_preparation(AcceptanceStatus.FIRST_ACCEPTED)

    assert can_participate_in_leaderboard(AcceptanceStatus.FINAL_ACCEPTED)
    assert not can_participate_in_leaderboard(AcceptanceStatus.REJECTED)
