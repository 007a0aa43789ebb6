"""Tests for the REST API routes."""

import httpx
import pytest

from robo_rumble.main import app
from robo_rumble.models.status import UserRole
from robo_rumble.repositories.competition_repository import CompetitionRepository

pytestmark = pytest.mark.anyio

CACHED_SERVICES = ["team_service", "scoring_service", "settings_service"]


@pytest.fixture
def repo(tmp_path):
    repository = CompetitionRepository(tmp_path / "api.duckdb")
    repository.grant_user_role("admin", UserRole.ADMIN)
    repository.grant_user_role("judge", UserRole.JUDGE)
    yield repository
    repository.close()


@pytest.fixture
async def client(repo):
    """Create async test client backed by a temporary database."""
    # Set repository directly on app.state (mimics lifespan startup)
    app.state.repository = repo

    # Clear any cached services so they get re-created with this repository
    for attr in CACHED_SERVICES:
        if hasattr(app.state, attr):
            delattr(app.state, attr)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def as_user(user_id):
    return {"X-User-Id": user_id}


async def create_full_team(client, roles):
    response = await client.post(
        "/api/teams", json={"name": "Sand Storm", "role": roles[0]}, headers=as_user("u0")
    )
    assert response.status_code == 201
    team_id = response.json()["id"]
    for i, role in enumerate(roles[1:], start=1):
        response = await client.post(
            f"/api/teams/{team_id}/join-requests", json={"role": role}, headers=as_user(f"u{i}")
        )
        assert response.status_code == 201
        response = await client.post(
            f"/api/join-requests/{response.json()['id']}/approve", headers=as_user("u0")
        )
        assert response.status_code == 200
    return team_id


class TestBasics:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_role_table(self, client):
        response = await client.get("/api/roles")
        data = response.json()
        assert {"role": "mechanics_designer", "cap": 2, "required": True} in data["roles"]
        assert data["min_team_size"] == 4
        assert data["max_team_size"] == 5


class TestRoleValidation:
    async def test_validate_composition(self, client):
        response = await client.post("/api/roles/validate", json={
            "memberships": [
                {"member_id": "a", "role": "driver"},
                {"member_id": "b", "role": "driver"},
                {"member_id": "c", "role": "programmer"},
                {"member_id": "d", "role": "electronics"},
                {"member_id": "e", "role": "mechanics_designer"},
            ]
        })
        assert response.status_code == 200
        data = response.json()
        assert data["registrable"] is False
        assert data["roles"]["driver"]["exceeded"] is True
        assert data["findings"] == [
            {"kind": "role_exceeded", "detail": {"role": "driver", "count": 2, "cap": 1}},
        ]

    async def test_validate_empty(self, client):
        response = await client.post("/api/roles/validate", json={})
        data = response.json()
        assert data["team_size"] == 0
        assert data["findings"][0]["kind"] == "team_too_small"

    async def test_admission_check(self, client):
        response = await client.post("/api/roles/admission", json={
            "memberships": [{"member_id": "a", "role": "driver"}],
            "role": "driver",
        })
        data = response.json()
        assert data["is_valid"] is False
        assert data["error"] == "role_taken"
        assert data["available_roles"] == ["programmer", "electronics", "mechanics_designer"]


class TestTeams:
    async def test_requires_user_header(self, client):
        response = await client.post("/api/teams", json={"name": "X", "role": "driver"})
        assert response.status_code == 401

    async def test_create_and_get_team(self, client):
        team_id = await create_full_team(client, ["driver"])
        response = await client.get(f"/api/teams/{team_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["acceptance_status"] == "under_review"
        assert data["members_count"] == 1
        assert data["is_open"] is True
        assert data["composition"]["missing_roles"] == [
            "programmer", "electronics", "mechanics_designer",
        ]

    async def test_unknown_team_is_404(self, client):
        response = await client.get("/api/teams/missing")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    async def test_rule_violation_is_409(self, client):
        team_id = await create_full_team(client, ["driver"])
        response = await client.post(
            f"/api/teams/{team_id}/join-requests", json={"role": "driver"}, headers=as_user("u5")
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "role_taken"

    async def test_join_request_listing_is_leader_only(self, client):
        team_id = await create_full_team(client, ["driver"])
        await client.post(
            f"/api/teams/{team_id}/join-requests", json={"role": "programmer"}, headers=as_user("u1")
        )
        response = await client.get(f"/api/teams/{team_id}/join-requests", headers=as_user("u1"))
        assert response.status_code == 403

        response = await client.get(f"/api/teams/{team_id}/join-requests", headers=as_user("u0"))
        requests = response.json()["requests"]
        assert [r["requested_role"] for r in requests] == ["programmer"]

    async def test_reject_join_request(self, client):
        team_id = await create_full_team(client, ["driver"])
        response = await client.post(
            f"/api/teams/{team_id}/join-requests", json={"role": "programmer"}, headers=as_user("u1")
        )
        request_id = response.json()["id"]
        response = await client.post(f"/api/join-requests/{request_id}/reject", headers=as_user("u0"))
        assert response.json()["status"] == "rejected"

    async def test_available_roles_and_role_change(self, client):
        team_id = await create_full_team(client, ["driver", "programmer"])
        response = await client.get(f"/api/teams/{team_id}/available-roles")
        assert response.json()["available_roles"] == ["electronics", "mechanics_designer"]

        response = await client.patch(
            f"/api/teams/{team_id}/members/u1", json={"role": "electronics"}, headers=as_user("u0")
        )
        assert response.status_code == 200
        roles = {m["user_id"]: m["team_role"] for m in response.json()["members"]}
        assert roles["u1"] == "electronics"

    async def test_remove_member(self, client):
        team_id = await create_full_team(client, ["driver", "programmer"])
        response = await client.delete(f"/api/teams/{team_id}/members/u1", headers=as_user("u0"))
        assert response.json()["members_count"] == 1

    async def test_submit_incomplete_team(self, client):
        team_id = await create_full_team(client, ["driver", "programmer"])
        response = await client.post(f"/api/teams/{team_id}/submit", headers=as_user("u0"))
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "team_not_registrable"
        assert detail["findings"][0]["kind"] == "team_too_small"

    async def test_submit_complete_team(self, client):
        team_id = await create_full_team(
            client, ["driver", "programmer", "electronics", "mechanics_designer", "mechanic"]
        )
        response = await client.post(f"/api/teams/{team_id}/submit", headers=as_user("u0"))
        assert response.status_code == 200
        data = response.json()
        assert data["composition"]["registrable"] is True
        assert data["composition"]["roles"]["mechanics_designer"]["full"] is True
        assert data["submitted_at"] is not None


class TestScoringAndAdmin:
    async def test_admin_accepts_team_then_judge_scores(self, client):
        team_id = await create_full_team(
            client, ["driver", "programmer", "electronics", "mechanics_designer"]
        )
        response = await client.patch(
            f"/api/admin/teams/{team_id}/status", json={"status": "accepted"}, headers=as_user("u0")
        )
        assert response.status_code == 403

        response = await client.patch(
            f"/api/admin/teams/{team_id}/status", json={"status": "accepted"}, headers=as_user("admin")
        )
        assert response.json()["acceptance_status"] == "final_accepted"

        response = await client.put(
            f"/api/scores/{team_id}",
            json={"criteria": {"innovation": 15, "control": 12}, "comments": "solid"},
            headers=as_user("judge"),
        )
        assert response.status_code == 200
        assert response.json()["total_score"] == 27

        response = await client.get("/api/leaderboard")
        board = response.json()["leaderboard"]
        assert board[0]["rank"] == 1
        assert board[0]["team_id"] == team_id
        assert board[0]["total_score"] == 27

    async def test_score_out_of_range_is_422(self, client):
        response = await client.put(
            "/api/scores/any", json={"criteria": {"innovation": 25}}, headers=as_user("judge")
        )
        assert response.status_code == 422

    async def test_settings_are_admin_only(self, client):
        response = await client.get("/api/admin/settings", headers=as_user("u0"))
        assert response.status_code == 403

        response = await client.put(
            "/api/admin/settings/registration", json={"is_open": False}, headers=as_user("admin")
        )
        assert response.json()["value"]["is_open"] is False

        response = await client.get("/api/admin/settings", headers=as_user("admin"))
        assert response.json()["registration_open"] is False

        response = await client.post(
            "/api/teams", json={"name": "Late", "role": "driver"}, headers=as_user("late")
        )
        assert response.json()["detail"]["code"] == "registration_closed"

    async def test_invalid_settings_are_422(self, client):
        response = await client.put(
            "/api/admin/settings/competition", json={"max_teams": "fifty"}, headers=as_user("admin")
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_input"

        # Team creation still works with the previous settings
        response = await client.post(
            "/api/teams", json={"name": "Sand Storm", "role": "driver"}, headers=as_user("u0")
        )
        assert response.status_code == 201

    async def test_preparation_status(self, client):
        team_id = await create_full_team(client, ["driver"])
        response = await client.patch(
            f"/api/teams/{team_id}/preparation", json={"status": "in_progress"}, headers=as_user("u0")
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "preparation_locked"

        await client.patch(
            f"/api/admin/teams/{team_id}/status", json={"status": "accepted"}, headers=as_user("admin")
        )
        response = await client.patch(
            f"/api/teams/{team_id}/preparation", json={"status": "in_progress"}, headers=as_user("u0")
        )
        assert response.status_code == 200
        assert response.json()["preparation_status"] == "in_progress"

    async def test_unknown_settings_key(self, client):
        response = await client.get("/api/admin/settings/workshops", headers=as_user("admin"))
        assert response.status_code == 404


class TestProfiles:
    async def test_upsert_profile_normalizes_phone(self, client):
        response = await client.put(
            "/api/profiles/me",
            json={"email": "u0@example.com", "full_name": "U Zero", "phone": "051 234 5678"},
            headers=as_user("u0"),
        )
        assert response.status_code == 200
        assert response.json()["phone"] == "0512345678"

        response = await client.get("/api/profiles/me", headers=as_user("u0"))
        assert response.json()["full_name"] == "U Zero"

    async def test_invalid_phone(self, client):
        response = await client.put(
            "/api/profiles/me",
            json={"email": "u0@example.com", "phone": "12345"},
            headers=as_user("u0"),
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_phone"

    async def test_password_check(self, client):
        response = await client.post("/api/profiles/password-check", json={"password": "weak"})
        data = response.json()
        assert data["is_valid"] is False
        assert data["min_length"] is False
        assert data["has_lowercase"] is True
