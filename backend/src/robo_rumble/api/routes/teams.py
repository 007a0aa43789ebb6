"""REST endpoints for teams, roster changes and join requests."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from robo_rumble.api.deps import (
    CurrentUser,
    get_team_service,
    serialize_join_request,
    serialize_team,
)
from robo_rumble.models.status import JoinRequestStatus, PreparationStatus, TeamStatus
from robo_rumble.services.team_service import TeamService

router = APIRouter(prefix="/api", tags=["teams"])

Teams = Annotated[TeamService, Depends(get_team_service)]


class CreateTeamRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    role: str
    name_ar: str | None = None
    description: str | None = None


class RoleChangeRequest(BaseModel):
    role: str


class JoinTeamRequest(BaseModel):
    role: str
    message: str | None = Field(default=None, max_length=500)


class PreparationRequest(BaseModel):
    status: PreparationStatus


@router.post("/teams", status_code=201)
def create_team(body: CreateTeamRequest, user_id: CurrentUser, teams: Teams):
    """Create a team; the caller becomes its leader and first member."""
    team = teams.create_team(
        leader_id=user_id,
        name=body.name.strip(),
        role=body.role,
        name_ar=body.name_ar,
        description=body.description,
    )
    return serialize_team(team)


@router.get("/teams")
def list_teams(teams: Teams, status: TeamStatus | None = None):
    return {"teams": [serialize_team(t) for t in teams.list_teams(status)]}


@router.get("/teams/{team_id}")
def get_team(team_id: str, teams: Teams):
    return serialize_team(teams.get_team(team_id))


@router.get("/teams/{team_id}/composition")
def get_composition(team_id: str, teams: Teams):
    """Role occupancy, missing roles and registrability of the stored roster."""
    return teams.get_composition(team_id).to_dict()


@router.get("/teams/{team_id}/available-roles")
def get_available_roles(team_id: str, teams: Teams):
    return {
        "team_id": team_id,
        "available_roles": [role.value for role in teams.get_available_roles(team_id)],
    }


@router.patch("/teams/{team_id}/members/{member_id}")
def change_member_role(
    team_id: str, member_id: str, body: RoleChangeRequest, user_id: CurrentUser, teams: Teams
):
    team = teams.change_member_role(user_id, team_id, member_id, body.role)
    return serialize_team(team)


@router.delete("/teams/{team_id}/members/{member_id}")
def remove_member(team_id: str, member_id: str, user_id: CurrentUser, teams: Teams):
    team = teams.remove_member(user_id, team_id, member_id)
    return serialize_team(team)


@router.post("/teams/{team_id}/submit")
def submit_registration(team_id: str, user_id: CurrentUser, teams: Teams):
    """Submit a complete roster for competition registration."""
    team, report = teams.submit_registration(user_id, team_id)
    return serialize_team(team, report)


@router.patch("/teams/{team_id}/preparation")
def set_preparation_status(
    team_id: str, body: PreparationRequest, user_id: CurrentUser, teams: Teams
):
    """Update how far a finally accepted team is with its preparation."""
    return serialize_team(teams.set_preparation_status(user_id, team_id, body.status))


@router.post("/teams/{team_id}/join-requests", status_code=201)
def send_join_request(team_id: str, body: JoinTeamRequest, user_id: CurrentUser, teams: Teams):
    request = teams.send_join_request(user_id, team_id, body.role, body.message)
    return serialize_join_request(request)


@router.get("/teams/{team_id}/join-requests")
def list_join_requests(
    team_id: str,
    user_id: CurrentUser,
    teams: Teams,
    status: JoinRequestStatus | None = JoinRequestStatus.PENDING,
):
    requests = teams.list_join_requests(user_id, team_id, status)
    return {"team_id": team_id, "requests": [serialize_join_request(r) for r in requests]}


@router.post("/join-requests/{request_id}/approve")
def approve_join_request(request_id: str, user_id: CurrentUser, teams: Teams):
    return serialize_team(teams.approve_join_request(user_id, request_id))


@router.post("/join-requests/{request_id}/reject")
def reject_join_request(request_id: str, user_id: CurrentUser, teams: Teams):
    return serialize_join_request(teams.reject_join_request(user_id, request_id))
