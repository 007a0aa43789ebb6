"""Shared request dependencies and response serializers for the API routes."""

from dataclasses import asdict
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from robo_rumble.models.status import map_status_to_ui
from robo_rumble.models.team import JoinRequest, Team
from robo_rumble.services.composition_validator import CompositionReport, evaluate_composition
from robo_rumble.services.scoring_service import ScoringService
from robo_rumble.services.settings_service import SettingsService
from robo_rumble.services.team_service import TeamService


def get_current_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Acting user, as set by the authenticating proxy in front of the API."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


CurrentUser = Annotated[str, Depends(get_current_user_id)]


def _get_or_create_services(request: Request) -> tuple[TeamService, ScoringService, SettingsService]:
    """Get or create services from app state."""
    repo = request.app.state.repository

    if not hasattr(request.app.state, "team_service"):
        settings_service = SettingsService(repo)
        request.app.state.settings_service = settings_service
        request.app.state.team_service = TeamService(repo, settings_service)
        request.app.state.scoring_service = ScoringService(repo)

    return (
        request.app.state.team_service,
        request.app.state.scoring_service,
        request.app.state.settings_service,
    )


def get_team_service(request: Request) -> TeamService:
    return _get_or_create_services(request)[0]


def get_scoring_service(request: Request) -> ScoringService:
    return _get_or_create_services(request)[1]


def get_settings_service(request: Request) -> SettingsService:
    return _get_or_create_services(request)[2]


def serialize_team(team: Team, report: CompositionReport | None = None) -> dict:
    report = report or evaluate_composition(team.memberships)
    return {
        "id": team.id,
        "name": team.name,
        "name_ar": team.name_ar,
        "description": team.description,
        "leader_id": team.leader_id,
        "leader_name": team.leader_name,
        "status": team.status.value,
        "acceptance_status": map_status_to_ui(team.status).value,
        "preparation_status": team.preparation_status.value,
        "max_members": team.max_members,
        "members_count": team.members_count,
        "is_open": team.is_open,
        "created_at": team.created_at,
        "submitted_at": team.submitted_at,
        "members": [asdict(m) for m in team.members],
        "composition": report.to_dict(),
    }


def serialize_join_request(request: JoinRequest) -> dict:
    data = asdict(request)
    data["status"] = request.status.value
    return data
