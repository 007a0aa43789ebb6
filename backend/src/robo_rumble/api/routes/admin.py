"""Admin-only endpoints: competition settings and team acceptance."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from robo_rumble.api.deps import (
    CurrentUser,
    get_settings_service,
    get_team_service,
    serialize_team,
)
from robo_rumble.models.status import TeamStatus
from robo_rumble.services.settings_service import SettingsService
from robo_rumble.services.team_service import TeamService

router = APIRouter(prefix="/api/admin", tags=["admin"])

Teams = Annotated[TeamService, Depends(get_team_service)]
Settings = Annotated[SettingsService, Depends(get_settings_service)]


class TeamStatusRequest(BaseModel):
    status: TeamStatus


def _require_admin(user_id: str, teams: TeamService) -> None:
    if not teams.is_admin(user_id):
        raise HTTPException(status_code=403, detail="Admin access required")


@router.get("/settings")
def get_all_settings(user_id: CurrentUser, teams: Teams, settings: Settings):
    _require_admin(user_id, teams)
    return {
        "settings": settings.get_all(),
        "registration_open": settings.registration_open(),
    }


@router.get("/settings/{key}")
def get_settings(key: str, user_id: CurrentUser, teams: Teams, settings: Settings):
    _require_admin(user_id, teams)
    return {"key": key, "value": settings.get(key)}


@router.put("/settings/{key}")
def update_settings(
    key: str, body: dict[str, Any], user_id: CurrentUser, teams: Teams, settings: Settings
):
    """Merge the posted fields into a settings document."""
    _require_admin(user_id, teams)
    return {"key": key, "value": settings.update(key, body, updated_by=user_id)}


@router.patch("/teams/{team_id}/status")
def set_team_status(team_id: str, body: TeamStatusRequest, user_id: CurrentUser, teams: Teams):
    return serialize_team(teams.set_team_status(user_id, team_id, body.status))
