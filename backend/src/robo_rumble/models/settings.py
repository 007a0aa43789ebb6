"""Typed settings documents stored under the ``system_settings`` keys."""

from datetime import date as Date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SettingsDocument(BaseModel):
    """Unknown fields are dropped rather than stored."""

    model_config = ConfigDict(extra="ignore")


class CompetitionSettings(SettingsDocument):
    name: str = Field(default="RoboRumble", min_length=1, max_length=200)
    date: Optional[Date] = None
    registration_start: Optional[Date] = None
    registration_end: Optional[Date] = None
    max_teams: Optional[int] = Field(default=50, ge=1)

    @field_validator("date", "registration_start", "registration_end", "max_teams", mode="before")
    @classmethod
    def blank_as_none(cls, value):
        # Admin forms post cleared inputs as empty strings
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RegistrationSettings(SettingsDocument):
    is_open: bool = True
    allow_team_editing: bool = True
    auto_accept: bool = False


class NotificationSettings(SettingsDocument):
    email_enabled: bool = True
    new_registration_alerts: bool = True


SETTINGS_MODELS: dict[str, type[SettingsDocument]] = {
    "competition": CompetitionSettings,
    "registration": RegistrationSettings,
    "notifications": NotificationSettings,
}
