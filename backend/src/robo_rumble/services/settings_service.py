"""Admin-editable competition settings and registration gating."""

import logging
from datetime import date
from typing import Optional

from pydantic import ValidationError

from robo_rumble.errors import InvalidInputError, NotFoundError
from robo_rumble.models.settings import SETTINGS_MODELS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, dict] = {
    key: model().model_dump(mode="json") for key, model in SETTINGS_MODELS.items()
}


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning(f"Ignoring malformed settings date: {value!r}")
        return None


def is_registration_open(competition: dict, registration: dict, today: date) -> bool:
    """Registration is open when the switch is on and today is inside the window.

    Missing window bounds leave that side of the window unbounded.
    """
    if not registration.get("is_open", False):
        return False
    start = _parse_date(competition.get("registration_start"))
    end = _parse_date(competition.get("registration_end"))
    if start is not None and today < start:
        return False
    if end is not None and today > end:
        return False
    return True


class SettingsService:
    """Reads settings documents with defaults filled in and stores updates."""

    def __init__(self, repository):
        self.repository = repository

    def get(self, key: str) -> dict:
        if key not in SETTINGS_MODELS:
            raise NotFoundError(f"Unknown settings key: {key}")
        stored = self.repository.get_setting(key) or {}
        return SETTINGS_MODELS[key].model_validate(stored).model_dump(mode="json")

    def get_all(self) -> dict[str, dict]:
        return {key: self.get(key) for key in DEFAULT_SETTINGS}

    def update(self, key: str, values: dict, updated_by: str | None = None) -> dict:
        """Merge ``values`` over the current document; unknown fields are dropped.

        Raises:
            InvalidInputError: If a field has the wrong type or is out of range
        """
        current = self.get(key)
        try:
            document = SETTINGS_MODELS[key].model_validate({**current, **values})
        except ValidationError as e:
            raise InvalidInputError(
                f"Invalid {key} settings",
                errors=[
                    {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ],
            ) from e
        merged = document.model_dump(mode="json")
        self.repository.save_setting(key, merged, updated_by=updated_by)
        logger.info(f"Settings '{key}' updated by {updated_by}")
        return merged

    def registration_open(self, today: date | None = None) -> bool:
        return is_registration_open(
            self.get("competition"),
            self.get("registration"),
            today or date.today(),
        )

    def auto_accept(self) -> bool:
        return self.get("registration")["auto_accept"]

    def team_editing_allowed(self) -> bool:
        return self.get("registration")["allow_team_editing"]

    def max_teams(self) -> int | None:
        return self.get("competition")["max_teams"]
