"""Data models for the RoboRumble competition backend."""

from robo_rumble.models.roles import (
    MAX_TEAM_SIZE,
    MIN_TEAM_SIZE,
    REQUIRED_ROLES,
    ROLE_ORDER,
    ROLE_RULES,
    Membership,
    Role,
    RoleRule,
)
from robo_rumble.models.scores import LeaderboardEntry, Score, ScoreCriteria
from robo_rumble.models.settings import (
    CompetitionSettings,
    NotificationSettings,
    RegistrationSettings,
)
from robo_rumble.models.status import (
    AcceptanceStatus,
    JoinRequestStatus,
    PreparationStatus,
    TeamStatus,
    UserRole,
)
from robo_rumble.models.team import JoinRequest, Team, TeamMember

__all__ = [
    "MAX_TEAM_SIZE",
    "MIN_TEAM_SIZE",
    "REQUIRED_ROLES",
    "ROLE_ORDER",
    "ROLE_RULES",
    "Membership",
    "Role",
    "RoleRule",
    "LeaderboardEntry",
    "Score",
    "ScoreCriteria",
    "CompetitionSettings",
    "NotificationSettings",
    "RegistrationSettings",
    "AcceptanceStatus",
    "JoinRequestStatus",
    "PreparationStatus",
    "TeamStatus",
    "UserRole",
    "JoinRequest",
    "Team",
    "TeamMember",
]
