"""Team lifecycle statuses and the features each one unlocks."""

from enum import Enum


class TeamStatus(str, Enum):
    """Status stored on the team row."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class AcceptanceStatus(str, Enum):
    """Status shown to participants."""

    UNDER_REVIEW = "under_review"
    FIRST_ACCEPTED = "first_accepted"
    FINAL_ACCEPTED = "final_accepted"
    REJECTED = "rejected"


class PreparationStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class JoinRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, Enum):
    """Application-level permission role, unrelated to team roles."""

    ADMIN = "admin"
    JUDGE = "judge"
    PARTICIPANT = "participant"


_STATUS_TO_UI = {
    TeamStatus.PENDING: AcceptanceStatus.UNDER_REVIEW,
    TeamStatus.ACCEPTED: AcceptanceStatus.FINAL_ACCEPTED,
    TeamStatus.REJECTED: AcceptanceStatus.REJECTED,
}


def parse_team_status(value: str | None) -> TeamStatus:
    """Read a stored status, treating missing or unknown values as pending."""
    try:
        return TeamStatus(value)
    except ValueError:
        return TeamStatus.PENDING


def map_status_to_ui(status: TeamStatus | str | None) -> AcceptanceStatus:
    """Map a stored team status to the status participants see."""
    return _STATUS_TO_UI[parse_team_status(status)]


def can_access_workshops(status: AcceptanceStatus) -> bool:
    return status in (AcceptanceStatus.FIRST_ACCEPTED, AcceptanceStatus.FINAL_ACCEPTED)


def can_access_preparation(status: AcceptanceStatus) -> bool:
    return status == AcceptanceStatus.FINAL_ACCEPTED


def can_participate_in_leaderboard(status: AcceptanceStatus) -> bool:
    return status == AcceptanceStatus.FINAL_ACCEPTED
