"""Team, member and join request models."""

from dataclasses import dataclass, field
from typing import Optional

from robo_rumble.models.roles import Membership
from robo_rumble.models.status import JoinRequestStatus, PreparationStatus, TeamStatus


@dataclass
class TeamMember:
    """A user on a team, with an optional display name from their profile."""

    user_id: str
    team_role: str | None
    full_name: str | None = None
    email: str | None = None

    def as_membership(self) -> Membership:
        return Membership(member_id=self.user_id, role=self.team_role)


@dataclass
class Team:
    """A competition team and its current members."""

    id: str
    name: str
    leader_id: str | None
    status: TeamStatus = TeamStatus.PENDING
    preparation_status: PreparationStatus = PreparationStatus.NOT_STARTED
    name_ar: str | None = None
    description: str | None = None
    max_members: int = 5
    created_at: str | None = None
    submitted_at: str | None = None
    members: list[TeamMember] = field(default_factory=list)
    leader_name: Optional[str] = None

    @property
    def memberships(self) -> list[Membership]:
        return [m.as_membership() for m in self.members]

    @property
    def members_count(self) -> int:
        return len(self.members)

    @property
    def is_open(self) -> bool:
        """Whether the team still has free seats."""
        return self.members_count < self.max_members

    def has_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)


@dataclass
class JoinRequest:
    """A user's request to join a team in a given role."""

    id: str
    team_id: str
    user_id: str
    requested_role: str | None
    status: JoinRequestStatus = JoinRequestStatus.PENDING
    message: str | None = None
    created_at: str | None = None
    user_name: str | None = None
    user_email: str | None = None
