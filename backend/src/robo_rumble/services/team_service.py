"""Team formation: creation, join requests, role changes and registration."""

import logging
from datetime import date

from robo_rumble.errors import NotFoundError, PermissionDeniedError, RuleViolationError
from robo_rumble.models.roles import Membership, Role
from robo_rumble.models.status import (
    JoinRequestStatus,
    PreparationStatus,
    TeamStatus,
    UserRole,
    can_access_preparation,
    map_status_to_ui,
)
from robo_rumble.models.team import JoinRequest, Team
from robo_rumble.services.composition_validator import CompositionReport, evaluate_composition
from robo_rumble.services.role_admission import (
    RoleCheck,
    available_roles,
    can_add_role,
    validate_leader_role,
)
from robo_rumble.services.settings_service import SettingsService
from robo_rumble.utils.role_normalizer import normalize_role

logger = logging.getLogger(__name__)


def _raise_if_invalid(check: RoleCheck) -> None:
    if not check.is_valid:
        raise RuleViolationError(check.message or "Role not allowed", code=check.error)


class TeamService:
    """Applies team rules on top of a repository.

    The repository only needs to provide the methods of
    ``CompetitionRepository`` used here, so tests can pass a stub.
    """

    def __init__(self, repository, settings_service: SettingsService | None = None):
        self.repository = repository
        self.settings = settings_service or SettingsService(repository)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_team(self, team_id: str) -> Team:
        team = self.repository.get_team(team_id)
        if team is None:
            raise NotFoundError(f"Team not found: {team_id}")
        return team

    def list_teams(self, status: TeamStatus | None = None) -> list[Team]:
        return self.repository.list_teams(status)

    def get_composition(self, team_id: str) -> CompositionReport:
        """Composition report for the team's current memberships."""
        self.get_team(team_id)
        return evaluate_composition(self.repository.get_memberships(team_id))

    def get_available_roles(self, team_id: str) -> list[Role]:
        self.get_team(team_id)
        return available_roles(self.repository.get_memberships(team_id))

    def is_admin(self, user_id: str) -> bool:
        return UserRole.ADMIN in self.repository.get_user_roles(user_id)

    def _require_leader_or_admin(self, team: Team, actor_id: str) -> None:
        if team.leader_id == actor_id or self.is_admin(actor_id):
            return
        raise PermissionDeniedError("Only the team leader can manage this team")

    def _require_team_editing(self, actor_id: str) -> None:
        if not self.settings.team_editing_allowed() and not self.is_admin(actor_id):
            raise RuleViolationError("Team editing is currently disabled", code="editing_closed")

    def _require_not_in_team(self, user_id: str) -> None:
        if self.repository.get_team_id_for_user(user_id) is not None:
            raise RuleViolationError("You are already a member of a team", code="already_in_team")

    @staticmethod
    def _canonical_role(role: str | None) -> str:
        normalized = normalize_role(role)
        if normalized is None:
            raise RuleViolationError(f"Invalid role: {role}", code="invalid_role")
        return normalized

    # ------------------------------------------------------------------
    # Team creation
    # ------------------------------------------------------------------

    def create_team(
        self,
        leader_id: str,
        name: str,
        role: str,
        name_ar: str | None = None,
        description: str | None = None,
        today: date | None = None,
    ) -> Team:
        """Create a team with ``leader_id`` as its first member."""
        if not self.settings.registration_open(today):
            raise RuleViolationError("Registration is closed", code="registration_closed")

        leader_role = normalize_role(role)
        _raise_if_invalid(validate_leader_role(leader_role))
        max_teams = self.settings.max_teams()

        def check() -> None:
            self._require_not_in_team(leader_id)
            if max_teams is not None and self.repository.count_teams() >= max_teams:
                raise RuleViolationError(
                    f"The competition is limited to {max_teams} teams", code="max_teams_reached"
                )

        team_id = self.repository.create_team(
            name=name,
            leader_id=leader_id,
            leader_role=leader_role,
            name_ar=name_ar,
            description=description,
            check=check,
        )
        return self.get_team(team_id)

    # ------------------------------------------------------------------
    # Join requests
    # ------------------------------------------------------------------

    def send_join_request(
        self, user_id: str, team_id: str, role: str, message: str | None = None
    ) -> JoinRequest:
        self.get_team(team_id)

        existing = self.repository.find_join_request(team_id, user_id)
        if existing is not None:
            if existing.status == JoinRequestStatus.PENDING:
                raise RuleViolationError(
                    "You already have a pending request", code="request_pending"
                )
            if existing.status == JoinRequestStatus.REJECTED:
                raise RuleViolationError(
                    "Your request was rejected by the team leader", code="request_rejected"
                )
            raise RuleViolationError("Your request was already accepted", code="request_accepted")

        self._require_not_in_team(user_id)

        requested_role = self._canonical_role(role)
        _raise_if_invalid(can_add_role(self.repository.get_memberships(team_id), requested_role))

        request_id = self.repository.create_join_request(
            team_id, user_id, requested_role, message=message
        )
        logger.info(f"Join request {request_id}: {user_id} -> team {team_id} as {requested_role}")
        return self.repository.get_join_request(request_id)

    def list_join_requests(
        self,
        actor_id: str,
        team_id: str,
        status: JoinRequestStatus | None = JoinRequestStatus.PENDING,
    ) -> list[JoinRequest]:
        team = self.get_team(team_id)
        self._require_leader_or_admin(team, actor_id)
        return self.repository.list_join_requests(team_id, status)

    def _get_pending_request(self, request_id: str) -> JoinRequest:
        request = self.repository.get_join_request(request_id)
        if request is None:
            raise NotFoundError(f"Request not found: {request_id}")
        if request.status != JoinRequestStatus.PENDING:
            raise RuleViolationError(
                f"Request is already {request.status.value}", code="request_not_pending"
            )
        return request

    def approve_join_request(self, actor_id: str, request_id: str) -> Team:
        """Approve a pending request after re-checking the team's current roles."""
        request = self._get_pending_request(request_id)
        team = self.get_team(request.team_id)
        self._require_leader_or_admin(team, actor_id)
        role = self._canonical_role(request.requested_role)

        def check(memberships: list[Membership]) -> None:
            # Runs under the repository write lock against the current roster
            self._get_pending_request(request_id)
            self._require_not_in_team(request.user_id)
            _raise_if_invalid(can_add_role(memberships, role))

        self.repository.approve_join_request(request, role, check=check)
        logger.info(f"Join request {request_id} approved by {actor_id}")
        return self.get_team(team.id)

    def reject_join_request(self, actor_id: str, request_id: str) -> JoinRequest:
        request = self._get_pending_request(request_id)
        team = self.get_team(request.team_id)
        self._require_leader_or_admin(team, actor_id)

        self.repository.set_join_request_status(request_id, JoinRequestStatus.REJECTED)
        logger.info(f"Join request {request_id} rejected by {actor_id}")
        return self.repository.get_join_request(request_id)

    # ------------------------------------------------------------------
    # Roster changes
    # ------------------------------------------------------------------

    def change_member_role(self, actor_id: str, team_id: str, user_id: str, role: str) -> Team:
        """Reassign a member; the new role is checked against everyone else."""
        team = self.get_team(team_id)
        self._require_leader_or_admin(team, actor_id)
        self._require_team_editing(actor_id)
        new_role = self._canonical_role(role)

        def check(memberships: list[Membership]) -> None:
            others = [m for m in memberships if m.member_id != user_id]
            if len(others) == len(memberships):
                raise NotFoundError(f"User {user_id} is not a member of team {team_id}")
            _raise_if_invalid(can_add_role(others, new_role))

        self.repository.update_member_role(team_id, user_id, new_role, check=check)
        return self.get_team(team_id)

    def remove_member(self, actor_id: str, team_id: str, user_id: str) -> Team:
        team = self.get_team(team_id)
        self._require_leader_or_admin(team, actor_id)
        self._require_team_editing(actor_id)
        if not team.has_member(user_id):
            raise NotFoundError(f"User {user_id} is not a member of team {team_id}")
        if user_id == team.leader_id:
            raise RuleViolationError("The team leader cannot be removed", code="leader_removal")

        self.repository.remove_member(team_id, user_id)
        logger.info(f"Removed {user_id} from team {team_id}")
        return self.get_team(team_id)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def submit_registration(
        self, actor_id: str, team_id: str, today: date | None = None
    ) -> tuple[Team, CompositionReport]:
        """Submit a complete team for review (or straight to accepted with auto-accept)."""
        team = self.get_team(team_id)
        self._require_leader_or_admin(team, actor_id)
        if team.status == TeamStatus.ACCEPTED:
            raise RuleViolationError("Team is already accepted", code="already_accepted")

        if not self.settings.registration_open(today):
            raise RuleViolationError("Registration is closed", code="registration_closed")

        report = evaluate_composition(team.memberships)
        if not report.registrable:
            raise RuleViolationError(
                "Team composition is not complete",
                code="team_not_registrable",
                findings=[finding.to_dict() for finding in report.findings],
            )

        status = TeamStatus.ACCEPTED if self.settings.auto_accept() else TeamStatus.PENDING
        self.repository.set_team_status(team_id, status, submitted=True)
        logger.info(f"Team {team_id} submitted for registration, status={status.value}")
        return self.get_team(team_id), report

    def set_team_status(self, actor_id: str, team_id: str, status: TeamStatus) -> Team:
        """Admin decision on a team's acceptance."""
        self.get_team(team_id)
        if not self.is_admin(actor_id):
            raise PermissionDeniedError("Only admins can change a team's status")
        self.repository.set_team_status(team_id, status)
        logger.info(f"Team {team_id} status set to {status.value} by {actor_id}")
        return self.get_team(team_id)

    def set_preparation_status(
        self, actor_id: str, team_id: str, status: PreparationStatus
    ) -> Team:
        """Track competition preparation. Only finally accepted teams have one."""
        team = self.get_team(team_id)
        self._require_leader_or_admin(team, actor_id)
        if not can_access_preparation(map_status_to_ui(team.status)):
            raise RuleViolationError(
                "Preparation opens once the team is finally accepted", code="preparation_locked"
            )
        self.repository.set_preparation_status(team_id, status)
        logger.info(f"Team {team_id} preparation set to {status.value} by {actor_id}")
        return self.get_team(team_id)
