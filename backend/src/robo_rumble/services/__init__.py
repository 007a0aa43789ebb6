"""Business logic services."""

from robo_rumble.services.composition_validator import (
    CompositionReport,
    Finding,
    FindingKind,
    evaluate_composition,
    is_registrable,
    is_role_exceeded,
    is_role_full,
    missing_required_roles,
    occupancy_by_role,
    validation_errors,
)
from robo_rumble.services.role_admission import (
    RoleCheck,
    available_roles,
    can_accept_new_members,
    can_add_role,
    is_core_complete,
    validate_leader_role,
)
from robo_rumble.services.scoring_service import ScoringService, build_leaderboard
from robo_rumble.services.settings_service import SettingsService
from robo_rumble.services.team_service import TeamService

__all__ = [
    "CompositionReport",
    "Finding",
    "FindingKind",
    "evaluate_composition",
    "is_registrable",
    "is_role_exceeded",
    "is_role_full",
    "missing_required_roles",
    "occupancy_by_role",
    "validation_errors",
    "RoleCheck",
    "available_roles",
    "can_accept_new_members",
    "can_add_role",
    "is_core_complete",
    "validate_leader_role",
    "ScoringService",
    "build_leaderboard",
    "SettingsService",
    "TeamService",
]
