"""Checks applied before a member is added to a team in a given role.

The composition validator judges a finished roster; these rules decide
whether one more seat may be filled. A team grows to its four-member core
first (one driver, one programmer, one electronics, one mechanics/designer)
and only then may take a fifth member, who must be a mechanics/designer.
"""

from dataclasses import dataclass
from typing import Iterable

from robo_rumble.models.roles import (
    MAX_TEAM_SIZE,
    MIN_TEAM_SIZE,
    REQUIRED_ROLES,
    ROLE_ORDER,
    UNIQUE_ROLES,
    Membership,
    Role,
    cap,
)
from robo_rumble.services.composition_validator import occupancy_by_role


@dataclass(frozen=True)
class RoleCheck:
    """Outcome of an admission check. ``error`` is a machine-readable code."""

    is_valid: bool
    error: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls) -> "RoleCheck":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str, message: str) -> "RoleCheck":
        return cls(is_valid=False, error=error, message=message)


def is_core_complete(memberships: Iterable[Membership]) -> bool:
    """True once every required role is held and the team has its core size."""
    memberships = list(memberships)
    occupancy = occupancy_by_role(memberships)
    return (
        all(occupancy[role] > 0 for role in REQUIRED_ROLES)
        and len(memberships) >= MIN_TEAM_SIZE
    )


def can_add_role(memberships: Iterable[Membership], role: Role | str | None) -> RoleCheck:
    """Decide whether one more member holding ``role`` may join."""
    memberships = list(memberships)
    new_role = role if isinstance(role, Role) else Role.parse(role)
    if new_role is None:
        return RoleCheck.fail("invalid_role", f"Invalid role: {role}")

    size = len(memberships)
    occupancy = occupancy_by_role(memberships)

    if size >= MAX_TEAM_SIZE:
        return RoleCheck.fail(
            "team_full",
            f"Team is already at maximum capacity ({MAX_TEAM_SIZE} members)",
        )

    if new_role in UNIQUE_ROLES and occupancy[new_role] > 0:
        return RoleCheck.fail("role_taken", f"Role {new_role.value} is already taken in this team")

    if new_role not in UNIQUE_ROLES and occupancy[new_role] >= cap(new_role):
        return RoleCheck.fail(
            "role_cap_reached",
            f"Maximum of {cap(new_role)} {new_role.value} members allowed",
        )

    # With a complete core every unique role is taken, so a fifth member can
    # only be a mechanics/designer.
    if size >= MIN_TEAM_SIZE and not all(occupancy[r] > 0 for r in REQUIRED_ROLES):
        return RoleCheck.fail(
            "core_incomplete",
            f"Core team ({MIN_TEAM_SIZE} members) must be complete before adding another member",
        )

    return RoleCheck.ok()


def available_roles(memberships: Iterable[Membership]) -> list[Role]:
    """Roles a new member could still take, in canonical order."""
    memberships = list(memberships)
    return [role for role in ROLE_ORDER if can_add_role(memberships, role).is_valid]


def can_accept_new_members(memberships: Iterable[Membership]) -> bool:
    """Whether the team has any open seat at all."""
    return bool(available_roles(memberships))


def validate_leader_role(role: Role | str | None) -> RoleCheck:
    """The team founder may take any of the canonical roles."""
    if isinstance(role, Role) or Role.parse(role) is not None:
        return RoleCheck.ok()
    return RoleCheck.fail("invalid_role", "Invalid role selected")
