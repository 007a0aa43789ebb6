"""Role-composition validation for competition teams.

Classifies the occupancy of each team role against ``ROLE_RULES`` and decides
whether a team may register. All functions are pure: they take any iterable
of ``Membership`` and never mutate it, clamp it or raise on odd role tags.
Tags that are not one of the canonical roles still count toward team size
but never toward a role's occupancy.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from robo_rumble.models.roles import (
    MAX_TEAM_SIZE,
    MIN_TEAM_SIZE,
    REQUIRED_ROLES,
    ROLE_ORDER,
    Membership,
    Role,
    cap,
)


class FindingKind(str, Enum):
    TEAM_TOO_SMALL = "team_too_small"
    TEAM_TOO_LARGE = "team_too_large"
    MISSING_REQUIRED_ROLES = "missing_required_roles"
    ROLE_EXCEEDED = "role_exceeded"


@dataclass(frozen=True)
class Finding:
    """A single structured validation problem. Callers render the text."""

    kind: FindingKind
    detail: dict

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "detail": self.detail}


@dataclass(frozen=True)
class CompositionReport:
    """Everything the validator knows about one membership set."""

    team_size: int
    occupancy: dict[Role, int]
    full_roles: list[Role]
    exceeded_roles: list[Role]
    missing_roles: list[Role]
    unknown_roles: list[str]
    registrable: bool
    findings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "team_size": self.team_size,
            "occupancy": {role.value: count for role, count in self.occupancy.items()},
            "roles": {
                role.value: {
                    "count": self.occupancy[role],
                    "cap": cap(role),
                    "full": role in self.full_roles,
                    "exceeded": role in self.exceeded_roles,
                }
                for role in ROLE_ORDER
            },
            "missing_roles": [role.value for role in self.missing_roles],
            "unknown_roles": self.unknown_roles,
            "registrable": self.registrable,
            "findings": [finding.to_dict() for finding in self.findings],
        }


def occupancy_by_role(memberships: Iterable[Membership]) -> dict[Role, int]:
    """Count members per canonical role. Every role is present as a key."""
    counts = Counter(m.known_role for m in memberships)
    return {role: counts.get(role, 0) for role in ROLE_ORDER}


def is_role_full(role: Role, memberships: Iterable[Membership]) -> bool:
    """True when the role has reached its cap (inclusive)."""
    return occupancy_by_role(memberships)[role] >= cap(role)


def is_role_exceeded(role: Role, memberships: Iterable[Membership]) -> bool:
    """True when the role holds more members than its cap allows."""
    return occupancy_by_role(memberships)[role] > cap(role)


def missing_required_roles(memberships: Iterable[Membership]) -> set[Role]:
    """Required roles that nobody on the team holds."""
    occupancy = occupancy_by_role(memberships)
    return {role for role in REQUIRED_ROLES if occupancy[role] == 0}


def exceeded_roles(memberships: Iterable[Membership]) -> list[Role]:
    """Roles over their cap, in canonical order."""
    occupancy = occupancy_by_role(memberships)
    return [role for role in ROLE_ORDER if occupancy[role] > cap(role)]


def is_registrable(memberships: Iterable[Membership]) -> bool:
    """Whether the team may be submitted for competition registration."""
    memberships = list(memberships)
    return (
        not missing_required_roles(memberships)
        and not exceeded_roles(memberships)
        and MIN_TEAM_SIZE <= len(memberships) <= MAX_TEAM_SIZE
    )


def validation_errors(memberships: Iterable[Membership]) -> list[Finding]:
    """Structured findings in a fixed order: size, missing roles, exceeded roles."""
    memberships = list(memberships)
    findings: list[Finding] = []

    size = len(memberships)
    if size < MIN_TEAM_SIZE:
        findings.append(Finding(
            FindingKind.TEAM_TOO_SMALL,
            {"size": size, "min": MIN_TEAM_SIZE, "max": MAX_TEAM_SIZE},
        ))
    elif size > MAX_TEAM_SIZE:
        findings.append(Finding(
            FindingKind.TEAM_TOO_LARGE,
            {"size": size, "min": MIN_TEAM_SIZE, "max": MAX_TEAM_SIZE},
        ))

    missing = missing_required_roles(memberships)
    if missing:
        findings.append(Finding(
            FindingKind.MISSING_REQUIRED_ROLES,
            {"roles": [role.value for role in ROLE_ORDER if role in missing]},
        ))

    occupancy = occupancy_by_role(memberships)
    for role in exceeded_roles(memberships):
        findings.append(Finding(
            FindingKind.ROLE_EXCEEDED,
            {"role": role.value, "count": occupancy[role], "cap": cap(role)},
        ))

    return findings


def evaluate_composition(memberships: Iterable[Membership]) -> CompositionReport:
    """Run every check once and bundle the results."""
    memberships = list(memberships)
    occupancy = occupancy_by_role(memberships)
    missing = missing_required_roles(memberships)
    unknown = sorted({
        "" if m.role is None else str(m.role)
        for m in memberships
        if m.known_role is None
    })

    return CompositionReport(
        team_size=len(memberships),
        occupancy=occupancy,
        full_roles=[role for role in ROLE_ORDER if occupancy[role] >= cap(role)],
        exceeded_roles=exceeded_roles(memberships),
        missing_roles=[role for role in ROLE_ORDER if role in missing],
        unknown_roles=unknown,
        registrable=is_registrable(memberships),
        findings=validation_errors(memberships),
    )
