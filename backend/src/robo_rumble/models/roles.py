"""Team role definitions and the role capacity table.

Every place that needs to know which roles exist, how many members may hold
each one, or whether a role is required for registration reads it from
``ROLE_RULES``. Nothing else in the codebase should hard-code caps.
"""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Functions a member can hold on a robotics team."""

    DRIVER = "driver"
    PROGRAMMER = "programmer"
    ELECTRONICS = "electronics"
    MECHANICS_DESIGNER = "mechanics_designer"

    @classmethod
    def parse(cls, tag: str | None) -> "Role | None":
        """Exact lookup of a canonical tag; None for anything else."""
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag)
        except ValueError:
            return None


@dataclass(frozen=True)
class RoleRule:
    """Capacity rule for a single role."""

    role: Role
    cap: int
    required: bool = True


ROLE_RULES: dict[Role, RoleRule] = {
    Role.DRIVER: RoleRule(Role.DRIVER, cap=1),
    Role.PROGRAMMER: RoleRule(Role.PROGRAMMER, cap=1),
    Role.ELECTRONICS: RoleRule(Role.ELECTRONICS, cap=1),
    Role.MECHANICS_DESIGNER: RoleRule(Role.MECHANICS_DESIGNER, cap=2),
}

# Display/sort order, matches declaration order of ROLE_RULES
ROLE_ORDER: list[Role] = list(ROLE_RULES)

REQUIRED_ROLES: frozenset[Role] = frozenset(
    rule.role for rule in ROLE_RULES.values() if rule.required
)

# Roles that only one member may hold
UNIQUE_ROLES: frozenset[Role] = frozenset(
    rule.role for rule in ROLE_RULES.values() if rule.cap == 1
)

MIN_TEAM_SIZE = 4
MAX_TEAM_SIZE = 5


def cap(role: Role) -> int:
    """Maximum number of members allowed to hold ``role``."""
    return ROLE_RULES[role].cap


@dataclass(frozen=True)
class Membership:
    """A team member holding one role.

    ``role`` is kept as the raw stored tag so legacy or unknown values can be
    reported instead of silently dropped.
    """

    member_id: str
    role: str | None

    @property
    def known_role(self) -> Role | None:
        return Role.parse(self.role)
