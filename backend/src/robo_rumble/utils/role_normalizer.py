"""Centralized team role normalization.

Role values arrive from forms, legacy join request messages and older rows
in several spellings. Anything that stores a role should pass it through
``normalize_role`` first. The composition validator itself only accepts the
canonical lowercase tags: driver, programmer, electronics, mechanics_designer.
"""

import re
from typing import Optional

from robo_rumble.models.roles import ROLE_ORDER, Role

# Canonical roles - the standard format stored in team_members.team_role
CANONICAL_ROLES = frozenset(role.value for role in Role)

# Mapping from any known spelling (lowercased) to the canonical tag
ROLE_ALIASES: dict[str, str] = {
    # Driver
    "driver": "driver",
    "control": "driver",
    "pilot": "driver",

    # Programmer
    "programmer": "programmer",
    "programming": "programmer",
    "coder": "programmer",

    # Electronics
    "electronics": "electronics",
    "electrical": "electronics",

    # Mechanics / designer share one role with two seats. Older rows used
    # "mechanic" and "designer" as separate values.
    "mechanics_designer": "mechanics_designer",
    "mechanics designer": "mechanics_designer",
    "mechanics / designer": "mechanics_designer",
    "mechanics/designer": "mechanics_designer",
    "mechanics": "mechanics_designer",
    "mechanic": "mechanics_designer",
    "designer": "mechanics_designer",
}

# Legacy join requests stored the role inside the message text
_MESSAGE_ROLE_PATTERN = re.compile(r"Role:\s*(\w+)")


def normalize_role(role: Optional[str]) -> Optional[str]:
    """Normalize a role string to its canonical tag.

    Args:
        role: Role string in any known format (e.g., "Driver", "mechanic")

    Returns:
        Canonical role tag or None if invalid/None

    Examples:
        >>> normalize_role("Driver")
        'driver'
        >>> normalize_role("designer")
        'mechanics_designer'
        >>> normalize_role("member")
        None
    """
    if role is None:
        return None

    role_lower = role.strip().lower()

    if role_lower in ROLE_ALIASES:
        return ROLE_ALIASES[role_lower]

    # Unknown role - return None to indicate invalid
    return None


def normalize_role_strict(role: str) -> str:
    """Normalize a role string, raising ValueError if unknown.

    Raises:
        ValueError: If role is not recognized
    """
    normalized = normalize_role(role)
    if normalized is None:
        raise ValueError(f"Unknown role: {role}")
    return normalized


def is_valid_role(role: Optional[str]) -> bool:
    """Check if a role string can be normalized to a canonical role."""
    return normalize_role(role) is not None


def role_from_message(message: Optional[str]) -> Optional[str]:
    """Extract the role from a legacy ``"Role: <tag>"`` join request message."""
    if not message:
        return None
    match = _MESSAGE_ROLE_PATTERN.search(message)
    return match.group(1) if match else None


def sort_by_role(members: list[dict], role_key: str = "team_role") -> list[dict]:
    """Sort member dicts by canonical role order; unknown roles go last.

    Args:
        members: List of member dicts with a role field
        role_key: Key name for the role field (default: "team_role")
    """
    order = [role.value for role in ROLE_ORDER]

    def role_sort_key(member: dict) -> int:
        role = normalize_role(member.get(role_key))
        return order.index(role) if role else 99

    return sorted(members, key=role_sort_key)
