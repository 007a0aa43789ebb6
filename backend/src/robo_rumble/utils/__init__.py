"""Utility modules for robo_rumble."""

from robo_rumble.utils.role_normalizer import (
    CANONICAL_ROLES,
    ROLE_ALIASES,
    normalize_role,
    normalize_role_strict,
    is_valid_role,
    role_from_message,
    sort_by_role,
)
from robo_rumble.utils.validation import (
    format_saudi_phone,
    validate_password,
    validate_saudi_phone,
)

__all__ = [
    "CANONICAL_ROLES",
    "ROLE_ALIASES",
    "normalize_role",
    "normalize_role_strict",
    "is_valid_role",
    "role_from_message",
    "sort_by_role",
    "format_saudi_phone",
    "validate_password",
    "validate_saudi_phone",
]
