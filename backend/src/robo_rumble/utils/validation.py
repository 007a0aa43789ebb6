"""Profile field validation: password policy and Saudi phone numbers."""

import re
from dataclasses import dataclass

PASSWORD_MIN_LENGTH = 8
_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

# 05XXXXXXXX or +9665XXXXXXXX
_SAUDI_PHONE = re.compile(r"^(?:05\d{8}|\+9665\d{8})$")
_NON_PHONE_CHARS = re.compile(r"[^\d+]")


@dataclass(frozen=True)
class PasswordValidation:
    min_length: bool
    has_uppercase: bool
    has_lowercase: bool
    has_number: bool
    has_special_char: bool

    @property
    def is_valid(self) -> bool:
        return all((
            self.min_length,
            self.has_uppercase,
            self.has_lowercase,
            self.has_number,
            self.has_special_char,
        ))


@dataclass(frozen=True)
class PhoneValidation:
    is_valid: bool
    formatted: str
    error: str | None = None


def validate_password(password: str) -> PasswordValidation:
    """Report which password rules ``password`` satisfies."""
    return PasswordValidation(
        min_length=len(password) >= PASSWORD_MIN_LENGTH,
        has_uppercase=bool(_UPPERCASE.search(password)),
        has_lowercase=bool(_LOWERCASE.search(password)),
        has_number=bool(_DIGIT.search(password)),
        has_special_char=bool(_SPECIAL.search(password)),
    )


def validate_saudi_phone(phone: str) -> PhoneValidation:
    """Validate a phone number after stripping everything but digits and ``+``.

    An empty input is not valid but carries no error code, so forms can
    leave the field blank without showing an error.
    """
    cleaned = _NON_PHONE_CHARS.sub("", phone)
    if not cleaned:
        return PhoneValidation(is_valid=False, formatted="")

    is_valid = bool(_SAUDI_PHONE.match(cleaned))
    return PhoneValidation(
        is_valid=is_valid,
        formatted=cleaned,
        error=None if is_valid else "invalid_format",
    )


def format_saudi_phone(value: str) -> str:
    """Progressively format partial phone input as the user types."""
    cleaned = _NON_PHONE_CHARS.sub("", value)

    # "+" is only allowed as the first character
    if "+" in cleaned and not cleaned.startswith("+"):
        cleaned = cleaned.replace("+", "")

    if cleaned.startswith("+"):
        return cleaned[:13]

    if cleaned.startswith("966"):
        return "+" + cleaned[:12]

    return cleaned[:10]
