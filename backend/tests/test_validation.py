"""Tests for password and phone validation."""

import pytest

from robo_rumble.utils.validation import (
    format_saudi_phone,
    validate_password,
    validate_saudi_phone,
)


def test_strong_password_is_valid():
    result = validate_password("Robo#2024x")
    assert result.is_valid


@pytest.mark.parametrize("password,failed_rule", [
    ("Ab1!", "min_length"),
    ("robo#2024x", "has_uppercase"),
    ("ROBO#2024X", "has_lowercase"),
    ("Robo#robox", "has_number"),
    ("Robo2024xx", "has_special_char"),
])
def test_password_rules(password, failed_rule):
    result = validate_password(password)
    assert getattr(result, failed_rule) is False
    assert result.is_valid is False


@pytest.mark.parametrize("phone,formatted", [
    ("0512345678", "0512345678"),
    ("+966512345678", "+966512345678"),
    ("051 234 5678", "0512345678"),
    ("+966-51-234-5678", "+966512345678"),
])
def test_valid_saudi_phones(phone, formatted):
    result = validate_saudi_phone(phone)
    assert result.is_valid
    assert result.formatted == formatted
    assert result.error is None


@pytest.mark.parametrize("phone", ["0412345678", "05123", "+96651234567", "966512345678"])
def test_invalid_saudi_phones(phone):
    result = validate_saudi_phone(phone)
    assert result.is_valid is False
    assert result.error == "invalid_format"


def test_empty_phone_has_no_error_code():
    result = validate_saudi_phone("  ")
    assert result.is_valid is False
    assert result.error is None


@pytest.mark.parametrize("raw,expected", [
    ("05123456789999", "0512345678"),
    ("966512345678", "+966512345678"),
    ("+966 51 234 5678 99", "+966512345678"),
    ("05+12", "0512"),
    ("+9", "+9"),
])
def test_format_saudi_phone(raw, expected):
    assert format_saudi_phone(raw) == expected
