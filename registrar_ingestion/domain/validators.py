"""
Business-rule validators for normalized registration records.

Each rule returns the error messages it finds; ``validate_record`` runs all
of them and collects every violation rather than stopping at the first.

Architecture: registrar_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Protocol, runtime_checkable

from registrar_kernel.exceptions import ValidationError

from registrar_ingestion.domain.types import NormalizedRecord, ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_MINIMUM_AGE = 16


# -----------------------------------------------------------------------------
# Phone policies
# -----------------------------------------------------------------------------


@runtime_checkable
class PhonePolicy(Protocol):
    """Decides whether a phone number is acceptable."""

    name: str
    requirement: str  # human-readable rule, appended to the error message

    def is_valid(self, phone: str) -> bool:
        ...


@dataclass(frozen=True)
class RegexPhonePolicy:
    """
    Phone policy backed by a regular expression.

    Characters matching ``strip_pattern`` are removed before the number is
    matched, so "98765 43210" and "(987) 654-3210" compare as digits.
    """

    name: str
    pattern: str
    requirement: str
    strip_pattern: str = r"\D"

    def is_valid(self, phone: str) -> bool:
        cleaned = re.sub(self.strip_pattern, "", phone)
        return re.fullmatch(self.pattern, cleaned) is not None


IN_MOBILE = RegexPhonePolicy(
    name="in_mobile",
    pattern=r"[6-9]\d{9}",
    requirement="must be 10 digits, starting with 6-9",
)

E164 = RegexPhonePolicy(
    name="e164",
    pattern=r"\+?[1-9]\d{7,14}",
    requirement="must be 8 to 15 digits in international format",
    strip_pattern=r"[^\d+]",
)

PHONE_POLICIES: dict[str, PhonePolicy] = {
    IN_MOBILE.name: IN_MOBILE,
    E164.name: E164,
}


def get_phone_policy(name: str) -> PhonePolicy:
    """Look up a registered phone policy by name."""
    try:
        return PHONE_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown phone policy {name!r}; known: {sorted(PHONE_POLICIES)}"
        ) from None


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------


def calculate_age(birth: date, today: date) -> int:
    """Whole years between ``birth`` and ``today``."""
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def validate_required_fields(record: NormalizedRecord) -> list[str]:
    errors: list[str] = []
    if not record.first_name:
        errors.append("Missing first name")
    if not record.last_name:
        errors.append("Missing last name")
    if not record.email:
        errors.append("Missing email")
    if not record.date_of_birth:
        errors.append("Missing date of birth")
    if record.year is None:
        errors.append("Missing year")
    if not record.department:
        errors.append("Missing department")
    # Course is optional, but an enrollment needs a date
    if record.course and not record.enrollment_date:
        errors.append("Missing enrollment date (required when course is provided)")
    return errors


def validate_email(email: str | None) -> list[str]:
    if email and not EMAIL_PATTERN.match(email):
        return [f"Invalid email: {email}"]
    return []


def validate_phone(phone: str | None, policy: PhonePolicy) -> list[str]:
    if phone and not policy.is_valid(phone):
        return [f"Invalid phone number: {phone} ({policy.requirement})"]
    return []


def validate_age(
    date_of_birth: str | None,
    today: date,
    minimum_age: int = DEFAULT_MINIMUM_AGE,
) -> list[str]:
    if not date_of_birth:
        return []
    age = calculate_age(date.fromisoformat(date_of_birth), today)
    if age < minimum_age:
        return [f"Student too young: {age} years old"]
    return []


def validate_year(year: int | None) -> list[str]:
    if year is not None and not 1 <= year <= 4:
        return [f"Invalid year: {year}"]
    return []


def validate_credits(credits: int | None, credits_input: str | None) -> list[str]:
    """Credits must be 1-4 whenever the row supplied any."""
    if credits_input is None:
        return []
    if credits is None:
        return [f"Invalid credits: {credits_input}"]
    if not 1 <= credits <= 4:
        return [f"Invalid credits: {credits}"]
    return []


def validate_record(
    record: NormalizedRecord,
    today: date,
    phone_policy: PhonePolicy = IN_MOBILE,
    minimum_age: int = DEFAULT_MINIMUM_AGE,
) -> ValidationResult:
    """Run every rule and collect all violations."""
    errors = [
        *validate_required_fields(record),
        *validate_email(record.email),
        *validate_phone(record.phone, phone_policy),
        *validate_age(record.date_of_birth, today, minimum_age),
        *validate_year(record.year),
        *validate_credits(record.credits, record.credits_input),
    ]
    return ValidationResult(valid=not errors, errors=tuple(errors))


def raise_if_invalid(result: ValidationResult, row_id: int | None) -> None:
    """Raise ValidationError carrying every message of a failed result."""
    if not result.valid:
        raise ValidationError(row_id, result.errors)
