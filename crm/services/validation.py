from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email

from crm.core.errors import FieldViolation, ValidationFailed
from crm.models.customer import ACCOUNT_TYPES, DEFAULT_ACCOUNT_TYPE
from crm.schemas.address import AddressPayload
from crm.schemas.customer import CustomerPayload

PHONE_PATTERN = re.compile(r"^\d{10}$")
PINCODE_PATTERN = re.compile(r"^\d{6}$")


def clean_optional(value: str | None) -> str | None:
    """Strip ``value``; blank strings count as absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def is_valid_phone(phone: str | None) -> bool:
    return bool(phone) and PHONE_PATTERN.match(phone) is not None


def is_valid_pincode(pincode: str | None) -> bool:
    return bool(pincode) and PINCODE_PATTERN.match(pincode) is not None


def is_valid_email(email: str | None) -> bool:
    if not email:
        return False
    try:
        result = validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    # top-level domain needs at least two characters
    return len(result.ascii_domain.rsplit(".", 1)[-1]) >= 2


def _required(field: str, value: str | None, violations: list[FieldViolation]) -> None:
    if clean_optional(value) is None:
        violations.append(FieldViolation(field=field, rule="required", message=f"{field} is required"))


def validate_customer(payload: CustomerPayload) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    _required("firstName", payload.first_name, violations)
    _required("lastName", payload.last_name, violations)

    phone = clean_optional(payload.phone)
    if not is_valid_phone(phone):
        violations.append(FieldViolation(field="phone", rule="pattern", message="phone must be exactly 10 digits"))

    email = clean_optional(payload.email)
    if email is not None and not is_valid_email(email):
        violations.append(FieldViolation(field="email", rule="email", message="email must be a valid email address"))

    account_type = clean_optional(payload.account_type)
    if account_type is not None and account_type not in ACCOUNT_TYPES:
        violations.append(
            FieldViolation(
                field="accountType",
                rule="choice",
                message=f"accountType must be one of: {', '.join(ACCOUNT_TYPES)}",
            )
        )
    return violations


def validate_address(payload: AddressPayload) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    _required("line1", payload.line1, violations)
    _required("city", payload.city, violations)

    pincode = clean_optional(payload.pincode)
    if pincode is not None and not is_valid_pincode(pincode):
        violations.append(FieldViolation(field="pincode", rule="pattern", message="pincode must be exactly 6 digits"))
    return violations


def normalized_customer(payload: CustomerPayload) -> CustomerPayload:
    """Validate ``payload`` and return a trimmed copy ready to persist."""
    violations = validate_customer(payload)
    if violations:
        raise ValidationFailed(violations)
    return CustomerPayload(
        first_name=clean_optional(payload.first_name),
        last_name=clean_optional(payload.last_name),
        phone=clean_optional(payload.phone),
        email=clean_optional(payload.email),
        account_type=clean_optional(payload.account_type) or DEFAULT_ACCOUNT_TYPE,
    )


def normalized_address(payload: AddressPayload) -> AddressPayload:
    violations = validate_address(payload)
    if violations:
        raise ValidationFailed(violations)
    return AddressPayload(
        line1=clean_optional(payload.line1),
        city=clean_optional(payload.city),
        state=clean_optional(payload.state),
        pincode=clean_optional(payload.pincode),
    )
