import pytest

from crm.core.errors import ValidationFailed
from crm.schemas.address import AddressPayload
from crm.schemas.customer import CustomerPayload
from crm.services.validation import (
    clean_optional,
    is_valid_email,
    is_valid_phone,
    is_valid_pincode,
    normalized_address,
    normalized_customer,
    validate_address,
    validate_customer,
)


@pytest.mark.parametrize(
    "phone,expected",
    [("9123456789", True), ("912345678", False), ("91234567890", False), ("91234a6789", False), ("", False), (None, False)],
)
def test_phone_must_be_exactly_ten_digits(phone, expected):
    assert is_valid_phone(phone) is expected


@pytest.mark.parametrize("pincode,expected", [("560001", True), ("56000", False), ("5600011", False), ("56-001", False)])
def test_pincode_must_be_exactly_six_digits(pincode, expected):
    assert is_valid_pincode(pincode) is expected


def test_email_shape():
    assert is_valid_email("a.b@example.co.in")
    assert not is_valid_email("a.b@example")
    assert not is_valid_email("a b@example.com")
    assert not is_valid_email(None)


@pytest.mark.parametrize("email", ["user..name@example.com", "a@b.c", ".lead@example.com", "x@-bad-.com"])
def test_malformed_emails_are_rejected(email):
    assert is_valid_email(email) is False

    violations = validate_customer(CustomerPayload(first_name="A", last_name="B", phone="9123456789", email=email))

    assert [(violation.field, violation.rule) for violation in violations] == [("email", "email")]


def test_clean_optional_treats_blank_as_absent():
    assert clean_optional(None) is None
    assert clean_optional("   ") is None
    assert clean_optional("  Asha ") == "Asha"


def test_valid_customer_has_no_violations():
    payload = CustomerPayload(first_name="Asha", last_name="Rao", phone="9988776655")

    assert validate_customer(payload) == []


def test_missing_customer_fields_are_reported_together():
    violations = validate_customer(CustomerPayload())

    assert [(violation.field, violation.rule) for violation in violations] == [
        ("firstName", "required"),
        ("lastName", "required"),
        ("phone", "pattern"),
    ]


def test_normalized_customer_trims_and_defaults_account_type():
    data = normalized_customer(
        CustomerPayload(first_name=" Asha ", last_name="Rao ", phone=" 9988776655 ", email=" ", account_type="")
    )

    assert data.first_name == "Asha"
    assert data.last_name == "Rao"
    assert data.phone == "9988776655"
    assert data.email is None
    assert data.account_type == "basic"


def test_normalized_customer_raises_with_violations():
    with pytest.raises(ValidationFailed) as exc_info:
        normalized_customer(CustomerPayload(first_name="A", last_name="B", phone="1", account_type="gold"))

    assert {violation.field for violation in exc_info.value.violations} == {"phone", "accountType"}
    assert exc_info.value.status_code == 400


def test_address_requires_line1_and_city_and_checks_pincode_only_when_given():
    assert validate_address(AddressPayload(line1="12 MG Road", city="Bangalore")) == []

    violations = validate_address(AddressPayload(line1="", city=" ", pincode="12"))

    assert [(violation.field, violation.rule) for violation in violations] == [
        ("line1", "required"),
        ("city", "required"),
        ("pincode", "pattern"),
    ]


def test_normalized_address_drops_blank_optionals():
    data = normalized_address(AddressPayload(line1=" 12 MG Road ", city="Bangalore", state=" ", pincode=""))

    assert data.line1 == "12 MG Road"
    assert data.state is None
    assert data.pincode is None


def test_payloads_accept_camel_case_keys():
    payload = CustomerPayload.model_validate({"firstName": "Asha", "lastName": "Rao", "accountType": "premium"})

    assert payload.first_name == "Asha"
    assert payload.account_type == "premium"
