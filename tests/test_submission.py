import json

import pytest

from error import InvalidEmail, MalformedInput, MissingField
from schema.contact import ContactSubmission
from util.sanitize import filter_email, is_valid_email


def body(**fields):
    data = {
        "name": "Ana",
        "email": "ana@example.com",
        "message": "Hola",
        "cf-turnstile-response": "tok",
    }
    data.update(fields)
    return json.dumps({k: v for k, v in data.items() if v is not None}).encode()


def test_trims_fields_and_defaults_phone():
    submission = ContactSubmission.from_body(
        body(name="  Ana  ", email=" ana@example.com ", message="\n Hola \n")
    )
    assert submission.name == "Ana"
    assert submission.email == "ana@example.com"
    assert submission.message == "Hola"
    assert submission.phone == ""
    assert submission.verification_token == "tok"


@pytest.mark.parametrize("raw", [b"", b"not json", b"[1, 2]", b'"text"'])
def test_unparseable_body_is_malformed(raw):
    with pytest.raises(MalformedInput):
        ContactSubmission.from_body(raw)


def test_non_string_field_is_malformed():
    with pytest.raises(MalformedInput):
        ContactSubmission.from_body(body(name=42))


@pytest.mark.parametrize(
    "field", ["name", "email", "message", "cf-turnstile-response"]
)
def test_required_fields(field):
    with pytest.raises(MissingField) as info:
        ContactSubmission.from_body(body(**{field: "  "}))
    assert info.value.status_code == 400


def test_missing_field_reported_before_bad_email():
    with pytest.raises(MissingField):
        ContactSubmission.from_body(body(email="bad", message=None))


@pytest.mark.parametrize(
    "email", ["not-an-email", "ana@", "@example.com", "ana@@example.com"]
)
def test_invalid_email(email):
    with pytest.raises(InvalidEmail):
        ContactSubmission.from_body(body(email=email))


def test_email_filter_drops_illegal_characters():
    assert filter_email(" ana@exa mple.com ") == "ana@example.com"
    assert filter_email("<ana@example.com>") == "ana@example.com"
    assert filter_email("ána@example.com") == "na@example.com"
    assert is_valid_email(filter_email("ana (at) example.com")) is False


def test_name_cannot_carry_header_breaks():
    submission = ContactSubmission.from_body(
        body(name="Ana\r\nBcc: spam@example.com")
    )
    assert "\n" not in submission.name
    assert "\r" not in submission.name


def test_submission_is_immutable():
    submission = ContactSubmission.from_body(body())
    with pytest.raises(Exception):
        submission.name = "Eva"
