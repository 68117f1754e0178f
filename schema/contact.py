from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from error import InvalidEmail, MalformedInput, MissingField
from util.sanitize import (
    clean_text,
    filter_email,
    is_valid_email,
    strip_header_breaks,
)

REQUIRED_FIELDS = ("name", "email", "message", "verification_token")


class ContactFormIn(BaseModel):
    """Raw contact form body as posted by the page script"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    verification_token: Optional[str] = Field(
        default=None, alias="cf-turnstile-response"
    )


class ContactSubmission(BaseModel):
    """A normalized submission, built once per request and never mutated"""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: str = ""
    message: str
    verification_token: str

    @classmethod
    def from_body(cls, raw: bytes) -> "ContactSubmission":
        """Normalize a raw request body

        Trims every field, requires name, email, message and the
        verification token, filters the address down to legal
        characters and validates it. Raises MalformedInput,
        MissingField or InvalidEmail, in that order of checking.
        """
        try:
            form = ContactFormIn.model_validate_json(raw or b"")
        except ValidationError as e:
            raise MalformedInput() from e

        values = {
            "name": strip_header_breaks(clean_text(form.name)),
            "email": clean_text(form.email),
            "phone": clean_text(form.phone),
            "message": clean_text(form.message),
            "verification_token": clean_text(form.verification_token),
        }
        for field in REQUIRED_FIELDS:
            if not values[field]:
                raise MissingField(field)

        values["email"] = filter_email(values["email"])
        if not is_valid_email(values["email"]):
            raise InvalidEmail()
        return cls(**values)


class ContactOut(BaseModel):
    success: bool
    message: str
    debug: Optional[dict] = None
