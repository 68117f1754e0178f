import re
from email_validator import EmailNotValidError, validate_email


# Characters allowed to survive in an address before validation
_EMAIL_UNSAFE = re.compile(r"[^A-Za-z0-9!#$%&'*+\-=?^_`{|}~@.\[\]]")
_HEADER_BREAKS = re.compile(r"[\r\n]+")


def clean_text(value) -> str:
    if value is None:
        return ""
    return value.strip()


def strip_header_breaks(value: str) -> str:
    """Drop line breaks so a value cannot inject extra mail headers"""
    return _HEADER_BREAKS.sub(" ", value).strip()


def filter_email(value: str) -> str:
    """Trim and remove every character that cannot appear in an address"""
    return _EMAIL_UNSAFE.sub("", clean_text(value))


def is_valid_email(value: str) -> bool:
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
