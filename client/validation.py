"""
Client-side registration checks.

Same rules and wording the API applies, so a form can flag problems
before submitting. The server remains the authority.
"""

import re
from datetime import datetime
from typing import Any, Dict, Mapping

from email_validator import validate_email, EmailNotValidError

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
MIN_PASSING_YEAR = 1900
PASSING_YEAR_LOOKAHEAD = 5
MAX_FULL_NAME_LENGTH = 100
MAX_MESSAGE_LENGTH = 500
MAX_QUALIFICATION_LENGTH = 100

REQUIRED_FIELDS = {
    "fullName": "Full name",
    "email": "Email",
    "phone": "Phone number",
    "service": "Service",
    "course": "Course",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validate_registration_form(data: Mapping[str, Any]) -> Dict[str, str]:
    """Return {field: message} for every problem; empty dict means OK to submit"""
    errors: Dict[str, str] = {}

    for field, label in REQUIRED_FIELDS.items():
        if not _text(data.get(field)):
            errors[field] = f"{label} is required"

    full_name = _text(data.get("fullName"))
    if len(full_name) > MAX_FULL_NAME_LENGTH:
        errors["fullName"] = f"Name cannot exceed {MAX_FULL_NAME_LENGTH} characters"

    if len(_text(data.get("qualification"))) > MAX_QUALIFICATION_LENGTH:
        errors["qualification"] = f"Qualification cannot exceed {MAX_QUALIFICATION_LENGTH} characters"

    email = _text(data.get("email"))
    if email:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors["email"] = "Please enter a valid email"

    phone = _text(data.get("phone"))
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = f"{phone} is not a valid phone number! Phone number must be 10 digits"

    year = _text(data.get("passingYear"))
    if year:
        upper = datetime.now().year + PASSING_YEAR_LOOKAHEAD
        if not year.isdigit():
            errors["passingYear"] = "Passing year must be a number"
        elif not MIN_PASSING_YEAR <= int(year) <= upper:
            errors["passingYear"] = f"Year must be between {MIN_PASSING_YEAR} and {upper}"

    if len(_text(data.get("message"))) > MAX_MESSAGE_LENGTH:
        errors["message"] = f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters"

    return errors
