"""
Registration Schemas - Pydantic models for API validation

Wire format is camelCase (fullName, passingYear, createdAt); snake_case
keys are accepted on input as well.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from email_validator import validate_email, EmailNotValidError
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.registration import NOT_SPECIFIED

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
MIN_PASSING_YEAR = 1900
PASSING_YEAR_LOOKAHEAD = 5
MAX_FULL_NAME_LENGTH = 100
MAX_MESSAGE_LENGTH = 500
MAX_TAG_LENGTH = 100
MAX_QUALIFICATION_LENGTH = 100

# Human readable labels used in "X is required" messages
FIELD_LABELS: Dict[str, str] = {
    "full_name": "Full name",
    "email": "Email",
    "phone": "Phone number",
    "qualification": "Qualification",
    "passing_year": "Passing year",
    "service": "Service",
    "course": "Course",
    "message": "Message",
}


def current_year() -> int:
    return datetime.now().year


def max_passing_year() -> int:
    return current_year() + PASSING_YEAR_LOOKAHEAD


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================
# Input
# ============================================

class RegistrationCreate(CamelModel):
    """
    Submitted registration.

    Pass `context={"catalog": {...}}` to model_validate to also check the
    service/course pair against the configured catalog.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    full_name: str
    email: str
    phone: str
    qualification: Optional[str] = None
    passing_year: Optional[int] = None
    service: str
    course: str
    message: Optional[str] = None

    @field_validator("full_name", "email", "phone", "service", "course", "qualification", "message", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        # Numeric form values (e.g. phone sent as a number) are accepted as text
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if isinstance(v, float) and v.is_integer() else str(v)
        return v

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Full name is required")
        if len(v) > MAX_FULL_NAME_LENGTH:
            raise ValueError(f"Name cannot exceed {MAX_FULL_NAME_LENGTH} characters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        if not v:
            raise ValueError("Email is required")
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Please enter a valid email")
        return v.lower()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not v:
            raise ValueError("Phone number is required")
        if not PHONE_PATTERN.match(v):
            raise ValueError(f"{v} is not a valid phone number! Phone number must be 10 digits")
        return v

    @field_validator("passing_year", mode="before")
    @classmethod
    def parse_passing_year(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("Passing year must be a number")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if not v.isdigit():
                raise ValueError("Passing year must be a number")
            return int(v)
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError("Passing year must be a whole number")
            return int(v)
        return v

    @field_validator("passing_year")
    @classmethod
    def validate_passing_year(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        upper = max_passing_year()
        if v < MIN_PASSING_YEAR or v > upper:
            raise ValueError(f"Year must be between {MIN_PASSING_YEAR} and {upper}")
        return v

    @field_validator("service")
    @classmethod
    def validate_service(cls, v: str, info: ValidationInfo) -> str:
        if not v:
            raise ValueError("Service is required")
        if len(v) > MAX_TAG_LENGTH:
            raise ValueError(f"Service cannot exceed {MAX_TAG_LENGTH} characters")
        catalog = (info.context or {}).get("catalog")
        if catalog is not None and v not in catalog:
            raise ValueError(f"Unknown service '{v}'")
        return v

    @field_validator("course")
    @classmethod
    def validate_course(cls, v: str, info: ValidationInfo) -> str:
        if not v:
            raise ValueError("Course is required")
        if len(v) > MAX_TAG_LENGTH:
            raise ValueError(f"Course cannot exceed {MAX_TAG_LENGTH} characters")
        catalog = (info.context or {}).get("catalog")
        service = info.data.get("service")
        if catalog is not None and service in catalog and v not in catalog[service]:
            raise ValueError(f"Course '{v}' is not offered under '{service}'")
        return v

    @field_validator("qualification")
    @classmethod
    def validate_qualification(cls, v: Optional[str]) -> str:
        if v and len(v) > MAX_QUALIFICATION_LENGTH:
            raise ValueError(f"Qualification cannot exceed {MAX_QUALIFICATION_LENGTH} characters")
        return v or NOT_SPECIFIED

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if len(v) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters")
        return v

    @model_validator(mode="after")
    def apply_defaults(self) -> "RegistrationCreate":
        if self.passing_year is None:
            self.passing_year = current_year()
        if self.qualification is None:
            self.qualification = NOT_SPECIFIED
        return self


# ============================================
# Output
# ============================================

class RegistrationResponse(CamelModel):
    """Canonical stored representation"""
    id: str
    full_name: str
    email: str
    phone: str
    qualification: str = NOT_SPECIFIED
    passing_year: Optional[int] = None
    service: str
    course: str
    message: Optional[str] = None
    created_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready camelCase dict, as sent over HTTP and the admin channel"""
        return self.model_dump(by_alias=True, mode="json")


class RegistrationEnvelope(CamelModel):
    success: bool = True
    data: RegistrationResponse


class RegistrationListResponse(CamelModel):
    success: bool = True
    data: List[RegistrationResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class ServiceStats(CamelModel):
    total: int
    services: Dict[str, int] = Field(default_factory=dict)


class ServiceStatsResponse(CamelModel):
    success: bool = True
    data: ServiceStats


class CatalogResponse(CamelModel):
    success: bool = True
    data: Dict[str, List[str]]


class MessageResponse(CamelModel):
    success: bool = True
    message: str
