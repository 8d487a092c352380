"""
Read-side coercion of stored registration rows.

`coerce_registration` never raises: a row with a missing or mistyped field
is filled with a safe default, and a row that has no usable identity
(no id, no parseable createdAt) yields None so the caller can drop it.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from app.models.registration import NOT_SPECIFIED
from app.schemas.registration import RegistrationResponse

# snake_case column -> camelCase wire key, both accepted on read
_KEYS = {
    "id": "id",
    "full_name": "fullName",
    "email": "email",
    "phone": "phone",
    "qualification": "qualification",
    "passing_year": "passingYear",
    "service": "service",
    "course": "course",
    "message": "message",
    "created_at": "createdAt",
}

TEXT_DEFAULTS = {
    "full_name": "Unknown",
    "email": "",
    "phone": "",
    "qualification": NOT_SPECIFIED,
    "service": "General",
    "course": NOT_SPECIFIED,
}


def _get(raw: Any, key: str) -> Any:
    if isinstance(raw, Mapping):
        if key in raw:
            return raw[key]
        return raw.get(_KEYS[key])
    return getattr(raw, key, None)


def _text(value: Any, default: str) -> str:
    if isinstance(value, str):
        value = value.strip()
        return value or default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _year(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    # SQLite hands back naive values; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def coerce_registration(raw: Any) -> Optional[RegistrationResponse]:
    """Map a stored row (ORM object, row mapping or dict) to the canonical model, or None"""
    try:
        if raw is None:
            return None

        registration_id = _get(raw, "id")
        if registration_id is None or (isinstance(registration_id, str) and not registration_id.strip()):
            return None

        created_at = _timestamp(_get(raw, "created_at"))
        if created_at is None:
            return None

        message = _get(raw, "message")
        if isinstance(message, str):
            message = message.strip() or None
        else:
            message = None

        email = _text(_get(raw, "email"), TEXT_DEFAULTS["email"]).lower()

        return RegistrationResponse(
            id=str(registration_id),
            full_name=_text(_get(raw, "full_name"), TEXT_DEFAULTS["full_name"]),
            email=email,
            phone=_text(_get(raw, "phone"), TEXT_DEFAULTS["phone"]),
            qualification=_text(_get(raw, "qualification"), TEXT_DEFAULTS["qualification"]),
            passing_year=_year(_get(raw, "passing_year")),
            service=_text(_get(raw, "service"), TEXT_DEFAULTS["service"]),
            course=_text(_get(raw, "course"), TEXT_DEFAULTS["course"]),
            message=message,
            created_at=created_at,
        )
    except Exception:
        return None
