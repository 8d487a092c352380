"""
Reconciliation of locally held registrations with live pushes.

Records are keyed by id. Email is only used as the key when one side
still carries a client-generated placeholder id, since that record has
not been confirmed by the server yet.
"""

from typing import Any, Dict, List, Mapping, Optional

PLACEHOLDER_PREFIX = "local-"

TEXT_DEFAULTS = {
    "fullName": "Unknown",
    "email": "",
    "phone": "",
    "qualification": "Not specified",
    "service": "General",
    "course": "Not specified",
}


def is_placeholder_id(record_id: Any) -> bool:
    return isinstance(record_id, str) and record_id.startswith(PLACEHOLDER_PREFIX)


def normalize_email(email: Any) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


def normalize_record(raw: Any) -> Optional[Dict[str, Any]]:
    """Fill missing display fields; None when the record has no id"""
    if not isinstance(raw, Mapping):
        return None
    record_id = raw.get("id")
    if record_id is None or str(record_id).strip() == "":
        return None

    record: Dict[str, Any] = dict(raw)
    record["id"] = str(record_id)
    for key, default in TEXT_DEFAULTS.items():
        value = record.get(key)
        record[key] = value.strip() if isinstance(value, str) and value.strip() else default
    record["email"] = normalize_email(record["email"])
    return record


def _same_record(local: Mapping[str, Any], incoming: Mapping[str, Any]) -> bool:
    if local.get("id") == incoming.get("id"):
        return True
    if is_placeholder_id(local.get("id")) or is_placeholder_id(incoming.get("id")):
        email = normalize_email(incoming.get("email"))
        return bool(email) and email == normalize_email(local.get("email"))
    return False


def merge(local: List[Dict[str, Any]], incoming: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    Return a new list with `incoming` applied.

    A matching record is replaced in place; otherwise the record is
    prepended (newest first). The input list is not modified.
    """
    record = normalize_record(incoming)
    if record is None:
        return list(local)

    merged = list(local)
    for index, existing in enumerate(merged):
        if _same_record(existing, record):
            merged[index] = record
            return merged
    return [record] + merged


def matches_view(record: Mapping[str, Any], search: Optional[str] = None, service: Optional[str] = None) -> bool:
    """Would the server include this record under the given search/service filter"""
    if service and service != "All" and record.get("service") != service:
        return False
    term = (search or "").strip().lower()
    if not term:
        return True
    for key in ("fullName", "email", "phone", "service", "course"):
        value = record.get(key)
        if isinstance(value, str) and term in value.lower():
            return True
    return False
