"""
Registration Service - Business logic for registration submissions

Handles:
- Validation and normalization of submitted fields (all violations at once)
- Duplicate email detection
- Persistence and the single "new registration" notification per create
- Filtered, paginated listing with per-row coercion
"""

import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import (
    DuplicateEmailError,
    RegistrationNotFoundError,
    RegistrationValidationError,
)
from app.core.logging_config import logger
from app.schemas.registration import (
    FIELD_LABELS,
    RegistrationCreate,
    RegistrationResponse,
)
from app.services.registration_coercion import coerce_registration
from app.services.registration_store import RegistrationStore
from app.utils.pagination import build_page_meta, clamp_page

# Receives the stored record's JSON payload; must not block the caller
Notifier = Callable[[Dict[str, Any]], None]

ALL_SERVICES = "All"


def _to_camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


def _to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def collect_field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into [{"field", "message"}] with form-friendly wording"""
    errors: List[Dict[str, str]] = []
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        # loc carries the camelCase alias
        field = _to_snake(str(loc[0]))
        label = FIELD_LABELS.get(field, field)
        if err.get("type") == "missing" or (err.get("input", ...) is None and err.get("type", "").endswith("_type")):
            message = f"{label} is required"
        elif err.get("type") == "value_error" and err.get("ctx", {}).get("error") is not None:
            message = str(err["ctx"]["error"])
        elif err.get("type") in ("int_parsing", "int_type"):
            message = f"{label} must be a number"
        else:
            message = f"{label}: {err.get('msg', 'invalid value')}"
        errors.append({"field": _to_camel(field), "message": message})
    return errors


class RegistrationService:
    """Validates, stores and lists registrations"""

    def __init__(
        self,
        store: RegistrationStore,
        notify: Optional[Notifier] = None,
        catalog: Optional[Dict[str, List[str]]] = None,
        enforce_catalog: Optional[bool] = None,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ):
        self.store = store
        self._notify = notify
        self.catalog = catalog if catalog is not None else settings.SERVICE_CATALOG
        self.enforce_catalog = settings.ENFORCE_SERVICE_CATALOG if enforce_catalog is None else enforce_catalog
        self.default_page_size = default_page_size or settings.DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or settings.MAX_PAGE_SIZE

    # ==================== CREATE ====================

    def validate(self, data: Any) -> RegistrationCreate:
        """Validate and normalize raw input, reporting every violation together"""
        if not isinstance(data, Mapping):
            raise RegistrationValidationError.single("body", "Request body must be a JSON object")

        context = {"catalog": self.catalog} if self.enforce_catalog else None
        try:
            return RegistrationCreate.model_validate(dict(data), context=context)
        except PydanticValidationError as e:
            raise RegistrationValidationError(collect_field_errors(e))

    async def create(self, data: Any) -> RegistrationResponse:
        """
        Create a registration.

        Raises:
            RegistrationValidationError: input failed validation
            DuplicateEmailError: normalized email already registered
            UnavailableError: storage timed out or is unreachable
        """
        registration_in = self.validate(data)

        # Fast path only; the unique index decides races
        existing = await self.store.find_by_email(registration_in.email)
        if existing is not None:
            logger.info(f"[Registrations] Duplicate submission for {registration_in.email}")
            raise DuplicateEmailError(registration_in.email)

        stored = await self.store.insert(registration_in.model_dump())
        registration = coerce_registration(stored)
        if registration is None:
            # Freshly inserted rows always carry id and createdAt
            raise RuntimeError(f"Stored registration {stored.id} could not be read back")

        logger.info(
            f"[Registrations] New registration {registration.id}: {registration.email} "
            f"for {registration.service} / {registration.course}"
        )
        self._publish(registration)
        return registration

    def _publish(self, registration: RegistrationResponse) -> None:
        if self._notify is None:
            return
        try:
            self._notify(registration.to_payload())
        except Exception as e:
            logger.log_error_with_context(e, context="registration notify", registration_id=registration.id)

    # ==================== READ ====================

    async def list(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        service: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return {records, total, page, page_size, total_pages, has_next_page, has_previous_page}"""
        page, page_size = clamp_page(page, page_size or self.default_page_size, self.max_page_size)
        search = (search or "").strip() or None
        service = (service or "").strip() or None
        if service == ALL_SERVICES:
            service = None

        rows, total = await self.store.list_page(page, page_size, search=search, service=service)

        records: List[RegistrationResponse] = []
        for row in rows:
            record = coerce_registration(row)
            if record is None:
                logger.warning(
                    f"[Registrations] Dropping malformed stored record: id={row.get('id')!r}",
                    extra={"event_type": "malformed_record", "record_id": str(row.get("id"))}
                )
                continue
            records.append(record)

        return {"records": records, **build_page_meta(total, page, page_size)}

    async def get(self, registration_id: str) -> RegistrationResponse:
        stored = await self.store.find_by_id(registration_id)
        record = coerce_registration(stored) if stored is not None else None
        if record is None:
            raise RegistrationNotFoundError(registration_id)
        return record

    async def service_counts(self) -> Dict[str, Any]:
        services = await self.store.count_by_service()
        return {"total": sum(services.values()), "services": services}

    # ==================== DELETE ====================

    async def delete(self, registration_id: str) -> None:
        deleted = await self.store.delete(registration_id)
        if not deleted:
            raise RegistrationNotFoundError(registration_id)
        logger.info(f"[Registrations] Deleted registration {registration_id}")
