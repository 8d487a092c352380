"""
Registrations API - public submission plus the admin list/get/delete views
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.rate_limiter import registration_rate_limit
from app.schemas.registration import (
    MessageResponse,
    RegistrationEnvelope,
    RegistrationListResponse,
    ServiceStats,
    ServiceStatsResponse,
)
from app.services.admin_channel import admin_channel
from app.services.registration_service import RegistrationService
from app.services.registration_store import RegistrationStore

router = APIRouter(prefix="/registrations", tags=["Registrations"])


def get_registration_service(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
) -> RegistrationService:
    """Service wired to the request's session; broadcasts run after the response is sent"""

    def notify(payload: Dict[str, Any]) -> None:
        background_tasks.add_task(admin_channel.publish_new_registration, payload)

    return RegistrationService(RegistrationStore(db), notify=notify)


@router.post("", response_model=RegistrationEnvelope, status_code=status.HTTP_201_CREATED)
@registration_rate_limit()
async def create_registration(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Submit a registration.

    This endpoint is public and doesn't require authentication.
    Validation failures and duplicate emails return 400 with a message.
    """
    registration = await service.create(payload)
    return RegistrationEnvelope(data=registration)


@router.get("", response_model=RegistrationListResponse)
async def list_registrations(
    page: int = Query(1, description="1-indexed page number"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="Items per page (default 100)"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name, email, phone, service or course"),
    service_filter: Optional[str] = Query(None, alias="service", description="Exact service name; 'All' disables the filter"),
    service: RegistrationService = Depends(get_registration_service),
):
    """List registrations, newest first"""
    result = await service.list(page=page, page_size=page_size, search=search, service=service_filter)
    return RegistrationListResponse(
        data=result["records"],
        total=result["total"],
        page=result["page"],
        page_size=result["page_size"],
        total_pages=result["total_pages"],
        has_next_page=result["has_next_page"],
        has_previous_page=result["has_previous_page"],
    )


@router.get("/stats", response_model=ServiceStatsResponse)
async def registration_stats(service: RegistrationService = Depends(get_registration_service)):
    """Registration counts per service"""
    counts = await service.service_counts()
    return ServiceStatsResponse(data=ServiceStats(**counts))


@router.get("/{registration_id}", response_model=RegistrationEnvelope)
async def get_registration(
    registration_id: str,
    service: RegistrationService = Depends(get_registration_service),
):
    registration = await service.get(registration_id)
    return RegistrationEnvelope(data=registration)


@router.delete("/{registration_id}", response_model=MessageResponse)
async def delete_registration(
    registration_id: str,
    service: RegistrationService = Depends(get_registration_service),
):
    """Hard delete a registration"""
    await service.delete(registration_id)
    return MessageResponse(message="Registration deleted")
