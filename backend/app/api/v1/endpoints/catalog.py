"""
Service catalog API - the services and courses a registration can choose from
"""

from fastapi import APIRouter

from app.core.config import settings
from app.schemas.registration import CatalogResponse

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("", response_model=CatalogResponse)
async def get_catalog():
    """Service -> courses mapping from SERVICE_CATALOG_STR (or the built-in catalog)"""
    return CatalogResponse(data=settings.SERVICE_CATALOG)
