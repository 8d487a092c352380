# Pydantic schemas
from app.schemas.registration import (
    RegistrationCreate,
    RegistrationResponse,
    RegistrationEnvelope,
    RegistrationListResponse,
    ServiceStats,
    ServiceStatsResponse,
    CatalogResponse,
    MessageResponse,
)
