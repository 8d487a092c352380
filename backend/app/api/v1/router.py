from fastapi import APIRouter
from app.api.v1.endpoints import registrations, catalog, health

api_router = APIRouter()

# Deep health checks (use /health/ready for load balancers)
api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "registration-api"}


api_router.include_router(registrations.router)
api_router.include_router(catalog.router)
