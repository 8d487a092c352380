# API endpoints
from . import registrations, catalog, health, realtime

__all__ = ["registrations", "catalog", "health", "realtime"]
