# Re-export all models for convenient imports
from app.models.registration import Registration, NOT_SPECIFIED

__all__ = [
    "Registration",
    "NOT_SPECIFIED",
]
