"""
Registration Model - Stores project registration submissions
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Text, Integer, Index

from app.core.database import Base

NOT_SPECIFIED = "Not specified"


def generate_uuid() -> str:
    """Generate a UUID string"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Registration(Base):
    """One submitted applicant record; never updated after insert"""
    __tablename__ = "registrations"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    # Personal Information
    full_name = Column(String(100), nullable=False)
    # Stored trimmed and lower-cased; the unique index is the race-safe duplicate guard
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(10), nullable=False)

    # Academic Information
    qualification = Column(String(100), nullable=False, default=NOT_SPECIFIED)
    passing_year = Column(Integer, nullable=False)

    # Chosen offering
    service = Column(String(100), nullable=False, index=True)
    course = Column(String(100), nullable=False)

    message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_registrations_created_at_id", "created_at", "id"),
    )

    def __repr__(self):
        return f"<Registration {self.full_name} - {self.email}>"
