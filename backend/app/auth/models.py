"""
Auth SQLAlchemy models: Users and the closed set of workflow roles.
"""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Uuid

from app.database.postgresql import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """Every actor falls in exactly one of these categories."""
    KOREA_AGENT = "korea_agent"        # originating-party agent, signs off the source
    TRANSLATOR = "translator"          # signs off the primary translation
    FOREIGN_LAWYER = "foreign_lawyer"  # signs off localized translations
    FAMILY_VIEWER = "family_viewer"    # read-only
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=UserRole.FAMILY_VIEWER.value)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
