"""
Document: the workflow's top-level entity.
Carries its own list of required translation targets; content lives in versions.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON, Uuid

from app.database.postgresql import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id = Column(String(100), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    source_lang = Column(String(10), nullable=False, default="ko")
    target_langs = Column(JSON, nullable=False, default=list)
    created_by = Column(Uuid, nullable=True)
    current_version_id = Column(Uuid, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
