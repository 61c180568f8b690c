"""
Segment translations: one row per (segment, target language).
"""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, ForeignKey, DateTime, UniqueConstraint, Uuid

from app.database.postgresql import Base


class TranslationEngine(str, enum.Enum):
    AI = "ai"
    HUMAN = "human"
    HYBRID = "hybrid"


class TranslationStatus(str, enum.Enum):
    DRAFT = "draft"
    REVIEWED = "reviewed"
    APPROVED = "approved"


class SegmentTranslation(Base):
    __tablename__ = "segment_translations"
    __table_args__ = (
        UniqueConstraint("segment_id", "target_lang", name="uq_segment_translation_lang"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    segment_id = Column(Uuid, ForeignKey("version_segments.id", ondelete="CASCADE"), nullable=False, index=True)
    target_lang = Column(String(10), nullable=False)
    translated_text = Column(Text, nullable=False, default="")
    engine = Column(String(10), nullable=False, default=TranslationEngine.AI.value)
    status = Column(String(20), nullable=False, default=TranslationStatus.DRAFT.value)
    created_by = Column(Uuid, nullable=True)
    reviewed_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))
