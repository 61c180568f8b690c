"""
Version segments: the translatable units of a version's source text.
"""
import uuid
from sqlalchemy import Column, String, Text, Integer, ForeignKey, Uuid

from app.database.postgresql import Base


class VersionSegment(Base):
    __tablename__ = "version_segments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    version_id = Column(Uuid, ForeignKey("document_versions.id", ondelete="CASCADE"), nullable=False, index=True)
    seq = Column(Integer, nullable=False)
    key = Column(String(64), nullable=False)
    source_text = Column(Text, nullable=False, default="")
