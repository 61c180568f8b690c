"""
Document versions: immutable, hash-addressed content snapshots.
The bytes live in MongoDB (`version_snapshots`); this table keeps the address.
"""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Integer, ForeignKey, DateTime, UniqueConstraint, Uuid

from app.database.postgresql import Base


class VersionStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_TRANSLATION = "pending_translation"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPORTED = "exported"


class DocumentVersion(Base):
    """One snapshot per edit. Only `status` ever changes after insert."""
    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint("document_id", "version_no", name="uq_document_version_no"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    version_no = Column(Integer, nullable=False)
    sha256 = Column(String(64), nullable=False, index=True)
    snapshot_id = Column(String(64), nullable=True)
    content_type = Column(String(100), nullable=False, default="text/plain")
    size_bytes = Column(Integer, nullable=False, default=0)
    change_summary = Column(Text, nullable=True)
    status = Column(String(30), nullable=False, default=VersionStatus.DRAFT.value)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
