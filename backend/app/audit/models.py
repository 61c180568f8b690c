"""
Audit trail model: one immutable row per state-changing workflow event.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, JSON, Uuid

from app.database.postgresql import Base


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id = Column(String(100), nullable=True, index=True)
    entity_type = Column(String(50), nullable=False)  # document | version | translation | approval | export | case
    entity_id = Column(String(100), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    meta = Column(JSON, nullable=False, default=dict)
    actor = Column(String(100), nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
