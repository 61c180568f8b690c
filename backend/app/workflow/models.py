"""
Approval ledger model.
Rows are inserted once and never updated or deleted; the listeners below turn
any attempt into a PersistenceFailure at flush time.
"""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, ForeignKey, DateTime, Uuid, event

from app.core.errors import PersistenceFailure
from app.database.postgresql import Base


class Decision(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    version_id = Column(Uuid, ForeignKey("document_versions.id", ondelete="CASCADE"), nullable=False, index=True)
    target_lang = Column(String(20), nullable=False, index=True)  # "source" or a language code
    approved_by = Column(Uuid, nullable=False)
    role = Column(String(30), nullable=False)  # role at time of decision
    decision = Column(String(10), nullable=False)
    comment = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)


@event.listens_for(Approval, "before_update")
def _refuse_update(mapper, connection, target):
    raise PersistenceFailure("Approvals are append-only and cannot be modified", approval_id=target.id)


@event.listens_for(Approval, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise PersistenceFailure("Approvals are append-only and cannot be deleted", approval_id=target.id)
