"""
Audit trail service.
Writes go through their own session and commit so an audit failure can never
roll back, or fail, the workflow operation that triggered it.
"""
from collections import Counter
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.models import AuditEvent
from app.core.errors import PersistenceFailure
from app.core.logging import get_logger
from app.database.postgresql import AsyncSessionLocal

logger = get_logger(__name__)


class AuditActions:
    CASE_CREATED = "case_created"
    DOCUMENT_CREATED = "document_created"
    VERSION_CREATED = "version_created"
    VERSION_LOCKED = "version_locked"
    SEGMENT_CREATED = "segment_created"
    TRANSLATION_CREATED = "translation_created"
    TRANSLATION_REVIEWED = "translation_reviewed"
    TRANSLATION_APPROVED = "translation_approved"
    APPROVAL_CREATED = "approval_created"
    APPROVAL_REJECTED = "approval_rejected"
    EXPORT_CREATED = "export_created"


async def log_audit_event(
    entity_type: str,
    entity_id,
    action: str,
    actor=None,
    meta: Optional[dict] = None,
    case_id: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> Optional[AuditEvent]:
    """Fire-and-forget audit write. Returns None when the write failed."""
    try:
        async with AsyncSessionLocal() as session:
            event = AuditEvent(
                case_id=case_id,
                entity_type=entity_type,
                entity_id=str(entity_id),
                action=action,
                meta=meta or {},
                actor=str(actor) if actor else None,
                ip_address=ip_address,
            )
            session.add(event)
            await session.commit()
    except Exception as exc:
        logger.error("Failed to log audit event", extra={
            "event": "audit_write_failed",
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "action": action,
            "error": str(exc),
        })
        return None

    logger.info("Audit event logged", extra={
        "event": "audit_logged",
        "audit_id": str(event.id),
        "entity_type": entity_type,
        "entity_id": str(entity_id),
        "action": action,
    })
    return event


async def get_audit_trail(db: AsyncSession, case_id: str) -> list[AuditEvent]:
    """All events for a case, oldest first."""
    try:
        result = await db.execute(
            select(AuditEvent)
            .where(AuditEvent.case_id == case_id)
            .order_by(AuditEvent.created_at.asc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to get audit trail", extra={"event": "audit_read_failed", "case_id": case_id, "error": str(exc)})
        raise PersistenceFailure("Failed to get audit trail", case_id=case_id) from exc
    return list(result.scalars().all())


async def get_entity_audit_events(db: AsyncSession, entity_type: str, entity_id) -> list[AuditEvent]:
    try:
        result = await db.execute(
            select(AuditEvent)
            .where(AuditEvent.entity_type == entity_type, AuditEvent.entity_id == str(entity_id))
            .order_by(AuditEvent.created_at.asc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to get entity audit events", extra={
            "event": "audit_read_failed", "entity_type": entity_type,
            "entity_id": str(entity_id), "error": str(exc),
        })
        raise PersistenceFailure("Failed to get entity audit events") from exc
    return list(result.scalars().all())


async def generate_audit_report(db: AsyncSession, case_id: str) -> dict:
    """Case audit trail plus counts by entity type, action and actor."""
    events = await get_audit_trail(db, case_id)
    return {
        "case_id": case_id,
        "total_events": len(events),
        "events": events,
        "summary": {
            "by_type": dict(Counter(e.entity_type for e in events)),
            "by_action": dict(Counter(e.action for e in events)),
            "by_actor": dict(Counter(e.actor or "system" for e in events)),
        },
    }
