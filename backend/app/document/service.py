"""
Document service: create and look up documents.
"""
import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.service import AuditActions, log_audit_event
from app.config import settings
from app.core.errors import NotFoundFailure, PersistenceFailure
from app.core.logging import get_logger
from app.document.models import Document

logger = get_logger(__name__)


async def create_document(
    db: AsyncSession,
    title: str,
    created_by: uuid.UUID,
    case_id: Optional[str] = None,
    source_lang: Optional[str] = None,
    target_langs: Optional[List[str]] = None,
) -> Document:
    document = Document(
        title=title,
        case_id=case_id,
        source_lang=source_lang or settings.DEFAULT_SOURCE_LANG,
        target_langs=target_langs if target_langs is not None else settings.default_target_langs,
        created_by=created_by,
    )
    db.add(document)
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to create document", extra={"event": "document_create_failed", "error": str(exc)})
        raise PersistenceFailure("Failed to create document") from exc

    logger.info("Document created", extra={
        "event": "document_created",
        "document_id": str(document.id),
        "target_langs": document.target_langs,
    })
    await log_audit_event(
        "document", document.id, AuditActions.DOCUMENT_CREATED,
        actor=created_by, case_id=case_id,
        meta={"title": title, "target_langs": document.target_langs},
    )
    return document


async def get_document(db: AsyncSession, document_id: uuid.UUID) -> Document:
    try:
        document = await db.get(Document, document_id)
    except SQLAlchemyError as exc:
        logger.error("Failed to get document", extra={"event": "document_read_failed", "document_id": str(document_id), "error": str(exc)})
        raise PersistenceFailure("Failed to get document") from exc
    if not document:
        raise NotFoundFailure("Document not found", document_id=document_id)
    return document
