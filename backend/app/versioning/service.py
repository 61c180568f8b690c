"""
Version store: append-only, SHA-256 addressed document snapshots.
A new edit always inserts a new version; existing rows are never rewritten
apart from their workflow status.
"""
import hashlib
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from bson import Binary, ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundFailure, PersistenceFailure, ValidationFailure
from app.core.logging import get_logger
from app.database.mongodb import version_snapshots_collection
from app.document.models import Document
from app.versioning.models import DocumentVersion, VersionStatus

logger = get_logger(__name__)

_LOCK_STATUSES = {VersionStatus.APPROVED.value, VersionStatus.EXPORTED.value}


def calculate_sha256(content: Union[bytes, str]) -> str:
    """Hex SHA-256 of the snapshot bytes (strings are hashed as UTF-8)."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    return hashlib.sha256(data).hexdigest()


# ═══════════════════════════════════════════════════════════════════
#  Create
# ═══════════════════════════════════════════════════════════════════

async def create_document_version(
    db: AsyncSession,
    document_id: uuid.UUID,
    content: Union[bytes, str],
    created_by: Optional[uuid.UUID],
    content_type: str = "text/plain",
    change_summary: str = "",
) -> DocumentVersion:
    """Snapshot `content` as the next version of the document."""
    document = await db.get(Document, document_id)
    if not document:
        raise NotFoundFailure("Document not found", document_id=document_id)

    data = content.encode("utf-8") if isinstance(content, str) else content
    sha256 = calculate_sha256(data)

    try:
        result = await version_snapshots_collection().insert_one({
            "document_id": str(document_id),
            "sha256": sha256,
            "content_type": content_type,
            "content": Binary(data),
            "created_at": datetime.now(timezone.utc),
        })
    except PyMongoError as exc:
        logger.error("Failed to store version snapshot", extra={
            "event": "snapshot_write_failed", "document_id": str(document_id), "error": str(exc),
        })
        raise PersistenceFailure("Failed to store version snapshot", document_id=document_id) from exc

    try:
        max_result = await db.execute(
            select(func.max(DocumentVersion.version_no)).where(DocumentVersion.document_id == document_id)
        )
        version_no = (max_result.scalar() or 0) + 1

        version = DocumentVersion(
            document_id=document_id,
            version_no=version_no,
            sha256=sha256,
            snapshot_id=str(result.inserted_id),
            content_type=content_type,
            size_bytes=len(data),
            change_summary=change_summary,
            status=VersionStatus.DRAFT.value,
            created_by=created_by,
        )
        db.add(version)
        await db.flush()

        # Always point at the newest version
        document.current_version_id = version.id
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to create document version", extra={
            "event": "version_create_failed",
            "document_id": str(document_id),
            "created_by": str(created_by) if created_by else None,
            "error": str(exc),
        })
        raise PersistenceFailure("Failed to create document version", document_id=document_id) from exc

    logger.info("Document version created", extra={
        "event": "version_created",
        "document_id": str(document_id),
        "version_id": str(version.id),
        "version_no": version_no,
        "sha256": sha256,
    })
    return version


# ═══════════════════════════════════════════════════════════════════
#  Read
# ═══════════════════════════════════════════════════════════════════

async def get_version(db: AsyncSession, version_id: uuid.UUID) -> Optional[DocumentVersion]:
    try:
        return await db.get(DocumentVersion, version_id)
    except SQLAlchemyError as exc:
        logger.error("Failed to get version", extra={"event": "version_read_failed", "version_id": str(version_id), "error": str(exc)})
        raise PersistenceFailure("Failed to get version", version_id=version_id) from exc


async def get_version_for_document(
    db: AsyncSession, document_id: uuid.UUID, version_id: uuid.UUID
) -> DocumentVersion:
    """Version lookup scoped to a document. Foreign versions are reported as missing."""
    version = await get_version(db, version_id)
    if not version or version.document_id != document_id:
        raise NotFoundFailure("Version not found", document_id=document_id, version_id=version_id)
    return version


async def get_version_history(db: AsyncSession, document_id: uuid.UUID) -> List[DocumentVersion]:
    """All versions of a document, newest first."""
    try:
        result = await db.execute(
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_no.desc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to get version history", extra={"event": "version_read_failed", "document_id": str(document_id), "error": str(exc)})
        raise PersistenceFailure("Failed to get version history") from exc
    return list(result.scalars().all())


async def get_version_content(version: DocumentVersion) -> bytes:
    """Raw snapshot bytes from MongoDB."""
    if not version.snapshot_id:
        raise NotFoundFailure("Version has no stored snapshot", version_id=version.id)
    try:
        doc = await version_snapshots_collection().find_one({"_id": ObjectId(version.snapshot_id)})
    except InvalidId as exc:
        raise NotFoundFailure("Version snapshot id is malformed", version_id=version.id) from exc
    except PyMongoError as exc:
        logger.error("Failed to read version snapshot", extra={"event": "snapshot_read_failed", "version_id": str(version.id), "error": str(exc)})
        raise PersistenceFailure("Failed to read version snapshot", version_id=version.id) from exc
    if not doc:
        raise NotFoundFailure("Version snapshot not found", version_id=version.id)
    return bytes(doc["content"])


async def verify_version_integrity(
    db: AsyncSession, version_id: uuid.UUID, content: Union[bytes, str]
) -> bool:
    """True when `content` hashes to the version's stored SHA-256."""
    version = await get_version(db, version_id)
    if not version:
        return False
    return calculate_sha256(content) == version.sha256


# ═══════════════════════════════════════════════════════════════════
#  Status: the only mutable field
# ═══════════════════════════════════════════════════════════════════

async def update_version_status(db: AsyncSession, version_id: uuid.UUID, status: str) -> DocumentVersion:
    """Last writer wins. Treat the stored status as a cache, never as readiness."""
    try:
        status = VersionStatus(status).value
    except ValueError as exc:
        raise ValidationFailure(f"Unknown version status '{status}'") from exc

    version = await get_version(db, version_id)
    if not version:
        raise NotFoundFailure("Version not found", version_id=version_id)

    version.status = status
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to update version status", extra={
            "event": "version_status_failed", "version_id": str(version_id), "status": status, "error": str(exc),
        })
        raise PersistenceFailure("Failed to update version status", version_id=version_id) from exc

    logger.info("Version status updated", extra={"event": "version_status", "version_id": str(version_id), "status": status})
    return version


async def lock_version(db: AsyncSession, version_id: uuid.UUID, status: str) -> DocumentVersion:
    """Mark a version approved or exported. Exported versions are final."""
    if status not in _LOCK_STATUSES:
        raise ValidationFailure("Versions can only be locked as 'approved' or 'exported'")

    version = await get_version(db, version_id)
    if not version:
        raise NotFoundFailure("Version not found", version_id=version_id)
    if version.status == VersionStatus.EXPORTED.value:
        raise ValidationFailure("Version is already exported and cannot be modified")

    return await update_version_status(db, version_id, status)
