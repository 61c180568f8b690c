"""
Versioning API endpoints: version history, segments, new versions.
Mounted under /api/documents.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.service import AuditActions, log_audit_event
from app.core.errors import WorkflowError
from app.core.logging import get_logger
from app.database.postgresql import get_db
from app.document.schemas import SuccessResponse
from app.document.service import get_document
from app.middleware.auth_middleware import get_current_user, get_request_meta
from app.segmentation.service import create_version_segments, get_version_segments
from app.versioning import service
from app.versioning.schemas import (
    CreateVersionRequest, CreateVersionResponse,
    SegmentListResponse, SegmentResponse,
    VersionListResponse, VersionResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get("/{document_id}/versions", response_model=VersionListResponse | SegmentListResponse)
async def list_versions(
    document_id: UUID,
    version_id: Optional[UUID] = Query(None, alias="versionId"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Version history, or the segments of one version when versionId is given."""
    await get_document(db, document_id)
    if version_id:
        await service.get_version_for_document(db, document_id, version_id)
        segments = await get_version_segments(db, version_id)
        items = [SegmentResponse.model_validate(s) for s in segments]
        return SegmentListResponse(segments=items, total=len(items))

    versions = await service.get_version_history(db, document_id)
    items = [VersionResponse.model_validate(v) for v in versions]
    return VersionListResponse(versions=items, total=len(items))


@router.post("/{document_id}/versions", response_model=SuccessResponse, status_code=201)
async def create_version(
    document_id: UUID,
    data: CreateVersionRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Snapshot new source text as the next version, then segment it.
    Segmentation failure leaves the version in place and is reported as a warning.
    """
    document = await get_document(db, document_id)
    version = await service.create_document_version(
        db,
        document_id=document_id,
        content=data.source_text,
        created_by=current_user["user_id"],
        change_summary=data.change_summary,
    )

    warnings = []
    segment_count = 0
    try:
        async with db.begin_nested():
            segments = await create_version_segments(db, version.id, data.source_text)
        segment_count = len(segments)
    except WorkflowError as exc:
        logger.error("Segmentation failed for new version", extra={
            "event": "segmentation_failed", "version_id": str(version.id), "error": exc.message,
        })
        warnings.append("Segmentation failed; the version was created without segments")

    await log_audit_event(
        "version", version.id, AuditActions.VERSION_CREATED,
        actor=current_user["user_id"],
        case_id=document.case_id,
        ip_address=get_request_meta(request)["ip_address"],
        meta={"version_no": version.version_no, "sha256": version.sha256, "segment_count": segment_count},
    )

    return SuccessResponse(
        message="Version created",
        data=CreateVersionResponse(
            version=VersionResponse.model_validate(version),
            segment_count=segment_count,
            warnings=warnings,
        ),
    )
