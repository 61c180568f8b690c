"""
Translation API endpoints. Mounted under /api/documents.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.service import AuditActions, log_audit_event
from app.core.errors import ValidationFailure
from app.core.logging import get_logger
from app.database.postgresql import get_db
from app.document.schemas import SuccessResponse
from app.document.service import get_document
from app.email_service.service import send_translation_ready_email
from app.middleware.auth_middleware import get_current_user, get_request_meta
from app.translation import service
from app.translation.schemas import (
    ReviewTranslationRequest, SegmentTranslationResponse,
    TranslateRequest, TranslationListResponse,
)
from app.versioning.models import VersionStatus
from app.versioning.service import get_version_for_document, update_version_status

logger = get_logger(__name__)

router = APIRouter()


@router.get("/{document_id}/translate", response_model=TranslationListResponse)
async def list_translations(
    document_id: UUID,
    version_id: UUID = Query(..., alias="versionId"),
    target_lang: str = Query(..., alias="targetLang"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await get_version_for_document(db, document_id, version_id)
    translations = await service.get_version_translations(db, version_id, target_lang)
    items = [SegmentTranslationResponse.model_validate(t) for t in translations]
    return TranslationListResponse(translations=items, count=len(items))


@router.post("/{document_id}/translate", response_model=SuccessResponse, status_code=201)
async def translate_document(
    document_id: UUID,
    data: TranslateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Translate every segment of a version, then hand it over for approval."""
    document = await get_document(db, document_id)
    version = await get_version_for_document(db, document_id, data.version_id)
    if version.status == VersionStatus.EXPORTED.value:
        raise ValidationFailure("Exported versions cannot be retranslated", version_id=version.id)

    await update_version_status(db, version.id, VersionStatus.PENDING_TRANSLATION.value)
    translations = await service.translate_version(
        db,
        version_id=version.id,
        source_lang=data.source_lang or document.source_lang,
        target_lang=data.target_lang,
        created_by=current_user["user_id"],
    )
    await update_version_status(db, version.id, VersionStatus.PENDING_APPROVAL.value)

    await log_audit_event(
        "translation", version.id, AuditActions.TRANSLATION_CREATED,
        actor=current_user["user_id"],
        case_id=document.case_id,
        ip_address=get_request_meta(request)["ip_address"],
        meta={"target_lang": data.target_lang, "segment_count": len(translations)},
    )
    await send_translation_ready_email(
        document_title=document.title,
        version_no=version.version_no,
        target_lang=data.target_lang,
        segment_count=len(translations),
    )

    items = [SegmentTranslationResponse.model_validate(t) for t in translations]
    return SuccessResponse(
        message="Translation completed",
        data=TranslationListResponse(translations=items, count=len(items)),
    )


@router.put("/{document_id}/translate", response_model=SuccessResponse)
async def review_translation(
    document_id: UUID,
    data: ReviewTranslationRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    document = await get_document(db, document_id)
    translation = await service.review_translation(
        db, data.translation_id, reviewer=current_user["user_id"], approved=data.approved,
        document_id=document.id,
    )

    await log_audit_event(
        "translation", translation.id,
        AuditActions.TRANSLATION_APPROVED if data.approved else AuditActions.TRANSLATION_REVIEWED,
        actor=current_user["user_id"],
        case_id=document.case_id,
        ip_address=get_request_meta(request)["ip_address"],
        meta={"approved": data.approved, "target_lang": translation.target_lang},
    )
    return SuccessResponse(
        message="Translation approved" if data.approved else "Translation reviewed",
        data=SegmentTranslationResponse.model_validate(translation),
    )
