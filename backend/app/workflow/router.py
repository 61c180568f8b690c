"""
Approval workflow API endpoints: sign-off, readiness and export.
Mounted under /api/documents.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.service import AuditActions, log_audit_event
from app.config import settings
from app.core.errors import AuthorizationFailure, ValidationFailure
from app.core.logging import get_logger
from app.database.postgresql import get_db
from app.document.schemas import SuccessResponse
from app.document.service import get_document
from app.middleware.auth_middleware import get_current_user, get_request_meta
from app.versioning.models import VersionStatus
from app.versioning.service import get_version_for_document
from app.workflow import service
from app.workflow.models import Decision
from app.workflow.permissions import SOURCE_TARGET, can_approve, parse_role
from app.workflow.schemas import (
    ApprovalOverview, ApprovalResponse, ApproveRequest,
    DecisionResult, ExportRequest, ReadinessResponse,
)

logger = get_logger(__name__)

router = APIRouter()


# ═══════════════════════════════════════════════════════════════════
#  Approvals
# ═══════════════════════════════════════════════════════════════════

@router.get("/{document_id}/approve", response_model=ApprovalOverview)
async def get_approval_status(
    document_id: UUID,
    version_id: UUID = Query(..., alias="versionId"),
    target_lang: str = Query(SOURCE_TARGET, alias="targetLang"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await get_version_for_document(db, document_id, version_id)
    status = await service.check_approval_status(db, version_id, target_lang)
    chain = await service.get_approval_chain(db, version_id)
    return ApprovalOverview(status=status, chain=[ApprovalResponse.model_validate(a) for a in chain])


@router.post("/{document_id}/approve", response_model=SuccessResponse, status_code=201)
async def approve(
    document_id: UUID,
    data: ApproveRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Record an approve/reject decision for one target of a version.

    400 for a malformed decision, 404 when the version is not part of the
    document, 403 when the caller's role may not sign off the target.
    Nothing is written in any of those cases.
    """
    decision = service.validate_decision(data.decision)

    document = await get_document(db, document_id)
    version = await get_version_for_document(db, document_id, data.version_id)

    role = parse_role(current_user.get("role"))
    if not can_approve(
        role,
        data.target_lang,
        primary_lang=settings.PRIMARY_TRANSLATION_LANG,
        localized_langs=settings.localized_target_langs,
    ):
        logger.warning("Approval refused", extra={
            "event": "approval_forbidden",
            "version_id": str(version.id),
            "target_lang": data.target_lang,
            "role": current_user.get("role"),
        })
        raise AuthorizationFailure(
            "User does not have permission to approve this document",
            version_id=version.id,
            target_lang=data.target_lang,
        )

    meta = get_request_meta(request)
    previous_status = version.status
    outcome = await service.record_decision(
        db,
        document=document,
        version=version,
        target=data.target_lang,
        actor_id=current_user["user_id"],
        role=role.value,
        decision=decision,
        comment=data.comment,
        ip_address=meta["ip_address"],
        user_agent=meta["user_agent"],
    )
    approval = outcome["approval"]

    approved = decision == Decision.APPROVED.value
    await log_audit_event(
        "approval", approval.id,
        AuditActions.APPROVAL_CREATED if approved else AuditActions.APPROVAL_REJECTED,
        actor=current_user["user_id"],
        case_id=document.case_id,
        ip_address=meta["ip_address"],
        meta={
            "version_id": str(version.id),
            "target_lang": data.target_lang,
            "role": role.value,
            "version_status": outcome["status"],
        },
    )
    if outcome["status"] == VersionStatus.APPROVED.value and previous_status != outcome["status"]:
        await log_audit_event(
            "version", version.id, AuditActions.VERSION_LOCKED,
            actor=current_user["user_id"],
            case_id=document.case_id,
            meta={"target_langs": list(document.target_langs or [])},
        )

    return SuccessResponse(
        message="Document approved" if approved else "Document rejected",
        data=DecisionResult(
            approval=ApprovalResponse.model_validate(approval),
            version_status=outcome["status"],
            required=outcome["required"],
        ),
    )


# ═══════════════════════════════════════════════════════════════════
#  Readiness & export
# ═══════════════════════════════════════════════════════════════════

@router.get("/{document_id}/readiness", response_model=ReadinessResponse)
async def get_readiness(
    document_id: UUID,
    version_id: UUID = Query(..., alias="versionId"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    document = await get_document(db, document_id)
    version = await get_version_for_document(db, document_id, version_id)
    target_langs = list(document.target_langs or [])
    required = await service.get_required_approvals(db, version.id, target_langs)
    return ReadinessResponse(
        version_id=version.id,
        version_status=version.status,
        target_langs=target_langs,
        required=required,
        ready=service.is_ready(required),
    )


def _export_langs(document_langs: list, requested: Optional[list]) -> list:
    if requested is None:
        return list(document_langs)
    extra = [lang for lang in requested if lang not in document_langs]
    if extra:
        raise ValidationFailure(f"Languages not configured for this document: {', '.join(extra)}")
    return list(dict.fromkeys(requested))


@router.post("/{document_id}/export", response_model=SuccessResponse, status_code=201)
async def export_version(
    document_id: UUID,
    data: ExportRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Build the signed-off package manifest. 400 unless every required target is approved."""
    document = await get_document(db, document_id)
    version = await get_version_for_document(db, document_id, data.version_id)
    target_langs = _export_langs(document.target_langs or [], data.target_langs)

    manifest = await service.build_export_package(
        db, document, version, target_langs, exported_by=current_user["user_id"],
    )

    await log_audit_event(
        "export", version.id, AuditActions.EXPORT_CREATED,
        actor=current_user["user_id"],
        case_id=document.case_id,
        ip_address=get_request_meta(request)["ip_address"],
        meta={"package_hash": manifest["package_hash"], "target_langs": target_langs},
    )
    return SuccessResponse(message="Version exported", data=manifest)
