"""
Approval workflow service: the append-only sign-off ledger and the export
readiness gate built on it.

Readiness is always recomputed from the ledger. The status column on a
version is a cache for display and is never read back to make a decision.
"""
import hashlib
import json
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceFailure, ValidationFailure, WorkflowError
from app.core.logging import get_logger
from app.document.models import Document
from app.translation.service import get_version_translations
from app.versioning.models import DocumentVersion, VersionStatus
from app.versioning.service import lock_version, update_version_status
from app.workflow.models import Approval, Decision
from app.workflow.permissions import SOURCE_TARGET
from app.workflow.schemas import ApprovalResponse, ApprovalStatus, RequiredApprovals, TargetStatus

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Ledger: append and read
# ═══════════════════════════════════════════════════════════════════

def validate_decision(decision: str) -> str:
    try:
        return Decision(decision).value
    except ValueError as exc:
        raise ValidationFailure("decision must be 'approved' or 'rejected'") from exc


async def create_approval(
    db: AsyncSession,
    version_id: uuid.UUID,
    target: str,
    actor_id: uuid.UUID,
    role: str,
    decision: str,
    comment: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Approval:
    """Append one decision. No dedup: every call is one row.
    Permission is the caller's job (see permissions.can_approve).
    """
    decision = validate_decision(decision)

    approval = Approval(
        version_id=version_id,
        target_lang=target,
        approved_by=actor_id,
        role=str(getattr(role, "value", role)),
        decision=decision,
        comment=comment or None,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(approval)
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to create approval", extra={
            "event": "approval_create_failed",
            "version_id": str(version_id),
            "target_lang": target,
            "decision": decision,
            "error": str(exc),
        })
        raise PersistenceFailure("Failed to create approval", version_id=version_id) from exc

    logger.info("Approval created", extra={
        "event": "approval_created",
        "approval_id": str(approval.id),
        "version_id": str(version_id),
        "target_lang": target,
        "role": approval.role,
        "decision": decision,
    })
    return approval


def derive_status(entries: Iterable) -> dict:
    """Collapse ledger entries for one target. A rejection anywhere wins,
    regardless of order or of later approvals."""
    decisions = {getattr(e, "decision", e) for e in entries}
    rejected = Decision.REJECTED.value in decisions
    approved = Decision.APPROVED.value in decisions and not rejected
    return {"approved": approved, "rejected": rejected, "pending": not approved and not rejected}


async def _entries_for_target(db: AsyncSession, version_id: uuid.UUID, target: str) -> List[Approval]:
    try:
        result = await db.execute(
            select(Approval)
            .where(Approval.version_id == version_id, Approval.target_lang == target)
            .order_by(Approval.created_at.desc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to check approval status", extra={
            "event": "approval_read_failed", "version_id": str(version_id), "target_lang": target, "error": str(exc),
        })
        raise PersistenceFailure("Failed to check approval status", version_id=version_id) from exc
    return list(result.scalars().all())


async def check_approval_status(db: AsyncSession, version_id: uuid.UUID, target: str) -> ApprovalStatus:
    """Status of one (version, target) pair; approvals newest first."""
    entries = await _entries_for_target(db, version_id, target)
    return ApprovalStatus(
        **derive_status(entries),
        approvals=[ApprovalResponse.model_validate(e) for e in entries],
    )


async def get_approval_chain(db: AsyncSession, version_id: uuid.UUID) -> List[Approval]:
    """Every decision on a version across all targets, oldest first."""
    try:
        result = await db.execute(
            select(Approval)
            .where(Approval.version_id == version_id)
            .order_by(Approval.created_at.asc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to get approval chain", extra={
            "event": "approval_read_failed", "version_id": str(version_id), "error": str(exc),
        })
        raise PersistenceFailure("Failed to get approval chain", version_id=version_id) from exc
    return list(result.scalars().all())


# ═══════════════════════════════════════════════════════════════════
#  Readiness
# ═══════════════════════════════════════════════════════════════════

async def get_required_approvals(
    db: AsyncSession, version_id: uuid.UUID, target_langs: Iterable[str]
) -> RequiredApprovals:
    """Source plus every target language, each required."""
    source = derive_status(await _entries_for_target(db, version_id, SOURCE_TARGET))
    translations = {}
    for lang in dict.fromkeys(target_langs):
        translations[lang] = TargetStatus(**derive_status(await _entries_for_target(db, version_id, lang)))
    return RequiredApprovals(source=TargetStatus(**source), translations=translations)


def is_ready(required: RequiredApprovals) -> bool:
    """Strict AND over every required target."""
    dimensions = [required.source, *required.translations.values()]
    return all(d.approved and not d.rejected for d in dimensions if d.required)


def next_version_status(required: RequiredApprovals) -> str:
    if is_ready(required):
        return VersionStatus.APPROVED.value
    dimensions = [required.source, *required.translations.values()]
    if any(d.rejected for d in dimensions if d.required):
        return VersionStatus.REJECTED.value
    return VersionStatus.PENDING_APPROVAL.value


async def is_version_ready_for_export(
    db: AsyncSession, version_id: uuid.UUID, target_langs: Iterable[str]
) -> bool:
    """Unreadable ledger means not ready."""
    try:
        required = await get_required_approvals(db, version_id, target_langs)
    except WorkflowError as exc:
        logger.error("Readiness check failed, treating version as not ready", extra={
            "event": "readiness_failed", "version_id": str(version_id), "error": exc.message,
        })
        return False
    return is_ready(required)


async def record_decision(
    db: AsyncSession,
    document: Document,
    version: DocumentVersion,
    target: str,
    actor_id: uuid.UUID,
    role: str,
    decision: str,
    comment: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> dict:
    """Append a decision, then rederive the version status from the ledger
    against the document's own target languages."""
    approval = await create_approval(
        db, version.id, target, actor_id, role, decision,
        comment=comment, ip_address=ip_address, user_agent=user_agent,
    )

    try:
        async with db.begin_nested():
            required = await get_required_approvals(db, version.id, document.target_langs or [])
        status = next_version_status(required)
    except WorkflowError as exc:
        # The recorded decision stands; an unreadable ledger is not ready
        logger.error("Readiness recompute failed after decision", extra={
            "event": "readiness_recompute_failed",
            "version_id": str(version.id),
            "target_lang": target,
            "error": exc.message,
        })
        required = None
        status = VersionStatus.PENDING_APPROVAL.value

    if version.status == VersionStatus.EXPORTED.value:
        # Exported is terminal; the decision is still on the ledger
        status = version.status
    else:
        await update_version_status(db, version.id, status)

    logger.info("Version status rederived", extra={
        "event": "version_status_derived",
        "document_id": str(document.id),
        "version_id": str(version.id),
        "target_lang": target,
        "decision": approval.decision,
        "status": status,
    })
    return {"approval": approval, "required": required, "status": status}


# ═══════════════════════════════════════════════════════════════════
#  Export
# ═══════════════════════════════════════════════════════════════════

def _sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


async def build_export_package(
    db: AsyncSession,
    document: Document,
    version: DocumentVersion,
    target_langs: List[str],
    exported_by: uuid.UUID,
) -> dict:
    """Manifest of what was signed off. Refuses unless the version is ready
    for exactly these languages; marks the version exported."""
    if version.status == VersionStatus.EXPORTED.value:
        raise ValidationFailure("Version has already been exported", version_id=version.id)

    if not await is_version_ready_for_export(db, version.id, target_langs):
        raise ValidationFailure(
            "Version is not ready for export. All required approvals must be obtained.",
            version_id=version.id,
        )

    translations = {}
    for lang in target_langs:
        rows = await get_version_translations(db, version.id, lang)
        text = "\n\n".join(t.translated_text for t in rows)
        translations[lang] = {"segment_count": len(rows), "sha256": _sha256_text(text)}

    chain = await get_approval_chain(db, version.id)
    manifest = {
        "document_id": str(document.id),
        "case_id": document.case_id,
        "title": document.title,
        "version_id": str(version.id),
        "version_no": version.version_no,
        "sha256": version.sha256,
        "source_lang": document.source_lang,
        "target_langs": list(target_langs),
        "translations": translations,
        "approval_chain": [
            {
                "target_lang": a.target_lang,
                "decision": a.decision,
                "role": a.role,
                "approved_by": str(a.approved_by),
                "created_at": a.created_at.isoformat() if a.created_at else None,
            }
            for a in chain
        ],
        "exported_by": str(exported_by),
        "exported_at": datetime.now(timezone.utc).isoformat(),
    }
    manifest["package_hash"] = _sha256_text(json.dumps(manifest, sort_keys=True))

    await lock_version(db, version.id, VersionStatus.EXPORTED.value)

    logger.info("Version exported", extra={
        "event": "version_exported",
        "document_id": str(document.id),
        "version_id": str(version.id),
        "package_hash": manifest["package_hash"],
    })
    return manifest
