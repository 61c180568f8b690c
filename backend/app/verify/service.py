"""
Verification: lets a recipient confirm a document version is genuine and
see who signed it off.
"""
import hmac
import uuid
from typing import Optional

from app.audit.service import get_audit_trail
from app.core.errors import NotFoundFailure, WorkflowError
from app.core.logging import get_logger
from app.document.models import Document
from app.verify.schemas import PublicApprovalEntry, VerificationResponse, VerifyAuditEntry
from app.versioning.service import get_version
from app.workflow.service import get_approval_chain

logger = get_logger(__name__)

AUDIT_TRAIL_LIMIT = 20


def hash_matches(expected: str, supplied: Optional[str]) -> Optional[bool]:
    """None when nothing was supplied; otherwise a case-insensitive constant-time compare."""
    if supplied is None or not supplied.strip():
        return None
    return hmac.compare_digest(expected.lower(), supplied.strip().lower())


async def verify_version(db, version_id: uuid.UUID, supplied_hash: Optional[str] = None) -> VerificationResponse:
    version = await get_version(db, version_id)
    if not version:
        raise NotFoundFailure("Version not found", version_id=version_id)

    document = await db.get(Document, version.document_id)
    chain = await get_approval_chain(db, version.id)

    warnings = []
    audit_trail = []
    if document and document.case_id:
        try:
            events = await get_audit_trail(db, document.case_id)
            audit_trail = [VerifyAuditEntry.model_validate(e) for e in events[-AUDIT_TRAIL_LIMIT:]]
        except WorkflowError as exc:
            logger.warning("Audit trail unavailable during verification", extra={
                "event": "verify_audit_unavailable", "version_id": str(version.id), "error": exc.message,
            })
            warnings.append("Audit trail is temporarily unavailable")

    hash_valid = hash_matches(version.sha256, supplied_hash)
    logger.info("Version verified", extra={
        "event": "version_verified", "version_id": str(version.id), "hash_valid": hash_valid,
    })

    return VerificationResponse(
        version_id=version.id,
        document_id=version.document_id,
        document_title=document.title if document else None,
        version_no=version.version_no,
        status=version.status,
        sha256=version.sha256,
        hash_valid=hash_valid,
        approval_chain=[PublicApprovalEntry.model_validate(a) for a in chain],
        audit_trail=audit_trail,
        warnings=warnings,
    )
