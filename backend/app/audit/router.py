"""
Audit API endpoints: case audit report and per-entity history.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit import service
from app.audit.schemas import AuditEventResponse, AuditReportResponse
from app.database.postgresql import get_db
from app.middleware.auth_middleware import require_role

router = APIRouter()


@router.get("/cases/{case_id}", response_model=AuditReportResponse)
async def get_case_report(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(require_role("admin")),
):
    """Full audit trail for a case with counts by type, action and actor."""
    return await service.generate_audit_report(db, case_id)


@router.get("/{entity_type}/{entity_id}", response_model=list[AuditEventResponse])
async def get_entity_events(
    entity_type: str,
    entity_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(require_role("admin")),
):
    return await service.get_entity_audit_events(db, entity_type, entity_id)
