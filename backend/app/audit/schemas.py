"""
Audit Pydantic schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AuditEventResponse(BaseModel):
    id: UUID
    case_id: Optional[str] = None
    entity_type: str
    entity_id: str
    action: str
    meta: Dict[str, Any] = Field(default_factory=dict)
    actor: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditSummary(BaseModel):
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_action: Dict[str, int] = Field(default_factory=dict)
    by_actor: Dict[str, int] = Field(default_factory=dict)


class AuditReportResponse(BaseModel):
    case_id: str
    total_events: int
    events: List[AuditEventResponse]
    summary: AuditSummary
