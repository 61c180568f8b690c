"""
Approval workflow Pydantic schemas.
"""
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ApprovalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    version_id: UUID
    target_lang: str
    approved_by: UUID
    role: str
    decision: str
    comment: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class TargetStatus(BaseModel):
    required: bool = True
    approved: bool = False
    rejected: bool = False
    pending: bool = True


class ApprovalStatus(BaseModel):
    """Collapsed state of one (version, target) pair."""
    approved: bool
    rejected: bool
    pending: bool
    approvals: List[ApprovalResponse] = Field(default_factory=list)  # newest first


class RequiredApprovals(BaseModel):
    source: TargetStatus
    translations: Dict[str, TargetStatus] = Field(default_factory=dict)


class ApprovalOverview(BaseModel):
    status: ApprovalStatus
    chain: List[ApprovalResponse]  # oldest first


class ReadinessResponse(BaseModel):
    version_id: UUID
    version_status: str
    target_langs: List[str]
    required: Optional[RequiredApprovals] = None  # None when readiness could not be read
    ready: bool


class ApproveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version_id: UUID = Field(..., alias="versionId")
    target_lang: str = Field("source", alias="targetLang", min_length=1, max_length=20)
    decision: str  # checked by the service before any I/O
    comment: Optional[str] = None


class DecisionResult(BaseModel):
    approval: ApprovalResponse
    version_status: str
    required: Optional[RequiredApprovals] = None  # None when readiness could not be read


class ExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version_id: UUID = Field(..., alias="versionId")
    target_langs: Optional[List[str]] = Field(None, alias="targetLangs")  # subset of the document's
