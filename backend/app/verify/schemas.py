"""
Verification Pydantic schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PublicApprovalEntry(BaseModel):
    """A sign-off as shown to recipients. Request metadata stays internal."""
    model_config = ConfigDict(from_attributes=True)

    target_lang: str
    role: str
    decision: str
    comment: Optional[str] = None
    created_at: datetime


class VerifyAuditEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entity_type: str
    action: str
    actor: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    created_at: datetime


class VerificationResponse(BaseModel):
    version_id: UUID
    document_id: UUID
    document_title: Optional[str] = None
    version_no: int
    status: str
    sha256: str
    hash_valid: Optional[bool] = None  # None when no hash was supplied
    approval_chain: List[PublicApprovalEntry] = Field(default_factory=list)
    audit_trail: List[VerifyAuditEntry] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
