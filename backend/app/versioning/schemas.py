"""
Versioning schemas: version records, creation payload, segments.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime


class VersionResponse(BaseModel):
    """Single version record."""
    id: UUID
    document_id: UUID
    version_no: int
    sha256: str
    content_type: str = "text/plain"
    size_bytes: int = 0
    change_summary: Optional[str] = None
    status: str
    created_by: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class VersionListResponse(BaseModel):
    versions: List[VersionResponse]
    total: int = 0


class SegmentResponse(BaseModel):
    id: UUID
    version_id: UUID
    seq: int
    key: str
    source_text: str

    class Config:
        from_attributes = True


class SegmentListResponse(BaseModel):
    segments: List[SegmentResponse]
    total: int = 0


class CreateVersionRequest(BaseModel):
    source_text: str = Field(..., min_length=1)
    change_summary: str = ""


class CreateVersionResponse(BaseModel):
    version: VersionResponse
    segment_count: int = 0
    warnings: List[str] = Field(default_factory=list)
