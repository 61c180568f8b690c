"""
Document Pydantic schemas.
"""
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    case_id: Optional[str] = None
    source_lang: Optional[str] = None
    target_langs: Optional[List[str]] = None  # falls back to DEFAULT_TARGET_LANGS

    @field_validator("target_langs")
    @classmethod
    def _no_reserved_target(cls, v):
        if v is None:
            return v
        cleaned = [lang.strip() for lang in v if lang.strip()]
        if "source" in cleaned:
            raise ValueError("'source' is not a translation language")
        return list(dict.fromkeys(cleaned))


class DocumentResponse(BaseModel):
    id: UUID
    case_id: Optional[str] = None
    title: str
    source_lang: str
    target_langs: List[str] = Field(default_factory=list)
    created_by: Optional[UUID] = None
    current_version_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SuccessResponse(BaseModel):
    """Envelope used by every mutating endpoint."""
    message: str
    data: Any = None
