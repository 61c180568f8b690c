"""
Translation Pydantic schemas.
Request bodies accept both camelCase and snake_case keys.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version_id: UUID = Field(..., alias="versionId")
    target_lang: str = Field(..., alias="targetLang", min_length=2, max_length=10)
    source_lang: Optional[str] = Field(None, alias="sourceLang")  # defaults to the document's source_lang


class ReviewTranslationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    translation_id: UUID = Field(..., alias="translationId")
    approved: bool


class SegmentTranslationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    segment_id: UUID
    target_lang: str
    translated_text: str
    engine: str
    status: str
    created_by: Optional[UUID] = None
    reviewed_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class TranslationListResponse(BaseModel):
    translations: List[SegmentTranslationResponse]
    count: int = 0
