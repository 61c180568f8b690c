"""
Document API endpoints: create and fetch documents.
Version, translation and approval routes hang off the same /documents prefix.
"""
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.postgresql import get_db
from app.document import service
from app.document.schemas import DocumentCreate, DocumentResponse
from app.middleware.auth_middleware import get_current_user

router = APIRouter()


@router.post("", response_model=DocumentResponse, status_code=201)
async def create_document(
    data: DocumentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Create a document. Its target_langs decide which translations gate export."""
    return await service.create_document(
        db,
        title=data.title,
        created_by=current_user["user_id"],
        case_id=data.case_id,
        source_lang=data.source_lang,
        target_langs=data.target_langs,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    return await service.get_document(db, document_id)
