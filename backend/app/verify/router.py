"""
Public verification endpoint. No authentication: the version id and hash
printed on an exported package are the only inputs.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.postgresql import get_db
from app.verify.schemas import VerificationResponse
from app.verify.service import verify_version

router = APIRouter()


@router.get("/{version_id}", response_model=VerificationResponse)
async def verify(
    version_id: UUID,
    hash: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await verify_version(db, version_id, hash)
