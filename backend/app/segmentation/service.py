"""
Segmentation: splits a version's source text into ordered, keyed segments.
"""
import hashlib
import re
import uuid
from dataclasses import dataclass
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceFailure
from app.core.logging import get_logger
from app.segmentation.models import VersionSegment

logger = get_logger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")


@dataclass(frozen=True)
class SegmentDraft:
    seq: int
    key: str
    text: str


def segment_key(text: str, seq: int) -> str:
    """Stable key: sequence number plus a short hash of the opening text."""
    digest = hashlib.md5(text[:50].encode("utf-8")).hexdigest()[:8]
    return f"seg_{seq}_{digest}"


def segment_document(text: str) -> List[SegmentDraft]:
    """Paragraphs first, then lines, then the whole text as one segment."""
    if not text or not text.strip():
        return [SegmentDraft(seq=1, key=segment_key("", 1), text="")]

    parts = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
    if len(parts) <= 1:
        parts = [line for line in text.split("\n") if line.strip()]
    if not parts:
        parts = [text]

    segments = []
    for seq, part in enumerate(parts, start=1):
        segments.append(SegmentDraft(seq=seq, key=segment_key(part, seq), text=part.strip()))
    return segments


async def create_version_segments(
    db: AsyncSession, version_id: uuid.UUID, source_text: str
) -> List[VersionSegment]:
    drafts = segment_document(source_text)
    rows = [
        VersionSegment(version_id=version_id, seq=d.seq, key=d.key, source_text=d.text)
        for d in drafts
    ]
    db.add_all(rows)
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to create version segments", extra={
            "event": "segments_create_failed", "version_id": str(version_id), "error": str(exc),
        })
        raise PersistenceFailure("Failed to create version segments", version_id=version_id) from exc

    logger.info("Version segments created", extra={
        "event": "segments_created", "version_id": str(version_id), "segment_count": len(rows),
    })
    return rows


async def get_version_segments(db: AsyncSession, version_id: uuid.UUID) -> List[VersionSegment]:
    try:
        result = await db.execute(
            select(VersionSegment)
            .where(VersionSegment.version_id == version_id)
            .order_by(VersionSegment.seq.asc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to get version segments", extra={
            "event": "segments_read_failed", "version_id": str(version_id), "error": str(exc),
        })
        raise PersistenceFailure("Failed to get version segments", version_id=version_id) from exc
    return list(result.scalars().all())
