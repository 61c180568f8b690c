"""
Translation service: per-segment translations of a version.
"""
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundFailure, PersistenceFailure, ValidationFailure
from app.core.logging import get_logger
from app.segmentation.models import VersionSegment
from app.segmentation.service import get_version_segments
from app.translation.ai_translator import ai_translator
from app.translation.models import SegmentTranslation, TranslationEngine, TranslationStatus
from app.versioning.models import DocumentVersion, VersionStatus

logger = get_logger(__name__)


async def _find_translation(
    db: AsyncSession, segment_id: uuid.UUID, target_lang: str
) -> Optional[SegmentTranslation]:
    result = await db.execute(
        select(SegmentTranslation).where(
            SegmentTranslation.segment_id == segment_id,
            SegmentTranslation.target_lang == target_lang,
        )
    )
    return result.scalar_one_or_none()


async def save_segment_translation(
    db: AsyncSession,
    segment_id: uuid.UUID,
    target_lang: str,
    translated_text: str,
    engine: str = TranslationEngine.AI.value,
    created_by: Optional[uuid.UUID] = None,
) -> SegmentTranslation:
    """Upsert on (segment, language). A rewrite always drops back to draft."""
    try:
        engine = TranslationEngine(engine).value
    except ValueError as exc:
        raise ValidationFailure(f"Unknown translation engine '{engine}'") from exc

    try:
        translation = await _find_translation(db, segment_id, target_lang)
        if translation:
            translation.translated_text = translated_text
            translation.engine = engine
            translation.status = TranslationStatus.DRAFT.value
            if created_by:
                translation.created_by = created_by
        else:
            translation = SegmentTranslation(
                segment_id=segment_id,
                target_lang=target_lang,
                translated_text=translated_text,
                engine=engine,
                status=TranslationStatus.DRAFT.value,
                created_by=created_by,
            )
            db.add(translation)
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to save segment translation", extra={
            "event": "translation_save_failed", "segment_id": str(segment_id),
            "target_lang": target_lang, "error": str(exc),
        })
        raise PersistenceFailure("Failed to save segment translation", segment_id=segment_id) from exc
    return translation


async def translate_version(
    db: AsyncSession,
    version_id: uuid.UUID,
    source_lang: str,
    target_lang: str,
    created_by: Optional[uuid.UUID] = None,
) -> List[SegmentTranslation]:
    """Translate every segment of a version into one language.

    Segments whose translation is already approved are left untouched.
    A segment that fails to save is logged and skipped; the rest still run.
    """
    segments = await get_version_segments(db, version_id)
    if not segments:
        raise ValidationFailure("No segments found for version", version_id=version_id)

    translations = []
    for segment in segments:
        try:
            async with db.begin_nested():
                existing = await _find_translation(db, segment.id, target_lang)
                if existing and existing.status == TranslationStatus.APPROVED.value:
                    translations.append(existing)
                    continue

                text = await ai_translator.translate_segment(segment.source_text, source_lang, target_lang)
                translations.append(
                    await save_segment_translation(db, segment.id, target_lang, text, created_by=created_by)
                )
        except (PersistenceFailure, SQLAlchemyError) as exc:
            logger.error("Failed to translate segment", extra={
                "event": "segment_translation_failed",
                "version_id": str(version_id),
                "segment_id": str(segment.id),
                "target_lang": target_lang,
                "error": str(exc),
            })

    logger.info("Version translation completed", extra={
        "event": "version_translated",
        "version_id": str(version_id),
        "target_lang": target_lang,
        "total_segments": len(segments),
        "translated_count": len(translations),
    })
    return translations


async def get_version_translations(
    db: AsyncSession, version_id: uuid.UUID, target_lang: str
) -> List[SegmentTranslation]:
    """Translations for one language, in segment order."""
    try:
        result = await db.execute(
            select(SegmentTranslation)
            .join(VersionSegment, SegmentTranslation.segment_id == VersionSegment.id)
            .where(
                VersionSegment.version_id == version_id,
                SegmentTranslation.target_lang == target_lang,
            )
            .order_by(VersionSegment.seq.asc())
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to get version translations", extra={
            "event": "translation_read_failed", "version_id": str(version_id),
            "target_lang": target_lang, "error": str(exc),
        })
        raise PersistenceFailure("Failed to get version translations", version_id=version_id) from exc
    return list(result.scalars().all())


async def get_translated_text(db: AsyncSession, version_id: uuid.UUID, target_lang: str) -> str:
    translations = await get_version_translations(db, version_id, target_lang)
    return "\n\n".join(t.translated_text for t in translations)


async def _translation_with_version(
    db: AsyncSession, translation_id: uuid.UUID
) -> Tuple[SegmentTranslation, DocumentVersion]:
    result = await db.execute(
        select(SegmentTranslation, DocumentVersion)
        .join(VersionSegment, SegmentTranslation.segment_id == VersionSegment.id)
        .join(DocumentVersion, VersionSegment.version_id == DocumentVersion.id)
        .where(SegmentTranslation.id == translation_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundFailure("Translation not found", translation_id=translation_id)
    return row[0], row[1]


async def review_translation(
    db: AsyncSession,
    translation_id: uuid.UUID,
    reviewer: uuid.UUID,
    approved: bool = False,
    document_id: Optional[uuid.UUID] = None,
) -> SegmentTranslation:
    """Mark a translation reviewed or approved.

    With `document_id`, a translation from another document's version is
    reported as not found. Exported versions are frozen.
    """
    translation, version = await _translation_with_version(db, translation_id)
    if document_id is not None and version.document_id != document_id:
        raise NotFoundFailure("Translation not found", translation_id=translation_id)
    if version.status == VersionStatus.EXPORTED.value:
        raise ValidationFailure("Translations of an exported version cannot be reviewed", version_id=version.id)

    translation.reviewed_by = reviewer
    translation.status = (TranslationStatus.APPROVED if approved else TranslationStatus.REVIEWED).value
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to review translation", extra={
            "event": "translation_review_failed", "translation_id": str(translation_id), "error": str(exc),
        })
        raise PersistenceFailure("Failed to review translation", translation_id=translation_id) from exc

    logger.info("Translation reviewed", extra={
        "event": "translation_reviewed",
        "translation_id": str(translation_id),
        "reviewed_by": str(reviewer),
        "approved": approved,
    })
    return translation
