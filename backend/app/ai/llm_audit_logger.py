"""
Centralized LLM audit logger.
Every translation model call (success or failure) flows through this module.
Writes to the MongoDB `llm_audit_log` collection plus a structured log line.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from app.core.logging import get_logger
from app.database.mongodb import llm_audit_collection

logger = get_logger(__name__)


class LLMCallRecord(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    provider: str
    model: str
    operation: str  # e.g. "translate_segment"
    prompt_hash: str  # SHA-256 of the segment text
    prompt_length: int
    system_prompt_length: int
    success: bool
    latency_ms: float = 0.0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    temperature: float = 0.1
    error: Optional[str] = None


async def log_llm_call(record: LLMCallRecord) -> None:
    """Persist a call record. Mongo failures are logged and swallowed."""
    log_extra = {
        "event": "llm_audit",
        "provider": record.provider,
        "model": record.model,
        "operation": record.operation,
        "success": record.success,
        "latency_ms": record.latency_ms,
        "total_tokens": record.total_tokens,
        "prompt_hash": record.prompt_hash,
    }
    if record.error:
        log_extra["error"] = record.error

    if record.success:
        logger.info("LLM call completed", extra=log_extra)
    else:
        logger.error("LLM call failed", extra=log_extra)

    try:
        await llm_audit_collection().insert_one(record.model_dump(mode="json"))
    except Exception as exc:
        logger.warning(
            f"Failed to persist LLM audit record to MongoDB: {exc}",
            extra={"event": "llm_audit_persist_error", "error": str(exc)},
        )
