"""
Abstract base class for translation model providers.
All providers must implement complete().
"""
import abc
import hashlib
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class AIProviderError(Exception):
    """Raised when a provider call fails or no provider is configured."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        self.provider = provider
        self.model = model
        super().__init__(message)


class AIResponse(BaseModel):
    """Completion text plus usage metadata."""
    text: str
    provider: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    latency_ms: float = 0.0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_prompt_hash: str = ""

    @staticmethod
    def hash_prompt(prompt: str) -> str:
        """SHA-256 of the prompt, stored instead of the legal text itself."""
        return hashlib.sha256(prompt.encode("utf-8")).hexdigest()


class AIProvider(abc.ABC):
    """Abstract provider. Subclasses must implement complete()."""

    provider_name: str = "base"

    @abc.abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        operation: str = "translate_segment",
    ) -> AIResponse:
        """
        Send a prompt to the model and return its text.

        Args:
            system_prompt: Translation instructions.
            user_prompt: The segment text.
            max_tokens: Optional completion ceiling.
            operation: Label recorded in the LLM audit log.

        Raises:
            AIProviderError on any failure.
        """
        ...
