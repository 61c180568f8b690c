"""
Ollama provider: local models through Ollama's OpenAI-compatible /v1 endpoint.
"""
import re

from app.ai.providers.base import AIProviderError
from app.ai.providers.openai_provider import OpenAIProvider
from app.config import settings

_THINK_BLOCK = re.compile(r"<think>.*?</think>", flags=re.DOTALL)


class OllamaProvider(OpenAIProvider):
    """Same call path as OpenAI; different endpoint and output cleanup."""

    provider_name = "ollama"

    def __init__(self):
        from openai import AsyncOpenAI

        if not settings.OLLAMA_BASE_URL:
            raise AIProviderError(
                "OLLAMA_BASE_URL is not configured",
                provider=self.provider_name,
                model=settings.OLLAMA_MODEL,
            )
        self._client = AsyncOpenAI(
            base_url=settings.OLLAMA_BASE_URL,
            api_key="ollama",  # ignored by Ollama, required by the client
            timeout=float(settings.AI_TIMEOUT_SECONDS),
        )
        self._model = settings.OLLAMA_MODEL

    def _clean(self, content: str) -> str:
        # Qwen/DeepSeek reasoning models prepend <think> blocks
        return _THINK_BLOCK.sub("", content).strip()
