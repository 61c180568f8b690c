"""
OpenAI provider: chat completions for legal segment translation.
Temperature comes from config; every call is audited.
"""
import time
from typing import Optional

from app.ai.providers.base import AIProvider, AIProviderError, AIResponse
from app.config import settings
from app.core.logging import get_logger
from app.ai.llm_audit_logger import log_llm_call, LLMCallRecord

logger = get_logger(__name__)

_MAX_TOKENS = 2000
_TOP_P = 0.95


class OpenAIProvider(AIProvider):
    """OpenAI ChatCompletion provider returning plain text."""

    provider_name = "openai"

    def __init__(self):
        from openai import AsyncOpenAI

        if not settings.OPENAI_API_KEY:
            raise AIProviderError(
                "OPENAI_API_KEY is not configured",
                provider=self.provider_name,
                model=settings.AI_MODEL_OPENAI,
            )
        self._client = AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=float(settings.AI_TIMEOUT_SECONDS),
        )
        self._model = settings.AI_MODEL_OPENAI

    def _clean(self, content: str) -> str:
        return content.strip()

    async def _audit(self, prompt_hash, user_prompt, system_prompt, operation, start, **fields):
        await log_llm_call(LLMCallRecord(
            provider=self.provider_name,
            model=self._model,
            operation=operation,
            prompt_hash=prompt_hash,
            prompt_length=len(user_prompt),
            system_prompt_length=len(system_prompt),
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            temperature=settings.AI_TEMPERATURE,
            **fields,
        ))

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
        operation: str = "translate_segment",
    ) -> AIResponse:
        start = time.perf_counter()
        prompt_hash = AIResponse.hash_prompt(user_prompt)

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=settings.AI_TEMPERATURE,
                top_p=_TOP_P,
                max_tokens=max_tokens or _MAX_TOKENS,
            )
        except Exception as exc:
            await self._audit(prompt_hash, user_prompt, system_prompt, operation, start,
                              success=False, error=str(exc))
            raise AIProviderError(
                f"{self.provider_name} call failed: {exc}",
                provider=self.provider_name,
                model=self._model,
            ) from exc

        text = self._clean(response.choices[0].message.content or "")
        if not text:
            await self._audit(prompt_hash, user_prompt, system_prompt, operation, start,
                              success=False, error="Empty completion")
            raise AIProviderError(
                f"{self.provider_name} returned an empty completion",
                provider=self.provider_name,
                model=self._model,
            )

        usage = response.usage
        prompt_tokens = usage.prompt_tokens if usage else 0
        completion_tokens = usage.completion_tokens if usage else 0
        total_tokens = usage.total_tokens if usage else 0

        await self._audit(
            prompt_hash, user_prompt, system_prompt, operation, start,
            success=True,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
        )

        return AIResponse(
            text=text,
            provider=self.provider_name,
            model=self._model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            request_prompt_hash=prompt_hash,
        )
