"""
Provider factory: returns the configured translation provider.
Supports: openai, ollama, none.

With AI_PROVIDER=none every call raises AIProviderError and the translator
falls back to its bracketed placeholder text.
"""
from app.ai.providers.base import AIProvider, AIProviderError
from app.config import settings


def get_ai_provider() -> AIProvider:
    """Raises AIProviderError if the provider is disabled, unknown or misconfigured."""
    provider_name = settings.AI_PROVIDER.lower().strip()

    if provider_name == "openai":
        from app.ai.providers.openai_provider import OpenAIProvider
        return OpenAIProvider()

    elif provider_name == "ollama":
        from app.ai.providers.ollama_provider import OllamaProvider
        return OllamaProvider()

    elif provider_name == "none":
        raise AIProviderError("No translation provider is configured", provider="none")

    raise AIProviderError(
        f"Unsupported AI provider: '{provider_name}'. Must be 'openai', 'ollama', or 'none'.",
        provider=provider_name,
    )
