"""
Translation model providers.
OpenAI and Ollama behind one interface.
"""
from app.ai.providers.base import AIProvider, AIProviderError, AIResponse
from app.ai.providers.factory import get_ai_provider

__all__ = ["AIProvider", "AIProviderError", "AIResponse", "get_ai_provider"]
