"""
LLM Service - Abstraction layer for content-generation providers

Providers:
- Gemini (google-genai)
- Anthropic (Messages API over httpx)
- Ollama (local models over httpx)

Usage:
    from app.services.llm import build_content_providers

    for provider in build_content_providers():
        response = await provider.generate("Your prompt here")
"""

from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
)
from .factory import build_content_providers, create_provider, get_all_providers
from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider
from .ollama_provider import OllamaProvider

__all__ = [
    # Base classes
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "ProviderType",
    "UsageStats",
    # Providers
    "AnthropicProvider",
    "GeminiProvider",
    "OllamaProvider",
    # Factory
    "build_content_providers",
    "create_provider",
    "get_all_providers",
]
