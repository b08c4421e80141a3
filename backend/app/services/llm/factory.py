"""
LLM Provider Factory

Builds the ordered list of content-generation providers from configuration.
"""

import os
from typing import Dict, List, Optional

import httpx

from app.config.providers import ContentProviderType, get_content_provider_order
from app.core import get_logger
from .anthropic_provider import AnthropicProvider
from .base import LLMProvider, ProviderType
from .gemini_provider import GeminiProvider
from .ollama_provider import OllamaProvider

logger = get_logger(__name__, component="llm_factory")


def create_provider(
    provider_type: ProviderType,
    http_client: Optional[httpx.AsyncClient] = None,
) -> LLMProvider:
    """Create a single provider instance

    Raises:
        ValueError: for an unknown provider type
    """
    if provider_type == ProviderType.GEMINI:
        return GeminiProvider()
    if provider_type == ProviderType.ANTHROPIC:
        return AnthropicProvider(http_client=http_client)
    if provider_type == ProviderType.OLLAMA:
        # Only talk to Ollama when a host was configured explicitly
        return OllamaProvider(base_url=os.getenv("OLLAMA_HOST", ""), http_client=http_client)
    raise ValueError(f"Unknown provider type: {provider_type}")


def build_content_providers(
    order: Optional[List[ContentProviderType]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[LLMProvider]:
    """Providers in priority order, skipping any that are not configured.

    An empty list is valid: the Script Generator then goes straight to its
    offline fallback.
    """
    providers: List[LLMProvider] = []
    for provider_type in order or get_content_provider_order():
        provider = create_provider(provider_type, http_client=http_client)
        if provider.is_available():
            providers.append(provider)
        else:
            logger.debug("Content provider not configured", extra={"provider": provider_type.value})

    logger.info(
        "Content providers resolved",
        extra={"providers": [provider.name for provider in providers]},
    )
    return providers


def get_all_providers() -> Dict[str, bool]:
    """Availability of every content provider, for the health endpoint"""
    return {
        provider_type.value: create_provider(provider_type).is_available()
        for provider_type in ContentProviderType
    }
