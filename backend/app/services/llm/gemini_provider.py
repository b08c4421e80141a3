"""
Gemini LLM Provider

Implementation of LLMProvider for Google's Gemini models via google-genai.
"""

import asyncio
import os
from typing import Any, Optional

from google import genai
from google.genai import types

from app.config.providers import GEMINI_CONTENT_MODEL
from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
)


class GeminiProvider(LLMProvider):
    """Google Gemini LLM Provider"""

    provider_type = ProviderType.GEMINI
    default_model = GEMINI_CONTENT_MODEL

    def __init__(self, api_key: Optional[str] = None, client: Any = None):
        """Initialize Gemini provider

        Args:
            api_key: Gemini API key. If not provided, uses GEMINI_API_KEY env var
            client: Pre-built genai client (tests pass a fake)
        """
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        self.client = client
        if self.client is None and self.api_key:
            self.client = genai.Client(api_key=self.api_key)

    def is_available(self) -> bool:
        return self.client is not None

    def _build_generation_config(self, config: LLMConfig) -> types.GenerateContentConfig:
        kwargs = {}
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.max_tokens:
            kwargs["max_output_tokens"] = config.max_tokens
        if config.system_instruction:
            kwargs["system_instruction"] = config.system_instruction
        if config.json_mode:
            kwargs["response_mime_type"] = "application/json"
        return types.GenerateContentConfig(**kwargs)

    def _extract_usage(self, response: Any) -> Optional[UsageStats]:
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return None
        return UsageStats(
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
        )

    async def generate(
        self,
        prompt: str,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        """Generate response using Gemini API

        The SDK call is blocking, so it runs in a worker thread.
        """
        if not self.is_available():
            raise RuntimeError("Gemini provider is not available. Check API key.")

        config = config or self.default_config()
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=config.model,
            contents=prompt,
            config=self._build_generation_config(config),
        )

        return LLMResponse(
            text=response.text.strip() if response.text else "",
            model=config.model,
            provider=self.provider_type,
            usage=self._extract_usage(response),
            raw_response=response,
        )
