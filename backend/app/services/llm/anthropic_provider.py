"""
Anthropic LLM Provider

Calls the Anthropic Messages API directly over httpx.
"""

import os
from typing import Any, Dict, Optional

import httpx

from app.config.providers import ANTHROPIC_CONTENT_MODEL
from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider"""

    provider_type = ProviderType.ANTHROPIC
    default_model = ANTHROPIC_CONTENT_MODEL

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.timeout = timeout
        self._http_client = http_client

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def _parse_response(self, data: Dict[str, Any], model: str) -> LLMResponse:
        text = "".join(
            block.get("text", "")
            for block in data.get("content") or []
            if block.get("type") == "text"
        )
        usage_data = data.get("usage") or {}
        usage = UsageStats(
            input_tokens=usage_data.get("input_tokens", 0),
            output_tokens=usage_data.get("output_tokens", 0),
        )
        return LLMResponse(
            text=text.strip(),
            model=data.get("model", model),
            provider=self.provider_type,
            usage=usage,
            raw_response=data,
        )

    async def generate(
        self,
        prompt: str,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        if not self.is_available():
            raise RuntimeError("Anthropic provider is not available. Check API key.")

        config = config or self.default_config()
        payload: Dict[str, Any] = {
            "model": config.model,
            "max_tokens": config.max_tokens or 4096,
            "messages": [{"role": "user", "content": prompt}],
        }
        if config.temperature is not None:
            payload["temperature"] = config.temperature
        if config.system_instruction:
            payload["system"] = config.system_instruction

        if self._http_client is not None:
            response = await self._http_client.post(
                ANTHROPIC_API_URL, json=payload, headers=self._headers(), timeout=self.timeout
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(ANTHROPIC_API_URL, json=payload, headers=self._headers())
        response.raise_for_status()
        return self._parse_response(response.json(), config.model)
