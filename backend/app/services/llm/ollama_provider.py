"""
Ollama LLM Provider

Implementation of LLMProvider for local models via Ollama's /api/generate.
"""

import os
from typing import Any, Dict, Optional

import httpx

from app.config.providers import OLLAMA_CONTENT_MODEL
from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    ProviderType,
    UsageStats,
)


class OllamaProvider(LLMProvider):
    """Ollama LLM Provider for local models (gemma3, llama3, mistral, ...)"""

    provider_type = ProviderType.OLLAMA
    default_model = OLLAMA_CONTENT_MODEL

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Ollama provider

        Args:
            base_url: Ollama server URL. Defaults to OLLAMA_HOST env
            timeout: Request timeout in seconds
            http_client: Shared async client; one is created per call otherwise
        """
        self.base_url = (base_url or os.getenv("OLLAMA_HOST", "")).rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    def is_available(self) -> bool:
        return bool(self.base_url)

    def _build_options(self, config: LLMConfig) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if config.temperature is not None:
            options["temperature"] = config.temperature
        if config.max_tokens:
            options["num_predict"] = config.max_tokens
        options.update(config.extra_options)
        return options

    def _parse_response(self, data: Dict[str, Any], model: str) -> LLMResponse:
        usage = None
        if "prompt_eval_count" in data or "eval_count" in data:
            usage = UsageStats(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
            )
        return LLMResponse(
            text=(data.get("response") or "").strip(),
            model=model,
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
            raise RuntimeError("Ollama provider is not available. Set OLLAMA_HOST.")

        config = config or self.default_config()
        payload: Dict[str, Any] = {
            "model": config.model,
            "prompt": prompt,
            "stream": False,
        }
        options = self._build_options(config)
        if options:
            payload["options"] = options
        if config.system_instruction:
            payload["system"] = config.system_instruction
        if config.json_mode:
            payload["format"] = "json"

        url = f"{self.base_url}/api/generate"
        if self._http_client is not None:
            response = await self._http_client.post(url, json=payload, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
        response.raise_for_status()
        return self._parse_response(response.json(), config.model)
