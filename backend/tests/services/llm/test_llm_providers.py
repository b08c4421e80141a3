"""
Tests for the content-generation providers and factory
"""

import json
from types import SimpleNamespace

import httpx
import pytest

from app.services.llm import (
    AnthropicProvider,
    GeminiProvider,
    LLMConfig,
    OllamaProvider,
    ProviderType,
    build_content_providers,
    get_all_providers,
)


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_generate_posts_messages_request(self):
        captured = {}

        def handler(request):
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "model": "claude-test",
                "content": [{"type": "text", "text": ' {"segments": []} '}],
                "usage": {"input_tokens": 12, "output_tokens": 4},
            })

        async with mock_client(handler) as client:
            provider = AnthropicProvider(api_key="sk-test", http_client=client)
            response = await provider.generate(
                "Write a course",
                LLMConfig(model="claude-test", system_instruction="Return JSON"),
            )

        assert response.text == '{"segments": []}'
        assert response.provider is ProviderType.ANTHROPIC
        assert response.usage.total_tokens == 16
        assert captured["headers"]["x-api-key"] == "sk-test"
        assert captured["body"]["system"] == "Return JSON"
        assert captured["body"]["messages"] == [{"role": "user", "content": "Write a course"}]

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        async with mock_client(lambda request: httpx.Response(529, json={"error": "overloaded"})) as client:
            provider = AnthropicProvider(api_key="sk-test", http_client=client)
            with pytest.raises(httpx.HTTPStatusError):
                await provider.generate("hi")

    @pytest.mark.asyncio
    async def test_unavailable_without_key(self):
        provider = AnthropicProvider()
        assert provider.is_available() is False
        with pytest.raises(RuntimeError):
            await provider.generate("hi")


class TestOllamaProvider:
    @pytest.mark.asyncio
    async def test_generate_uses_json_format(self):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "{}", "prompt_eval_count": 3, "eval_count": 1})

        async with mock_client(handler) as client:
            provider = OllamaProvider(base_url="http://ollama.local:11434/", http_client=client)
            response = await provider.generate("hi", LLMConfig(model="gemma3", json_mode=True, max_tokens=100))

        assert captured["url"] == "http://ollama.local:11434/api/generate"
        assert captured["body"]["format"] == "json"
        assert captured["body"]["stream"] is False
        assert captured["body"]["options"]["num_predict"] == 100
        assert response.text == "{}"
        assert response.usage.input_tokens == 3

    def test_requires_explicit_host(self):
        assert OllamaProvider().is_available() is False


class TestGeminiProvider:
    @pytest.mark.asyncio
    async def test_generate_with_injected_client(self):
        calls = []

        def generate_content(model, contents, config):
            calls.append((model, contents))
            return SimpleNamespace(
                text=' {"summary": "s"}\n',
                usage_metadata=SimpleNamespace(prompt_token_count=5, candidates_token_count=2),
            )

        client = SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))
        provider = GeminiProvider(client=client)
        response = await provider.generate("prompt", LLMConfig(model="gemini-test", json_mode=True))

        assert response.text == '{"summary": "s"}'
        assert response.usage.total_tokens == 7
        assert calls == [("gemini-test", "prompt")]

    def test_unavailable_without_key(self):
        assert GeminiProvider().is_available() is False


class TestFactory:
    def test_no_configuration_means_no_providers(self):
        assert build_content_providers() == []

    def test_configured_providers_keep_order(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("OLLAMA_HOST", "http://ollama.local:11434")
        providers = build_content_providers([ProviderType.OLLAMA, ProviderType.GEMINI, ProviderType.ANTHROPIC])
        assert [provider.name for provider in providers] == ["ollama", "anthropic"]

    def test_get_all_providers(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        assert get_all_providers() == {"gemini": False, "anthropic": True, "ollama": False}
