import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from senpi.config import settings
from senpi.providers.llm import (
    AnthropicProvider,
    LLMProviderError,
    canonical_provider_name,
    extract_json_object,
    get_llm_provider,
)


class TestExtractJsonObject:

    def test_plain_json(self):
        assert extract_json_object('{"success": true}') == {"success": True}

    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"timeframe": "DAY"}\n```\nDone.'
        assert extract_json_object(text) == {"timeframe": "DAY"}

    def test_json_surrounded_by_prose(self):
        text = 'Sure! {"params": {"note": "brace } in string"}} hope that helps'
        assert extract_json_object(text) == {"params": {"note": "brace } in string"}}

    def test_no_json(self):
        with pytest.raises(LLMProviderError):
            extract_json_object("no object here")

    def test_empty(self):
        with pytest.raises(LLMProviderError):
            extract_json_object("")


class TestProviderFactory:

    def test_alias(self):
        assert canonical_provider_name("Claude") == "anthropic"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            get_llm_provider("mystery")

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", "")
        with pytest.raises(ValueError, match="No API key"):
            get_llm_provider("anthropic")

    def test_builds_anthropic(self, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", "sk-test")
        provider = get_llm_provider("claude", model="claude-test")
        assert isinstance(provider, AnthropicProvider)
        assert provider.model == "claude-test"


class TestAnthropicProvider:

    @pytest.fixture
    def provider(self):
        provider = AnthropicProvider(api_key="sk-test", model="claude-test")
        provider.client = MagicMock()
        return provider

    def test_requires_model(self):
        with pytest.raises(ValueError):
            AnthropicProvider(api_key="sk-test", model=None)

    @pytest.mark.asyncio
    async def test_generate_object(self, provider):
        provider.client.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[SimpleNamespace(text='```json\n{"success": true, "params": []}\n```')],
                usage=SimpleNamespace(output_tokens=12),
                stop_reason="end_turn",
            )
        )

        result = await provider.generate_object("prompt", max_tokens=8192, temperature=0.1)

        assert result == {"success": True, "params": []}
        kwargs = provider.client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 8192
        assert kwargs["temperature"] == 0.1
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_errors_are_wrapped(self, provider):
        provider.client.messages.create = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(LLMProviderError, match="Unexpected error: boom"):
            await provider.generate_response([])

    @pytest.mark.asyncio
    async def test_stream_text(self, provider):
        async def text_stream():
            for chunk in ["Hello", " world"]:
                yield chunk

        stream = MagicMock()
        stream.__aenter__ = AsyncMock(return_value=SimpleNamespace(text_stream=text_stream()))
        stream.__aexit__ = AsyncMock(return_value=False)
        provider.client.messages.stream = MagicMock(return_value=stream)

        chunks = [chunk async for chunk in provider.stream_text("prompt", temperature=0.5)]

        assert chunks == ["Hello", " world"]
        assert provider.client.messages.stream.call_args.kwargs["temperature"] == 0.5
