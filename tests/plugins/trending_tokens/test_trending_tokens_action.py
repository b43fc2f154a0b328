import pytest
from unittest.mock import AsyncMock

from senpi.plugins.trending_tokens.action import FETCH_FAILED, NO_TRENDING_TOKENS, TrendingTokensAction


class TestTrendingTokensAction:

    @pytest.mark.asyncio
    async def test_streams_recommendation(self, make_context, recorder, runtime, llm_stream):
        runtime.senpi_api.get_trending_tokens = AsyncMock(
            return_value=[{"symbol": "DEGEN", "address": "0x4ed4e862860bed51a9570b96d89af5e1b0efefed"}]
        )
        calls = llm_stream(["1. ", "DEGEN"])

        await TrendingTokensAction().run(make_context(recent_messages=[{"user": "alice", "text": "what's hot?"}]))

        assert recorder.texts == ["1. ", "DEGEN"]
        [call] = calls
        assert '"symbol": "DEGEN"' in call["prompt"]
        assert "alice: what's hot?" in call["prompt"]
        assert call["temperature"] == 0.5
        assert call["max_tokens"] == 8192

    @pytest.mark.asyncio
    async def test_no_tokens(self, make_context, recorder, runtime):
        runtime.senpi_api.get_trending_tokens = AsyncMock(return_value=[])

        assert await TrendingTokensAction().run(make_context()) is True
        assert recorder.texts == [NO_TRENDING_TOKENS]

    @pytest.mark.asyncio
    async def test_fetch_failure(self, make_context, recorder, runtime):
        runtime.senpi_api.get_trending_tokens = AsyncMock(side_effect=RuntimeError("down"))

        await TrendingTokensAction().run(make_context())

        assert recorder.texts == [FETCH_FAILED]
