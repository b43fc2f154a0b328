"""
Tests for the GraphQL-backed providers (Senpi API and Codex).

Outbound HTTP is served by an ``httpx.MockTransport``.
"""

import json

import httpx
import pytest

from senpi.core.recovery import GraphQLResponseError, NetworkError, RateLimitError, UnrecoverableError
from senpi.providers.codex import CodexProvider
from senpi.providers.senpi_api import SenpiApiProvider
from senpi.services.orders import ActionType, OpenOrderInput, Source, SwapInput
from senpi.services.tokens import ETH_ADDRESS, USDC_ADDRESS, WETH_ADDRESS

_REAL_ASYNC_CLIENT = httpx.AsyncClient


@pytest.fixture
def mock_http(monkeypatch):
    """Route every ``httpx.AsyncClient`` through a recording mock transport."""
    state = {"requests": [], "responses": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        response = state["responses"].pop(0)
        if isinstance(response, httpx.Response):
            return response
        if "errors" in response:
            return httpx.Response(200, json=response)
        return httpx.Response(200, json={"data": response})

    def factory(*args, **kwargs):
        return _REAL_ASYNC_CLIENT(transport=httpx.MockTransport(handler))

    monkeypatch.setattr(httpx, "AsyncClient", factory)
    return state


def body(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture
def senpi_api():
    return SenpiApiProvider(
        api_url="https://api.senpi.test/graphql",
        internal_url="https://internal.senpi.test/graphql",
        analysis_url="https://prod.senpi.test/graphql",
    )


def swap_input() -> SwapInput:
    return SwapInput(
        sell_token_address=ETH_ADDRESS,
        buy_token_address=USDC_ADDRESS,
        amount="1000000000000000",
        chain_id=8453,
        sell_token_symbol="ETH",
        buy_token_symbol="USDC",
        sell_token_decimal=18,
        buy_token_decimal=6,
    )


class TestGraphQLTransport:

    @pytest.mark.asyncio
    async def test_graphql_errors_raise_unrecoverable(self, mock_http, senpi_api):
        mock_http["responses"].append({"errors": [{"message": "User not found"}]})

        with pytest.raises(GraphQLResponseError, match="User not found"):
            await senpi_api.get_user("user-1")

    @pytest.mark.asyncio
    async def test_rate_limit_status(self, mock_http, senpi_api):
        mock_http["responses"].append(httpx.Response(429, headers={"retry-after": "5"}))

        with pytest.raises(RateLimitError) as exc_info:
            await senpi_api.get_trending_tokens()

        assert exc_info.value.retry_after == 5.0

    @pytest.mark.asyncio
    async def test_server_error_is_network_error(self, mock_http, senpi_api):
        mock_http["responses"].append(httpx.Response(502))

        with pytest.raises(NetworkError):
            await senpi_api.get_trending_tokens()

    @pytest.mark.asyncio
    async def test_missing_endpoint(self):
        provider = SenpiApiProvider(api_url="", internal_url="", analysis_url="")
        provider.api_url = ""
        provider.internal_url = ""

        with pytest.raises(NetworkError, match="not configured"):
            await provider.get_trending_tokens()


class TestSenpiApiProvider:

    @pytest.mark.asyncio
    async def test_create_manual_order_payload(self, mock_http, senpi_api):
        mock_http["responses"].append(
            {
                "CreateManualOrder": {
                    "success": True,
                    "error": None,
                    "metadata": {
                        "traceId": "t-1",
                        "orderId": "o-1",
                        "swapOutput": {"txHash": "0xhash", "buyAmount": "2.5", "buyPrice": "2500"},
                        "stopLossOutputs": None,
                        "limitOrderOutputs": None,
                    },
                }
            }
        )

        output = await senpi_api.create_manual_order("Bearer t", ActionType.SWAP, Source.AGENT, swap_input=swap_input())

        request = mock_http["requests"][0]
        assert str(request.url) == "https://api.senpi.test/graphql"
        assert request.headers["Authorization"] == "Bearer t"
        variables = body(request)["variables"]["createRuleInput"]
        assert variables["actionType"] == "SWAP"
        assert variables["source"] == "AGENT"
        assert variables["swapInput"]["sellTokenDecimal"] == 18
        assert "stopLossInput" not in variables

        assert output.success is True
        assert output.metadata.swap_output.tx_hash == "0xhash"
        assert output.metadata.stop_loss_outputs == []

    @pytest.mark.asyncio
    async def test_create_manual_order_requires_an_input(self, senpi_api):
        with pytest.raises(ValueError):
            await senpi_api.create_manual_order("Bearer t", ActionType.SL, Source.AGENT, stop_loss_inputs=[])

    @pytest.mark.asyncio
    async def test_create_manual_order_wraps_graphql_errors(self, mock_http, senpi_api):
        mock_http["responses"].append({"errors": [{"message": "INSUFFICIENT_FUNDS_ERROR"}]})
        order = OpenOrderInput(
            sell_token_address=USDC_ADDRESS,
            sell_token_symbol="USDC",
            sell_token_decimals=6,
            buy_token_address=ETH_ADDRESS,
            buy_token_symbol="ETH",
            buy_token_decimals=18,
            trigger_value="-0.1",
            trigger_type="PERCENTAGE",
        )

        with pytest.raises(GraphQLResponseError, match="Failed to create manual order: INSUFFICIENT_FUNDS_ERROR"):
            await senpi_api.create_manual_order("Bearer t", ActionType.SL, Source.AGENT, stop_loss_inputs=[order])

    @pytest.mark.asyncio
    async def test_get_user_uses_internal_url(self, mock_http, senpi_api):
        mock_http["responses"].append({"GetUser": {"userName": "alice", "communicationPreference": "TELEGRAM"}})

        user = await senpi_api.get_user("user-1")

        assert str(mock_http["requests"][0].url) == "https://internal.senpi.test/graphql"
        assert user.id == "user-1"
        assert user.user_name == "alice"

    @pytest.mark.asyncio
    async def test_communication_preference_swallows_errors(self, mock_http, senpi_api):
        mock_http["responses"].append(httpx.Response(500))

        assert await senpi_api.get_communication_preference("user-1") is None

    @pytest.mark.asyncio
    async def test_top_traders_returns_none_on_failure(self, mock_http, senpi_api):
        mock_http["responses"].append({"errors": [{"message": "boom"}]})

        assert await senpi_api.get_top_traders("WEEK") is None

    @pytest.mark.asyncio
    async def test_top_group_targets(self, mock_http, senpi_api):
        mock_http["responses"].append({"TopGroupTargets": {"targets": [{"groupId": "g-1"}]}})

        targets = await senpi_api.get_top_group_targets("DAY", limit=5)

        assert targets == [{"groupId": "g-1"}]
        assert body(mock_http["requests"][0])["variables"] == {"timeframe": "DAY", "limit": 5}

    @pytest.mark.asyncio
    async def test_group_names(self, mock_http, senpi_api):
        mock_http["responses"].append({"GetGroups": {"groups": [{"id": "1", "name": "whales"}, {"id": "2"}]}})

        assert await senpi_api.get_group_names("Bearer t") == ["whales"]

    @pytest.mark.asyncio
    async def test_stats_query_goes_to_analysis_url(self, mock_http, senpi_api):
        mock_http["responses"].append({"GetUserGroupStatsOrRecommendations": {"items": [{"userId": "u"}]}})

        items = await senpi_api.get_user_group_stats_or_recommendations({"take": 10}, "Bearer t")

        assert items == [{"userId": "u"}]
        assert str(mock_http["requests"][0].url) == "https://prod.senpi.test/graphql"

    @pytest.mark.asyncio
    async def test_send_transaction_requires_hash(self, mock_http, senpi_api):
        mock_http["responses"].append({"SendTransaction": {"hash": None}})

        with pytest.raises(UnrecoverableError):
            await senpi_api.send_transaction("Bearer t", "8453", {"toAddress": "0x1"})

    @pytest.mark.asyncio
    async def test_send_transaction(self, mock_http, senpi_api):
        mock_http["responses"].append({"SendTransaction": {"hash": "0xabc"}})

        result = await senpi_api.send_transaction("Bearer t", "8453", {"toAddress": "0x1", "data": "0x"})

        assert result == {"hash": "0xabc"}
        assert body(mock_http["requests"][0])["variables"]["input"] == {
            "chainId": "8453",
            "toAddress": "0x1",
            "data": "0x",
        }

    @pytest.mark.asyncio
    async def test_health_unavailable_without_url(self):
        provider = SenpiApiProvider()
        provider.api_url = ""

        assert (await provider.health_check())["status"] == "unavailable"


class TestCodexProvider:

    @pytest.fixture
    def codex(self):
        return CodexProvider(api_url="https://codex.test/graphql", api_key="key")

    @pytest.mark.asyncio
    async def test_eth_is_priced_as_weth(self, mock_http, codex):
        mock_http["responses"].append({"getTokenPrices": [{"priceUsd": 2500}]})

        assert await codex.get_usd_price(ETH_ADDRESS) == 2500.0

        request = mock_http["requests"][0]
        assert request.headers["Authorization"] == "key"
        assert body(request)["variables"]["inputs"] == [{"address": WETH_ADDRESS, "networkId": 8453}]

    @pytest.mark.asyncio
    async def test_missing_price_raises(self, mock_http, codex):
        mock_http["responses"].append({"getTokenPrices": [None]})

        with pytest.raises(ValueError):
            await codex.get_usd_price(USDC_ADDRESS)

    @pytest.mark.asyncio
    async def test_get_price_converts_between_tokens(self, mock_http, codex):
        mock_http["responses"].extend(
            [
                {"getTokenPrices": [{"priceUsd": "2000"}]},
                {"getTokenPrices": [{"priceUsd": "1"}]},
            ]
        )

        result = await codex.get_price(10**18, ETH_ADDRESS, 18, "ETH", USDC_ADDRESS, 6, "USDC")

        assert result == 2000 * 10**6

    @pytest.mark.asyncio
    async def test_get_price_into_a_low_priced_token(self, mock_http, codex):
        mock_http["responses"].extend(
            [
                {"getTokenPrices": [{"priceUsd": "1"}]},
                {"getTokenPrices": [{"priceUsd": "0.0000000001"}]},
            ]
        )

        result = await codex.get_price(1000 * 10**6, USDC_ADDRESS, 6, "USDC", "0x" + "ab" * 20, 18, "MEME")

        assert result == 10**31

    @pytest.mark.asyncio
    async def test_health_without_key(self):
        codex = CodexProvider(api_url="https://codex.test/graphql", api_key="")
        assert (await codex.health_check())["status"] == "unavailable"
