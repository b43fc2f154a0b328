import pytest
from unittest.mock import AsyncMock, MagicMock

from senpi.cache import TTLCache
from senpi.services.portfolio import Portfolio, PortfolioService, portfolio_cache_key

API_PAYLOAD = {
    "totalBalanceUSD": 150.5,
    "tokenBalances": [
        {
            "tokenAddress": "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed",
            "chainId": 8453,
            "formattedBalance": 1000,
            "balanceInUSD": 50.5,
            "balanceInWei": "1000000000000000000000",
            "tokenName": "Degen",
            "tokenSymbol": "DEGEN",
            "decimals": 18,
        },
    ],
}


class TestPortfolioModel:

    def test_from_api(self):
        portfolio = Portfolio.from_api(API_PAYLOAD)

        assert portfolio.total_balance_usd == 150.5
        balance = portfolio.token_balances[0]
        assert balance.network == 8453
        assert balance.token.balance_usd == 50.5
        assert balance.token.balance_raw == "1000000000000000000000"
        assert balance.token.base_token.symbol == "DEGEN"

    def test_from_empty_payload(self):
        portfolio = Portfolio.from_api({})
        assert portfolio.token_balances == []
        assert portfolio.total_balance_usd == 0


class TestPortfolioService:

    @pytest.fixture
    def senpi_api(self):
        api = MagicMock()
        api.get_portfolio = AsyncMock(return_value=Portfolio.from_api(API_PAYLOAD))
        return api

    @pytest.mark.asyncio
    async def test_caches_per_user(self, senpi_api):
        service = PortfolioService(TTLCache(), senpi_api)

        first = await service.get_portfolio("user-1", ["0xabc"])
        second = await service.get_portfolio("user-1", ["0xabc"])

        assert first is second
        senpi_api.get_portfolio.assert_awaited_once_with(["0xabc"], [8453], None)

    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self, senpi_api):
        cache = TTLCache()
        service = PortfolioService(cache, senpi_api)

        await service.get_portfolio("user-1", ["0xabc"])
        await service.invalidate("user-1")

        assert await cache.get(portfolio_cache_key("user-1")) is None
        await service.get_portfolio("user-1", ["0xabc"])
        assert senpi_api.get_portfolio.await_count == 2


class TestTTLCache:

    @pytest.mark.asyncio
    async def test_expired_entries_are_dropped(self, monkeypatch):
        cache = TTLCache(default_ttl=10)
        now = [1000.0]
        monkeypatch.setattr("senpi.cache.time.time", lambda: now[0])

        await cache.set("k", "v")
        assert await cache.get("k") == "v"

        now[0] += 11
        assert await cache.get("k") is None
        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_evicts_least_recently_used(self):
        cache = TTLCache(max_size=2)
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.get("a")
        await cache.set("c", 3)

        assert await cache.get("b") is None
        assert await cache.get("a") == 1
        assert await cache.delete("c") is True
