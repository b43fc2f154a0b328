import logging
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..services.tokens import BASE_NETWORK_ID, UNIT_PRECISION, WETH_ADDRESS, is_eth
from .graphql import GraphQLProvider

logger = logging.getLogger(__name__)

TOKEN_PRICES_QUERY = """
query GetTokenPrices($inputs: [GetPriceInput]) {
    getTokenPrices(inputs: $inputs) {
        address
        networkId
        priceUsd
    }
}
"""


class CodexProvider(GraphQLProvider):
    """Token USD prices on Base from the Codex GraphQL API"""

    name = "codex"
    timeout_s = 15

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None):
        self.api_url = api_url or settings.codex_api_url
        self.api_key = api_key if api_key is not None else settings.codex_api_key

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "API key not configured"}

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    json={"query": "{ getNetworks { id } }"},
                    headers={"Authorization": self.api_key},
                    timeout=self.timeout_s,
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def get_usd_price(self, token_address: str) -> float:
        """USD price of one whole token; ETH is priced as WETH"""
        address = WETH_ADDRESS if is_eth(token_address) else token_address

        data = await self._execute(
            self.api_url,
            TOKEN_PRICES_QUERY,
            {"inputs": [{"address": address, "networkId": BASE_NETWORK_ID}]},
            headers={"Authorization": self.api_key},
            operation="getTokenPrices",
        )
        prices = data.get("getTokenPrices") or []
        price = prices[0].get("priceUsd") if prices and prices[0] else None
        if not price:
            raise ValueError(f"Price not available for token {token_address}")
        return float(price)

    async def get_price(
        self,
        amount_wei: int,
        from_address: str,
        from_decimals: int,
        from_symbol: str,
        to_address: str,
        to_decimals: int,
        to_symbol: str,
    ) -> int:
        """
        Convert ``amount_wei`` of one token into base units of another.

        Both legs are priced in USD; the result is truncated to an integer
        number of base units.
        """
        from_price = Decimal(str(await self.get_usd_price(from_address)))
        to_price = Decimal(str(await self.get_usd_price(to_address)))

        with localcontext() as ctx:
            ctx.prec = UNIT_PRECISION
            usd_value = Decimal(int(amount_wei)) / (Decimal(10) ** from_decimals) * from_price
            converted = usd_value / to_price * (Decimal(10) ** to_decimals)
            result = int(converted.quantize(Decimal(1), rounding=ROUND_DOWN))

        logger.debug(
            f"Converted {amount_wei} {from_symbol} -> {result} {to_symbol} "
            f"({from_price} / {to_price} USD)"
        )
        return result
