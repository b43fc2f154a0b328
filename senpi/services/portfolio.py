"""Agent wallet portfolio lookups, cached per user."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..cache import TTLCache
from .tokens import BASE_NETWORK_ID

if TYPE_CHECKING:
    from ..providers.senpi_api import SenpiApiProvider

logger = logging.getLogger(__name__)

PORTFOLIO_CACHE_PREFIX = "PORTFOLIO-V2-"


class BaseToken(BaseModel):
    name: Optional[str] = None
    symbol: str = ""
    address: str = ""
    decimals: int = 18


class TokenInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    balance: float = 0
    balance_usd: float = Field(default=0, alias="balanceUSD")
    balance_raw: str = Field(default="0", alias="balanceRaw")
    base_token: BaseToken = Field(default_factory=BaseToken, alias="baseToken")


class TokenBalance(BaseModel):
    address: str
    network: Optional[int] = None
    token: TokenInfo


class Portfolio(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_balance_usd: float = Field(default=0, alias="totalBalanceUSD")
    token_balances: List[TokenBalance] = Field(default_factory=list, alias="tokenBalances")

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Portfolio":
        """Map a ``GetPortfolio`` response onto the portfolio model."""

        balances = []
        for token in payload.get("tokenBalances") or []:
            balances.append(
                TokenBalance(
                    address=token.get("tokenAddress") or "",
                    network=token.get("chainId"),
                    token=TokenInfo(
                        balance=token.get("formattedBalance") or 0,
                        balance_usd=token.get("balanceInUSD") or 0,
                        balance_raw=str(token.get("balanceInWei") or "0"),
                        base_token=BaseToken(
                            name=token.get("tokenName"),
                            symbol=token.get("tokenSymbol") or "",
                            address=token.get("tokenAddress") or "",
                            decimals=token.get("decimals") or 18,
                        ),
                    ),
                )
            )
        return cls(
            total_balance_usd=payload.get("totalBalanceUSD") or 0,
            token_balances=balances,
        )


def portfolio_cache_key(user_id: str) -> str:
    return f"{PORTFOLIO_CACHE_PREFIX}{user_id}"


class PortfolioService:
    """Read-through cache over the Senpi portfolio query."""

    def __init__(self, cache: TTLCache, senpi_api: "SenpiApiProvider"):
        self.cache = cache
        self.senpi_api = senpi_api

    async def get_portfolio(
        self,
        user_id: str,
        addresses: List[str],
        networks: Optional[List[int]] = None,
        token_addresses: Optional[List[str]] = None,
    ) -> Portfolio:
        key = portfolio_cache_key(user_id)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Portfolio cache hit for {key}")
            return cached

        portfolio = await self.senpi_api.get_portfolio(
            addresses,
            networks or [BASE_NETWORK_ID],
            token_addresses,
        )
        await self.cache.set(key, portfolio)
        return portfolio

    async def invalidate(self, user_id: str) -> None:
        key = portfolio_cache_key(user_id)
        await self.cache.delete(key)
        logger.debug(f"Deleted cache key: {key}")


__all__ = [
    "BaseToken",
    "TokenInfo",
    "TokenBalance",
    "Portfolio",
    "PortfolioService",
    "portfolio_cache_key",
]
