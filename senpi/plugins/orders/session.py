"""
Per-request order state: resolved tokens, prices and wallet balances.

One ``OrderSession`` lives for a single ``SENPI_ORDERS`` invocation so
repeated transactions on the same token reuse RPC and price lookups.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ...core.runtime import ActionContext
from ...services.tokens import (
    ETH,
    ETH_ADDRESS,
    ETH_TOKEN_DECIMALS,
    USDC,
    USDC_ADDRESS,
    USDC_TOKEN_DECIMALS,
    extract_token_details,
    format_token_mention,
    is_eth,
    is_usdc,
    is_valid_address,
)
from .messages import ACTION_NAME

logger = logging.getLogger(__name__)


class OrderRejected(Exception):
    """An order input was refused; ``message`` is what the user sees."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, slots=True)
class ResolvedToken:
    symbol: str
    address: str
    decimals: int

    @property
    def mention(self) -> str:
        return format_token_mention(self.symbol, self.address)


ETH_TOKEN = ResolvedToken(ETH, ETH_ADDRESS, ETH_TOKEN_DECIMALS)
USDC_TOKEN = ResolvedToken(USDC, USDC_ADDRESS, USDC_TOKEN_DECIMALS)


class OrderSession:
    def __init__(self, ctx: ActionContext):
        self.ctx = ctx
        self.runtime = ctx.runtime
        self.symbols: Dict[str, str] = {}
        self.decimals: Dict[str, int] = {}
        self.prices: Dict[str, float] = {}
        self.wallet_balances: Dict[str, int] = {}
        self.swap_balances: Dict[str, int] = {}

    @property
    def wallet_address(self) -> str:
        return self.ctx.state.agent_wallet.address

    async def send(self, text: str, **extra: Any) -> None:
        await self.ctx.send(
            text,
            content={"action": ACTION_NAME, "inReplyTo": self.ctx.trace_id},
            **extra,
        )

    async def resolve_token(self, token: str) -> ResolvedToken:
        """Resolve a mention or bare address to symbol, address and decimals."""
        if is_eth(token):
            return ETH_TOKEN
        if is_usdc(token):
            return USDC_TOKEN

        symbol: Optional[str] = None
        if is_valid_address(token):
            address = token
        else:
            symbol, address = extract_token_details(token)

        if not address:
            raise ValueError(f"Could not resolve token: {token}")
        if is_eth(address):
            return ETH_TOKEN
        if is_usdc(address):
            return USDC_TOKEN

        if not symbol:
            symbol = await self.token_symbol(address)
        decimals = await self.token_decimals(address)
        return ResolvedToken(symbol, address, decimals)

    async def token_symbol(self, address: str) -> str:
        if address in self.symbols:
            return self.symbols[address]
        try:
            symbol = await self.runtime.rpc.get_erc20_symbol(address)
        except Exception as e:
            logger.warning(f"Failed to fetch symbol for {address}: {e}")
            return ""
        self.symbols[address] = symbol
        return symbol

    async def token_decimals(self, address: str) -> int:
        if address not in self.decimals:
            self.decimals[address] = await self.runtime.rpc.get_erc20_decimals(address)
        return self.decimals[address]

    async def usd_price(self, address: str) -> float:
        price = self.prices.get(address)
        if not price:
            price = await self.runtime.codex.get_usd_price(address)
            self.prices[address] = price
        return price

    async def convert(self, amount_wei: int, source: ResolvedToken, target: ResolvedToken) -> int:
        """Amount of ``target`` base units worth ``amount_wei`` of ``source``."""
        return await self.runtime.codex.get_price(
            amount_wei,
            source.address,
            source.decimals,
            source.symbol,
            target.address,
            target.decimals,
            target.symbol,
        )

    async def current_balance(self, token: ResolvedToken) -> int:
        if token.symbol == ETH:
            return await self.runtime.rpc.get_native_balance(self.wallet_address)
        return await self.runtime.rpc.get_erc20_balance(token.address, self.wallet_address)

    async def wallet_token_balance(self, token: ResolvedToken) -> int:
        key = f"{self.wallet_address}-{token.address}"
        balance = self.wallet_balances.get(key)
        if not balance:
            balance = await self.current_balance(token)
            self.wallet_balances[key] = balance
        return balance
