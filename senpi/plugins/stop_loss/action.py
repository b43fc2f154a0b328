"""
STOP_LOSS action.

Places stop-loss orders on tokens already held in the agent wallet. The
model picks tokens from the wallet's top holdings; every order sells a
share of the current on-chain balance when its trigger fires.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...core.runtime import Action, ActionContext, ActionState
from ...services.orders import ActionType, OpenOrderInput, OrderTriggerType, RequestType, Source
from ...services.tokens import (
    BASE_NETWORK_ID,
    ETH,
    ETH_TOKEN_DECIMALS,
    USDC_ADDRESS,
    WETH_ADDRESS,
    ZERO_ADDRESS,
    format_units,
    is_valid_address,
)
from .templates import STOP_LOSS_TEMPLATE

ACTION_NAME = "STOP_LOSS"

DEFAULT_BUY_TOKEN = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
DEFAULT_BUY_TOKEN_DECIMALS = ETH_TOKEN_DECIMALS
DEFAULT_BUY_TOKEN_SYMBOL = ETH

IGNORED_TOKENS = {
    DEFAULT_BUY_TOKEN,
    WETH_ADDRESS.lower(),
    USDC_ADDRESS.lower(),
    ZERO_ADDRESS,
}

MAX_TOKENS_IN_PROMPT = 100

AGENT_WALLET_NOT_FOUND = "\nPlease make sure to set up your agent wallet first and try again."
WALLET_CLIENT_NOT_FOUND = (
    "\nUnable to access Senpi wallet details. "
    "Please ensure your Senpi wallet is properly setup and try again."
)
NO_TOKENS_FOUND = "No tokens found to setup stop loss on. Can't setup stop loss on ETH, USDC, USDT, etc."
NO_RULES_FOUND = "No stop loss rules found. Please try again."
GENERIC_FAILURE = "Something went wrong while creating stop loss rule. Please try again later."


class StopLossOrderRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    token_address: Optional[str] = None
    token_symbol: Optional[str] = None
    token_decimals: Optional[int] = None
    quantity_percentage: Optional[str] = None
    quantity_absolute: Optional[str] = None
    stop_loss_trigger: Optional[str] = None
    stop_loss_value: Optional[str] = None
    expiry: Optional[str] = None
    buy_token: Optional[str] = None
    buy_token_decimals: Optional[int] = None
    buy_token_symbol: Optional[str] = None


class StopLossError(BaseModel):
    missing_fields: List[str] = []
    prompt_message: Optional[str] = None


class StopLossResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    is_followup: bool = False
    params: Optional[List[StopLossOrderRequest]] = None
    error: Optional[StopLossError] = None

    @field_validator("params", mode="before")
    @classmethod
    def _single_param(cls, value):
        if isinstance(value, dict):
            return [value]
        return value


def apply_percentage(amount: int, percentage: float, precision: int = 6) -> int:
    """Scale ``amount`` by a fraction in [0, 1], keeping ``precision`` digits."""
    if percentage < 0 or percentage > 1:
        raise ValueError("Percentage must be between 0 and 1")
    scale = 10**precision
    return amount * int(percentage * scale) // scale


def expires_at(expiry_seconds: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    expiry = now.replace(microsecond=0) + timedelta(seconds=int(expiry_seconds))
    return expiry.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def held_tokens(state: ActionState) -> List[Dict[str, Any]]:
    """Wallet holdings a stop loss can be placed on, largest first."""
    portfolio = state.agent_wallet_balance
    if portfolio is None:
        return []

    holdings = [
        holding
        for holding in portfolio.token_balances
        if holding.token.balance_usd > 0
        and holding.token.base_token.address.lower() not in IGNORED_TOKENS
    ]
    holdings.sort(key=lambda h: h.token.balance_usd, reverse=True)

    return [
        {
            "address": holding.token.base_token.address.lower(),
            "symbol": holding.token.base_token.symbol,
            "balance": holding.token.balance,
            "balanceUSD": holding.token.balance_usd,
            "tentativePrice": holding.token.balance_usd / holding.token.balance if holding.token.balance else 0,
        }
        for holding in holdings[:MAX_TOKENS_IN_PROMPT]
    ]


def validate_stop_loss_param(param: StopLossOrderRequest) -> None:
    if not param.token_address or not is_valid_address(param.token_address):
        raise ValueError("valid token_address is required to setup stop loss. Please provide a valid token_address.")

    if not param.stop_loss_value or not param.stop_loss_trigger:
        raise ValueError(
            "stop_loss_value and stop_loss_trigger are required to setup stop loss. "
            "Please provide a valid stop_loss_value and stop_loss_trigger."
        )

    value = float(param.stop_loss_value)
    if param.stop_loss_trigger in ("absolute_price", "price_drop"):
        if value <= 0:
            raise ValueError("stop_loss_value must be greater than 0. Please provide a valid stop_loss_value.")
    elif param.stop_loss_trigger == "percentage":
        if value <= 0 or value > 100:
            raise ValueError(
                "stop_loss_value must be greater than 0 and less than 100. Please provide a valid stop_loss_value."
            )


def success_table(param: StopLossOrderRequest, order_id: Optional[str]) -> str:
    token = param.token_symbol or param.token_address
    trigger = "Percentage" if param.stop_loss_trigger == "percentage" else "Token Price"
    return (
        f"Stop loss order successfully created for token {token} with address {param.token_address}.\n"
        "| Order ID | Trigger Type | Trigger Value | Order Type | Percentage Sold |\n"
        "|----------|--------------|---------------|------------|--------|\n"
        f"| {order_id or 'N/A'} | {trigger} | {param.stop_loss_value} | Stop Loss | {param.quantity_percentage} |\n \n"
    )


class StopLossAction(Action):
    name = ACTION_NAME
    similes = ["STOP_LOSS_ORDER"]
    description = (
        "Handles user intents related to placing stop loss orders on tokens they currently hold "
        "to prevent losses from price drops."
    )
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "Set a stop loss order for all my tokens if they drop by 10%"}},
            {
                "user": "{{user2}}",
                "content": {
                    "text": "Create a stop loss order to sell my tokens if they lose 15% in value",
                    "action": ACTION_NAME,
                },
            },
        ]
    ]
    suppress_initial_message = True

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            await self._create_stop_losses(ctx)
        except Exception as e:
            self.logger.exception(f"Error occurred while performing stop loss operation: {e}")
            await self._send(ctx, GENERIC_FAILURE)
        return True

    async def _send(self, ctx: ActionContext, text: str) -> None:
        await ctx.send(text, action=ACTION_NAME)

    async def _create_stop_losses(self, ctx: ActionContext) -> None:
        state = ctx.state
        if state.agent_wallet is None:
            self.logger.error("Agent wallet not found")
            await ctx.send(AGENT_WALLET_NOT_FOUND)
            return
        if state.wallet_client is None:
            self.logger.error("Wallet client not found")
            await ctx.send(WALLET_CLIENT_NOT_FOUND)
            return

        preference = await ctx.runtime.senpi_api.get_communication_preference(ctx.user_id)
        self.logger.debug(f"Communication preference: {preference}")

        tokens = held_tokens(state)
        if not tokens:
            self.logger.warning("No tokens eligible for a stop loss")
            await self._send(ctx, NO_TOKENS_FOUND)
            return

        prompt = ctx.runtime.compose_context(STOP_LOSS_TEMPLATE, state, tokenBalances=json.dumps(tokens))
        raw = await ctx.runtime.generate_object(prompt, temperature=0.1, max_tokens=8192)
        response = StopLossResponse.model_validate(raw)
        self.logger.info(f"Stop loss response: {response.model_dump_json()}")

        if not response.success:
            message = GENERIC_FAILURE
            if response.error and response.error.prompt_message:
                message = response.error.prompt_message
            await self._send(ctx, message)
            return

        if not response.params:
            await self._send(ctx, NO_RULES_FOUND)
            return

        balances: Dict[str, int] = {}
        decimals: Dict[str, int] = {}
        for param in response.params:
            await self._place_stop_loss(ctx, param, balances, decimals)

    async def _place_stop_loss(
        self,
        ctx: ActionContext,
        param: StopLossOrderRequest,
        balances: Dict[str, int],
        decimals: Dict[str, int],
    ) -> None:
        rpc = ctx.runtime.rpc
        label = param.token_symbol or param.token_address
        await self._send(ctx, f"Creating stop loss order for token $[{label}|{param.token_address}]...\n")

        validate_stop_loss_param(param)
        address = param.token_address

        if address not in balances:
            balances[address] = await rpc.get_erc20_balance(address, ctx.state.agent_wallet.address)
        balance = balances[address]
        if balance == 0:
            self.logger.warning(f"No balance found for token {address}")
            return

        if not decimals.get(address):
            decimals[address] = await rpc.get_erc20_decimals(address)
        token_decimals = decimals[address]
        if not token_decimals:
            raise ValueError("Failed to fetch decimals for token. Please try again.")

        percentage = float(param.quantity_percentage or 100) / 100
        sell_wei = apply_percentage(balance, percentage)

        order = OpenOrderInput(
            sell_amount_in_wei=str(sell_wei),
            sell_amount=format_units(sell_wei, token_decimals),
            sell_token_address=address,
            sell_token_symbol=param.token_symbol or "",
            sell_token_decimals=token_decimals,
            buy_token_address=param.buy_token or DEFAULT_BUY_TOKEN,
            buy_token_symbol=param.buy_token_symbol or DEFAULT_BUY_TOKEN_SYMBOL,
            buy_token_decimals=param.buy_token_decimals or DEFAULT_BUY_TOKEN_DECIMALS,
            trigger_value=param.stop_loss_value,
            trigger_type=(
                OrderTriggerType.PERCENTAGE if param.stop_loss_trigger == "percentage" else OrderTriggerType.TOKEN_PRICE
            ),
            request_type=RequestType.STOP_LOSS,
            chain_id=BASE_NETWORK_ID,
        )
        if param.expiry:
            order.expires_at = expires_at(param.expiry)

        result = await ctx.runtime.senpi_api.create_manual_order(
            ctx.authorization,
            ActionType.SL,
            Source.AGENT,
            stop_loss_inputs=[order],
        )

        if result.success:
            await self._send(ctx, success_table(param, result.metadata.order_id))
        else:
            await self._send(
                ctx,
                f"Failed to create stop loss order for token $[{label}|{address}]. Error: {result.error}",
            )
