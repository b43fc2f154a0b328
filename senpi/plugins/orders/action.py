"""
SENPI_ORDERS action.

Parses a trading request into transactions, groups them per token and
places one ``createManualOrder`` call per group: an optional swap plus
any stop-loss and limit orders attached to it.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ...core.runtime import Action, ActionContext
from ...services.orders import OpenOrderInput, Source, SwapInput
from ...services.tokens import extract_token_details
from . import messages
from .open_orders import handle_sell_order
from .results import handle_order_creation_result
from .session import OrderRejected, OrderSession
from .swap import handle_swap_order
from .templates import SENPI_ORDERS_EXAMPLES, SENPI_ORDERS_TEMPLATE
from .types import OPEN_ORDER_TYPES, OrderType, SenpiOrdersResponse, Transaction
from .validation import validate_orders

logger = logging.getLogger(__name__)

ProcessedTransaction = Tuple[Optional[SwapInput], List[OpenOrderInput], List[OpenOrderInput]]

BUY_SIDE_ORDER_TYPES = (OrderType.BUY, OrderType.LIMIT_ORDER_BUY)
SELL_SIDE_ORDER_TYPES = (OrderType.SELL, OrderType.STOP_LOSS, OrderType.LIMIT_ORDER_SELL)


def group_transactions_by_token(
    transactions: List[Transaction],
    trace_id: Optional[str] = None,
) -> Dict[str, List[Transaction]]:
    """Group by the traded token, keeping first-appearance order.

    Buys are keyed by the buy token and sells by the sell token.
    Transactions with an unknown order type are skipped with a warning;
    those without an address are dropped.
    """
    grouped: Dict[str, List[Transaction]] = {}
    for transaction in transactions:
        if transaction.order_type in BUY_SIDE_ORDER_TYPES:
            _, address = extract_token_details(transaction.buy_token)
        elif transaction.order_type in SELL_SIDE_ORDER_TYPES:
            _, address = extract_token_details(transaction.sell_token)
        else:
            logger.warning(
                f"Skipping transaction with unknown order type {transaction.order_type} (traceId: {trace_id})"
            )
            continue
        if address:
            grouped.setdefault(address, []).append(transaction)
    return grouped


class SenpiOrdersAction(Action):
    name = messages.ACTION_NAME
    similes = [
        "SENPI_ORDERS",
        "TRADE_TOKENS",
        "SWAP_TOKENS",
        "BUY_TOKENS",
        "SELL_TOKENS",
        "PURCHASE_TOKENS",
        "STOP_LOSS",
        "LIMIT_ORDER",
        "SWAP_SL",
        "SWAP_SL_LO",
        "LO",
        "SL",
        "SL_LO",
    ]
    description = (
        "This action handles all order-related operations for Senpi, including swapping (buying or selling) "
        "ERC20 tokens, setting up limit orders for profit-taking, and configuring stop-loss orders for "
        "minimising loss. It does not support copy trading or automated trading strategies."
    )
    examples = SENPI_ORDERS_EXAMPLES
    suppress_initial_message = True

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            await self._place_orders(ctx)
        except Exception as e:
            await self._handle_error(ctx, e)
        return True

    async def _place_orders(self, ctx: ActionContext) -> None:
        state = ctx.state
        agent_wallet = state.agent_wallet
        if agent_wallet is None:
            self.logger.error("Agent wallet not found")
            await ctx.send(messages.AGENT_WALLET_NOT_FOUND)
            return
        if not agent_wallet.delegated:
            self.logger.error("Agent wallet is not delegated")
            await ctx.send(messages.DELEGATE_ACCESS_NOT_FOUND)
            return
        if state.wallet_client is None:
            self.logger.error("Wallet client not found")
            await ctx.send(messages.WALLET_CLIENT_NOT_FOUND)
            return

        response = await self.generate_orders(ctx)
        if response is None:
            return

        session = OrderSession(ctx)
        for token_address, transactions in group_transactions_by_token(response.transactions, ctx.trace_id).items():
            self.logger.debug(f"Processing {len(transactions)} transactions for {token_address}")
            token = await session.resolve_token(token_address)
            await session.send(messages.preparing_order(token.mention))

            swap_input: Optional[SwapInput] = None
            swap_order_type: Optional[str] = None
            stop_losses: List[OpenOrderInput] = []
            limit_orders: List[OpenOrderInput] = []

            for transaction in transactions:
                new_swap, new_stop_losses, new_limit_orders = await self.process_transaction(
                    session, transaction, response.action
                )
                swap_input = new_swap or swap_input
                if swap_input and transaction.order_type in (OrderType.BUY, OrderType.SELL):
                    swap_order_type = transaction.order_type
                stop_losses.extend(new_stop_losses)
                limit_orders.extend(new_limit_orders)

            if swap_input or stop_losses or limit_orders:
                result = await ctx.runtime.senpi_api.create_manual_order(
                    ctx.authorization,
                    response.action,
                    Source.AGENT,
                    swap_input=swap_input,
                    stop_loss_inputs=stop_losses,
                    limit_order_inputs=limit_orders,
                )
                await handle_order_creation_result(session, result, swap_input, swap_order_type)

            await ctx.runtime.portfolio.invalidate(ctx.user_id)

    async def generate_orders(self, ctx: ActionContext) -> Optional[SenpiOrdersResponse]:
        """Ask the model for structured orders; None when the user was already answered."""
        prompt = ctx.runtime.compose_context(SENPI_ORDERS_TEMPLATE, ctx.state)
        raw = await ctx.runtime.generate_object(prompt, temperature=0.1, max_tokens=8192)
        self.logger.debug(f"Generated orders: {json.dumps(raw)}")

        try:
            response = SenpiOrdersResponse.model_validate(raw)
        except PydanticValidationError as e:
            self.logger.error(f"Model returned malformed orders: {e}")
            await self._send(ctx, messages.GENERATION_FAILED)
            return None

        if response.error:
            self.logger.error(f"Model reported an error: {response.error.model_dump_json()}")
            await self._send(ctx, response.error.prompt_message or messages.GENERATION_FAILED)
            return None

        if not await validate_orders(ctx, response):
            return None
        return response

    async def process_transaction(
        self,
        session: OrderSession,
        transaction: Transaction,
        action: Optional[str],
    ) -> ProcessedTransaction:
        """Turn one transaction into order inputs.

        A rejected transaction is reported to the user and contributes nothing.
        """
        if transaction.trigger_price:
            transaction.trigger_price = abs(transaction.trigger_price)
        if transaction.balance and transaction.balance.value:
            transaction.balance.value = abs(transaction.balance.value)

        try:
            sell = await session.resolve_token(transaction.sell_token)
            buy = await session.resolve_token(transaction.buy_token)

            if transaction.order_type in (OrderType.BUY, OrderType.SELL):
                swap_input = await handle_swap_order(session, transaction, sell, buy)
                return swap_input, [], []

            if transaction.order_type in OPEN_ORDER_TYPES:
                stop_losses, limit_orders = await handle_sell_order(session, transaction, sell, buy, action)
                return None, stop_losses, limit_orders

            self.logger.warning(f"Unknown order type: {transaction.order_type} (traceId: {session.ctx.trace_id})")
            raise OrderRejected(messages.UNKNOWN_ORDER_TYPE)
        except OrderRejected as rejection:
            await session.send(rejection.message)
            return None, [], []

    async def _send(self, ctx: ActionContext, text: str) -> None:
        await ctx.send(text, content={"action": self.name, "inReplyTo": ctx.trace_id})

    async def _handle_error(self, ctx: ActionContext, error: Exception) -> None:
        self.logger.exception(f"Error occurred while placing orders: {error}")
        if messages.INSUFFICIENT_FUNDS_ERROR in str(error):
            await ctx.send(messages.INSUFFICIENT_ETH_BALANCE)
            return
        await ctx.send(
            messages.SWAP_OPERATION_FAILED,
            content={
                "error": "SWAP_OPERATION_FAILED",
                "details": f"An error occurred while performing the swap operation: {error}.",
            },
        )
