"""
Stop-loss and limit order inputs.

Orders placed on their own are sized from the agent wallet balance
(``sellAmountInWei``). Orders placed alongside a swap cannot know the
swapped amount yet and carry ``sellPercentage`` instead.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ...services.formatting import number_to_string
from ...services.orders import (
    ActionType,
    LimitOrderType,
    OpenOrderInput,
    OrderTriggerType,
    RequestType,
)
from ...services.tokens import ETH, format_units, parse_units
from . import messages
from .session import OrderRejected, OrderSession, ResolvedToken
from .types import BalanceType, OrderType, Transaction, TriggerType
from .validation import sell_order_problem, validate_price_conditions

logger = logging.getLogger(__name__)

SWAP_ATTACHED_ACTIONS = (ActionType.SWAP_SL, ActionType.SWAP_SL_LO, ActionType.SWAP_LO)

OpenOrders = Tuple[List[OpenOrderInput], List[OpenOrderInput]]


def compute_trigger_value(
    transaction: Transaction,
    trigger_price: float,
    balance_value: float,
    current_price: float,
) -> Optional[str]:
    """Trigger sent to the order service, or None when it cannot be derived."""
    trigger_type = transaction.trigger_type
    order_type = transaction.order_type

    if trigger_type in (TriggerType.PERCENTAGE, TriggerType.ABSOLUTE_VALUE):
        return number_to_string(trigger_price)
    if trigger_type == TriggerType.VALUE_PRICE_DROP and order_type == OrderType.STOP_LOSS:
        return number_to_string(current_price - trigger_price * (balance_value / 100))
    if trigger_type == TriggerType.VALUE_PRICE_INCREASE and order_type == OrderType.LIMIT_ORDER_SELL:
        return number_to_string(current_price + trigger_price * (balance_value / 100))
    return None


def _order_trigger_type(transaction: Transaction) -> OrderTriggerType:
    if transaction.trigger_type == TriggerType.PERCENTAGE:
        return OrderTriggerType.PERCENTAGE
    return OrderTriggerType.TOKEN_PRICE


def _request_type(transaction: Transaction) -> RequestType:
    if transaction.order_type == OrderType.STOP_LOSS:
        return RequestType.STOP_LOSS
    return RequestType.LIMIT_ORDER


def _file_sell_order(order: OpenOrderInput, transaction: Transaction) -> OpenOrders:
    if transaction.order_type == OrderType.STOP_LOSS:
        return [order], []
    order.limit_order_type = LimitOrderType.LIMIT_SELL
    return [], [order]


async def handle_sell_order(
    session: OrderSession,
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
    action: Optional[str],
) -> OpenOrders:
    """Build stop-loss / limit order inputs; returns ``(stop_losses, limit_orders)``."""
    problem = sell_order_problem(transaction)
    if problem:
        raise OrderRejected(problem)

    trigger_price = float(transaction.trigger_price)
    balance_value = float(transaction.balance.value)
    order_type = transaction.order_type

    if (sell.symbol == ETH and order_type != OrderType.LIMIT_ORDER_BUY) or (
        buy.symbol == ETH and order_type == OrderType.LIMIT_ORDER_BUY
    ):
        raise OrderRejected(messages.ETH_NOT_SUPPORTED)

    balance_check = action not in SWAP_ATTACHED_ACTIONS

    try:
        current_price = await session.usd_price(sell.address)
        price_problem = validate_price_conditions(transaction, trigger_price, current_price)
        if price_problem:
            raise OrderRejected(price_problem)

        token_balance = await session.wallet_token_balance(sell)

        if order_type in (OrderType.STOP_LOSS, OrderType.LIMIT_ORDER_SELL):
            if balance_check:
                return _sized_sell_order(transaction, sell, buy, token_balance, trigger_price, balance_value, current_price)
            return _percentage_sell_order(transaction, sell, buy, trigger_price, balance_value, current_price)

        if order_type == OrderType.LIMIT_ORDER_BUY:
            return [], [await _limit_buy_order(session, transaction, sell, buy, trigger_price)]

        raise OrderRejected(messages.SELL_ORDER_FAILED)
    except OrderRejected:
        raise
    except Exception as e:
        logger.exception(f"Error setting up {order_type} order: {e}")
        raise OrderRejected(messages.SELL_ORDER_ERROR) from e


def _sized_sell_order(
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
    token_balance: int,
    trigger_price: float,
    balance_value: float,
    current_price: float,
) -> OpenOrders:
    label = "stop loss" if transaction.order_type == OrderType.STOP_LOSS else "limit"
    formatted_balance = float(format_units(token_balance, sell.decimals)) if token_balance > 0 else 0
    balance_type = transaction.balance.type

    if token_balance == 0:
        raise OrderRejected(messages.insufficient_order_balance(sell.symbol, label))
    if balance_type == BalanceType.QUANTITY and balance_value > formatted_balance:
        raise OrderRejected(
            messages.insufficient_order_quantity(
                sell.symbol,
                label,
                number_to_string(formatted_balance),
                number_to_string(balance_value),
            )
        )

    if balance_type == BalanceType.PERCENTAGE:
        sell_wei = token_balance * int(balance_value) // 100
    elif balance_type == BalanceType.QUANTITY:
        sell_wei = parse_units(balance_value, sell.decimals)
    else:
        sell_wei = token_balance
    sell_value = float(format_units(sell_wei, sell.decimals))

    trigger_value = compute_trigger_value(transaction, trigger_price, balance_value, current_price)
    if not trigger_value:
        raise OrderRejected(messages.trigger_not_calculated(transaction.order_type))

    order = OpenOrderInput(
        sell_amount_in_wei=str(sell_wei),
        sell_amount=number_to_string(sell_value),
        sell_token_address=sell.address,
        sell_token_symbol=sell.symbol,
        sell_token_decimals=sell.decimals,
        buy_token_decimals=buy.decimals,
        buy_token_address=buy.address,
        buy_token_symbol=buy.symbol,
        trigger_value=trigger_value,
        trigger_type=_order_trigger_type(transaction),
        request_type=_request_type(transaction),
    )
    return _file_sell_order(order, transaction)


def _percentage_sell_order(
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
    trigger_price: float,
    balance_value: float,
    current_price: float,
) -> OpenOrders:
    order_type = transaction.order_type
    balance_type = transaction.balance.type

    if not balance_value:
        raise OrderRejected(messages.sell_percentage_missing(order_type))
    if balance_type == BalanceType.QUANTITY:
        raise OrderRejected(messages.quantity_not_supported_with_swaps(order_type))
    percentage = 100 if balance_type == BalanceType.FULL else balance_value

    trigger_value = compute_trigger_value(transaction, trigger_price, balance_value, current_price)
    if not trigger_value:
        raise OrderRejected(messages.trigger_not_calculated(order_type))

    order = OpenOrderInput(
        sell_token_address=sell.address,
        sell_token_symbol=sell.symbol,
        sell_token_decimals=sell.decimals,
        buy_token_decimals=buy.decimals,
        sell_percentage=number_to_string(percentage),
        buy_token_address=buy.address,
        buy_token_symbol=buy.symbol,
        trigger_value=trigger_value,
        trigger_type=_order_trigger_type(transaction),
        request_type=_request_type(transaction),
    )
    return _file_sell_order(order, transaction)


async def _limit_buy_order(
    session: OrderSession,
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
    trigger_price: float,
) -> OpenOrderInput:
    order_type = transaction.order_type
    buy_quantity = transaction.buy_quantity
    if not buy_quantity:
        raise OrderRejected(messages.buy_amount_missing(order_type))

    buy_price = await session.usd_price(buy.address)
    if not buy_price:
        raise OrderRejected(messages.buy_price_unavailable(buy.address, order_type))

    if transaction.trigger_type not in (TriggerType.PERCENTAGE, TriggerType.ABSOLUTE_VALUE) or not trigger_price:
        raise OrderRejected(messages.buy_trigger_not_calculated(buy.address, order_type))

    order = OpenOrderInput(
        buy_token_address=buy.address,
        buy_token_symbol=buy.symbol,
        buy_token_decimals=buy.decimals,
        sell_token_address=sell.address,
        sell_token_symbol=sell.symbol,
        sell_token_decimals=sell.decimals,
        trigger_value=number_to_string(trigger_price),
        trigger_type=_order_trigger_type(transaction),
        request_type=RequestType.LIMIT_ORDER,
        limit_order_type=LimitOrderType.LIMIT_BUY,
    )
    if transaction.is_usd_value:
        order.buy_amount_usd = number_to_string(buy_quantity)
    else:
        buy_wei = parse_units(buy_quantity, buy.decimals)
        order.buy_amount_in_wei = str(buy_wei)
        order.buy_amount = number_to_string(float(format_units(buy_wei, buy.decimals)))
    return order
