import logging
from typing import List

from ...core.runtime import ActionContext
from . import messages
from .types import OPEN_ORDER_TYPES, BalanceType, OrderType, SenpiOrdersResponse, Transaction, TriggerType

logger = logging.getLogger(__name__)


def missing_fields(transaction: Transaction) -> List[str]:
    missing = []
    if not transaction.sell_token:
        missing.append("sellToken")
    if not transaction.buy_token:
        missing.append("buyToken")
    if not transaction.order_type:
        missing.append("orderType")

    if transaction.order_type in OPEN_ORDER_TYPES:
        balance = transaction.balance
        if not transaction.trigger_type:
            missing.append("triggerType")
        if not transaction.trigger_price:
            missing.append("triggerPrice")
        if not balance or not balance.type:
            missing.append("balance.type")
        if not balance or not balance.value:
            missing.append("balance.value")
    return missing


def _has_invalid_balance(transaction: Transaction) -> bool:
    balance = transaction.balance
    if not balance or not balance.type:
        return False
    if not balance.source_token:
        return True
    if balance.type == BalanceType.PERCENTAGE:
        value = balance.value or 0
        if value <= 0:
            return True
        if value > 100 and transaction.order_type != OrderType.LIMIT_ORDER_SELL:
            return True
    return False


async def validate_orders(ctx: ActionContext, response: SenpiOrdersResponse) -> bool:
    """Check the parsed orders; on failure the user is told why and False is returned."""
    if not response.transactions:
        logger.error(f"Invalid content structure: {response.model_dump_json()}")
        await ctx.send(
            messages.NO_ORDERS_DETECTED,
            content={"error": "INVALID_CONTENT", "details": messages.GENERIC_ERROR_DETAILS},
        )
        return False

    for transaction in response.transactions:
        missing = missing_fields(transaction)
        if missing:
            logger.error(f"Missing required fields {missing} in transaction")
            await ctx.send(
                messages.MISSING_FIELDS,
                content={"error": "MISSING_FIELDS", "details": f"Missing fields: {', '.join(missing)}"},
            )
            return False

        sell_quantity = transaction.sell_quantity
        buy_quantity = transaction.buy_quantity
        if (sell_quantity is not None and sell_quantity <= 0) or (buy_quantity is not None and buy_quantity <= 0):
            logger.error(f"Invalid quantity: sell={sell_quantity}, buy={buy_quantity}")
            await ctx.send(
                messages.INVALID_QUANTITY,
                content={"error": "INVALID_QUANTITY", "details": "Quantities must be positive"},
            )
            return False

        if _has_invalid_balance(transaction):
            logger.error(f"Invalid balance configuration: {transaction.balance}")
            await ctx.send(
                messages.INVALID_BALANCE,
                content={"error": "INVALID_BALANCE", "details": messages.GENERIC_ERROR_DETAILS},
            )
            return False

    return True


def sell_order_problem(transaction: Transaction) -> str:
    """First missing piece of an SL/LO order, as a user message, or ``""``."""
    if not transaction.trigger_type:
        return messages.MISSING_TRIGGER_TYPE
    if not transaction.trigger_price:
        return messages.MISSING_TRIGGER_PRICE
    if not transaction.balance:
        return messages.MISSING_BALANCE
    if not transaction.balance.type:
        return messages.MISSING_BALANCE_TYPE
    if not transaction.balance.value:
        return messages.MISSING_BALANCE_VALUE
    return ""


def validate_price_conditions(transaction: Transaction, trigger_price: float, current_price: float) -> str:
    """Reject triggers on the wrong side of the current price; ``""`` when fine."""
    order_type = transaction.order_type
    trigger_type = transaction.trigger_type
    error = ""

    if trigger_type == TriggerType.ABSOLUTE_VALUE:
        if trigger_price > current_price and order_type == OrderType.STOP_LOSS:
            error = messages.SL_ABOVE_PRICE
        if trigger_price < current_price and order_type == OrderType.LIMIT_ORDER_SELL:
            error = messages.LO_SELL_BELOW_PRICE
    elif trigger_type == TriggerType.PERCENTAGE:
        if trigger_price > 100 and order_type == OrderType.STOP_LOSS:
            error = messages.SL_PERCENTAGE_TOO_HIGH
        if trigger_price < 0 and order_type in (OrderType.LIMIT_ORDER_SELL, OrderType.LIMIT_ORDER_BUY):
            error = messages.LO_PERCENTAGE_NEGATIVE
    elif trigger_type in (TriggerType.VALUE_PRICE_DROP, TriggerType.VALUE_PRICE_INCREASE):
        stop_loss_price = current_price - (transaction.trigger_price or 0)
        limit_price = current_price + (transaction.trigger_price or 0)
        if stop_loss_price <= 0 and order_type == OrderType.STOP_LOSS:
            error = messages.SL_DROP_TOO_LARGE
        if limit_price < current_price and order_type == OrderType.LIMIT_ORDER_SELL:
            error = messages.LO_INCREASE_NEGATIVE

    if error:
        logger.error(f"Price condition failed for {order_type}: trigger={trigger_price}, price={current_price}")
    return error
