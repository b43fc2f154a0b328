import logging
from typing import List, Optional

from ...services.formatting import format_amount
from ...services.orders import (
    CreateManualOrderOutput,
    LimitOrderOutput,
    OrderTriggerType,
    StopLossOutput,
    SwapInput,
    SwapOutput,
)
from ...services.tokens import format_token_mention, to_decimal
from . import messages
from .session import OrderSession
from .types import ActiveViewType, OrderType

logger = logging.getLogger(__name__)

BASESCAN_TX_URL = "https://basescan.org/tx/"

ORDERS_CTA = {
    "label": "Open Orders",
    "path": ActiveViewType.ORDERS.value,
    "message": "View Orders",
    "type": "NAVIGATE",
}


def _positive(value: Optional[str]) -> bool:
    try:
        return bool(value) and to_decimal(value) > 0
    except ValueError:
        return False


def _amount(value: Optional[str]) -> str:
    return format_amount(value if value else 0)


def render_swap_output(output: SwapOutput, swap_input: SwapInput, swap_order_type: Optional[str]) -> str:
    if swap_order_type == OrderType.BUY:
        amount = output.buy_amount
        token = format_token_mention(swap_input.buy_token_symbol, swap_input.buy_token_address)
        verb = "received"
    else:
        amount = output.sell_amount
        token = format_token_mention(swap_input.sell_token_symbol, swap_input.sell_token_address)
        verb = "sold"
    price = f"${output.buy_price}" if output.buy_price else "Price not available"

    return (
        "&nbsp;\n✅ Swap order completed:\n"
        f"Amount: **{amount}** of {token} {verb}\n"
        f"Price: {price}\n"
        f"View tx: [BaseScan]({BASESCAN_TX_URL}{output.tx_hash})\n"
    )


def render_stop_losses(outputs: List[StopLossOutput]) -> str:
    text = ""
    for output in outputs:
        price = _amount(output.stop_loss_price)
        quantity = _amount(output.sell_amount)
        if output.trigger_type == OrderTriggerType.PERCENTAGE:
            text += f"&nbsp;\n🛑 [-{output.trigger_value}%] Stop Loss created: \nSL Price: ${price} \nSell Quantity: {quantity} \n"
        elif output.trigger_type == OrderTriggerType.TOKEN_PRICE:
            text += f"&nbsp;\n🛑 [${price}] Stop Loss created: \nSL Price: ${price} \nSell Quantity: {quantity} \n"
    return text


def render_limit_orders(outputs: List[LimitOrderOutput]) -> str:
    text = ""
    for output in outputs:
        price = _amount(output.limit_price)

        if output.trigger_type == OrderTriggerType.PERCENTAGE:
            if _positive(output.sell_amount):
                text += (
                    f"&nbsp;\n📈 [+{output.trigger_value}%] Limit Sell created: \n"
                    f"LMT Price: ${price} \nSell Quantity: {_amount(output.sell_amount)} \n"
                )
            elif _positive(output.buy_amount_usd):
                text += (
                    f"&nbsp;\n📉 [-{output.trigger_value}%] Limit Buy created: \n"
                    f"LMT Price: ${price} \nBuy Amount: ${_amount(output.buy_amount_usd)} \n"
                )
            elif _positive(output.buy_amount):
                text += (
                    f"&nbsp;\n📉 [-{output.trigger_value}%] Limit Buy created: \n"
                    f"LMT Price: ${price} \nBuy Quantity: {_amount(output.buy_amount)} \n"
                )
        elif output.trigger_type == OrderTriggerType.TOKEN_PRICE:
            if _positive(output.sell_amount):
                text += (
                    f"&nbsp;\n📈 [LMT Price: ${price}] Limit Sell created: \n"
                    f"Sell Quantity: {_amount(output.sell_amount)} \n"
                )
            elif _positive(output.buy_amount_usd):
                text += (
                    f"&nbsp;\n📉 [LMT Price: ${price}] Limit Buy created: \n"
                    f"Buy Amount: ${_amount(output.buy_amount_usd)} \n"
                )
            elif _positive(output.buy_amount):
                text += (
                    f"&nbsp;\n📉 [LMT Price: ${price}] Limit Buy created: \n"
                    f"Buy Quantity: {_amount(output.buy_amount)} \n"
                )
    return text


async def handle_order_creation_result(
    session: OrderSession,
    result: CreateManualOrderOutput,
    swap_input: Optional[SwapInput],
    swap_order_type: Optional[str],
) -> None:
    if not result.success:
        logger.error(f"Could not create orders: {result.error}")
        await session.send(messages.ORDER_CREATION_FAILED)
        return

    metadata = result.metadata
    orders_view_available = False

    if metadata.swap_output and swap_input:
        orders_view_available = True
        await session.send(render_swap_output(metadata.swap_output, swap_input, swap_order_type))

    if metadata.stop_loss_outputs:
        orders_view_available = True
        await session.send(render_stop_losses(metadata.stop_loss_outputs))

    if metadata.limit_order_outputs:
        orders_view_available = True
        await session.send(render_limit_orders(metadata.limit_order_outputs))

    if orders_view_available:
        await session.send("", cta="DYNAMIC_CTA", metadata={"cta": dict(ORDERS_CTA)})
