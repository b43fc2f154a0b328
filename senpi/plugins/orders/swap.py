"""
Swap sizing for BUY / SELL transactions.

A swap is sized by the first of: buy quantity, sell quantity, or a
balance share (FULL or PERCENTAGE of what the agent wallet holds).
Amounts are always expressed in the sell token's base units.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from ...config import settings
from ...services.formatting import number_to_string
from ...services.orders import SwapInput
from ...services.tokens import (
    BASE_NETWORK_ID,
    ETH,
    ETH_ADDRESS,
    USDC,
    USDC_ADDRESS,
    USDC_TOKEN_DECIMALS,
    format_units,
    is_usdc,
    parse_units,
)
from . import messages
from .session import USDC_TOKEN, OrderRejected, OrderSession, ResolvedToken
from .types import BalanceType, Transaction

logger = logging.getLogger(__name__)

# balance shares are applied as percentage * 1e7 / 1e9 to keep 7 decimal places
PERCENTAGE_SCALE = 10**7
PERCENTAGE_DIVISOR = 10**9


def build_swap_input(sell: ResolvedToken, buy: ResolvedToken, amount: int) -> SwapInput:
    return SwapInput(
        sell_token_address=sell.address,
        buy_token_address=buy.address,
        amount=str(amount),
        chain_id=BASE_NETWORK_ID,
        sell_token_symbol=sell.symbol,
        buy_token_symbol=buy.symbol,
        sell_token_decimal=sell.decimals,
        buy_token_decimal=buy.decimals,
        slippage=settings.initial_slippage_in_bps,
    )


async def handle_swap_order(
    session: OrderSession,
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
) -> Optional[SwapInput]:
    balance = transaction.balance
    if transaction.buy_quantity:
        return await handle_buy_quantity(session, transaction, sell, buy)
    if transaction.sell_quantity:
        return await handle_sell_quantity(session, transaction, sell, buy)
    if balance and balance.type and balance.value:
        return await handle_balance_swap(session, transaction, sell, buy)

    logger.error(f"No quantity or balance provided for swap into {buy.address}")
    raise OrderRejected(messages.invalid_swap_inputs(buy.symbol, buy.address))


async def handle_buy_quantity(
    session: OrderSession,
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
) -> Optional[SwapInput]:
    if transaction.is_usd_value:
        try:
            amount = parse_units(transaction.buy_quantity, USDC_TOKEN_DECIMALS)
            if sell.symbol != USDC:
                amount = await session.convert(amount, USDC_TOKEN, sell)
        except Exception as e:
            logger.error(f"Failed to size USD buy of {buy.symbol}: {e}")
            raise OrderRejected(messages.SWAP_FAILED) from e

        if sell.symbol == buy.symbol:
            return None
        return build_swap_input(sell, buy, amount)

    # how much sell token is needed for the requested buy amount
    amount = await session.convert(parse_units(transaction.buy_quantity, buy.decimals), buy, sell)
    balance = await session.current_balance(sell)
    if balance < amount:
        logger.error(f"Insufficient {sell.symbol} balance: {balance} < {amount}")
        raise OrderRejected(await insufficient_balance_message(session, sell, amount, balance, buy.address))

    return build_swap_input(sell, buy, amount)


async def insufficient_balance_message(
    session: OrderSession,
    sell: ResolvedToken,
    required: int,
    balance: int,
    buy_address: Optional[str],
) -> str:
    """Suggest other holdings that could fund the buy, or ask for a top-up."""
    if not is_usdc(sell.address):
        usd_value = await session.convert(required, sell, USDC_TOKEN)
        indicative_usd = Decimal(format_units(usd_value, USDC_TOKEN_DECIMALS))
    else:
        indicative_usd = Decimal(format_units(required, sell.decimals))

    portfolio = session.ctx.state.agent_wallet_balance
    holdings = portfolio.token_balances if portfolio else []
    candidates = [
        holding
        for holding in holdings
        if (not buy_address or holding.token.base_token.address.lower() != buy_address.lower())
        and Decimal(str(holding.token.balance_usd)) > indicative_usd
    ]

    if not candidates:
        return messages.not_enough_in_bag(
            sell.symbol,
            format_units(balance, sell.decimals),
            format_units(required, sell.decimals),
            format_units(required - balance, sell.decimals),
        )

    by_symbol = {holding.token.base_token.symbol: holding for holding in candidates}
    ranked = sorted(candidates, key=lambda h: Decimal(str(h.token.balance_usd)), reverse=True)
    symbols = [holding.token.base_token.symbol for holding in ranked[:3]]

    lines = []
    for symbol in symbols:
        holding = by_symbol[symbol]
        if symbol == ETH:
            address = ETH_ADDRESS
        elif symbol == USDC:
            address = USDC_ADDRESS
        else:
            address = holding.token.base_token.address
        lines.append(
            f"• {symbol} ({address}): {number_to_string(holding.token.balance)} "
            f"({number_to_string(holding.token.balance_usd)} USD)"
        )

    joined = ", ".join(symbols[:-1])
    separator = " or " if len(symbols) > 1 else ""
    return (
        f"I can do that for you. Would you like me to use your {joined}{separator}{symbols[-1]} ?\n"
        "<!--\n" + "\n".join(lines) + "\n-->"
    )


async def handle_sell_quantity(
    session: OrderSession,
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
) -> SwapInput:
    if transaction.is_usd_value and not is_usdc(sell.address):
        usd_amount = parse_units(transaction.sell_quantity, USDC_TOKEN_DECIMALS)
        amount = await session.convert(usd_amount, USDC_TOKEN, sell)
    else:
        amount = parse_units(transaction.sell_quantity, sell.decimals)

    balance = await session.current_balance(sell)
    if balance < amount:
        logger.error(f"Insufficient {sell.symbol} balance: {balance} < {amount}")
        raise OrderRejected(
            messages.insufficient_swap_balance(
                sell.symbol,
                format_units(balance, sell.decimals),
                format_units(amount, sell.decimals),
                format_units(amount - balance, sell.decimals),
            )
        )

    return build_swap_input(sell, buy, amount)


async def handle_balance_swap(
    session: OrderSession,
    transaction: Transaction,
    sell: ResolvedToken,
    buy: ResolvedToken,
) -> SwapInput:
    try:
        balance = session.swap_balances.get(sell.address)
        if not balance:
            balance = await session.current_balance(sell)
        if not balance:
            await session.ctx.send(messages.wallet_refill(sell.symbol))
            raise ValueError(f"Agent wallet balance for {sell.address} is {balance}")
        session.swap_balances[sell.address] = balance

        quantity = balance_share(balance, transaction.balance.type, transaction.balance.value, sell.symbol)
    except Exception as e:
        logger.error(f"Balance based swap failed: {e}")
        raise OrderRejected(messages.SWAP_FAILED) from e

    logger.debug(f"Balance based swap quantity: {quantity}")
    return build_swap_input(sell, buy, quantity)


def balance_share(balance: int, balance_type: str, value: float, symbol: str) -> int:
    """Base units to swap for a FULL or PERCENTAGE balance instruction.

    100% of ETH is capped at 99% so the wallet keeps gas.
    """
    percentage = 100 if balance_type == BalanceType.FULL else value
    if symbol == ETH and percentage == 100:
        percentage = 99
    return balance * int(percentage * PERCENTAGE_SCALE) // PERCENTAGE_DIVISOR
