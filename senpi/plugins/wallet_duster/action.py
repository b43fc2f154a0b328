"""
DUST_WALLET_TO_ETH action.

Swaps every low-value token in the agent wallet into ETH, one
``createManualOrder`` swap per token.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ...core.recovery import FixedDelayStrategy
from ...core.runtime import Action, ActionContext
from ...services.orders import ActionType, CreateManualOrderOutput, Source, SwapInput
from ...services.portfolio import Portfolio, TokenBalance
from ...services.tokens import (
    BASE_NETWORK_ID,
    ETH,
    ETH_ADDRESS,
    ETH_TOKEN_DECIMALS,
    ZERO_ADDRESS,
    format_token_mention,
    parse_units,
)
from .templates import DUST_REQUEST_TEMPLATE

ACTION_NAME = "DUST_WALLET_TO_ETH"

DEFAULT_THRESHOLD = 5
MIN_DUST_USD = 0.01

PROCESSING_FAILED = "\nAn error occurred while processing your request. Please try again."
DUSTING_FAILED = "An error occurred while dusting your wallet. Please try again later."
CANCELLED = "Dusting process cancelled."
SUB_CENT_NOTE_CHECKED = (
    "\n\nOnly tokens above $0.01 have been checked for dusting. "
    "To dust tokens below $0.01, set the threshold to $0.01 or below."
)
SUB_CENT_NOTE_DUSTED = (
    "\n\nOnly tokens above $0.01 have been dusted. "
    "To dust tokens below $0.01, set the threshold to $0.01 or below."
)


class DustRequest(BaseModel):
    threshold: Optional[float] = Field(default=None, ge=0)
    is_confirmed: Optional[bool] = Field(default=None, alias="isConfirmed")


def find_dust_tokens(portfolio: Optional[Portfolio], threshold: float) -> List[TokenBalance]:
    """Holdings worth less than ``threshold`` USD, skipping ETH.

    Above one cent the filter also skips sub-cent tokens.
    """
    if portfolio is None:
        return []

    dust = []
    for holding in portfolio.token_balances:
        usd = holding.token.balance_usd
        if threshold > MIN_DUST_USD:
            in_range = MIN_DUST_USD < usd < threshold
        else:
            in_range = usd < threshold
        address = holding.token.base_token.address.lower()
        if in_range and holding.token.balance > 0 and address not in (ZERO_ADDRESS, ETH_ADDRESS.lower()):
            dust.append(holding)
    return dust


def _threshold_label(threshold: float) -> str:
    return f"{threshold:g}"


class DustWalletAction(Action):
    name = ACTION_NAME
    similes = [
        "CLEAN_WALLET",
        "DUST_MY_TOKENS",
        "REMOVE_DUST",
        "DUST_TO_ETH",
        "CLEAR_LOW_VALUE_TOKENS",
        "CLEAR_THE_DUST_OUT",
        "SELL_ALL_TOKENS_UNDER",
        "DUST_TOKENS",
        "DUST_WALLET",
        "DUST_TOKENS_UNDER_USD",
        "DUST_TOKENS_BELOW_USD",
    ]
    description = (
        "Dust any low-value ERC20 tokens in the user's agent wallet under a given USD $ value threshold "
        "and dusts them to ETH on Base. Select this action when user request to dust their wallet and NOT "
        "just simply display/preview the dust tokens, e.g. 'Dust tokens under $5'."
    )
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "Dust my wallet for anything under $5."}},
            {"user": "{{user2}}", "content": {"text": "Dusted 3 dust tokens into ETH.", "action": ACTION_NAME}},
        ],
        [
            {"user": "{{user1}}", "content": {"text": "Clear all the low-value tokens from my wallet."}},
            {"user": "{{user2}}", "content": {"text": "Swapped 2 dust tokens into ETH.", "action": ACTION_NAME}},
        ],
    ]
    suppress_initial_message = True

    def __init__(self, logger=None, retry: Optional[FixedDelayStrategy] = None) -> None:
        super().__init__(logger)
        self.retry = retry or FixedDelayStrategy(max_attempts=3, delay=1.0, logger=self.logger)

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            await self._dust(ctx)
        except Exception as e:
            self.logger.exception(f"Error dusting wallet: {e}")
            await ctx.send(DUSTING_FAILED)
        return True

    async def _dust(self, ctx: ActionContext) -> None:
        prompt = ctx.runtime.compose_context(DUST_REQUEST_TEMPLATE, ctx.state)
        request = DustRequest.model_validate(await ctx.runtime.generate_object(prompt))
        self.logger.debug(f"Dust request: {request.model_dump_json(by_alias=True)}")

        threshold = DEFAULT_THRESHOLD if request.threshold is None else request.threshold
        label = _threshold_label(threshold)

        if request.is_confirmed is None:
            await ctx.send(
                f"You are trying to dust tokens under ${label} from your agent wallet. Depending on the number "
                "of tokens, this may take a several minutes to complete. \n\nDo you want to proceed?"
            )
            return
        if request.is_confirmed is False:
            await ctx.send(CANCELLED)
            return

        above_cent = threshold > MIN_DUST_USD
        dust_tokens = find_dust_tokens(ctx.state.agent_wallet_balance, threshold)
        self.logger.debug(f"Found {len(dust_tokens)} dust tokens under ${label}")

        if not dust_tokens:
            note = SUB_CENT_NOTE_CHECKED if above_cent else ""
            await ctx.send(f"No tokens under ${label} found in your wallet.{note}")
            return

        await ctx.send(f"Initializing dusting process on your agent wallet for tokens under ${label}...\n")

        total_usd = 0.0
        dusted = 0
        for holding in dust_tokens:
            base_token = holding.token.base_token
            swap_input = SwapInput(
                sell_token_address=base_token.address,
                chain_id=BASE_NETWORK_ID,
                buy_token_address=ETH_ADDRESS,
                amount=str(parse_units(holding.token.balance, base_token.decimals)),
                buy_token_decimal=ETH_TOKEN_DECIMALS,
                buy_token_symbol=ETH,
                sell_token_decimal=base_token.decimals,
                sell_token_symbol=base_token.symbol,
            )
            result = await self.dust_token(ctx, swap_input)
            if result.success:
                dusted += 1
                total_usd += holding.token.balance_usd

        worth = "< $0.01" if total_usd < MIN_DUST_USD else f"~ ${total_usd:.2f}"
        plural = "" if dusted == 1 else "s"
        note = SUB_CENT_NOTE_DUSTED if above_cent else ""
        await ctx.send(f"\nDusted {dusted} dust token{plural} into ETH ({worth}).{note}")

    async def dust_token(self, ctx: ActionContext, swap_input: SwapInput) -> CreateManualOrderOutput:
        """Swap one token into ETH, reporting progress; failures come back unsuccessful."""
        if not swap_input.sell_token_symbol or not swap_input.sell_token_address:
            self.logger.error(f"Missing swap input parameters: {swap_input.to_payload()}")
            return CreateManualOrderOutput(success=False, error="Missing swap input parameters")

        sell = format_token_mention(swap_input.sell_token_symbol, swap_input.sell_token_address)
        buy = format_token_mention(swap_input.buy_token_symbol, swap_input.buy_token_address)
        await ctx.send(f"\n# Dusting {sell} to {buy}\n")

        try:
            await ctx.send(f"\nDusting {sell} to {buy} is in progress.\n")

            async def place_order() -> CreateManualOrderOutput:
                return await ctx.runtime.senpi_api.create_manual_order(
                    ctx.authorization,
                    ActionType.SWAP,
                    Source.AGENT,
                    swap_input=swap_input,
                )

            result = await self.retry.execute(place_order, {"operation": "CreateManualOrder"})
            self.logger.info(f"CreateManualOrder result: {result.model_dump_json(by_alias=True)}")

            swap_output = result.metadata.swap_output
            if not result.success or not swap_output or not swap_output.tx_hash:
                raise RuntimeError(result.error or "Swap did not return a transaction hash")

            await ctx.send(
                f"\nView transaction status on [BaseScan](https://basescan.org/tx/{swap_output.tx_hash}).\n"
                f"Dusting {sell} to {buy} completed successfully.\n"
            )
            return result
        except Exception as e:
            self.logger.error(f"CreateManualOrder failed for {swap_input.sell_token_address}: {e}")
            await ctx.send(
                PROCESSING_FAILED,
                content={"details": "An error occurred while processing your request. Please try again."},
            )
            return CreateManualOrderOutput(success=False, error=str(e))
