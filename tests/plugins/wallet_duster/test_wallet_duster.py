import pytest
from unittest.mock import AsyncMock

from senpi.core.recovery import FixedDelayStrategy
from senpi.plugins.wallet_duster.action import (
    CANCELLED,
    DUSTING_FAILED,
    PROCESSING_FAILED,
    DustWalletAction,
    find_dust_tokens,
)
from senpi.services.orders import ActionType, CreateManualOrderOutput, Source, SwapInput
from senpi.services.portfolio import BaseToken, Portfolio, TokenBalance, TokenInfo
from senpi.services.tokens import ETH_ADDRESS

DEGEN_ADDRESS = "0x4ed4e862860bed51a9570b96d89af5e1b0efefed"
BRETT_ADDRESS = "0x532f27101965dd16442e59d40670faf5ebb142e4"
TINY_ADDRESS = "0x9999999999999999999999999999999999999999"


def holding(symbol: str, address: str, balance: float, balance_usd: float, decimals: int = 18) -> TokenBalance:
    return TokenBalance(
        address=address,
        token=TokenInfo(
            balance=balance,
            balance_usd=balance_usd,
            base_token=BaseToken(symbol=symbol, address=address, decimals=decimals),
        ),
    )


PORTFOLIO = Portfolio(
    token_balances=[
        holding("DEGEN", DEGEN_ADDRESS, 100, 1.5),
        holding("BRETT", BRETT_ADDRESS, 10, 2.25),
        holding("TINY", TINY_ADDRESS, 1, 0.001),
        holding("ETH", ETH_ADDRESS, 0.001, 2.5),
        holding("BIG", "0x8888888888888888888888888888888888888888", 1, 500),
    ]
)


def swap_success(tx_hash: str = "0xabc") -> CreateManualOrderOutput:
    return CreateManualOrderOutput.model_validate({"success": True, "metadata": {"swapOutput": {"txHash": tx_hash}}})


class TestFindDustTokens:

    def test_above_a_cent_skips_sub_cent_and_eth(self):
        dust = find_dust_tokens(PORTFOLIO, 5)
        assert [h.token.base_token.symbol for h in dust] == ["DEGEN", "BRETT"]

    def test_sub_cent_threshold(self):
        dust = find_dust_tokens(PORTFOLIO, 0.01)
        assert [h.token.base_token.symbol for h in dust] == ["TINY"]

    def test_no_portfolio(self):
        assert find_dust_tokens(None, 5) == []


class TestDustWalletAction:

    @pytest.fixture
    def action(self):
        return DustWalletAction(retry=FixedDelayStrategy(max_attempts=2, delay=0))

    @pytest.mark.asyncio
    async def test_asks_for_confirmation(self, make_context, recorder, runtime, action):
        runtime.llm.generate_object.return_value = {"threshold": 3, "isConfirmed": None}

        await action.run(make_context(agent_wallet_balance=PORTFOLIO))

        assert recorder.texts == [
            "You are trying to dust tokens under $3 from your agent wallet. Depending on the number of tokens, "
            "this may take a several minutes to complete. \n\nDo you want to proceed?"
        ]

    @pytest.mark.asyncio
    async def test_cancelled(self, make_context, recorder, runtime, action):
        runtime.llm.generate_object.return_value = {"threshold": 3, "isConfirmed": False}

        await action.run(make_context(agent_wallet_balance=PORTFOLIO))

        assert recorder.texts == [CANCELLED]

    @pytest.mark.asyncio
    async def test_nothing_to_dust(self, make_context, recorder, runtime, action):
        runtime.llm.generate_object.return_value = {"threshold": 1, "isConfirmed": True}

        await action.run(make_context(agent_wallet_balance=PORTFOLIO))

        assert recorder.texts[0].startswith("No tokens under $1 found in your wallet.")
        assert "Only tokens above $0.01 have been checked" in recorder.texts[0]

    @pytest.mark.asyncio
    async def test_dusts_each_token(self, make_context, recorder, runtime, action):
        runtime.llm.generate_object.return_value = {"isConfirmed": True}
        runtime.senpi_api.create_manual_order = AsyncMock(return_value=swap_success())

        await action.run(make_context(agent_wallet_balance=PORTFOLIO))

        calls = runtime.senpi_api.create_manual_order.await_args_list
        assert len(calls) == 2
        assert calls[0].args == ("Bearer test", ActionType.SWAP, Source.AGENT)
        swap_input = calls[0].kwargs["swap_input"]
        assert swap_input.sell_token_address == DEGEN_ADDRESS
        assert swap_input.buy_token_address == ETH_ADDRESS
        assert swap_input.amount == str(100 * 10**18)

        assert recorder.texts[0] == "Initializing dusting process on your agent wallet for tokens under $5...\n"
        assert recorder.texts[-1].startswith("\nDusted 2 dust tokens into ETH (~ $3.75).")

    @pytest.mark.asyncio
    async def test_dusts_a_holding_with_a_huge_balance(self, make_context, recorder, runtime, action):
        meme = "0x7777777777777777777777777777777777777777"
        portfolio = Portfolio(token_balances=[holding("MEME", meme, 5e10, 3.0)])
        runtime.llm.generate_object.return_value = {"isConfirmed": True}
        runtime.senpi_api.create_manual_order = AsyncMock(return_value=swap_success())

        await action.run(make_context(agent_wallet_balance=portfolio))

        swap_input = runtime.senpi_api.create_manual_order.await_args.kwargs["swap_input"]
        assert swap_input.amount == str(5 * 10**28)
        assert recorder.texts[-1].startswith("\nDusted 1 dust token into ETH (~ $3.00).")

    @pytest.mark.asyncio
    async def test_failed_swap_is_reported_and_skipped(self, make_context, recorder, runtime, action):
        runtime.llm.generate_object.return_value = {"threshold": 2, "isConfirmed": True}
        runtime.senpi_api.create_manual_order = AsyncMock(
            return_value=CreateManualOrderOutput(success=False, error="no route")
        )

        await action.run(make_context(agent_wallet_balance=PORTFOLIO))

        assert PROCESSING_FAILED in recorder.texts
        assert recorder.texts[-1].startswith("\nDusted 0 dust tokens into ETH (< $0.01).")

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, make_context, runtime, action):
        runtime.senpi_api.create_manual_order = AsyncMock(side_effect=[Exception("connection reset"), swap_success()])

        result = await action.dust_token(make_context(), degen_swap())

        assert result.success is True
        assert runtime.senpi_api.create_manual_order.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_sell_token_is_rejected(self, make_context, runtime, action):
        runtime.senpi_api.create_manual_order = AsyncMock()
        swap = degen_swap().model_copy(update={"sell_token_symbol": ""})

        result = await action.dust_token(make_context(), swap)

        assert result.success is False
        runtime.senpi_api.create_manual_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_model_failure(self, make_context, recorder, runtime, action):
        runtime.llm.generate_object.side_effect = RuntimeError("model down")

        await action.run(make_context(agent_wallet_balance=PORTFOLIO))

        assert recorder.texts == [DUSTING_FAILED]


def degen_swap() -> SwapInput:
    return SwapInput(
        sell_token_address=DEGEN_ADDRESS,
        buy_token_address=ETH_ADDRESS,
        amount="1",
        chain_id=8453,
        sell_token_symbol="DEGEN",
        buy_token_symbol="ETH",
        sell_token_decimal=18,
        buy_token_decimal=18,
    )
