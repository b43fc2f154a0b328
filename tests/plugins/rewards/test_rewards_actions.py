import pytest
from unittest.mock import AsyncMock, MagicMock

from senpi.config import settings
from senpi.core.runtime import TransactionRequest
from senpi.plugins.rewards.actions import (
    AGENT_WALLET_NOT_FOUND,
    CHECK_BACK_LATER,
    FUND_WALLET,
    TRANSFER_FAILED,
    CheckRewardsAction,
    ClaimRewardsAction,
    get_reward_balance,
    withdraw_calldata,
)
from senpi.services.abi import encode_uint, selector
from senpi.services.tokens import ETH_ADDRESS, USDC_ADDRESS

WALLET = "0x1111111111111111111111111111111111111111"
VAULT = "0x2222222222222222222222222222222222222222"


@pytest.fixture(autouse=True)
def rewards_contract(monkeypatch):
    monkeypatch.setattr(settings, "senpi_rewards_contract_address", VAULT)


class TestHelpers:

    def test_withdraw_calldata(self):
        data = withdraw_calldata(WALLET, 10**18)

        assert data.startswith(selector("withdraw(address,uint256)"))
        assert data.endswith(encode_uint(10**18))
        assert len(data) == 10 + 128

    @pytest.mark.asyncio
    async def test_reward_balance_reads_vault(self):
        rpc = MagicMock()
        rpc.get_erc20_balance = AsyncMock(return_value=42)

        assert await get_reward_balance(rpc, WALLET) == 42
        rpc.get_erc20_balance.assert_awaited_once_with(VAULT, WALLET)

    @pytest.mark.asyncio
    async def test_reward_balance_failure(self):
        rpc = MagicMock()
        rpc.get_erc20_balance = AsyncMock(side_effect=RuntimeError("rpc down"))

        assert await get_reward_balance(rpc, WALLET) is None


class TestCheckRewardsAction:

    @pytest.mark.asyncio
    async def test_reports_balance_and_worth(self, make_context, recorder, runtime):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=242_154_500_000_000_000)
        runtime.codex.get_price = AsyncMock(return_value=579_230_000)

        await CheckRewardsAction().run(make_context())

        assert recorder.texts == [
            "🎉 Congratulations! Your Senpi rewards balance from referrals and copy trades has grown to "
            "0.2421545 ETH, currently worth $579.23. Shall I go ahead and send it to your Senpi wallet?"
        ]
        assert recorder.messages[0].action == "CHECK_REWARDS"
        runtime.codex.get_price.assert_awaited_once_with(
            242_154_500_000_000_000, ETH_ADDRESS, 18, "ETH", USDC_ADDRESS, 6, "USDC"
        )

    @pytest.mark.asyncio
    async def test_no_rewards(self, make_context, recorder, runtime):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=0)

        await CheckRewardsAction().run(make_context())

        assert recorder.texts == [CHECK_BACK_LATER]

    @pytest.mark.asyncio
    async def test_no_agent_wallet(self, make_context, recorder):
        await CheckRewardsAction().run(make_context(agent_wallet=None))

        assert recorder.texts == [AGENT_WALLET_NOT_FOUND]


class TestClaimRewardsAction:

    @pytest.fixture
    def wallet(self):
        wallet = MagicMock()
        wallet.send_transaction = AsyncMock(return_value={"hash": "0xfeed"})
        return wallet

    @pytest.mark.asyncio
    async def test_claims_to_agent_wallet(self, make_context, recorder, runtime, wallet):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=10**17)
        runtime.rpc.get_native_balance = AsyncMock(return_value=10**15)

        await ClaimRewardsAction().run(make_context(wallet_client=wallet))

        chain_id, transaction = wallet.send_transaction.await_args.args
        assert chain_id == "8453"
        assert transaction == TransactionRequest(
            from_address=WALLET,
            to_address=VAULT,
            data=withdraw_calldata(WALLET, 10**17),
        )
        assert recorder.texts[0] == "✨ Preparing rewards payout of 0.1 ETH\n\n"
        assert "[BaseScan](https://basescan.org/tx/0xfeed)" in recorder.texts[1]
        assert recorder.messages[1].content == {"action": "CLAIM_REWARDS", "inReplyTo": "trace-1"}

    @pytest.mark.asyncio
    async def test_needs_gas(self, make_context, recorder, runtime, wallet):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=10**17)
        runtime.rpc.get_native_balance = AsyncMock(return_value=0)

        await ClaimRewardsAction().run(make_context(wallet_client=wallet))

        assert recorder.texts == [FUND_WALLET]
        wallet.send_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nothing_to_claim(self, make_context, recorder, runtime, wallet):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=0)

        await ClaimRewardsAction().run(make_context(wallet_client=wallet))

        assert recorder.texts == [CHECK_BACK_LATER]

    @pytest.mark.asyncio
    async def test_transfer_failure(self, make_context, recorder, runtime, wallet):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=10**17)
        runtime.rpc.get_native_balance = AsyncMock(return_value=10**15)
        wallet.send_transaction = AsyncMock(side_effect=RuntimeError("reverted"))

        await ClaimRewardsAction().run(make_context(wallet_client=wallet))

        assert recorder.texts[-1] == TRANSFER_FAILED
