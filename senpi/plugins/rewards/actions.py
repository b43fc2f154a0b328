"""Senpi rewards: check the vault balance and claim it to the agent wallet."""

from __future__ import annotations

import logging
from typing import Optional

from ...config import settings
from ...core.runtime import Action, ActionContext, TransactionRequest
from ...providers.rpc import BaseRpcProvider
from ...services.abi import encode_address, encode_call, encode_uint
from ...services.formatting import number_to_string
from ...services.tokens import (
    ETH,
    ETH_ADDRESS,
    ETH_TOKEN_DECIMALS,
    USDC,
    USDC_ADDRESS,
    USDC_TOKEN_DECIMALS,
    format_units,
)

logger = logging.getLogger(__name__)

BASE_CHAIN_ID = "8453"
WITHDRAW_SIGNATURE = "withdraw(address,uint256)"

CHECK_BACK_LATER = (
    "🥷 Check back every Tuesday to claim your rewards! "
    "Earn more rewards by inviting friends and creating top performing groups. ⚡️"
)
FUND_WALLET = "⚠️ Failed to claim rewards - please fund your wallet with Base ETH and try again."
TRANSFER_FAILED = "Failed to transfer Base ETH. Please check the logs."
AGENT_WALLET_NOT_FOUND = "\nPlease make sure to set up your agent wallet first and try again."


async def get_reward_balance(rpc: BaseRpcProvider, address: str) -> Optional[int]:
    """Rewards held for ``address`` in wei, or None when the vault can't be read."""
    try:
        return await rpc.get_erc20_balance(settings.senpi_rewards_contract_address, address)
    except Exception as e:
        logger.error(f"Failed to read reward balance for {address}: {e}")
        return None


def withdraw_calldata(recipient: str, amount: int) -> str:
    return encode_call(WITHDRAW_SIGNATURE, encode_address(recipient), encode_uint(amount))


class CheckRewardsAction(Action):
    name = "CHECK_REWARDS"
    similes = [
        "CHECK_REWARDS",
        "VIEW_REWARDS",
        "SHOW_REWARDS",
        "WALLET_REWARDS",
        "ETH_REWARDS",
        "BASE_REWARDS",
    ]
    description = "Check the rewards of your agent wallet on Senpi"
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "What rewards have I earned?"}},
            {
                "user": "{{user2}}",
                "content": {
                    "text": (
                        "Your Senpi rewards balance from referrals and copy trades is 0.2421545 ETH, "
                        "currently worth $579.23. Would you like me to send it to your Senpi wallet?"
                    ),
                    "action": "CLAIM_REWARDS",
                },
            },
        ]
    ]
    suppress_initial_message = True

    async def handle(self, ctx: ActionContext) -> bool:
        if ctx.state.agent_wallet is None:
            await ctx.send(AGENT_WALLET_NOT_FOUND, action=self.name)
            return True
        address = ctx.state.agent_wallet.address
        self.logger.info(f"Checking rewards for address {address}")

        balance = await get_reward_balance(ctx.runtime.rpc, address)
        if not balance:
            await ctx.send(CHECK_BACK_LATER, action=self.name)
            return True

        usdc_wei = await ctx.runtime.codex.get_price(
            balance,
            ETH_ADDRESS,
            ETH_TOKEN_DECIMALS,
            ETH,
            USDC_ADDRESS,
            USDC_TOKEN_DECIMALS,
            USDC,
        )
        balance_eth = format_units(balance, ETH_TOKEN_DECIMALS)
        worth = number_to_string(format_units(usdc_wei, USDC_TOKEN_DECIMALS))

        await ctx.send(
            f"🎉 Congratulations! Your Senpi rewards balance from referrals and copy trades has grown to "
            f"{balance_eth} ETH, currently worth ${worth}. Shall I go ahead and send it to your Senpi wallet?",
            action=self.name,
        )
        return True


class ClaimRewardsAction(Action):
    name = "CLAIM_REWARDS"
    similes = [
        "CLAIM_REWARDS",
        "CLAIM_REWARDS_ON_SENPI",
        "SEND_REWARDS_TO_SENPI_WALLET",
    ]
    description = "Send, payout or claim your earned rewards from Senpi to your wallet"
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "Pay out my rewards balance"}},
            {"user": "{{user2}}", "content": {"text": "Confirmed: paid out 0.24 ETH", "action": "CLAIM_REWARDS"}},
        ]
    ]
    suppress_initial_message = True

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            await self._claim(ctx)
        except Exception as e:
            self.logger.exception(f"Error transferring Base ETH: {e}")
            await ctx.send(TRANSFER_FAILED)
        return True

    async def _claim(self, ctx: ActionContext) -> None:
        if ctx.state.agent_wallet is None:
            await ctx.send(AGENT_WALLET_NOT_FOUND, action=self.name)
            return
        address = ctx.state.agent_wallet.address
        reply_content = {"action": self.name, "inReplyTo": ctx.trace_id}

        balance = await get_reward_balance(ctx.runtime.rpc, address)
        if not balance:
            await ctx.send(CHECK_BACK_LATER, action=self.name)
            return

        eth_balance = await ctx.runtime.rpc.get_native_balance(address)
        if not eth_balance:
            await ctx.send(FUND_WALLET, action=self.name)
            return

        balance_eth = format_units(balance, ETH_TOKEN_DECIMALS)
        self.logger.info(f"Reward balance of {address} is {balance}")
        await ctx.send(f"✨ Preparing rewards payout of {balance_eth} ETH\n\n", content=reply_content)

        wallet = ctx.state.wallet_client
        if wallet is None:
            raise RuntimeError("Wallet client not available")

        result = await wallet.send_transaction(
            BASE_CHAIN_ID,
            TransactionRequest(
                from_address=address,
                to_address=settings.senpi_rewards_contract_address,
                value=None,
                data=withdraw_calldata(address, balance),
            ),
        )
        tx_hash = result["hash"]
        self.logger.info(f"Paid out {balance_eth} ETH, transaction hash: {tx_hash}")

        await ctx.send(
            "✅ **Rewards claim completed!** \n\n"
            f" View tx: [BaseScan](https://basescan.org/tx/{tx_hash})\n\n"
            " 💡 Don’t forget to visit the Rewards section and share your referral code with friends "
            "— the more they join Senpi, the more rewards you earn! 🚀",
            content=reply_content,
        )
