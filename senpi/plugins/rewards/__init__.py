from ...core.runtime import Plugin
from .actions import CheckRewardsAction, ClaimRewardsAction, get_reward_balance, withdraw_calldata

plugin = Plugin(
    name="senpi-rewards",
    description="View and claim senpi rewards",
    actions=[CheckRewardsAction(), ClaimRewardsAction()],
)

__all__ = ["CheckRewardsAction", "ClaimRewardsAction", "get_reward_balance", "withdraw_calldata", "plugin"]
