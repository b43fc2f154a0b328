from ...core.runtime import Plugin
from .action import DustWalletAction, find_dust_tokens

plugin = Plugin(
    name="walletDusterPlugin",
    description="Dust low-value tokens in the agent wallet into ETH",
    actions=[DustWalletAction()],
)

__all__ = ["DustWalletAction", "find_dust_tokens", "plugin"]
