from ...core.runtime import Plugin
from .action import TrendingTokensAction

plugin = Plugin(
    name="trendingTokensPlugin",
    description="Recommends trending tokens on Base",
    actions=[TrendingTokensAction()],
)

__all__ = ["TrendingTokensAction", "plugin"]
