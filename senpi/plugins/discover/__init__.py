from ...core.runtime import Plugin
from .actions import DiscoverGroupsAction, Timeframe, TopTradersAction, convert_timeframe_to_days

plugin = Plugin(
    name="senpiDiscoverPlugin",
    description="Discover top groups and traders to copy trade on Senpi",
    actions=[DiscoverGroupsAction(), TopTradersAction()],
)

__all__ = ["DiscoverGroupsAction", "Timeframe", "TopTradersAction", "convert_timeframe_to_days", "plugin"]
