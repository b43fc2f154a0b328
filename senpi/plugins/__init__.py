"""Registry of the agent plugins and lookup of their actions."""

from typing import List

from ..core.runtime import Action, Plugin
from .discover import plugin as discover_plugin
from .orders import plugin as orders_plugin
from .orders_analysis import plugin as orders_analysis_plugin
from .rewards import plugin as rewards_plugin
from .stop_loss import plugin as stop_loss_plugin
from .trending_tokens import plugin as trending_tokens_plugin
from .wallet_duster import plugin as wallet_duster_plugin

PLUGIN_REGISTRY: List[Plugin] = [
    orders_plugin,
    stop_loss_plugin,
    rewards_plugin,
    wallet_duster_plugin,
    discover_plugin,
    orders_analysis_plugin,
    trending_tokens_plugin,
]


def get_plugins() -> List[Plugin]:
    return list(PLUGIN_REGISTRY)


def resolve_action(name: str) -> Action:
    """Find the action registered under ``name``, else one listing it as a simile.

    Exact names win over similes across every plugin.
    """
    actions = [action for plugin in PLUGIN_REGISTRY for action in plugin.actions]
    wanted = name.upper()
    for action in actions:
        if action.name.upper() == wanted:
            return action
    for action in actions:
        if action.matches(name):
            return action
    raise KeyError(name)


__all__ = ["PLUGIN_REGISTRY", "get_plugins", "resolve_action"]
