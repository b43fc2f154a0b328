from ...core.runtime import Plugin
from .action import SenpiOrdersAction, group_transactions_by_token
from .session import OrderRejected, OrderSession, ResolvedToken

plugin = Plugin(
    name="senpiOrdersPlugin",
    description="Senpi Orders plugin",
    actions=[SenpiOrdersAction()],
)

__all__ = [
    "OrderRejected",
    "OrderSession",
    "ResolvedToken",
    "SenpiOrdersAction",
    "group_transactions_by_token",
    "plugin",
]
