from ...core.runtime import Plugin
from .action import StopLossAction, apply_percentage

plugin = Plugin(
    name="senpiStopLossPlugin",
    description="Execute stop loss actions",
    actions=[StopLossAction()],
)

__all__ = ["StopLossAction", "apply_percentage", "plugin"]
