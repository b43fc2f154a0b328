from ...core.runtime import Plugin
from .action import SenpiOrdersAnalysisAction, generate_cta_config, generate_unique_group_name

plugin = Plugin(
    name="senpiOrdersAnalysisPlugin",
    description="Analyze auto trades and recommend top traders and groups",
    actions=[SenpiOrdersAnalysisAction()],
)

__all__ = ["SenpiOrdersAnalysisAction", "generate_cta_config", "generate_unique_group_name", "plugin"]
