"""
Analysis of a user's auto trades and groups, or recommendations of the
top traders and groups by win rate.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...config import settings
from ...core.recovery import ExponentialBackoffStrategy
from ...core.runtime import Action, ActionContext
from ...providers.senpi_api import SenpiApiProvider
from .templates import ANALYSIS_OR_RECOMMEND_TEMPLATE, ORDERS_ANALYSIS_TEMPLATE

ACTION_NAME = "ANALYZE_TRADES_AND_GROUPS_OR_RECOMMEND_TOP_TRADERS_AND_GROUPS"

ERROR_MESSAGES = {
    "INVALID_USER_GROUP_ID": "Looks like the group you mentioned is not valid. Can you try again with a different group?",
    "GROUP_NOT_FOUND": "Looks like the user you mentioned does not exist. Can you try again with a different user?",
    "USER_NO_ACCESS": (
        "Looks like the user you're trying to access other user's data. Unfortunately, you're not allowed "
        "to do that. Can you try again with asking to analyze your own trades/groups?"
    ),
    "GROUP_NO_ACCESS_TO_USER": (
        "Looks like the group you mentioned does not belong to you. "
        "Can you try again with a different group that you own?"
    ),
    "INVALID_REQUEST": "Sorry, there was an error processing your request. Please try again.",
}
DEFAULT_ERROR_MESSAGE = "Error occured while performing senpi orders analysis operation. Please try again later."

NO_AUTO_TRADES = (
    "Looks like you have not done any auto trades yet on Senpi. "
    "Please try again later after doing some auto trades."
)

STATS_PAGE_SIZE = 100
RECOMMENDATION_PAGE_SIZE = 10


class AnalysisType(str, Enum):
    USER = "USER"
    GROUP = "GROUP"


class OrderBy(str, Enum):
    AVG_PNL = "AVG_PNL"
    TOTAL_PNL = "TOTAL_PNL"
    WIN_RATE = "WIN_RATE"
    TRADE_COUNT = "TRADE_COUNT"


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    analysis_type: Optional[AnalysisType] = Field(default=None, alias="analysisType")
    days: Optional[int] = None
    user_or_group_id: Optional[str] = Field(default=None, alias="userOrGroupId")
    user_or_group_name: Optional[str] = Field(default=None, alias="userOrGroupName")


class AnalysisError(BaseModel):
    prompt_message: Optional[str] = None


class AnalysisResponse(BaseModel):
    data: Optional[AnalysisRequest] = None
    error: Optional[AnalysisError] = None


def error_message_for(prompt_message: str) -> str:
    for code, message in ERROR_MESSAGES.items():
        if code in prompt_message:
            return message
    return DEFAULT_ERROR_MESSAGE


def no_recommendations_message() -> str:
    return (
        "Sorry, looks like there is no recommendations found for the given request. Please try again later. \n"
        "If the issue persists, tap the 👎 button to report this issue, or contact our team in the "
        f"[Senpi Dojo Telegram Group]({settings.senpi_telegram_group_url}) for further assistance. 🙏"
    )


def group_base_name(now: Optional[datetime] = None) -> str:
    """``top_traders_Jan_05_2025`` for the given day."""
    now = now or datetime.now()
    return f"top_traders_{now.strftime('%b_%d_%Y')}"


async def generate_unique_group_name(
    senpi_api: SenpiApiProvider,
    authorization: Optional[str],
    base_name: str,
) -> str:
    """``base_name``, or ``base_name_<n>`` with the smallest free n."""
    existing = set(await senpi_api.get_group_names(authorization))
    if base_name not in existing:
        return base_name
    suffix = 1
    while f"{base_name}_{suffix}" in existing:
        suffix += 1
    return f"{base_name}_{suffix}"


def generate_cta_config(
    user_or_group_id: Optional[str],
    analysis_type: Optional[str],
    group_name: Optional[str] = None,
    group_id: Optional[str] = None,
) -> Dict[str, Any]:
    """CTA fields attached to every streamed chunk.

    Analyses of a specific user or group carry no CTA.
    """
    if user_or_group_id:
        return {}

    if analysis_type == AnalysisType.USER:
        return {
            "cta": "CREATE_GROUP_AND_ADD_GROUP_MEMBER",
            "metadata": {
                "callbackPrompt": f"Create the {group_name} group and add all of the above users to it.",
            },
        }

    return {
        "cta": "RULE_TEMPLATE_CARDS",
        "metadata": {
            "groupId": group_id,
            "groupName": group_name,
        },
    }


class SenpiOrdersAnalysisAction(Action):
    name = ACTION_NAME
    similes = [
        "ANALYZE_MY_TRADES",
        "ANALYZE_MY_GROUPS",
        "RECOMMEND_TOP_TRADERS",
        "RECOMMEND_TOP_GROUPS",
    ]
    description = (
        "Use for analyzing user's trades/groups/group members or recommending which top traders/groups by "
        "performance metrics (win rate and trade count) to copy trade/add to their groups. "
        "Example: “top traders”, “best groups”. ❌ Not for social posts or news."
    )
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "Analyze my trades/auto-trades/ senpi trades from last 3 days"}},
            {
                "user": "{{user2}}",
                "content": {
                    "text": "The trades/auto-trades/ senpi trades from last 3 days are as follows: ...",
                    "action": ACTION_NAME,
                },
            },
        ]
    ]
    suppress_initial_message = True

    def __init__(self, logger=None, retry: Optional[ExponentialBackoffStrategy] = None) -> None:
        super().__init__(logger)
        self.retry = retry or ExponentialBackoffStrategy(max_attempts=3, initial_delay=1.0, logger=self.logger)

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            await self._analyze(ctx)
        except Exception as e:
            self.logger.error(f"Error fetching senpi orders analysis: {e}")
            await ctx.send(f"Error fetching senpi orders analysis: {e}")
        return True

    async def fetch_analysis(self, ctx: ActionContext, query_input: Dict[str, Any]) -> List[Dict[str, Any]]:
        async def operation() -> List[Dict[str, Any]]:
            return await ctx.runtime.senpi_api.get_user_group_stats_or_recommendations(
                query_input, ctx.authorization
            )

        return await self.retry.execute(operation, {"operation": "GetUserGroupStatsOrRecommendations"})

    async def _analyze(self, ctx: ActionContext) -> None:
        runtime = ctx.runtime
        prompt = runtime.compose_context(ORDERS_ANALYSIS_TEMPLATE, ctx.state)
        response = AnalysisResponse.model_validate(await runtime.generate_object(prompt))

        if response.error and response.error.prompt_message:
            self.logger.warning(f"Analysis request rejected: {response.error.prompt_message}")
            await ctx.send(error_message_for(response.error.prompt_message), action=self.name)
            return

        request = response.data or AnalysisRequest()
        query_input = request.model_dump(by_alias=True, exclude_none=True, mode="json")
        query_input.update(
            {
                "orderBy": OrderBy.WIN_RATE.value,
                "skip": 0,
                "take": STATS_PAGE_SIZE if request.user_or_group_id else RECOMMENDATION_PAGE_SIZE,
            }
        )
        items = await self.fetch_analysis(ctx, query_input)

        if not items:
            text = NO_AUTO_TRADES if request.user_or_group_id else no_recommendations_message()
            await ctx.send(text, action=self.name)
            return

        analysis_prompt = runtime.compose_context(
            ANALYSIS_OR_RECOMMEND_TEMPLATE,
            ctx.state,
            orders=json.dumps(items),
        )

        analysis_type = request.analysis_type.value if request.analysis_type else None
        if analysis_type == AnalysisType.USER:
            group_name = None
            if not request.user_or_group_id:
                group_name = await generate_unique_group_name(
                    runtime.senpi_api, ctx.authorization, group_base_name()
                )
            cta_config = generate_cta_config(request.user_or_group_id, analysis_type, group_name=group_name)
        else:
            cta_config = generate_cta_config(
                request.user_or_group_id,
                analysis_type,
                group_name=items[0].get("groupName"),
                group_id=items[0].get("groupId"),
            )

        async for chunk in runtime.stream_text(analysis_prompt, temperature=1.0):
            await ctx.send(chunk, action=self.name, **cta_config)
