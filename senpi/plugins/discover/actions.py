"""
Discovery leaderboards: top groups and top traders to copy trade.

Both actions share one flow: the model picks a timeframe, the leaderboard
is fetched with retries, creator / trader ids are resolved to usernames
concurrently and the result is rendered as a markdown table.
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ...config import settings
from ...core.recovery import fetch_with_retries
from ...core.runtime import Action, ActionContext
from ...providers.senpi_api import SenpiApiProvider
from ...services.formatting import format_number, format_pnl
from ...services.tokens import format_group_mention, format_user_mention
from .templates import DISCOVER_TEMPLATE


class Timeframe(str, Enum):
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"


TIMEFRAME_DAYS = {
    Timeframe.DAY: 1,
    Timeframe.WEEK: 7,
    Timeframe.MONTH: 30,
}


class DiscoverParams(BaseModel):
    timeframe: Timeframe = Timeframe.WEEK


class DiscoverError(BaseModel):
    prompt_message: Optional[str] = None


class DiscoverResponse(BaseModel):
    success: bool = False
    params: Optional[DiscoverParams] = None
    error: Optional[DiscoverError] = None


def convert_timeframe_to_days(timeframe: Timeframe) -> int:
    return TIMEFRAME_DAYS[Timeframe(timeframe)]


def days_label(days: int) -> str:
    return f"{days} day{'s' if days > 1 else ''}"


async def resolve_user_name(senpi_api: SenpiApiProvider, user_id: str) -> str:
    try:
        user = await senpi_api.get_user(user_id)
    except Exception:
        return user_id
    return user.user_name if user and user.user_name else user_id


class LeaderboardAction(Action):
    """Shared handler for the discovery leaderboards."""

    subject: str = ""
    fallback_message: str = ""
    suppress_initial_message = True

    @abstractmethod
    async def fetch(self, senpi_api: SenpiApiProvider, timeframe: Timeframe) -> Optional[List[Dict[str, Any]]]:
        ...

    @abstractmethod
    async def render_row(self, senpi_api: SenpiApiProvider, entry: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    def render(self, days: int, rows: List[str]) -> str:
        ...

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            await self._discover(ctx)
        except Exception as e:
            self.logger.error(f"Discovering {self.subject} failed: {e}")
            await ctx.send(self.fallback_message, action=self.name)
        return True

    async def _discover(self, ctx: ActionContext) -> None:
        senpi_api = ctx.runtime.senpi_api
        prompt = ctx.runtime.compose_context(DISCOVER_TEMPLATE, ctx.state, subject=self.subject)
        response = DiscoverResponse.model_validate(await ctx.runtime.generate_object(prompt))

        if not response.success:
            self.logger.warning(f"Could not extract a timeframe: {response.error}")
            message = response.error.prompt_message if response.error else None
            await ctx.send(message or self.fallback_message, action=self.name)
            return

        timeframe = response.params.timeframe if response.params else Timeframe.WEEK
        entries = await fetch_with_retries(lambda: self.fetch(senpi_api, timeframe), 3, 1000)
        days = convert_timeframe_to_days(timeframe)
        self.logger.debug(f"Fetched {len(entries or [])} {self.subject} for {timeframe.value}")

        if not entries:
            await ctx.send(
                f"No top {self.subject} to copy trade on Senpi found in the last {days_label(days)}.",
                action=self.name,
            )
            return

        rows = await asyncio.gather(*(self.render_row(senpi_api, entry) for entry in entries))
        await ctx.send(self.render(days, list(rows)), action=self.name)


class DiscoverGroupsAction(LeaderboardAction):
    name = "DISCOVER_GROUPS"
    similes = ["WHAT_GROUPS_TO_COPY_TRADE"]
    description = (
        "Discover top groups to copy trade on Senpi. Use this action if user asks along the lines of "
        "'Who should I copy trade?' or 'What groups to copy trade?'"
    )
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "Who should I copy trade?"}},
            {
                "user": "{{user2}}",
                "content": {
                    "text": "The top groups to copy trade on Senpi are in the last 7 days are as follows: ...",
                    "action": "DISCOVER_GROUPS",
                },
            },
        ]
    ]
    subject = "groups"
    fallback_message = "Something went wrong while discovering groups. Please try again later."

    async def fetch(self, senpi_api: SenpiApiProvider, timeframe: Timeframe) -> Optional[List[Dict[str, Any]]]:
        return await senpi_api.get_top_group_targets(timeframe.value)

    async def render_row(self, senpi_api: SenpiApiProvider, entry: Dict[str, Any]) -> str:
        creator = entry.get("groupCreatedBy") or ""
        user_name = await resolve_user_name(senpi_api, creator)
        group = format_group_mention(f"{entry.get('groupName')} (by {user_name})", entry.get("groupId"))
        return (
            f"| {group} "
            f"| {format_number(entry.get('totalTrades') or 0)} "
            f"| {format_number(entry.get('roi') or 0)}x "
            f"| {format_pnl(entry.get('pnl') or 0)} "
            f"| {format_number(entry.get('winRate') or 0, 2)}% "
            f"| {format_number(entry.get('scamRate') or 0, 2)}% |"
        )

    def render(self, days: int, rows: List[str]) -> str:
        return (
            f"The top groups to copy trade on Senpi are in the last {days_label(days)} are as follows:\n"
            " | Group | Trades | ROI | PnL | Win Rate | Scam Rate |\n |---|---|---|---|---|---| \n "
            + "\n".join(rows)
            + "\n\nTo copy trade one of the groups here, simply click on the highlighted group name "
            "to build your copy trading strategy.\n\n"
            f"To discover more groups, go to the [Discover page](https://{settings.senpi_url}/discover/top-groups) "
            "on Senpi."
        )


class TopTradersAction(LeaderboardAction):
    name = "TOP_TRADERS"
    similes = ["WHAT_TOP_TRADERS_TO_COPY_TRADE"]
    description = (
        "Discover top traders to copy trade on Senpi. Always select this if user ask who the top traders are."
    )
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "Who are the top traders?"}},
            {
                "user": "{{user2}}",
                "content": {
                    "text": "The top traders on Senpi are in the last 7 days are as follows: ...",
                    "action": "TOP_TRADERS",
                },
            },
        ]
    ]
    subject = "traders"
    fallback_message = "Something went wrong while discovering top traders. Please try again later."

    async def fetch(self, senpi_api: SenpiApiProvider, timeframe: Timeframe) -> Optional[List[Dict[str, Any]]]:
        return await senpi_api.get_top_traders(timeframe.value)

    async def render_row(self, senpi_api: SenpiApiProvider, entry: Dict[str, Any]) -> str:
        user_id = entry.get("userId") or ""
        user_name = await resolve_user_name(senpi_api, user_id)
        return (
            f"| {format_user_mention(user_name, user_id)} "
            f"| {format_number(entry.get('totalTrades') or 0)} "
            f"| {format_number((entry.get('roi') or 0) * 100)}% "
            f"| {format_pnl(entry.get('pnl') or 0)} "
            f"| {format_number(entry.get('winRate') or 0, 2)}% "
            f"| {format_number(entry.get('scamRate') or 0, 2)}% |"
        )

    def render(self, days: int, rows: List[str]) -> str:
        return (
            f"The top traders to copy trade on Senpi are in the last {days_label(days)} are as follows:\n"
            " | Trader | Trades | ROI | PnL | Win Rate | Scam Rate |\n |---|---|---|---|---|---| \n "
            + "\n".join(rows)
            + "\n\nTo copy trade one of the traders here, simply click on the highlighted trader name "
            "to build your copy trading strategy.\n\n"
            f"To discover more traders, go to the [Discover page](https://{settings.senpi_url}/discover/top-traders) "
            "on Senpi.\n\nIf you want to discover top groups to copy trade, let me know and I can provide you "
            "with a list of for that."
        )
