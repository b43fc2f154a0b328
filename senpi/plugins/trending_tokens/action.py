from __future__ import annotations

import json

from ...core.runtime import Action, ActionContext
from .templates import TRENDING_TOKENS_TEMPLATE

NO_TRENDING_TOKENS = "No trending tokens found."
FETCH_FAILED = "Failed to fetch trending tokens."


class TrendingTokensAction(Action):
    name = "TRENDING_TOKENS"
    similes = []
    description = "Display trending tokens on Base."
    examples = [
        [
            {"user": "{{user1}}", "content": {"text": "What tokens are trending on Base?"}},
            {
                "user": "{{user2}}",
                "content": {
                    "text": "Here are the top trending tokens on Base over the last 24 hours: ...",
                    "action": "TRENDING_TOKENS",
                },
            },
        ]
    ]
    suppress_initial_message = True

    async def handle(self, ctx: ActionContext) -> bool:
        try:
            tokens = await ctx.runtime.senpi_api.get_trending_tokens()
            if not tokens:
                self.logger.error("No trending tokens found")
                await ctx.send(NO_TRENDING_TOKENS)
                return True

            self.logger.debug(f"Found {len(tokens)} trending tokens")
            prompt = ctx.runtime.compose_context(
                TRENDING_TOKENS_TEMPLATE,
                ctx.state,
                trendingTokens=json.dumps(tokens),
            )
            async for chunk in ctx.runtime.stream_text(prompt, temperature=0.5, max_tokens=8192):
                await ctx.send(chunk)
        except Exception as e:
            self.logger.error(f"Error fetching trending tokens: {e}")
            await ctx.send(FETCH_FAILED)
        return True
