TRENDING_TOKENS_TEMPLATE = """Trending tokens on Base over the last 24 hours:
{{trendingTokens}}

Overall notes:
- Pick the 5 tokens from the data above that are most worth recommending.
- Be concise. Mention that you are looking at token performance over the last 24 hours.
- Pay attention to volume changes, especially the short term ones.

Skipping likely scam tokens:
- Skip tokens whose liquidity is lower than 5% of their market cap.
- Treat a very low walletAgeAvg (seconds) as a sign of suspicious activity.
- Do not recommend any token you suspect is suspicious.

For each recommended token include:
- Token name and symbol formatted as $[name|symbol]
- The full token address
- Current price and the % price change over the last hour
- Fully diluted market cap
- Net buy volume over 24 hours (bought minus sold, net value only)
- A very short reason for picking it, naming the time frame of any data you use

Answer the user's question using the context above:
{{recentMessages}}

Respond in markdown.
"""
