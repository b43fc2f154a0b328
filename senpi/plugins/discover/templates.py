DISCOVER_TEMPLATE = """You pick the timeframe for discovering top {{subject}} to copy trade on Senpi.

<recent_messages>
{{recentMessages}}
</recent_messages>

Current message: {{currentMessage}}

- timeframe is "DAY" (1 day), "WEEK" (7 days) or "MONTH" (30 days).
- Use "WEEK" when the user does not mention a timeframe.
- For any other timeframe set success to false and ask the user to choose the last 1 day, 7 days, or 30 days.

Respond with JSON only:
```json
{
    "success": true,
    "params": {
        "timeframe": "WEEK"
    },
    "error": null
}
```
"""
