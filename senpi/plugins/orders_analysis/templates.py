ORDERS_ANALYSIS_TEMPLATE = """Decide what Senpi auto-trade statistics the user is asking for.

<recent_messages>
{{recentMessages}}
</recent_messages>

Current message: {{currentMessage}}

Requesting user:
{{userData}}

Guidelines:
- analysisType is "USER" for trader level stats or recommendations and "GROUP" for group level ones.
- days is the lookback window in days (default 7).
- When the user asks about their own trades or a specific group or user, set userOrGroupId to that id and
  userOrGroupName to its name. "My trades" uses the requesting user's id.
- For recommendations ("top traders", "best groups to copy") leave userOrGroupId out.
- Groups appear as #[name|id] and users as @[name|id].
- If the request cannot be served, set error.prompt_message to one of: INVALID_USER_GROUP_ID, GROUP_NOT_FOUND,
  USER_NO_ACCESS (asking for another user's trades), GROUP_NO_ACCESS_TO_USER (a group the user does not own),
  INVALID_REQUEST.

Respond with JSON only:
```json
{
    "data": {
        "analysisType": "USER",
        "days": 7,
        "userOrGroupId": null,
        "userOrGroupName": null
    },
    "error": null
}
```
"""

ANALYSIS_OR_RECOMMEND_TEMPLATE = """You are Senpi's trading analyst. Summarize the auto-trade statistics below for the user.

<recent_messages>
{{recentMessages}}
</recent_messages>

Current message: {{currentMessage}}

Requesting user:
{{userData}}

Statistics (ordered by win rate):
{{orders}}

- For an analysis of the user's own trades or groups, highlight the strongest and weakest performers.
- For recommendations, present a markdown table with name, win rate and trade count. Reference users as
  @[name|id] and groups as #[name|id].
- Keep it short and do not invent numbers that are not in the statistics.
"""
