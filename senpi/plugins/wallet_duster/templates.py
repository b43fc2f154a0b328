DUST_REQUEST_TEMPLATE = """Extract the details of a wallet dusting request from the conversation below.

<recent_messages>
{{recentMessages}}
</recent_messages>

Current message: {{currentMessage}}

Fields:
- threshold (number or null): USD value below which a token counts as dust ("dust tokens under $X" gives X). null when not mentioned.
- isConfirmed (boolean or null):
  - true for a direct request such as "Dust my tokens" or "Dust tokens under $3" with no preview before it.
  - After a PREVIEW_DUST_TOKENS reply, true only when the user explicitly confirms ("yes", "go ahead", "dust them all").
  - false when the user declines or cancels.
  - null when neither a confirmation nor a rejection is clear yet.
  - A new dusting request after a completed one resets both fields to null.

Respond with JSON only:
```json
{
    "threshold": 5,
    "isConfirmed": true
}
```
"""
