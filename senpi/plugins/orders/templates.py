SENPI_ORDERS_TEMPLATE = """You interpret cryptocurrency trading intents on Base: buys, sells, swaps, stop-loss and limit orders.

<recent_messages>
{{recentMessages}}
</recent_messages>

Current message: {{currentMessage}}

Rules:
- Tokens use the mention format $[SYMBOL|ADDRESS]. ETH is $[ETH|0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE] and USDC is $[USDC|0x833589fcd6edb6e08f4c7c32d4f71b54bda02913].
- When buying without a sell token, sell ETH. When selling without a buy token, buy ETH.
- action is one of SWAP, SWAP_SL, SWAP_LO, SWAP_SL_LO, LO, SL, SL_LO.
- orderType is one of BUY, SELL, STOP_LOSS, LIMIT_ORDER_BUY, LIMIT_ORDER_SELL.
- triggerType is one of PERCENTAGE, ABSOLUTE_VALUE, VALUE_PRICE_INCREASE, VALUE_PRICE_DROP.
- balance.type is one of FULL, PERCENTAGE, QUANTITY. Set valueType to USD for dollar amounts.
- If required details are missing, set error.prompt_message to a short question for the user.

Respond with JSON only:
```json
{
    "success": true,
    "action": "SWAP",
    "is_followup": false,
    "transactions": [
        {
            "sellToken": "$[ETH|0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE]",
            "buyToken": "$[SYMBOL|0x...]",
            "sellQuantity": null,
            "buyQuantity": 10,
            "valueType": "USD",
            "orderType": "BUY",
            "orderScope": null,
            "executionType": "IMMEDIATE",
            "triggerType": null,
            "triggerPrice": null,
            "expiration_time": null,
            "balance": {"sourceToken": null, "type": null, "value": null}
        }
    ],
    "error": null
}
```
"""

SENPI_ORDERS_EXAMPLES = [
    [
        {"user": "{{user1}}", "content": {"text": "buy me 1 $[DEGEN|0x4ed4e862860bed51a9570b96d89af5e1b0efefed]"}},
        {
            "user": "{{agent}}",
            "content": {
                "text": "Sure, I'll help you to buy 1 $[DEGEN|0x4ed4e862860bed51a9570b96d89af5e1b0efefed]",
                "action": "SENPI_ORDERS",
            },
        },
    ],
    [
        {"user": "{{user1}}", "content": {"text": "sell all my $[DEGEN|0x4ed4e862860bed51a9570b96d89af5e1b0efefed]"}},
        {
            "user": "{{agent}}",
            "content": {
                "text": "Sure, I'll help you to sell all your $[DEGEN|0x4ed4e862860bed51a9570b96d89af5e1b0efefed]",
                "action": "SENPI_ORDERS",
            },
        },
    ],
]
