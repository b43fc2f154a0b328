import pytest

from senpi.plugins.orders import messages
from senpi.plugins.orders.types import SenpiOrdersResponse, Transaction
from senpi.plugins.orders.validation import (
    missing_fields,
    sell_order_problem,
    validate_orders,
    validate_price_conditions,
)

DEGEN = "$[DEGEN|0x4ed4e862860bed51a9570b96d89af5e1b0efefed]"
ETH = "$[ETH|0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE]"


def tx(**fields) -> Transaction:
    base = {"sellToken": ETH, "buyToken": DEGEN, "orderType": "BUY"}
    base.update(fields)
    return Transaction.model_validate(base)


def stop_loss(**fields) -> Transaction:
    base = {
        "sellToken": DEGEN,
        "buyToken": ETH,
        "orderType": "STOP_LOSS",
        "triggerType": "PERCENTAGE",
        "triggerPrice": 20,
        "balance": {"sourceToken": DEGEN, "type": "PERCENTAGE", "value": 50},
    }
    base.update(fields)
    return Transaction.model_validate(base)


class TestMissingFields:

    def test_complete_swap(self):
        assert missing_fields(tx(sellQuantity=1)) == []

    def test_swap_missing_tokens(self):
        assert missing_fields(Transaction.model_validate({"orderType": "SELL"})) == ["sellToken", "buyToken"]

    def test_open_order_needs_trigger_and_balance(self):
        transaction = Transaction.model_validate(
            {"sellToken": DEGEN, "buyToken": ETH, "orderType": "LIMIT_ORDER_SELL"}
        )
        assert missing_fields(transaction) == ["triggerType", "triggerPrice", "balance.type", "balance.value"]


class TestValidateOrders:

    @pytest.mark.asyncio
    async def test_no_transactions(self, make_context, recorder):
        ok = await validate_orders(make_context(), SenpiOrdersResponse(success=True, transactions=[]))

        assert ok is False
        assert recorder.texts == [messages.NO_ORDERS_DETECTED]
        assert recorder.messages[0].content["error"] == "INVALID_CONTENT"

    @pytest.mark.asyncio
    async def test_missing_fields_details(self, make_context, recorder):
        response = SenpiOrdersResponse(transactions=[Transaction.model_validate({"sellToken": ETH})])

        assert await validate_orders(make_context(), response) is False
        assert recorder.messages[0].text == messages.MISSING_FIELDS
        assert recorder.messages[0].content["details"] == "Missing fields: buyToken, orderType"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fields", [{"sellQuantity": 0}, {"buyQuantity": -1}])
    async def test_non_positive_quantity(self, make_context, recorder, fields):
        response = SenpiOrdersResponse(transactions=[tx(**fields)])

        assert await validate_orders(make_context(), response) is False
        assert recorder.texts == [messages.INVALID_QUANTITY]

    @pytest.mark.asyncio
    async def test_percentage_over_100_rejected_for_stop_loss(self, make_context, recorder):
        response = SenpiOrdersResponse(
            transactions=[stop_loss(balance={"sourceToken": DEGEN, "type": "PERCENTAGE", "value": 150})]
        )

        assert await validate_orders(make_context(), response) is False
        assert recorder.texts == [messages.INVALID_BALANCE]

    @pytest.mark.asyncio
    async def test_percentage_over_100_allowed_for_limit_sell(self, make_context, recorder):
        response = SenpiOrdersResponse(
            transactions=[
                stop_loss(
                    orderType="LIMIT_ORDER_SELL",
                    balance={"sourceToken": DEGEN, "type": "PERCENTAGE", "value": 150},
                )
            ]
        )

        assert await validate_orders(make_context(), response) is True
        assert recorder.messages == []

    @pytest.mark.asyncio
    async def test_balance_without_source_token(self, make_context, recorder):
        response = SenpiOrdersResponse(transactions=[tx(balance={"type": "FULL", "value": 100})])

        assert await validate_orders(make_context(), response) is False
        assert recorder.texts == [messages.INVALID_BALANCE]


class TestSellOrderProblem:

    def test_complete_order(self):
        assert sell_order_problem(stop_loss()) == ""

    def test_missing_trigger_type(self):
        assert sell_order_problem(stop_loss(triggerType=None)) == messages.MISSING_TRIGGER_TYPE

    def test_missing_balance(self):
        assert sell_order_problem(stop_loss(balance=None)) == messages.MISSING_BALANCE


class TestPriceConditions:

    def test_absolute_stop_loss_above_price(self):
        transaction = stop_loss(triggerType="ABSOLUTE_VALUE", triggerPrice=3)
        assert validate_price_conditions(transaction, 3, 2) == messages.SL_ABOVE_PRICE

    def test_absolute_limit_sell_below_price(self):
        transaction = stop_loss(orderType="LIMIT_ORDER_SELL", triggerType="ABSOLUTE_VALUE", triggerPrice=1)
        assert validate_price_conditions(transaction, 1, 2) == messages.LO_SELL_BELOW_PRICE

    def test_percentage_stop_loss_over_100(self):
        assert validate_price_conditions(stop_loss(triggerPrice=120), 120, 2) == messages.SL_PERCENTAGE_TOO_HIGH

    def test_price_drop_below_zero(self):
        transaction = stop_loss(triggerType="VALUE_PRICE_DROP", triggerPrice=5)
        assert validate_price_conditions(transaction, 5, 2) == messages.SL_DROP_TOO_LARGE

    def test_valid_stop_loss(self):
        assert validate_price_conditions(stop_loss(), 20, 2) == ""
