import pytest
from unittest.mock import AsyncMock

from senpi.plugins.orders import messages
from senpi.plugins.orders.open_orders import compute_trigger_value, handle_sell_order
from senpi.plugins.orders.session import ETH_TOKEN, USDC_TOKEN, OrderRejected, OrderSession, ResolvedToken
from senpi.plugins.orders.types import Transaction

DEGEN_ADDRESS = "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed"
DEGEN = ResolvedToken("DEGEN", DEGEN_ADDRESS, 18)


def order(**fields) -> Transaction:
    base = {
        "sellToken": "DEGEN",
        "buyToken": "ETH",
        "orderType": "STOP_LOSS",
        "triggerType": "PERCENTAGE",
        "triggerPrice": 20,
        "balance": {"sourceToken": "DEGEN", "type": "PERCENTAGE", "value": 50},
    }
    base.update(fields)
    return Transaction.model_validate(base)


class TestComputeTriggerValue:

    def test_percentage_passes_through(self):
        assert compute_trigger_value(order(), 20, 50, 2.0) == "20"

    def test_price_drop_for_stop_loss(self):
        transaction = order(triggerType="VALUE_PRICE_DROP", triggerPrice=0.5)
        assert compute_trigger_value(transaction, 0.5, 100, 2.0) == "1.5"

    def test_price_increase_for_limit_sell(self):
        transaction = order(orderType="LIMIT_ORDER_SELL", triggerType="VALUE_PRICE_INCREASE", triggerPrice=1)
        assert compute_trigger_value(transaction, 1, 50, 2.0) == "2.5"

    def test_price_increase_for_stop_loss_is_undefined(self):
        transaction = order(triggerType="VALUE_PRICE_INCREASE", triggerPrice=1)
        assert compute_trigger_value(transaction, 1, 50, 2.0) is None


class TestHandleSellOrder:

    @pytest.fixture
    def session(self, make_context, runtime):
        prices = {DEGEN_ADDRESS: 2.0, USDC_TOKEN.address: 1.0}
        runtime.codex.get_usd_price = AsyncMock(side_effect=lambda address: prices[address])
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=1000 * 10**18)
        return OrderSession(make_context())

    @pytest.mark.asyncio
    async def test_standalone_stop_loss_is_sized_from_balance(self, session):
        stop_losses, limit_orders = await handle_sell_order(session, order(), DEGEN, ETH_TOKEN, "SL")

        assert limit_orders == []
        (stop_loss,) = stop_losses
        assert stop_loss.sell_amount_in_wei == str(500 * 10**18)
        assert stop_loss.sell_amount == "500"
        assert stop_loss.trigger_value == "20"
        assert stop_loss.trigger_type == "PERCENTAGE"
        assert stop_loss.request_type == "STOP_LOSS"
        assert stop_loss.sell_percentage is None

    @pytest.mark.asyncio
    async def test_limit_sell_with_swap_uses_percentage(self, session, runtime):
        transaction = order(orderType="LIMIT_ORDER_SELL", triggerType="ABSOLUTE_VALUE", triggerPrice=3)

        stop_losses, limit_orders = await handle_sell_order(session, transaction, DEGEN, ETH_TOKEN, "SWAP_LO")

        assert stop_losses == []
        (limit_order,) = limit_orders
        assert limit_order.sell_percentage == "50"
        assert limit_order.sell_amount_in_wei is None
        assert limit_order.trigger_type == "TOKEN_PRICE"
        assert limit_order.to_payload()["limitOrderType"] == "LIMIT_SELL"

    @pytest.mark.asyncio
    async def test_quantity_not_supported_with_swaps(self, session):
        transaction = order(balance={"sourceToken": "DEGEN", "type": "QUANTITY", "value": 10})

        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, transaction, DEGEN, ETH_TOKEN, "SWAP_SL")

        assert exc_info.value.message == messages.quantity_not_supported_with_swaps("STOP_LOSS")

    @pytest.mark.asyncio
    async def test_eth_not_supported(self, session):
        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, order(sellToken="ETH"), ETH_TOKEN, USDC_TOKEN, "SL")

        assert exc_info.value.message == messages.ETH_NOT_SUPPORTED

    @pytest.mark.asyncio
    async def test_stop_loss_above_current_price(self, session):
        transaction = order(triggerType="ABSOLUTE_VALUE", triggerPrice=5)

        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, transaction, DEGEN, ETH_TOKEN, "SL")

        assert exc_info.value.message == messages.SL_ABOVE_PRICE

    @pytest.mark.asyncio
    async def test_empty_balance(self, session, runtime):
        runtime.rpc.get_erc20_balance = AsyncMock(return_value=0)

        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, order(), DEGEN, ETH_TOKEN, "SL")

        assert exc_info.value.message == messages.insufficient_order_balance("DEGEN", "stop loss")

    @pytest.mark.asyncio
    async def test_quantity_over_balance(self, session):
        transaction = order(
            orderType="LIMIT_ORDER_SELL",
            balance={"sourceToken": "DEGEN", "type": "QUANTITY", "value": 2000},
        )

        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, transaction, DEGEN, ETH_TOKEN, "LO")

        assert exc_info.value.message == messages.insufficient_order_quantity("DEGEN", "limit", "1000", "2000")

    @pytest.mark.asyncio
    async def test_limit_buy_in_usd(self, session):
        transaction = order(
            sellToken="USDC",
            buyToken="DEGEN",
            orderType="LIMIT_ORDER_BUY",
            triggerPrice=10,
            buyQuantity=50,
            valueType="USD",
            balance={"sourceToken": "USDC", "type": "FULL", "value": 100},
        )

        stop_losses, limit_orders = await handle_sell_order(session, transaction, USDC_TOKEN, DEGEN, "LO")

        assert stop_losses == []
        (limit_order,) = limit_orders
        assert limit_order.buy_amount_usd == "50"
        assert limit_order.buy_amount_in_wei is None
        assert limit_order.limit_order_type == "LIMIT_BUY"
        assert limit_order.trigger_value == "10"

    @pytest.mark.asyncio
    async def test_limit_buy_requires_amount(self, session):
        transaction = order(
            sellToken="USDC",
            buyToken="DEGEN",
            orderType="LIMIT_ORDER_BUY",
            balance={"sourceToken": "USDC", "type": "FULL", "value": 100},
        )

        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, transaction, USDC_TOKEN, DEGEN, "LO")

        assert exc_info.value.message == messages.buy_amount_missing("LIMIT_ORDER_BUY")

    @pytest.mark.asyncio
    async def test_unexpected_failure(self, session, runtime):
        runtime.codex.get_usd_price = AsyncMock(side_effect=RuntimeError("codex down"))

        with pytest.raises(OrderRejected) as exc_info:
            await handle_sell_order(session, order(), DEGEN, ETH_TOKEN, "SL")

        assert exc_info.value.message == messages.SELL_ORDER_ERROR
