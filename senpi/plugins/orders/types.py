from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    STOP_LOSS = "STOP_LOSS"
    LIMIT_ORDER_BUY = "LIMIT_ORDER_BUY"
    LIMIT_ORDER_SELL = "LIMIT_ORDER_SELL"


class BalanceType(str, Enum):
    FULL = "FULL"
    PERCENTAGE = "PERCENTAGE"
    QUANTITY = "QUANTITY"


class TriggerType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    ABSOLUTE_VALUE = "ABSOLUTE_VALUE"
    VALUE_PRICE_INCREASE = "VALUE_PRICE_INCREASE"
    VALUE_PRICE_DROP = "VALUE_PRICE_DROP"


class ValueType(str, Enum):
    USD = "USD"


class ActiveViewType(str, Enum):
    ORDERS = "ORDERS"


OPEN_ORDER_TYPES = (OrderType.STOP_LOSS, OrderType.LIMIT_ORDER_BUY, OrderType.LIMIT_ORDER_SELL)


class _LLMModel(BaseModel):
    # Enum-valued fields stay plain strings: the model can return values
    # outside the enums and those must reach the handler, not fail parsing.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class OrderBalance(_LLMModel):
    source_token: Optional[str] = Field(default=None, alias="sourceToken")
    type: Optional[str] = None
    value: Optional[float] = None


class Transaction(_LLMModel):
    sell_token: Optional[str] = Field(default=None, alias="sellToken")
    buy_token: Optional[str] = Field(default=None, alias="buyToken")
    sell_quantity: Optional[float] = Field(default=None, alias="sellQuantity")
    buy_quantity: Optional[float] = Field(default=None, alias="buyQuantity")
    value_type: Optional[str] = Field(default=None, alias="valueType")
    order_type: Optional[str] = Field(default=None, alias="orderType")
    order_scope: Optional[str] = Field(default=None, alias="orderScope")
    execution_type: Optional[str] = Field(default=None, alias="executionType")
    trigger_type: Optional[str] = Field(default=None, alias="triggerType")
    trigger_price: Optional[float] = Field(default=None, alias="triggerPrice")
    expiration_time: Optional[str] = None
    balance: Optional[OrderBalance] = None

    @property
    def is_usd_value(self) -> bool:
        return self.value_type == ValueType.USD


class SenpiOrdersError(_LLMModel):
    missing_fields: Optional[List[str]] = None
    prompt_message: Optional[str] = None


class SenpiOrdersResponse(_LLMModel):
    success: Optional[bool] = None
    action: Optional[str] = None
    is_followup: bool = False
    transactions: Optional[List[Transaction]] = None
    error: Optional[SenpiOrdersError] = None
