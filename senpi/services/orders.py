"""Wire models for the Senpi ``createManualOrder`` mutation.

Shared by every plugin that places orders (orders, stop loss, wallet
duster). Inputs serialize to camelCase and drop unset fields.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ActionType(str, Enum):
    SWAP = "SWAP"
    SWAP_SL = "SWAP_SL"
    SWAP_LO = "SWAP_LO"
    SWAP_SL_LO = "SWAP_SL_LO"
    LO = "LO"
    SL = "SL"
    SL_LO = "SL_LO"


class Source(str, Enum):
    AGENT = "AGENT"
    WIDGET = "WIDGET"
    AUTOMATION = "AUTOMATION"
    MANUAL = "MANUAL"


class OrderTriggerType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    TOKEN_PRICE = "TOKEN_PRICE"


class RequestType(str, Enum):
    STOP_LOSS = "STOP_LOSS"
    LIMIT_ORDER = "LIMIT_ORDER"


class LimitOrderType(str, Enum):
    LIMIT_BUY = "LIMIT_BUY"
    LIMIT_SELL = "LIMIT_SELL"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        coerce_numbers_to_str=True,
    )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SwapInput(_CamelModel):
    sell_token_address: str
    buy_token_address: str
    amount: str
    chain_id: int
    sell_token_symbol: str
    buy_token_symbol: str
    sell_token_decimal: int
    buy_token_decimal: int
    slippage: Optional[int] = None


class OpenOrderInput(_CamelModel):
    sell_token_address: str
    sell_token_symbol: str
    sell_token_decimals: int
    buy_token_address: str
    buy_token_symbol: str
    buy_token_decimals: int
    trigger_value: str
    trigger_type: OrderTriggerType
    request_type: Optional[RequestType] = None
    limit_order_type: Optional[LimitOrderType] = None
    sell_amount_in_wei: Optional[str] = None
    sell_amount: Optional[str] = None
    sell_percentage: Optional[str] = None
    buy_amount: Optional[str] = None
    buy_amount_in_wei: Optional[str] = None
    buy_amount_usd: Optional[str] = Field(default=None, alias="buyAmountUSD")
    chain_id: Optional[int] = None
    expires_at: Optional[str] = None


class CreateManualOrderInput(_CamelModel):
    action_type: ActionType
    source: Source
    swap_input: Optional[SwapInput] = None
    stop_loss_input: Optional[List[OpenOrderInput]] = None
    limit_order_input: Optional[List[OpenOrderInput]] = None


class SwapOutput(_CamelModel):
    tx_hash: Optional[str] = None
    buy_amount: Optional[str] = None
    sell_amount: Optional[str] = None
    buy_amount_in_usd: Optional[str] = Field(default=None, alias="buyAmountInUSD")
    sell_amount_in_usd: Optional[str] = Field(default=None, alias="sellAmountInUSD")
    buy_price: Optional[str] = None


class StopLossOutput(_CamelModel):
    subscription_id: Optional[str] = None
    stop_loss_price: Optional[str] = None
    sell_amount: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_value: Optional[str] = None


class LimitOrderOutput(_CamelModel):
    limit_order_id: Optional[str] = None
    limit_price: Optional[str] = None
    buy_amount: Optional[str] = None
    buy_amount_usd: Optional[str] = Field(default=None, alias="buyAmountUSD")
    sell_amount: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_value: Optional[str] = None


class CreateManualOrderMetadata(_CamelModel):
    trace_id: Optional[str] = None
    order_id: Optional[str] = None
    rule_id: Optional[str] = None
    rule_execution_log_id: Optional[str] = None
    swap_output: Optional[SwapOutput] = None
    stop_loss_outputs: List[StopLossOutput] = Field(default_factory=list)
    limit_order_outputs: List[LimitOrderOutput] = Field(default_factory=list)

    @field_validator("stop_loss_outputs", "limit_order_outputs", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return value or []


class CreateManualOrderOutput(_CamelModel):
    success: bool = False
    error: Optional[str] = None
    metadata: CreateManualOrderMetadata = Field(default_factory=CreateManualOrderMetadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value):
        return value or {}
