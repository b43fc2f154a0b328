"""Token constants and helpers shared by the trading plugins.

Covers Base token constants, the chat mention formats
(``$[SYMBOL|0x..]``, ``@[name|id]``, ``#[name|id]``) and exact
conversions between human amounts and integer base units.
"""

from __future__ import annotations

import re
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Optional, Tuple, Union

from ..config import settings

ETH_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
WETH_ADDRESS = "0x4200000000000000000000000000000000000006"
ETH_TOKEN_DECIMALS = 18
USDC_ADDRESS = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
USDC_TOKEN_DECIMALS = 6

# enough digits for uint256 base units plus fractional headroom
UNIT_PRECISION = 100
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ETH = "ETH"
USDC = "USDC"
USD = "USD"

BASE_NETWORK_ID = 8453

_TOKEN_MENTION_RE = re.compile(r"\$\[([^|]+)\|([^\]]+)\]")
_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

Number = Union[int, float, str, Decimal]


def extract_token_details(token: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(symbol, address)`` from a token mention or bare address.

    Unrecognized input yields ``(None, None)``.
    """

    if not token:
        return None, None

    match = _TOKEN_MENTION_RE.search(token)
    if match:
        return match.group(1), match.group(2)

    if _EVM_ADDRESS_RE.match(token):
        return None, token

    return None, None


def format_token_mention(symbol: str, address: str) -> str:
    return f"$[{symbol}|{address}]"


def format_user_mention(name: str, user_id: str) -> str:
    return f"@[{name}|{user_id}]"


def format_group_mention(name: str, group_id: str) -> str:
    return f"#[{name}|{group_id}]"


def is_valid_address(value: Optional[str]) -> bool:
    """Return True for a 0x-prefixed 20-byte hex address."""

    return bool(value) and bool(_EVM_ADDRESS_RE.match(value))


def is_eth(address: Optional[str]) -> bool:
    return bool(address) and address.lower() == ETH_ADDRESS.lower()


def is_usdc(address: Optional[str]) -> bool:
    return bool(address) and address.lower() == USDC_ADDRESS.lower()


def to_decimal(value: Number) -> Decimal:
    """Convert ints, floats and numeric strings to an exact Decimal."""

    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps floats at their shortest repr instead of binary expansion
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc


def parse_units(value: Number, decimals: int) -> int:
    """Convert a human amount to integer base units, truncating extra digits.

    >>> parse_units("1.5", 18)
    1500000000000000000
    """

    amount = to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = UNIT_PRECISION
        scaled = (amount * (Decimal(10) ** int(decimals))).quantize(Decimal(1), rounding=ROUND_DOWN)
    return int(scaled)


def format_units(value: Union[int, str], decimals: int) -> str:
    """Render integer base units as a decimal string.

    Always keeps at least one fractional digit, so ``10**18`` at 18
    decimals renders as ``"1.0"``.
    """

    amount = int(value)
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10 ** int(decimals))
    fraction_str = str(fraction).rjust(int(decimals), "0").rstrip("0") if decimals else ""
    return f"{sign}{whole}.{fraction_str or '0'}"


def is_stable_coin(symbol: Optional[str]) -> bool:
    if not symbol:
        return False
    return symbol.upper() in settings.stable_coin_symbols


__all__ = [
    "ETH_ADDRESS",
    "WETH_ADDRESS",
    "ETH_TOKEN_DECIMALS",
    "USDC_ADDRESS",
    "USDC_TOKEN_DECIMALS",
    "UNIT_PRECISION",
    "ZERO_ADDRESS",
    "ETH",
    "USDC",
    "USD",
    "BASE_NETWORK_ID",
    "extract_token_details",
    "format_token_mention",
    "format_user_mention",
    "format_group_mention",
    "is_valid_address",
    "is_eth",
    "is_usdc",
    "to_decimal",
    "parse_units",
    "format_units",
    "is_stable_coin",
]
