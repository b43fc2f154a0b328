import logging
from itertools import count
from typing import Any, Dict, List

import httpx
from eth_utils import to_checksum_address

from ..config import settings
from ..core.recovery import ExponentialBackoffStrategy, NetworkError, ProviderTimeoutError
from ..services.abi import decode_string, decode_uint, encode_address, encode_call
from .base import Provider

logger = logging.getLogger(__name__)


class BaseRpcProvider(Provider):
    """JSON-RPC reads against Base mainnet"""

    name = "base_rpc"
    timeout_s = 15

    def __init__(self, rpc_url: str = None, max_attempts: int = None):
        self.rpc_url = rpc_url or settings.base_rpc_url
        self.retry = ExponentialBackoffStrategy(
            max_attempts=max_attempts or settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay_seconds,
            logger=logger,
        )
        self._ids = count(1)

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "BASE_RPC_URL not configured"}

        try:
            chain_id = await self._rpc("eth_chainId", [])
            return {"status": "healthy", "chain_id": int(chain_id, 16)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def _rpc(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.rpc_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout_s,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(f"RPC {method} timed out", provider=self.name) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"RPC {method} failed: {e}", provider=self.name) from e

        if "error" in data:
            raise NetworkError(f"RPC error: {data['error']}", provider=self.name)

        return data["result"]

    async def _call(self, to: str, data: str) -> str:
        async def operation() -> str:
            return await self._rpc(
                "eth_call",
                [{"to": to_checksum_address(to), "data": data}, "latest"],
            )

        return await self.retry.execute(operation, {"operation": f"eth_call {data[:10]}"})

    async def get_native_balance(self, address: str) -> int:
        """ETH balance in wei"""

        async def operation() -> str:
            return await self._rpc("eth_getBalance", [to_checksum_address(address), "latest"])

        result = await self.retry.execute(operation, {"operation": "eth_getBalance"})
        return int(result, 16)

    async def get_erc20_balance(self, token: str, owner: str) -> int:
        """``balanceOf(owner)`` in the token's base units"""
        result = await self._call(token, encode_call("balanceOf(address)", encode_address(owner)))
        return decode_uint(result)

    async def get_erc20_decimals(self, token: str) -> int:
        result = await self._call(token, encode_call("decimals()"))
        return decode_uint(result)

    async def get_erc20_symbol(self, token: str) -> str:
        result = await self._call(token, encode_call("symbol()"))
        return decode_string(result)
