from __future__ import annotations

import logging
import re
from typing import Any, AsyncGenerator, Callable, Dict, Optional

from ...cache import TTLCache
from ...config import settings
from ...providers.codex import CodexProvider
from ...providers.llm import LLMProvider, get_llm_provider
from ...providers.rpc import BaseRpcProvider
from ...providers.senpi_api import SenpiApiProvider
from ...services.portfolio import PortfolioService
from .models import ActionState, TransactionRequest, WalletClient

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


class SenpiWalletClient:
    """Wallet client that relays transactions through the Senpi API."""

    def __init__(self, senpi_api: SenpiApiProvider, authorization: Optional[str]):
        self.senpi_api = senpi_api
        self.authorization = authorization

    async def send_transaction(self, chain_id: str, transaction: TransactionRequest) -> Dict[str, Any]:
        return await self.senpi_api.send_transaction(
            self.authorization,
            chain_id,
            transaction.to_payload(),
        )


WalletClientFactory = Callable[[Optional[str]], Optional[WalletClient]]


class AgentRuntime:
    """Shared services handed to every action: LLM, cache and backends."""

    def __init__(
        self,
        *,
        llm: Optional[LLMProvider] = None,
        cache: Optional[TTLCache] = None,
        senpi_api: Optional[SenpiApiProvider] = None,
        rpc: Optional[BaseRpcProvider] = None,
        codex: Optional[CodexProvider] = None,
        wallet_client_factory: Optional[WalletClientFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger("senpi.runtime")
        self._llm = llm
        self.cache = cache or TTLCache(
            default_ttl=settings.cache_ttl_seconds,
            max_size=settings.max_cache_size,
        )
        self.senpi_api = senpi_api or SenpiApiProvider()
        self.rpc = rpc or BaseRpcProvider()
        self.codex = codex or CodexProvider()
        self.portfolio = PortfolioService(self.cache, self.senpi_api)
        self._wallet_client_factory = wallet_client_factory

    @property
    def llm(self) -> LLMProvider:
        # Built on first use so the API can start without an LLM key
        if self._llm is None:
            self._llm = get_llm_provider()
        return self._llm

    def wallet_client(self, authorization: Optional[str]) -> Optional[WalletClient]:
        if self._wallet_client_factory is not None:
            return self._wallet_client_factory(authorization)
        if not authorization:
            return None
        return SenpiWalletClient(self.senpi_api, authorization)

    def compose_context(
        self,
        template: str,
        state: Optional[ActionState] = None,
        **values: Any,
    ) -> str:
        """Fill ``{{key}}`` placeholders from the state and explicit values.

        Unknown placeholders render as empty strings.
        """
        merged: Dict[str, Any] = state.template_values() if state else {}
        merged.update(values)
        return _PLACEHOLDER_RE.sub(lambda m: str(merged.get(m.group(1), "")), template)

    async def generate_object(
        self,
        prompt: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self.llm.generate_object(
            prompt,
            max_tokens=max_tokens or settings.llm_max_tokens,
            temperature=settings.llm_temperature if temperature is None else temperature,
        )

    async def stream_text(
        self,
        prompt: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncGenerator[str, None]:
        async for chunk in self.llm.stream_text(
            prompt,
            max_tokens=max_tokens or settings.llm_max_tokens,
            temperature=settings.llm_temperature if temperature is None else temperature,
        ):
            yield chunk

    async def health(self) -> Dict[str, Any]:
        providers = {
            "senpi_api": self.senpi_api,
            "base_rpc": self.rpc,
            "codex": self.codex,
        }
        report = {}
        for name, provider in providers.items():
            report[name] = await provider.health_check()
        return report
