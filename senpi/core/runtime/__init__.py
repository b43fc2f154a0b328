from __future__ import annotations

from typing import Optional

from .action import Action, ActionContext, Plugin
from .models import (
    ActionState,
    AgentWallet,
    Callback,
    CallbackMessage,
    SenpiUser,
    TransactionRequest,
    WalletClient,
)
from .runtime import AgentRuntime, SenpiWalletClient

_runtime: Optional[AgentRuntime] = None


def get_runtime() -> AgentRuntime:
    global _runtime
    if _runtime is None:
        _runtime = AgentRuntime()
    return _runtime


def set_runtime(runtime: Optional[AgentRuntime]) -> None:
    global _runtime
    _runtime = runtime


__all__ = [
    "Action",
    "ActionContext",
    "ActionState",
    "AgentRuntime",
    "AgentWallet",
    "Callback",
    "CallbackMessage",
    "Plugin",
    "SenpiUser",
    "SenpiWalletClient",
    "TransactionRequest",
    "WalletClient",
    "get_runtime",
    "set_runtime",
]
