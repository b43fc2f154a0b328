from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ...providers.senpi_api import SenpiUser
from ...services.portfolio import Portfolio


class AgentWallet(BaseModel):
    """Delegated agent wallet attached to a Senpi user."""

    address: str
    delegated: bool = False


class TransactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(alias="fromAddress")
    to_address: str = Field(alias="toAddress")
    value: Optional[str] = None
    data: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WalletClient(Protocol):
    async def send_transaction(self, chain_id: str, transaction: TransactionRequest) -> Dict[str, Any]:
        ...


@dataclass(slots=True)
class CallbackMessage:
    """One message streamed back to the chat client."""

    text: str
    action: Optional[str] = None
    content: Dict[str, Any] = field(default_factory=dict)
    cta: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": self.text}
        if self.action:
            payload["action"] = self.action
        if self.content:
            payload["content"] = self.content
        if self.cta:
            payload["cta"] = self.cta
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload


Callback = Callable[[CallbackMessage], Awaitable[Any]]


@dataclass
class ActionState:
    """Per-message state an action handler reads from."""

    user: SenpiUser
    message_text: str = ""
    recent_messages: List[Dict[str, str]] = field(default_factory=list)
    agent_wallet: Optional[AgentWallet] = None
    wallet_client: Optional[WalletClient] = None
    authorization_header: Optional[str] = None
    agent_wallet_balance: Optional[Portfolio] = None

    def template_values(self) -> Dict[str, str]:
        lines = [f"{m.get('user', 'user')}: {m.get('text', '')}" for m in self.recent_messages]
        return {
            "recentMessages": "\n".join(lines),
            "currentMessage": self.message_text,
            "userData": self.user.model_dump_json(by_alias=True, exclude_none=True),
        }


__all__ = [
    "AgentWallet",
    "ActionState",
    "Callback",
    "CallbackMessage",
    "SenpiUser",
    "TransactionRequest",
    "WalletClient",
]
