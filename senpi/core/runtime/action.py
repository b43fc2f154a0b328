from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ...logging_config import bound_action_context
from .models import ActionState, Callback, CallbackMessage

if TYPE_CHECKING:
    from .runtime import AgentRuntime


class ActionContext:
    """Everything a handler needs for one invocation."""

    def __init__(
        self,
        *,
        state: ActionState,
        runtime: "AgentRuntime",
        callback: Optional[Callback] = None,
        trace_id: Optional[str] = None,
    ) -> None:
        self.state = state
        self.runtime = runtime
        self.callback = callback
        self.trace_id = trace_id or str(uuid.uuid4())

    @property
    def user_id(self) -> str:
        return self.state.user.id

    @property
    def authorization(self) -> Optional[str]:
        return self.state.authorization_header

    async def send(
        self,
        text: str,
        *,
        action: Optional[str] = None,
        content: Optional[Dict[str, Any]] = None,
        cta: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.callback is None:
            return
        await self.callback(
            CallbackMessage(
                text=text,
                action=action,
                content=content or {},
                cta=cta,
                metadata=metadata or {},
            )
        )


class Action(ABC):
    """Base class for plugin actions."""

    name: str = "ACTION"
    similes: List[str] = []
    description: str = ""
    examples: List[List[Dict[str, Any]]] = []
    suppress_initial_message: bool = False

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__module__)

    def matches(self, name: str) -> bool:
        wanted = name.upper()
        return wanted == self.name.upper() or wanted in (s.upper() for s in self.similes)

    async def validate(self, ctx: ActionContext) -> bool:
        return True

    @abstractmethod
    async def handle(self, ctx: ActionContext) -> bool:
        """Run the action; report outcomes through ``ctx.send``."""

    async def run(self, ctx: ActionContext) -> bool:
        if not await self.validate(ctx):
            return False
        with bound_action_context(trace_id=ctx.trace_id, user_id=ctx.user_id, action=self.name):
            self.logger.info(f"Starting {self.name} handler")
            return await self.handle(ctx)


@dataclass
class Plugin:
    name: str
    description: str
    actions: List[Action] = field(default_factory=list)
