"""Shared fixtures: an agent runtime with mocked backends and a message recorder."""

from typing import List

import pytest
from unittest.mock import AsyncMock, MagicMock

from senpi.core.runtime import (
    ActionContext,
    ActionState,
    AgentRuntime,
    AgentWallet,
    CallbackMessage,
    SenpiUser,
)

AGENT_WALLET_ADDRESS = "0x1111111111111111111111111111111111111111"
TRACE_ID = "trace-1"


class MessageRecorder:
    """Callback that keeps every message an action sends."""

    def __init__(self) -> None:
        self.messages: List[CallbackMessage] = []

    async def __call__(self, message: CallbackMessage) -> None:
        self.messages.append(message)

    @property
    def texts(self) -> List[str]:
        return [message.text for message in self.messages]


@pytest.fixture
def runtime() -> AgentRuntime:
    llm = MagicMock()
    llm.generate_object = AsyncMock(return_value={})
    return AgentRuntime(
        llm=llm,
        senpi_api=MagicMock(),
        rpc=MagicMock(),
        codex=MagicMock(),
    )


@pytest.fixture
def llm_stream(runtime):
    """Install canned chunks as the model's text stream; returns the recorded calls."""
    calls = []

    def install(chunks):
        async def stream(prompt, **kwargs):
            calls.append({"prompt": prompt, **kwargs})
            for chunk in chunks:
                yield chunk

        runtime.llm.stream_text = stream
        return calls

    return install


@pytest.fixture
def recorder() -> MessageRecorder:
    return MessageRecorder()


@pytest.fixture
def make_context(runtime, recorder):
    def factory(**overrides) -> ActionContext:
        values = {
            "user": SenpiUser(id="user-1", user_name="alice"),
            "message_text": "",
            "agent_wallet": AgentWallet(address=AGENT_WALLET_ADDRESS, delegated=True),
            "wallet_client": MagicMock(),
            "authorization_header": "Bearer test",
        }
        values.update(overrides)
        return ActionContext(
            state=ActionState(**values),
            runtime=runtime,
            callback=recorder,
            trace_id=TRACE_ID,
        )

    return factory
