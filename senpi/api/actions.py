import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, Field

from ..core.runtime import ActionContext, ActionState, AgentWallet, CallbackMessage, SenpiUser, get_runtime
from ..plugins import resolve_action

router = APIRouter(prefix="/actions")
logger = logging.getLogger(__name__)


class ActionRequest(BaseModel):
    trace_id: Optional[str] = Field(default=None, description="Client trace id, generated when omitted")
    message: str = Field(description="Current user message")
    recent_messages: List[Dict[str, str]] = Field(
        default_factory=list,
        description="Prior conversation turns as {user, text}",
    )
    user: SenpiUser
    agent_wallet: Optional[AgentWallet] = None
    authorization: Optional[str] = Field(
        default=None,
        description="Senpi authorization header forwarded to the backend",
    )


class ActionResponse(BaseModel):
    action: str
    handled: bool
    messages: List[Dict[str, Any]]


@router.post("/{name}")
async def run_action(
    name: str,
    req: ActionRequest,
    authorization: Optional[str] = Header(default=None),
) -> ActionResponse:
    try:
        action = resolve_action(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown action: {name}")

    runtime = get_runtime()
    auth_header = req.authorization or authorization
    state = ActionState(
        user=req.user,
        message_text=req.message,
        recent_messages=req.recent_messages,
        agent_wallet=req.agent_wallet,
        wallet_client=runtime.wallet_client(auth_header),
        authorization_header=auth_header,
    )

    if req.agent_wallet is not None:
        try:
            state.agent_wallet_balance = await runtime.portfolio.get_portfolio(
                req.user.id, [req.agent_wallet.address]
            )
        except Exception as e:
            logger.warning(f"Failed to load portfolio for {req.user.id}: {e}")

    messages: List[CallbackMessage] = []

    async def collect(message: CallbackMessage) -> None:
        messages.append(message)

    ctx = ActionContext(state=state, runtime=runtime, callback=collect, trace_id=req.trace_id)
    try:
        handled = await action.run(ctx)
    except Exception as e:
        logger.error(f"Action {action.name} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Action {action.name} failed: {str(e)}")

    return ActionResponse(
        action=action.name,
        handled=handled,
        messages=[message.to_dict() for message in messages],
    )
