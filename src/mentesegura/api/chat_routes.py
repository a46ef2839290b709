"""
Stream relay — forwards the chat history plus Simone's system prompt to the
model gateway and pipes the event stream back to the caller untouched.
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from starlette.background import BackgroundTask
import structlog

from mentesegura.middleware.auth_middleware import get_current_user
from mentesegura.middleware.rate_limiter import chat_limit, get_limiter
from mentesegura.models.user import User
from mentesegura.prompts import SIMONE_SYSTEM_PROMPT
from mentesegura.services.gateway_client import GatewayClient, get_gateway_client

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["chat"])
limiter = get_limiter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class RelayRequest(BaseModel):
    messages: List[ChatTurn] = Field(default_factory=list)
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")

    model_config = {"populate_by_name": True}


@router.options("/chat-simone")
async def relay_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/chat-simone")
@limiter.limit(chat_limit)
async def relay_chat(
    request: Request,
    body: RelayRequest,
    user: User = Depends(get_current_user),
    gateway: GatewayClient = Depends(get_gateway_client),
):
    """
    Relay a chat turn to the model gateway.

    Returns the upstream byte stream as ``text/event-stream``. Upstream
    failures are raised as MenteSeguraError subclasses and rendered as
    ``{"error": ...}`` by the app's exception handler.
    """
    history = [turn.model_dump() for turn in body.messages]
    log.info(
        "relay_request",
        user_id=user.id,
        conversation_id=body.conversation_id,
        history_len=len(history),
    )

    upstream = await gateway.open_stream(SIMONE_SYSTEM_PROMPT, history)

    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="text/event-stream",
        headers=CORS_HEADERS,
        background=BackgroundTask(upstream.aclose),
    )
