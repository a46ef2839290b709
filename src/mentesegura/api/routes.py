"""
FastAPI API routes — conversation and message endpoints backing the chat view.
"""
from typing import Literal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from mentesegura.middleware.auth_middleware import get_current_user
from mentesegura.models.user import User
from mentesegura.services.conversation_service import ConversationService, get_conversation_service


router = APIRouter(prefix="/api", tags=["api"])


class AddMessageRequest(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=20000)
    is_critical: bool = False


@router.get("/conversations/current")
async def current_conversation(
    user: User = Depends(get_current_user),
    svc: ConversationService = Depends(get_conversation_service),
):
    return await svc.get_or_create_for_user(user.id)


@router.get("/conversations/{conversation_id}/messages")
async def get_messages(
    conversation_id: str,
    user: User = Depends(get_current_user),
    svc: ConversationService = Depends(get_conversation_service),
):
    await svc.ensure_owner(conversation_id, user.id)
    return await svc.list_messages(conversation_id)


@router.post("/conversations/{conversation_id}/messages", status_code=status.HTTP_201_CREATED)
async def add_message(
    conversation_id: str,
    req: AddMessageRequest,
    user: User = Depends(get_current_user),
    svc: ConversationService = Depends(get_conversation_service),
):
    await svc.ensure_owner(conversation_id, user.id)
    return await svc.add_message(
        conversation_id, req.role, req.content, is_critical=req.is_critical,
    )
