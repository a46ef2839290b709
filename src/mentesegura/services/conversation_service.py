"""
Conversation Service — the persisted store for conversations and messages.

Every database failure is re-raised as PersistenceError so callers can surface a
single localized message.
"""
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
import structlog

from mentesegura.errors import ConversationNotFoundError, PersistenceError
from mentesegura.models.conversation import Conversation, Message
from mentesegura.services.database import get_session

log = structlog.get_logger()

ROLES = ("user", "assistant")


class ConversationService:
    """Reads and appends rows in `conversations` and `messages`."""

    async def get_or_create_for_user(self, user_id: str) -> Dict:
        """Return the user's most recent conversation, creating one lazily."""
        try:
            async with get_session() as session:
                result = await session.execute(
                    select(Conversation)
                    .where(Conversation.user_id == user_id)
                    .order_by(Conversation.created_at.desc())
                    .limit(1)
                )
                conv = result.scalar_one_or_none()
                if conv is None:
                    conv = Conversation(user_id=user_id)
                    session.add(conv)
                    await session.flush()
                    log.info("conversation_created", conversation_id=conv.id, user_id=user_id)
                return {
                    "id": conv.id,
                    "user_id": conv.user_id,
                    "created_at": conv.created_at.isoformat(),
                }
        except SQLAlchemyError as e:
            log.error("conversation_lookup_failed", user_id=user_id, error=str(e))
            raise PersistenceError("Não foi possível carregar a conversa.", detail=str(e)) from e

    async def get_owner(self, conversation_id: str) -> Optional[str]:
        """Return the owning user id, or None when the conversation does not exist."""
        try:
            async with get_session() as session:
                result = await session.execute(
                    select(Conversation.user_id).where(Conversation.id == conversation_id)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("Não foi possível carregar a conversa.", detail=str(e)) from e

    async def ensure_owner(self, conversation_id: str, user_id: str) -> None:
        owner = await self.get_owner(conversation_id)
        if owner is None or owner != user_id:
            raise ConversationNotFoundError()

    async def list_messages(self, conversation_id: str) -> List[Dict]:
        """All messages of a conversation, oldest first."""
        try:
            async with get_session() as session:
                result = await session.execute(
                    select(Message)
                    .where(Message.conversation_id == conversation_id)
                    .order_by(Message.created_at.asc(), Message.sequence_num.asc())
                )
                return [m.to_dict() for m in result.scalars().all()]
        except SQLAlchemyError as e:
            log.error("messages_load_failed", conversation_id=conversation_id, error=str(e))
            raise PersistenceError(
                "Não foi possível carregar o histórico da conversa.", detail=str(e)
            ) from e

    async def add_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        is_critical: bool = False,
    ) -> Dict:
        """Append a message and return the stored row."""
        if role not in ROLES:
            raise ValueError(f"Invalid role: {role}")

        try:
            async with get_session() as session:
                result = await session.execute(
                    select(func.max(Message.sequence_num))
                    .where(Message.conversation_id == conversation_id)
                )
                max_seq = result.scalar() or 0

                msg = Message(
                    conversation_id=conversation_id,
                    role=role,
                    content=content,
                    is_critical=is_critical,
                    sequence_num=max_seq + 1,
                )
                session.add(msg)
                await session.flush()
                stored = msg.to_dict()
        except SQLAlchemyError as e:
            log.error("message_store_failed", conversation_id=conversation_id, role=role, error=str(e))
            raise PersistenceError(detail=str(e)) from e

        log.info(
            "message_stored",
            conversation_id=conversation_id,
            role=role,
            is_critical=is_critical,
            sequence_num=stored["sequence_num"],
        )
        return stored


_service: Optional[ConversationService] = None


def get_conversation_service() -> ConversationService:
    global _service
    if _service is None:
        _service = ConversationService()
    return _service
