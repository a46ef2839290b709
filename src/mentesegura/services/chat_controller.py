"""
Chat controller — drives one conversation view.

State machine: idle → sending → streaming → idle, with error → idle from any
state. The displayed message list is optimistic while a turn is in flight and
is replaced by the persisted rows once the turn completes.
"""
import inspect
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

import structlog

from mentesegura.config import get_config
from mentesegura.errors import MenteSeguraError, MissingCredentialError
from mentesegura.services.stream_decoder import SSEStreamDecoder

log = structlog.get_logger()

TEMP_PREFIX = "temp-"
OPTIMISTIC_USER_PREFIX = "user-"

Callback = Callable[..., Union[None, Awaitable[None]]]


class ChatState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    ERROR = "error"


@dataclass
class ChatMessage:
    id: str
    role: str
    content: str
    is_critical: bool = False
    failed: bool = False

    @property
    def pending(self) -> bool:
        return self.id.startswith(TEMP_PREFIX)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ChatMessage":
        return cls(
            id=row["id"],
            role=row["role"],
            content=row["content"],
            is_critical=bool(row.get("is_critical")),
        )

    def as_turn(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class Notice:
    """A user-visible notification (rendered as a toast by the UI)."""
    title: str
    description: str
    variant: str = "destructive"


class MessageStore(Protocol):
    async def list_messages(self, conversation_id: str) -> List[Dict]: ...

    async def add_message(
        self, conversation_id: str, role: str, content: str, is_critical: bool = False,
    ) -> Dict: ...


class Relay(Protocol):
    def open(self, messages: List[Dict[str, str]], conversation_id: str, access_token: Optional[str]): ...


async def _call(callback: Optional[Callback], *args) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class ChatController:
    """Sends student messages, consumes the relayed stream and persists replies."""

    def __init__(
        self,
        conversation_id: str,
        store: MessageStore,
        relay: Relay,
        token_provider: Callable[[], Optional[str]],
        on_change: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
        on_critical: Optional[Callback] = None,
        critical_marker: Optional[str] = None,
    ):
        self.conversation_id = conversation_id
        self.store = store
        self.relay = relay
        self.token_provider = token_provider
        self.on_change = on_change
        self.on_error = on_error
        self.on_critical = on_critical
        self.critical_marker = critical_marker or get_config().chat.critical_marker

        self.messages: List[ChatMessage] = []
        self.state = ChatState.IDLE
        self.transitions: List[ChatState] = [ChatState.IDLE]
        self.loading_history = True
        self.last_error: Optional[Notice] = None
        self.last_turn_complete = False

    # ---- State ----

    def _set_state(self, state: ChatState) -> None:
        self.state = state
        self.transitions.append(state)

    @property
    def is_busy(self) -> bool:
        return self.state != ChatState.IDLE

    def is_critical_text(self, text: str) -> bool:
        return self.critical_marker in text

    async def _changed(self) -> None:
        await _call(self.on_change, self)

    async def _surface(self, title: str, description: str) -> None:
        self.last_error = Notice(title=title, description=description)
        await _call(self.on_error, self.last_error)

    async def _fail(self, title: str, description: str) -> None:
        self._set_state(ChatState.ERROR)
        await self._surface(title, description)

    # ---- Operations ----

    async def load_messages(self) -> bool:
        """Replace the displayed list with the persisted rows."""
        try:
            rows = await self.store.list_messages(self.conversation_id)
        except Exception as e:
            log.error("chat_history_load_failed", conversation_id=self.conversation_id, error=str(e))
            self.loading_history = False
            await self._surface(
                "Erro ao carregar mensagens",
                "Não foi possível carregar o histórico da conversa.",
            )
            await self._changed()
            return False

        self.loading_history = False
        self.messages = [ChatMessage.from_row(row) for row in rows]
        await self._changed()
        return True

    async def send(self, text: str) -> bool:
        """
        Send a student message and stream Simone's reply.

        Returns True when the turn completed: both messages persisted. Blank
        input and sends while a turn is in flight are ignored.
        """
        text = (text or "").strip()
        if not text or self.is_busy:
            return False

        self.last_turn_complete = False
        self._set_state(ChatState.SENDING)
        try:
            try:
                await self.store.add_message(self.conversation_id, "user", text)
            except Exception as e:
                log.error("chat_user_message_failed", conversation_id=self.conversation_id, error=str(e))
                await self._fail("Erro ao enviar mensagem", "Não foi possível enviar sua mensagem.")
                return False

            self.messages.append(ChatMessage(
                id=f"{OPTIMISTIC_USER_PREFIX}{int(time.time() * 1000)}",
                role="user",
                content=text,
            ))
            await self._changed()

            self.last_turn_complete = await self._stream_reply()
            return self.last_turn_complete
        finally:
            self._set_state(ChatState.IDLE)
            await self._changed()

    async def _stream_reply(self) -> bool:
        history = [m.as_turn() for m in self.messages if not m.pending]
        placeholder: Optional[ChatMessage] = None
        accumulator = ""
        is_critical = False

        try:
            token = self.token_provider()
            if not token:
                raise MissingCredentialError("No session")

            async with self.relay.open(history, self.conversation_id, token) as chunks:
                self._set_state(ChatState.STREAMING)
                placeholder = ChatMessage(
                    id=f"{TEMP_PREFIX}{int(time.time() * 1000)}",
                    role="assistant",
                    content="",
                )
                self.messages.append(placeholder)
                await self._changed()

                decoder = SSEStreamDecoder()
                async for chunk in chunks:
                    for delta in decoder.feed(chunk):
                        accumulator += delta
                        if not is_critical and self.is_critical_text(accumulator):
                            is_critical = True
                        placeholder.content = accumulator
                        placeholder.is_critical = is_critical
                        await self._changed()
                    if decoder.done:
                        break
                else:
                    for delta in decoder.flush():
                        accumulator += delta
                        is_critical = is_critical or self.is_critical_text(accumulator)
                        placeholder.content = accumulator
                        placeholder.is_critical = is_critical
                        await self._changed()
        except Exception as e:
            log.error("chat_stream_failed", conversation_id=self.conversation_id, error=str(e))
            description = e.message if isinstance(e, MenteSeguraError) else "Não foi possível processar sua mensagem."
            self.messages = [m for m in self.messages if not m.pending]
            await self._fail("Erro na conversa", description)
            return False

        # the flag is derived once, from the final text
        is_critical = self.is_critical_text(accumulator)
        placeholder.is_critical = is_critical

        try:
            stored = await self.store.add_message(
                self.conversation_id, "assistant", accumulator, is_critical=is_critical,
            )
        except Exception as e:
            log.error("chat_reply_persist_failed", conversation_id=self.conversation_id, error=str(e))
            placeholder.failed = True
            description = e.message if isinstance(e, MenteSeguraError) else "Não foi possível salvar a mensagem."
            await self._fail("Erro na conversa", description)
            return False

        if is_critical:
            log.warning("chat_critical_reply", conversation_id=self.conversation_id, message_id=stored.get("id"))
            try:
                await _call(self.on_critical, stored)
            except Exception as e:
                log.error("critical_callback_failed", conversation_id=self.conversation_id, error=str(e))

        await self.load_messages()
        return True
