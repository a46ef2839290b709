"""HTTP client the chat view uses to reach the stream relay."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

import httpx
import structlog

from mentesegura.config import get_config
from mentesegura.errors import (
    MenteSeguraError,
    MissingCredentialError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)

log = structlog.get_logger()


def error_for_status(status_code: int, message: Optional[str] = None) -> MenteSeguraError:
    """Map a non-2xx relay status to the error shown to the student.

    ``message`` is the relay's ``{"error": ...}`` text; without it each error
    class supplies its own default.
    """
    if status_code == 401:
        return MissingCredentialError(message)
    if status_code == 429:
        return UpstreamRateLimitedError(message)
    if status_code == 402:
        return UpstreamUnavailableError(message)
    return UpstreamError(message)


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class RelayClient:
    """Posts a chat turn to the relay and exposes the raw response bytes."""

    def __init__(self, url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        cfg = get_config().chat
        self.url = url or cfg.relay_url
        self.timeout = httpx.Timeout(cfg.relay_timeout_seconds, connect=10.0)
        self._transport = transport

    @asynccontextmanager
    async def open(
        self,
        messages: List[Dict[str, str]],
        conversation_id: str,
        access_token: Optional[str],
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Open the relay stream.

        Usage:
            async with relay.open(history, conversation_id, token) as chunks:
                async for chunk in chunks:
                    ...

        Raises:
            MissingCredentialError: no token, or the relay answered 401
            UpstreamRateLimitedError / UpstreamUnavailableError / UpstreamError
        """
        if not access_token:
            raise MissingCredentialError("No session")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                async with client.stream(
                    "POST",
                    self.url,
                    json={"messages": messages, "conversationId": conversation_id},
                    headers={"Authorization": f"Bearer {access_token}"},
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        log.warning("relay_rejected", status=response.status_code, conversation_id=conversation_id)
                        raise error_for_status(response.status_code, _error_message(response))
                    yield response.aiter_bytes()
            except httpx.HTTPError as e:
                log.error("relay_transport_error", error=str(e), conversation_id=conversation_id)
                raise UpstreamError(detail=str(e)) from e
