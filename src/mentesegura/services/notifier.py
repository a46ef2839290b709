"""
Critical-turn notifier — tells the school psychologist that a conversation
needs attention.
"""
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx
import structlog
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from mentesegura.config import get_config

log = structlog.get_logger()


class CriticalNotifier:
    """Logs every critical turn and forwards it to a webhook when configured."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = get_config().notifications
        self._transport = transport

    def build_alert(self, message: Dict, user_id: Optional[str] = None) -> Dict:
        content = message.get("content", "")
        return {
            "conversation_id": message.get("conversation_id"),
            "message_id": message.get("id"),
            "user_id": user_id,
            "excerpt": content[: self.cfg.excerpt_chars],
            "detected_at": datetime.now(timezone.utc).isoformat(),
        }

    async def _post(self, client: httpx.AsyncClient, alert: Dict) -> None:
        response = await client.post(self.cfg.webhook_url, json=alert)
        response.raise_for_status()

    async def notify(self, message: Dict, user_id: Optional[str] = None) -> bool:
        """
        Deliver an alert for a persisted critical message.

        Returns True when the alert was delivered (or no webhook is set up),
        False when delivery failed after retries.
        """
        alert = self.build_alert(message, user_id)
        log.warning(
            "critical_turn_detected",
            conversation_id=alert["conversation_id"],
            message_id=alert["message_id"],
            user_id=user_id,
        )

        if not self.cfg.webhook_url:
            return True

        async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds, transport=self._transport) as client:
            try:
                async for attempt in AsyncRetrying(
                    stop=stop_after_attempt(self.cfg.retry_attempts),
                    wait=wait_exponential_jitter(initial=0.5, max=5.0),
                    retry=retry_if_exception_type(httpx.HTTPError),
                ):
                    with attempt:
                        await self._post(client, alert)
            except RetryError as e:
                log.error(
                    "critical_notification_failed",
                    conversation_id=alert["conversation_id"],
                    error=str(e.last_attempt.exception()),
                )
                return False

        log.info("critical_notification_sent", conversation_id=alert["conversation_id"])
        return True


_notifier: Optional[CriticalNotifier] = None


def get_notifier() -> CriticalNotifier:
    global _notifier
    if _notifier is None:
        _notifier = CriticalNotifier()
    return _notifier
