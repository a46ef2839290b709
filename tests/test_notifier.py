"""Critical-turn notifier tests."""
import json

import httpx

from mentesegura.services.notifier import CriticalNotifier

MESSAGE = {
    "id": "msg-1",
    "conversation_id": "conv-1",
    "role": "assistant",
    "content": "⚠️ ATENÇÃO: " + "x" * 1000,
    "is_critical": True,
}


def test_alert_carries_ids_and_trimmed_excerpt(test_config):
    alert = CriticalNotifier().build_alert(MESSAGE, user_id="user-1")

    assert alert["conversation_id"] == "conv-1"
    assert alert["message_id"] == "msg-1"
    assert alert["user_id"] == "user-1"
    assert alert["excerpt"].startswith("⚠️ ATENÇÃO:")
    assert len(alert["excerpt"]) == test_config.notifications.excerpt_chars
    assert alert["detected_at"]


async def test_without_webhook_only_logs(monkeypatch):
    calls = []
    notifier = CriticalNotifier(transport=httpx.MockTransport(lambda r: calls.append(r) or httpx.Response(200)))
    monkeypatch.setattr(notifier.cfg, "webhook_url", "")

    assert await notifier.notify(MESSAGE, "user-1") is True
    assert calls == []


async def test_posts_alert_to_webhook(monkeypatch):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    notifier = CriticalNotifier(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(notifier.cfg, "webhook_url", "https://psicologia.test/alertas")

    assert await notifier.notify(MESSAGE, "user-1") is True
    assert len(seen) == 1
    assert json.loads(seen[0].content)["message_id"] == "msg-1"


async def test_retries_then_gives_up(monkeypatch):
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(503)

    notifier = CriticalNotifier(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(notifier.cfg, "webhook_url", "https://psicologia.test/alertas")

    assert await notifier.notify(MESSAGE) is False
    assert len(attempts) == notifier.cfg.retry_attempts


async def test_recovers_after_transient_failure(monkeypatch):
    statuses = iter([502, 200])
    notifier = CriticalNotifier(transport=httpx.MockTransport(lambda r: httpx.Response(next(statuses))))
    monkeypatch.setattr(notifier.cfg, "webhook_url", "https://psicologia.test/alertas")

    assert await notifier.notify(MESSAGE) is True
