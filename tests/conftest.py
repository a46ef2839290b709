"""Shared fixtures. The test config is installed before any app module is imported."""
from contextlib import asynccontextmanager

import pytest
import pytest_asyncio

from mentesegura import config as config_module
from mentesegura.config import Config

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"


def make_test_config() -> Config:
    cfg = Config()
    cfg.app.secret_key = TEST_SECRET
    cfg.app.env = "test"
    cfg.auth.bcrypt_rounds = 4
    cfg.database.wal_mode = False
    cfg.gateway.api_key = "gateway-test-key"
    cfg.gateway.base_url = "https://gateway.test/v1"
    cfg.chat.relay_url = "https://relay.test/api/chat-simone"
    cfg.rate_limits.chat_limit = "1000/minute"
    cfg.rate_limits.auth_limit = "1000/minute"
    cfg.notifications.retry_attempts = 2
    return cfg


config_module._CONFIG = make_test_config()


def sse(*deltas: str, done: bool = True) -> bytes:
    """Encode deltas as chat-completion event lines."""
    import json
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": d}}]}, ensure_ascii=False)
        for d in deltas
    ]
    if done:
        lines.append("data: [DONE]")
    return ("\n".join(lines) + "\n").encode("utf-8")


class FakeStore:
    """In-memory stand-in for ConversationService."""

    def __init__(self, rows=None, fail_roles=(), fail_list=False):
        self.rows = list(rows or [])
        self.fail_roles = set(fail_roles)
        self.fail_list = fail_list

    async def list_messages(self, conversation_id):
        from mentesegura.errors import PersistenceError
        if self.fail_list:
            raise PersistenceError("Não foi possível carregar o histórico da conversa.")
        return [dict(r) for r in self.rows if r["conversation_id"] == conversation_id]

    async def add_message(self, conversation_id, role, content, is_critical=False):
        from mentesegura.errors import PersistenceError
        if role in self.fail_roles:
            raise PersistenceError()
        row = {
            "id": f"row-{len(self.rows) + 1}",
            "conversation_id": conversation_id,
            "role": role,
            "content": content,
            "is_critical": is_critical,
        }
        self.rows.append(row)
        return row


class FakeRelay:
    """Relay double yielding preset byte chunks; an Exception item is raised mid-stream."""

    def __init__(self, chunks=(), error=None):
        self.chunks = list(chunks)
        self.error = error
        self.calls = []
        self.pulled = 0

    @asynccontextmanager
    async def open(self, messages, conversation_id, access_token):
        self.calls.append({"messages": messages, "conversation_id": conversation_id, "token": access_token})
        if self.error is not None:
            raise self.error

        async def chunks():
            for chunk in self.chunks:
                self.pulled += 1
                if isinstance(chunk, Exception):
                    raise chunk
                yield chunk

        yield chunks()


@pytest.fixture
def test_config() -> Config:
    return config_module._CONFIG


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def database(db_url):
    from mentesegura.services.database import init_database, close_database
    await init_database(db_url)
    yield
    await close_database()
