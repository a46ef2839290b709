"""
Rate limiting tests.

Covers key extraction (per-user vs per-IP), limiter backend selection, 429
responses in the relay's error shape and isolation between students.
"""
import sys
import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient
from jose import JWTError
from slowapi.errors import RateLimitExceeded
from unittest.mock import Mock, patch

from mentesegura.middleware.rate_limiter import (
    create_limiter,
    get_user_identifier,
    rate_limit_exceeded_handler,
)
from mentesegura.services.auth_service import AuthService


def make_request(headers):
    mock_request = Mock()
    mock_request.headers = headers
    mock_request.method = "POST"
    mock_request.url.path = "/api/chat-simone"
    return mock_request


class TestRateLimitKeyFunction:
    """User identifier extraction for rate limiting."""

    def test_key_function_with_valid_jwt(self):
        token = AuthService().create_access_token("user123", "aluno@escola.br")

        identifier = get_user_identifier(make_request({"Authorization": f"Bearer {token}"}))

        assert identifier == "user:user123"

    def test_key_function_without_auth_header(self):
        with patch('mentesegura.middleware.rate_limiter.get_remote_address') as mock_ip:
            mock_ip.return_value = "192.168.1.100"

            identifier = get_user_identifier(make_request({}))

            assert identifier == "ip:192.168.1.100"

    def test_key_function_with_invalid_jwt(self):
        with patch('mentesegura.middleware.rate_limiter.jwt.decode') as mock_decode:
            mock_decode.side_effect = JWTError("Invalid token")

            with patch('mentesegura.middleware.rate_limiter.get_remote_address') as mock_ip:
                mock_ip.return_value = "192.168.1.100"

                identifier = get_user_identifier(make_request({"Authorization": "Bearer invalid.token.here"}))

                assert identifier == "ip:192.168.1.100"

    def test_key_function_without_sub_claim(self):
        with patch('mentesegura.middleware.rate_limiter.jwt.decode') as mock_decode:
            mock_decode.return_value = {"email": "aluno@escola.br"}

            with patch('mentesegura.middleware.rate_limiter.get_remote_address') as mock_ip:
                mock_ip.return_value = "10.0.0.7"

                identifier = get_user_identifier(make_request({"Authorization": "Bearer x.y.z"}))

                assert identifier == "ip:10.0.0.7"


class TestLimiterInitialization:
    """Limiter creation and backend selection."""

    def _config(self, storage="redis", enabled=True):
        mock_cfg = Mock()
        mock_cfg.rate_limits.enabled = enabled
        mock_cfg.rate_limits.storage = storage
        mock_cfg.rate_limits.redis_url = "redis://localhost:6379/1"
        mock_cfg.rate_limits.default_limit = "100/minute"
        return mock_cfg

    def test_create_limiter_with_redis_backend(self):
        fake_redis = Mock()
        fake_redis.from_url.return_value.ping.return_value = True

        with patch('mentesegura.middleware.rate_limiter.get_config', return_value=self._config()):
            with patch.dict(sys.modules, {"redis": fake_redis}):
                with patch('mentesegura.middleware.rate_limiter.Limiter') as mock_limiter:
                    create_limiter()

        fake_redis.from_url.assert_called_once_with("redis://localhost:6379/1", decode_responses=True)
        assert mock_limiter.call_args.kwargs["storage_uri"] == "redis://localhost:6379/1"

    def test_create_limiter_fallback_to_memory(self):
        fake_redis = Mock()
        fake_redis.from_url.side_effect = Exception("Connection refused")

        with patch('mentesegura.middleware.rate_limiter.get_config', return_value=self._config()):
            with patch.dict(sys.modules, {"redis": fake_redis}):
                with patch('mentesegura.middleware.rate_limiter.Limiter') as mock_limiter:
                    create_limiter()

        assert mock_limiter.call_args.kwargs["storage_uri"] == "memory://"

    def test_create_limiter_disabled(self):
        with patch('mentesegura.middleware.rate_limiter.get_config', return_value=self._config(enabled=False)):
            limiter = create_limiter()

        assert limiter is not None


@pytest.mark.integration
class TestEndpointRateLimits:
    """A limited endpoint returns 429 once a student's quota is spent."""

    @pytest.fixture
    def client(self):
        with patch('mentesegura.middleware.rate_limiter.get_config') as mock_config:
            mock_config.return_value = TestLimiterInitialization()._config(storage="memory")
            limiter = create_limiter()

        api = FastAPI()
        api.state.limiter = limiter
        api.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

        @api.post("/api/chat-simone")
        @limiter.limit("2/minute")
        async def relay(request: Request, response: Response):
            return {"ok": True}

        return TestClient(api)

    def test_limit_exceeded(self, client):
        headers = {"Authorization": f"Bearer {AuthService().create_access_token('user1', 'a@b.c')}"}
        for _ in range(2):
            assert client.post("/api/chat-simone", headers=headers).status_code == 200

        response = client.post("/api/chat-simone", headers=headers)

        assert response.status_code == 429
        assert "Retry-After" in response.headers
        assert response.json()["error"] == "Muitas solicitações. Por favor, aguarde alguns instantes."

    def test_different_users_separate_quotas(self, client):
        auth = AuthService()
        first = {"Authorization": f"Bearer {auth.create_access_token('user1', 'a@b.c')}"}
        second = {"Authorization": f"Bearer {auth.create_access_token('user2', 'b@b.c')}"}

        for _ in range(2):
            client.post("/api/chat-simone", headers=first)
        assert client.post("/api/chat-simone", headers=first).status_code == 429

        assert client.post("/api/chat-simone", headers=second).status_code == 200


class TestRateLimitHeaders:

    def test_retry_after_header_present(self):
        mock_request = Mock(spec=Request)
        mock_request.url.path = "/api/chat-simone"
        mock_request.method = "POST"

        mock_exc = Mock(spec=RateLimitExceeded)
        mock_exc.retry_after = 120
        mock_exc.detail = "20 per 1 minute"

        with patch('mentesegura.middleware.rate_limiter.get_user_identifier') as mock_id:
            mock_id.return_value = "user:test123"

            response = rate_limit_exceeded_handler(mock_request, mock_exc)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "120"
