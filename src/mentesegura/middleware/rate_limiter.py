"""
Request throttling with SlowAPI.

The chat relay is limited per student (JWT ``sub``), the auth endpoints per
client IP. Counters live in Redis when ``rate_limits.storage`` is ``redis`` and
the server answers, in process memory otherwise.
"""
from typing import Optional

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from mentesegura.config import RateLimitConfig, get_config

log = structlog.get_logger()

MEMORY_STORAGE = "memory://"


def get_user_identifier(request: Request) -> str:
    """
    Rate-limit key for a request: ``user:<sub>`` for bearer tokens carrying a
    subject, ``ip:<address>`` for everything else.

    Only the claims are read here. The signature is checked by the auth
    dependency, so a forged token can at worst spend its own quota.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme == "Bearer" and token.strip():
        try:
            cfg = get_config()
            claims = jwt.decode(
                token.strip(),
                cfg.app.secret_key,
                algorithms=[cfg.auth.jwt_algorithm],
                options={"verify_signature": False},
            )
        except (JWTError, KeyError, AttributeError) as e:
            log.debug("rate_limit_jwt_decode_failed", error=str(e), path=request.url.path)
        else:
            if claims.get("sub"):
                return f"user:{claims['sub']}"

    return f"ip:{get_remote_address(request)}"


def _storage_uri(rate_cfg: RateLimitConfig) -> str:
    """Pick the limiter backend, falling back to memory when Redis is unusable."""
    if getattr(rate_cfg, "storage", "memory") != "redis":
        return MEMORY_STORAGE

    redis_url = getattr(rate_cfg, "redis_url", "")
    if not redis_url:
        log.warning("redis_url_not_configured", fallback="memory")
        return MEMORY_STORAGE

    try:
        import redis
    except ImportError:
        log.warning(
            "redis_package_not_installed",
            fallback="memory",
            hint="pip install 'mentesegura[redis]'",
        )
        return MEMORY_STORAGE

    try:
        probe = redis.from_url(redis_url, decode_responses=True)
        probe.ping()
        probe.close()
    except Exception as e:
        log.warning("redis_connection_failed", error=str(e), fallback="memory")
        return MEMORY_STORAGE

    log.info("rate_limiter_redis_connected", redis_url=redis_url.split("@")[-1])
    return redis_url


def create_limiter() -> Limiter:
    rate_cfg = getattr(get_config(), "rate_limits", None)

    if rate_cfg is None or not getattr(rate_cfg, "enabled", True):
        log.warning("rate_limiting_disabled")
        return Limiter(key_func=get_user_identifier, storage_uri=MEMORY_STORAGE, enabled=False)

    storage_uri = _storage_uri(rate_cfg)
    default_limit = getattr(rate_cfg, "default_limit", "100/minute")
    log.info("rate_limiter_initialized", storage=storage_uri.split(":")[0], default_limit=default_limit)
    return Limiter(
        key_func=get_user_identifier,
        storage_uri=storage_uri,
        default_limits=[default_limit],
        headers_enabled=True,
    )


def chat_limit() -> str:
    return get_config().rate_limits.chat_limit


def auth_limit() -> str:
    return get_config().rate_limits.auth_limit


_limiter: Optional[Limiter] = None


def get_limiter() -> Limiter:
    global _limiter
    if _limiter is None:
        _limiter = create_limiter()
    return _limiter


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 in the relay's ``{"error": ...}`` shape, with Retry-After."""
    retry_after = getattr(exc, "retry_after", 60)
    log.warning(
        "rate_limit_exceeded",
        identifier=get_user_identifier(request),
        path=request.url.path,
        limit=getattr(exc, "detail", "unknown"),
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "Muitas solicitações. Por favor, aguarde alguns instantes.",
            "retry_after_seconds": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
