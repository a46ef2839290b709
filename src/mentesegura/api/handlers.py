"""Exception handlers shared by every router."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import structlog

from mentesegura.errors import MenteSeguraError
from mentesegura.middleware.rate_limiter import get_limiter, rate_limit_exceeded_handler

log = structlog.get_logger()


async def mentesegura_error_handler(request: Request, exc: MenteSeguraError) -> JSONResponse:
    """Render any MenteSeguraError as ``{"error": message}`` with its status."""
    log.warning(
        "request_failed",
        path=request.url.path,
        status=exc.status_code,
        error=type(exc).__name__,
        detail=exc.detail,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def install(app: FastAPI) -> FastAPI:
    """Attach the limiter and error handlers to an app."""
    app.state.limiter = get_limiter()
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(MenteSeguraError, mentesegura_error_handler)
    return app
