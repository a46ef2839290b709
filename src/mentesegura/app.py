"""
Application entry point — Creates the FastAPI app and mounts the NiceGUI pages on it.
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from nicegui import ui

from mentesegura.config import load_config
from mentesegura.services.database import init_database, close_database
from mentesegura.services.gateway_client import get_gateway_client
from mentesegura.api import handlers
from mentesegura.api.routes import router as api_router
from mentesegura.api.auth_routes import router as auth_router
from mentesegura.api.chat_routes import router as chat_router
from mentesegura.ui.pages import AuthPage, DashboardUI, LandingPage, current_session

log = structlog.get_logger()

cfg = load_config()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    log.info("app_starting", version=cfg.app.version)
    await init_database()
    log.info("app_started", rate_limiting_enabled=cfg.rate_limits.enabled)
    yield
    log.info("app_shutting_down")
    await get_gateway_client().close()
    await close_database()
    log.info("app_stopped")


def create_app() -> FastAPI:
    api = FastAPI(title=cfg.app.name, version=cfg.app.version, lifespan=lifespan)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    handlers.install(api)
    api.include_router(api_router)
    api.include_router(auth_router)
    api.include_router(chat_router)

    @api.get("/api/health")
    async def health_check():
        return JSONResponse({
            "status": "healthy",
            "version": cfg.app.version,
            "service": "mentesegura",
        })

    return api


# ---- NiceGUI Pages ----

@ui.page("/")
def landing_page():
    LandingPage().build()


@ui.page("/auth")
def auth_page():
    AuthPage().build()


@ui.page("/dashboard")
async def dashboard_page():
    session = current_session()
    if not session:
        ui.navigate.to("/auth")
        return
    await DashboardUI(session["sub"]).build()


app = create_app()
ui.run_with(
    app,
    title=cfg.ui.title,
    storage_secret=cfg.app.secret_key,
)
