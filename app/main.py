"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_pagination import add_pagination

from app.config import get_settings
from app.core.app_state import state
from app.db import init_db
from app.exceptions import (
    CriticalResumeFailure,
    GenerationError,
    InvalidInputError,
    NotFoundError,
    SendError,
)
from app.infra.logging_config import get_logger, setup_logging
from app.routers.auto_response_router import auto_response_router
from app.routers.messages_router import messages_router
from app.routers.settings_router import settings_router
from app.routers.system import router as system_router

logger = get_logger("main")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"detail": exc.to_detail()})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError):
        logger.error("Generation failed: %s", exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(SendError)
    async def send_error_handler(request: Request, exc: SendError):
        logger.error("Send failed: %s", exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(CriticalResumeFailure)
    async def resume_failure_handler(request: Request, exc: CriticalResumeFailure):
        logger.critical("Sync process not resumed: %s", exc)
        content = {"detail": str(exc)}
        if exc.sent_result is not None:
            content["message_id"] = exc.sent_result.message_id
        return JSONResponse(status_code=503, content=content)


def create_app(testing: bool = False) -> FastAPI:
    """
    Build the app. With ``testing`` the lifespan neither creates tables nor
    starts the poller; tests provide both through dependency overrides.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s (%s)", settings.app_name, settings.environment)
        poller = None
        if not testing:
            init_db()
            if settings.auto_response_poller_enabled:
                poller = state.poller
                poller.start()
        yield
        if poller is not None:
            poller.stop()
        logger.info("Shutting down %s", settings.app_name)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.include_router(auto_response_router)
    app.include_router(settings_router)
    app.include_router(messages_router)
    app.include_router(system_router)

    register_exception_handlers(app)
    add_pagination(app)
    return app


app = create_app()
