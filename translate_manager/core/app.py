from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from translate_manager.api.router import api_router
from translate_manager.core.config import get_settings
from translate_manager.core.exceptions import (
    ServiceError,
    StorageError,
    TranslationManagerError,
    ValidationError,
)
from translate_manager.core.logging_config import configure_logging
from translate_manager.services.manager import TranslationManager


logger = logging.getLogger(__name__)


def _status_for(exc: TranslationManagerError) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, (StorageError, ServiceError)):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_manager_error(request: Request, exc: TranslationManagerError) -> JSONResponse:
    manager: TranslationManager | None = getattr(request.app.state, "manager", None)
    if manager is not None:
        await manager.errors.flush()
    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": exc.message, "error_code": exc.error_code},
    )


def create_app(manager: TranslationManager | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "manager", None) is None:
            app.state.manager = TranslationManager.from_settings(settings)
        yield
        sent = await app.state.manager.errors.flush()
        if sent:
            logger.info(
                "Dispatched %s error records on shutdown",
                sent,
                extra={"flag": "error_flush", "action": "shutdown"},
            )

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.manager = manager
    app.state.dictionary_lock = asyncio.Lock()

    app.add_exception_handler(TranslationManagerError, _handle_manager_error)
    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["health"])
    async def root() -> dict[str, str]:
        return {"service": settings.app_name, "environment": settings.app_env}

    return app
