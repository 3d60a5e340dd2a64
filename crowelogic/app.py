"""
FastAPI application entry point for the Crowe Logic service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from crowelogic.config import get_settings
from crowelogic.dependencies import close_store
from crowelogic.errors import BackendUnavailable, EntityNotFound, GenerationFailed
from crowelogic.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_store()


def _error_handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    return handle


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    app = FastAPI(title="Crowe Logic API", version="0.1.0", lifespan=lifespan)
    app.include_router(router, prefix=settings.api_prefix)
    app.add_exception_handler(EntityNotFound, _error_handler(404))
    app.add_exception_handler(BackendUnavailable, _error_handler(503))
    app.add_exception_handler(GenerationFailed, _error_handler(502))
    return app


app = create_app()
