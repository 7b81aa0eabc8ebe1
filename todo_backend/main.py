"""Main FastAPI application for the todo API."""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todo_backend.api.routes import router as api_router
from todo_backend.config import Settings, get_settings
from todo_backend.errors import BackendUnavailable, DecodeError
from todo_backend.logging_utils import configure_logging, reset_request_id, set_request_id
from todo_backend.repositories import TodoRepository, build_repository

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "PATCH", "DELETE", "PUT"]
CORS_ALLOW_HEADERS = [
    "x-requested-with",
    "Access-Control-Allow-Origin",
    "origin",
    "Content-Type",
    "accept",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    repository: TodoRepository = app.state.repository
    logger.info("Starting todo backend (storage=%s)", repository.name)
    try:
        await repository.init_data()
    except BackendUnavailable:
        logger.exception("Persistence backend is not available; requests will fail with 503")

    yield

    logger.info("Shutting down todo backend...")
    await repository.close()


async def decode_error_handler(request: Request, exc: DecodeError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Bad request"
    errors = exc.errors()
    if errors:
        message = errors[0].get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


async def backend_unavailable_handler(request: Request, exc: BackendUnavailable) -> JSONResponse:
    logger.warning(
        "%s %s failed: backend=%s error=%s",
        request.method,
        request.url.path,
        exc.backend,
        exc,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service unavailable"},
    )


async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request_token = set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(request_token)
    response.headers["X-Request-ID"] = request_id
    return response


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[TodoRepository] = None,
) -> FastAPI:
    """Build the application around the configured storage backend."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Todo API",
        description="A todo backend with CRUD operations over Redis, PostgreSQL or memory",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository or build_repository(settings)

    app.add_exception_handler(DecodeError, decode_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(BackendUnavailable, backend_unavailable_handler)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=False,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    @app.get("/")
    def root() -> Dict[str, str]:
        """Root endpoint with basic API info."""
        return {
            "message": "Todo API",
            "endpoints": "/todos",
            "storage": app.state.repository.name,
        }

    app.include_router(api_router)
    return app


app = create_app()
