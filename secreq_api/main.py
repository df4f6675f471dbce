# File: secreq_api/main.py
import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

# --- Setup Logging First ---
from secreq_api.core.logging_config import setup_logging
setup_logging()

from secreq_api.core.config import settings
from secreq_api.api.v1.endpoints import embedding_endpoint, generation_endpoint, invites_endpoint, signup_endpoint
from secreq_api.core.errors import ValidationError, describe_validation_errors
from secreq_api.dependencies import ServiceContainer, build_service_container

log = structlog.get_logger(__name__)

# The AI proxy endpoints report failures under "error"; everything else uses "message".
ERROR_KEY_PATHS = frozenset({f"{settings.API_V1_STR}/generate", f"{settings.API_V1_STR}/embed"})


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Builds the FastAPI app. When `container` is given it is used as-is and the
    lifespan does not build production adapters.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("SecReq API startup sequence initiated...")
        if container is not None:
            app.state.container = container
            log.info("Using injected service container.")
            yield
            return

        timeout = httpx.Timeout(settings.HTTP_CLIENT_TIMEOUT, connect=15.0)
        app.state.http_client = httpx.AsyncClient(timeout=timeout)
        try:
            app.state.container = build_service_container(settings, app.state.http_client)
            log.info("Service container initialized.")
        except Exception as e:
            log.exception("CRITICAL: Failed to build service container!", error=str(e))
            app.state.container = None

        yield

        log.info("SecReq API shutting down...")
        client = getattr(app.state, "http_client", None)
        if client and not client.is_closed:
            await client.aclose()
            log.info("HTTPX client closed.")
        log.info("Shutdown complete.")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        description="Authenticated AI proxy, signup notification and invite endpoints for SecReq.",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )

    app.mount("/metrics", make_asgi_app())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        message = describe_validation_errors(exc.errors())
        log.info("Request body rejected", path=request.url.path, error=message)
        key = "error" if request.url.path in ERROR_KEY_PATHS else "message"
        return ValidationError(message).to_response(key=key)

    @app.middleware("http")
    async def request_context_timing_logging(request: Request, call_next):
        if request.url.path.startswith("/metrics"):
            return await call_next(request)

        start_time = time.perf_counter()
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        request_log = log.bind(
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )
        request_log.info("Request received")

        try:
            response = await call_next(request)
        except Exception:
            process_time = (time.perf_counter() - start_time) * 1000
            request_log.exception("Unhandled exception during request", duration_ms=round(process_time, 2))
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

        process_time = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        request_log.info("Request completed", status_code=response.status_code, duration_ms=round(process_time, 2))
        return response

    app.include_router(generation_endpoint.router, prefix=settings.API_V1_STR, tags=["Generation"])
    app.include_router(embedding_endpoint.router, prefix=settings.API_V1_STR, tags=["Generation"])
    app.include_router(signup_endpoint.router, prefix=settings.API_V1_STR, tags=["Notifications"])
    app.include_router(invites_endpoint.router, prefix=settings.API_V1_STR, tags=["Invitations"])

    @app.get("/", tags=["General"], include_in_schema=False)
    async def read_root():
        return JSONResponse({"message": f"{settings.PROJECT_NAME} is running!"})

    @app.get("/health", tags=["Health"], summary="Health check endpoint")
    async def health_check(request: Request):
        ready_container: Optional[ServiceContainer] = getattr(request.app.state, "container", None)
        if ready_container is None:
            log.error("Health check failed: service container not available.")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "service": settings.PROJECT_NAME, "detail": "Service container is not available."},
            )
        return {
            "status": "healthy",
            "service": settings.PROJECT_NAME,
            "generation_model": ready_container.text_generator.get_model_info(),
            "embedding_model": ready_container.embedding_model.get_model_info(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8080))
    host = os.getenv("HOST", "0.0.0.0")
    uvicorn.run(
        "secreq_api.main:app",
        host=host,
        port=port,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
