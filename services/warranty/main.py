"""
Warranty Registry Service.

FastAPI application exposing the warranty NFT registry: governance,
minting, transfer, extension and amendment of warranty records.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import get_settings
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from shared.models import HealthResponse
from services.warranty.dependencies import get_clock, get_registry
from services.warranty.routes import registry_router, warranties_router


logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging(
        log_level=settings.log_level.value,
        json_logs=settings.json_logs or settings.is_production,
        service_name=settings.service_name,
    )
    logger.info(
        "warranty_service_starting",
        port=settings.port,
        config_guard=settings.registry.config_guard.value,
    )
    yield
    logger.info("warranty_service_stopping")


app = FastAPI(
    title="Warranty Registry",
    description="Non-fungible warranty records with authority-gated minting and extension",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "warranties", "description": "Warranty minting, transfer, extension and amendment"},
        {"name": "registry", "description": "Authority, mint fee and capacity"},
        {"name": "health", "description": "Service health checks"},
    ],
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list or ["*"],
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def bind_request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Tag every log line emitted while serving a request."""
    clear_context()
    bind_context(request_id=uuid.uuid4().hex, path=request.url.path)
    return await call_next(request)


# Include routers
app.include_router(registry_router, prefix="/api/v1")
app.include_router(warranties_router, prefix="/api/v1")


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    """Service health check endpoint."""
    registry = get_registry()
    return HealthResponse(
        service=settings.service_name,
        version="0.1.0",
        components={
            "warranty_registry": {
                "status": "healthy",
                "tokens": await registry.get_token_count(),
                "height": get_clock().now(),
            },
            "fee_ledger": await registry.ledger.health_check(),
        },
    )


@app.get("/", tags=["health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Warranty Registry",
        "description": "Non-fungible warranty records with authority-gated minting and extension",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.warranty.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug and settings.is_development,
    )
