# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""AgriShield automation service - main application module."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.response_patterns import ErrorResponse
from .api.v1 import router as v1_router
from .core.config import get_settings
from .core.errors import AutomationError
from .core.logging_utils import configure_logging
from .storage import get_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()
    configure_logging(level=settings.log_level)
    logger.info("Starting AgriShield in %s mode", settings.api_env)

    store = get_store()
    await store.connect()
    logger.info("Storage backend %s ready", settings.storage_backend)

    yield

    logger.info("Shutting down AgriShield")
    await store.close()


async def automation_error_handler(
    request: Request, exc: AutomationError
) -> JSONResponse:
    """Render an escaped ``AutomationError`` like a returned ``Err``."""
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.from_error(exc).model_dump(mode="json"),
    )


@beartype
def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="AgriShield",
        description="Weather-triggered crop insurance claims automation",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AutomationError, automation_error_handler)
    app.include_router(v1_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "status": "operational",
            "environment": settings.api_env,
        }

    return app


# Create the application instance
app = create_app()


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()
    uvicorn.run(
        "agri_shield.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
