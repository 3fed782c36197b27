"""FastAPI application for the local cutwork tracker backend."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cutwork.api.router import api_router
from cutwork.core.config import get_settings
from cutwork.core.logging_config import setup_logging
from cutwork.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    init_db()
    yield


def create_app() -> FastAPI:
    """Build the app: shop entry routes and reports under the API prefix."""

    settings = get_settings()
    docs_url = f"{settings.api_prefix}/docs"

    app = FastAPI(
        title=settings.app_name,
        summary="Piecework assignments and payroll reports for a cutting shop.",
        version="0.1.0",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # The browser UI runs on its own dev port next to this backend.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", tags=["system"])
    def root() -> dict[str, str]:
        return {
            "service": settings.app_name,
            "api": settings.api_prefix,
            "docs": docs_url,
            "currency": settings.currency_label,
        }

    return app


app = create_app()
