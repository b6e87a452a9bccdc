"""Entry point for the task tracker FastAPI application."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db.session import dispose_engine
from .errors import register_exception_handlers


def _normalise_prefix(raw_prefix: str) -> str:
    prefix = raw_prefix.strip()
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    prefix = prefix.rstrip("/")
    return "" if prefix == "/" else prefix


def _point_password_flow_at(application: FastAPI, login_url: str) -> None:
    """Make the OpenAPI password flow use the login route under this app's prefix."""
    build_schema = application.openapi

    def openapi() -> dict[str, Any]:
        if application.openapi_schema is None:
            schema = build_schema()
            for scheme in schema.get("components", {}).get("securitySchemes", {}).values():
                password_flow = scheme.get("flows", {}).get("password")
                if password_flow is not None:
                    password_flow["tokenUrl"] = login_url
        return application.openapi_schema

    application.openapi = openapi  # type: ignore[method-assign]


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    await dispose_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    settings = settings or get_settings()
    configure_logging(settings)

    router_prefix = _normalise_prefix(settings.api_prefix)
    openapi_url = f"{router_prefix}/openapi.json"

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Multi-user task tracking with filtering, statistics, bulk updates and export.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=openapi_url,
        lifespan=_lifespan,
    )

    application.state.settings = settings

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    application.include_router(api_router, prefix=router_prefix)
    application.include_router(health_router)
    _point_password_flow_at(application, f"{router_prefix}/auth/login")

    register_exception_handlers(application)
    return application


app = create_app()


def run() -> None:
    """Convenience entry point for the ``task-tracker`` console script."""

    settings: Settings = get_settings()
    uvicorn.run(
        "task_tracker.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
