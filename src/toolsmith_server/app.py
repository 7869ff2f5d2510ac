"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolsmith_server.backend import BackendClient
from toolsmith_server.config import ToolsmithServerSettings
from toolsmith_server.discovery import ToolCache
from toolsmith_server.routers import discovery, health, patterns, plans, tools
from toolsmith_server.store import JsonConfigStore
from toolsmith_server.telemetry import BackgroundTasks, InvocationTelemetry
from toolsmith_server.tools.intrinsic import build_handlers, build_static_tools

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The backend client, configuration store, tool cache and background task
    set are created once at startup and stored in app.state for reuse across
    all requests. Discovery itself is lazy and runs on the first catalog read.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ToolsmithServerSettings = app.state.settings
    app.state.backend_client = BackendClient(
        base_url=settings.backend_base_url,
        token=settings.backend_token,
        timeout=settings.backend_timeout,
        page_size_limit=settings.page_size_limit,
    )
    logger.info(f"Initialized backend client for {settings.backend_base_url}")

    app.state.config_store = JsonConfigStore(
        settings.resolved_config_path,
        default_ttl_seconds=settings.default_cache_ttl_seconds,
    )
    app.state.tool_cache = ToolCache(
        app.state.backend_client,
        app.state.config_store,
        lock_enabled=settings.discovery_lock_enabled,
    )
    app.state.background_tasks = BackgroundTasks()
    app.state.telemetry = InvocationTelemetry(app.state.background_tasks)
    app.state.static_tools = build_static_tools()
    app.state.tool_handlers = build_handlers()

    connected = await app.state.backend_client.check_connection()
    if connected:
        logger.info("Successfully connected to backend")
    else:
        logger.warning("Could not connect to backend - tools will be discovered on demand")

    yield

    # Let in-flight telemetry and pattern writes finish
    await app.state.background_tasks.drain()
    if hasattr(app.state, "backend_client"):
        await app.state.backend_client.close()
        logger.info("Backend client closed")


def create_app(settings: ToolsmithServerSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional ToolsmithServerSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from toolsmith_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="toolsmith-server",
        description="Schema-driven tool discovery, dispatch and orchestration "
        "for a record web API",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(plans.router)
    app.include_router(patterns.router)
    app.include_router(discovery.router)

    return app
