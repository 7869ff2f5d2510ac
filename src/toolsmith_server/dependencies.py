"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and services.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from toolsmith_server.backend import BackendClient
from toolsmith_server.config import ToolsmithServerSettings
from toolsmith_server.services import ToolkitService


@lru_cache
def get_settings() -> ToolsmithServerSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLSMITH_ prefix.

    Returns:
        ToolsmithServerSettings: The application configuration settings.
    """
    return ToolsmithServerSettings()


def get_backend_client(request: Request) -> BackendClient:
    """Get the backend client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        BackendClient: The backend client instance.

    Raises:
        HTTPException: If the backend client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "backend_client"):
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": "backend_unavailable",
                    "message": "Backend client not initialized",
                    "details": {},
                }
            },
        )
    return request.app.state.backend_client


def get_toolkit_service(request: Request) -> ToolkitService:
    """Get a ToolkitService wired to the shared app-state collaborators.

    The service is created per request; the backend client, store, tool
    cache and background task set it uses live for the whole process.

    Args:
        request: The FastAPI request object.

    Returns:
        ToolkitService: A new ToolkitService instance.

    Raises:
        HTTPException: If the backend client is not initialized (503 Service Unavailable).
    """
    state = request.app.state
    backend = get_backend_client(request)
    return ToolkitService(
        backend=backend,
        store=state.config_store,
        cache=state.tool_cache,
        background=state.background_tasks,
        telemetry=state.telemetry,
        static_tools=state.static_tools,
        handlers=state.tool_handlers,
    )
