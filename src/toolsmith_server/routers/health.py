"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from toolsmith_server.backend import BackendClient
from toolsmith_server.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of the toolsmith-server.
    Also checks connectivity to the backend if the client is initialized.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    backend_connected = None
    backend_url = None

    if hasattr(request.app.state, "backend_client"):
        backend_client: BackendClient = request.app.state.backend_client
        backend_url = backend_client.base_url

        try:
            backend_connected = await backend_client.check_connection()
            logger.debug(f"Backend connectivity check: {backend_connected}")
        except Exception as e:
            logger.warning(f"Backend connectivity check failed: {e}")
            backend_connected = False

    return HealthResponse(
        status="ok",
        version="0.1.0",
        backend_connected=backend_connected,
        backend_url=backend_url,
    )
