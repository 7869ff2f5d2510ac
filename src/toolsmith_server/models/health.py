"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of toolsmith-server.
        backend_connected: Whether the backend answered a WhoAmI probe.
        backend_url: Backend API root the server talks to.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of toolsmith-server")
    backend_connected: bool | None = Field(
        default=None,
        description="Whether the backend is reachable",
    )
    backend_url: str | None = Field(
        default=None,
        description="Backend API root URL",
    )
