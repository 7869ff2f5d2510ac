"""Pydantic models for discovery configuration."""

from pydantic import BaseModel, Field


class DiscoveryConfigResponse(BaseModel):
    """Discovery configuration together with the cache state."""

    ttl_seconds: int = Field(..., description="Cache lifetime in seconds")
    categories: dict[str, bool] = Field(..., description="Enable flag per category")
    blacklist: list[str] = Field(default_factory=list)
    state: str = Field(..., description="empty, populated or expired")
    timestamp: float | None = Field(
        default=None, description="When the cached snapshot was taken (epoch seconds)"
    )
    cached_tools: int = Field(0, description="Number of discovered tools in the cache")


class UpdateDiscoveryConfigRequest(BaseModel):
    """Request model for changing discovery configuration."""

    ttl_seconds: int | None = Field(default=None, ge=0)
    categories: dict[str, bool] | None = Field(
        default=None, description="Flags to change, keyed by category"
    )
    blacklist_add: list[str] = Field(default_factory=list)
    blacklist_remove: list[str] = Field(default_factory=list)
