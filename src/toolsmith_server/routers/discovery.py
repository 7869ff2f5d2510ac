"""Discovery router for cache configuration and forced refresh.

This module provides REST API endpoints for:
- Reading the discovery configuration and cache state
- Changing TTL, category flags and the blacklist
- Forcing rediscovery
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from toolsmith_server.dependencies import get_toolkit_service
from toolsmith_server.errors import CacheWriteError, InvalidArgumentError
from toolsmith_server.models.discovery import (
    DiscoveryConfigResponse,
    UpdateDiscoveryConfigRequest,
)
from toolsmith_server.services import ToolkitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/discovery", tags=["discovery"])


@router.get("/config", response_model=DiscoveryConfigResponse)
async def get_discovery_config(
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
) -> DiscoveryConfigResponse:
    """Current discovery configuration and cache state."""
    return DiscoveryConfigResponse.model_validate(await service.get_config())


@router.put("/config", response_model=DiscoveryConfigResponse)
async def update_discovery_config(
    request: UpdateDiscoveryConfigRequest,
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
) -> DiscoveryConfigResponse:
    """Change discovery configuration.

    Any change invalidates the cached snapshot; the next catalog read
    rediscovers.

    Raises:
        HTTPException: 400 if a category name is unknown
        HTTPException: 500 if the configuration cannot be persisted
    """
    try:
        config = await service.update_config(
            ttl_seconds=request.ttl_seconds,
            categories=request.categories,
            blacklist_add=request.blacklist_add,
            blacklist_remove=request.blacklist_remove,
        )
    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": e.kind,
                    "message": e.message,
                    "details": e.details,
                }
            },
        )
    except CacheWriteError as e:
        logger.error(f"Failed to persist discovery configuration: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": {
                    "code": e.kind,
                    "message": e.message,
                    "details": e.details,
                }
            },
        )
    return DiscoveryConfigResponse.model_validate(config)


@router.post("/refresh", response_model=DiscoveryConfigResponse)
async def refresh_discovery(
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
) -> DiscoveryConfigResponse:
    """Rediscover tools now, regardless of the TTL."""
    return DiscoveryConfigResponse.model_validate(await service.refresh())
