"""Patterns router for reading recorded workflow patterns."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from toolsmith_server.dependencies import get_toolkit_service
from toolsmith_server.models.patterns import PatternsResponse
from toolsmith_server.orchestration.patterns import (
    DEFAULT_PATTERN_LIMIT,
    MAX_PATTERN_ENTRIES,
)
from toolsmith_server.services import ToolkitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/patterns", tags=["patterns"])


@router.get("", response_model=PatternsResponse, summary="Read workflow patterns")
async def get_patterns(
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
    tool_filter: str | None = Query(None, description="Substring of a tool name"),
    limit: int = Query(DEFAULT_PATTERN_LIMIT, ge=1, le=MAX_PATTERN_ENTRIES),
) -> PatternsResponse:
    """Recent successful plans, most recent first, with frequency insights."""
    try:
        report = await service.patterns(tool_filter=tool_filter, limit=limit)
    except ValueError as e:
        logger.error(f"Failed to read workflow patterns: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": {
                    "code": "config_record_unreadable",
                    "message": str(e),
                    "details": {},
                }
            },
        )
    return PatternsResponse.model_validate(report.to_dict())
