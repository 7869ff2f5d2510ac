"""Tools router for listing, searching and invoking tools.

This module provides REST API endpoints for:
- Listing the merged tool catalog
- Searching tools by intent and category
- Invoking a tool by name
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from toolsmith_server.dependencies import get_toolkit_service
from toolsmith_server.models.tools import (
    InvocationResponse,
    InvokeToolRequest,
    ToolListResponse,
    ToolSearchResponse,
)
from toolsmith_server.services import ToolkitService
from toolsmith_server.tools.search import DEFAULT_MAX_RESULTS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.get("", response_model=ToolListResponse, summary="List all tools")
async def list_tools(
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
    full: bool = Query(False, description="Include category, keywords and provenance"),
) -> ToolListResponse:
    """List the merged catalog of static and discovered tools.

    Discovery runs on demand when the cached snapshot is missing or expired.
    """
    try:
        tools = await service.list(full=full)
    except Exception as e:
        logger.error(f"Failed to list tools: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": {
                    "code": "tool_listing_failed",
                    "message": f"Failed to list tools: {str(e)}",
                    "details": {},
                }
            },
        )
    return ToolListResponse(tools=tools, count=len(tools))


@router.get("/search", response_model=ToolSearchResponse, summary="Search tools by intent")
async def search_tools(
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
    intent: str | None = Query(None, description="Free-text intent, e.g. 'create account'"),
    category: str | None = Query(None, description="Exact category filter"),
    max_results: int = Query(DEFAULT_MAX_RESULTS, ge=1, le=100),
) -> ToolSearchResponse:
    """Rank tools against an intent, highest score first."""
    try:
        results = await service.search(
            intent=intent, category=category, max_results=max_results
        )
    except Exception as e:
        logger.error(f"Tool search failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": {
                    "code": "tool_search_failed",
                    "message": f"Tool search failed: {str(e)}",
                    "details": {},
                }
            },
        )
    return ToolSearchResponse(
        intent=intent,
        category=category,
        tools=[item.to_dict() for item in results],
        count=len(results),
    )


@router.post(
    "/{name}/invoke",
    response_model=InvocationResponse,
    summary="Invoke a tool",
)
async def invoke_tool(
    name: str,
    request: InvokeToolRequest,
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
) -> InvocationResponse:
    """Invoke a tool by name.

    Tool failures (bad arguments, unknown tool, backend errors) are returned
    with HTTP 200 as a structured error so that callers can inspect them and
    retry with adapted arguments.
    """
    outcome = await service.invoke(name, request.arguments)
    return InvocationResponse.model_validate(outcome.to_dict())
