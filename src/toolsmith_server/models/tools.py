"""Pydantic models for tool listing, search and invocation."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolListResponse(BaseModel):
    """Response model for listing the merged tool catalog."""

    tools: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Tools in the minimal (name/description/inputSchema) or full shape",
    )
    count: int = Field(..., description="Number of tools")


class ToolSearchResponse(BaseModel):
    """Response model for intent search."""

    intent: str | None = Field(default=None, description="Intent that was searched")
    category: str | None = Field(default=None, description="Category filter applied")
    tools: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Matching tools in the full shape, each with a score",
    )
    count: int = Field(..., description="Number of results")


class InvokeToolRequest(BaseModel):
    """Request model for invoking one tool."""

    arguments: dict[str, Any] = Field(
        default_factory=dict, description="Tool arguments"
    )


class ToolErrorResponse(BaseModel):
    """Structured error of a failed invocation."""

    kind: str = Field(
        ...,
        description="invalid_argument, not_found, upstream, partial_discovery, "
        "cache_write or internal",
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class InvocationResponse(BaseModel):
    """Response model for a tool invocation (success or structured failure)."""

    tool: str = Field(..., description="Name of the invoked tool")
    success: bool = Field(..., description="Whether the invocation succeeded")
    result: Any = Field(default=None, description="Tool result on success")
    error: ToolErrorResponse | None = Field(default=None, description="Error on failure")
    duration_ms: float = Field(..., description="Invocation duration in milliseconds")
