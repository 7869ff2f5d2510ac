"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from toolsmith_server.models.discovery import (
    DiscoveryConfigResponse,
    UpdateDiscoveryConfigRequest,
)
from toolsmith_server.models.health import HealthResponse
from toolsmith_server.models.patterns import PatternsResponse
from toolsmith_server.models.plans import PlanResponse, PlanStepRequest, RunPlanRequest
from toolsmith_server.models.tools import (
    InvocationResponse,
    InvokeToolRequest,
    ToolListResponse,
    ToolSearchResponse,
)

__all__ = [
    "DiscoveryConfigResponse",
    "HealthResponse",
    "InvocationResponse",
    "InvokeToolRequest",
    "PatternsResponse",
    "PlanResponse",
    "PlanStepRequest",
    "RunPlanRequest",
    "ToolListResponse",
    "ToolSearchResponse",
    "UpdateDiscoveryConfigRequest",
]
