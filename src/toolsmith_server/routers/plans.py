"""Plans router for running multi-step tool plans."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from toolsmith_server.dependencies import get_toolkit_service
from toolsmith_server.models.plans import PlanResponse, RunPlanRequest
from toolsmith_server.orchestration import PlanStep
from toolsmith_server.services import ToolkitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/plans", tags=["plans"])


@router.post("/run", response_model=PlanResponse, summary="Run a plan")
async def run_plan(
    request: RunPlanRequest,
    service: Annotated[ToolkitService, Depends(get_toolkit_service)],
) -> PlanResponse:
    """Run plan steps in order, passing results between them.

    A failing step is reported in the results; the response status stays 200.

    Args:
        request: Steps and the stop_on_error flag
        service: Injected ToolkitService

    Returns:
        PlanResponse: Per-step results, final bindings and overall success

    Raises:
        HTTPException: 400 if the plan has no steps
    """
    if not request.steps:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": "empty_plan",
                    "message": "Plan has no steps to run",
                    "details": {},
                }
            },
        )

    steps = [
        PlanStep(tool=step.tool, args=step.args, output_as=step.output_as)
        for step in request.steps
    ]
    result = await service.run(steps, stop_on_error=request.stop_on_error)
    return PlanResponse.model_validate(result.to_dict())
