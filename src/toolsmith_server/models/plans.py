"""Pydantic models for plan execution requests and responses."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from toolsmith_server.models.tools import ToolErrorResponse


class PlanStepRequest(BaseModel):
    """One step of a plan."""

    tool: str = Field(..., min_length=1, description="Name of the tool to invoke")
    args: dict[str, Any] = Field(
        default_factory=dict,
        description="Arguments; strings like '{{name.path}}' reference earlier results",
    )
    output_as: str | None = Field(
        default=None,
        validation_alias=AliasChoices("output_as", "outputAs"),
        description="Bind this step's result under the given name",
    )


class RunPlanRequest(BaseModel):
    """Request model for running a plan."""

    steps: list[PlanStepRequest] = Field(..., description="Steps, run in order")
    stop_on_error: bool = Field(
        default=True,
        validation_alias=AliasChoices("stop_on_error", "stopOnError"),
        description="Halt at the first failing step",
    )


class StepResultResponse(BaseModel):
    """Outcome of one attempted step."""

    step: int = Field(..., description="1-based step number")
    tool: str
    success: bool
    result: Any = None
    error: ToolErrorResponse | None = None
    output_as: str | None = None
    duration_ms: float = 0.0


class PlanResponse(BaseModel):
    """Response model for a plan run."""

    success: bool = Field(..., description="True only if every attempted step succeeded")
    executed: int = Field(..., description="Number of steps attempted")
    total: int = Field(..., description="Number of steps in the plan")
    results: list[StepResultResponse] = Field(default_factory=list)
    context: dict[str, Any] = Field(
        default_factory=dict, description="Final bindings of the run"
    )
