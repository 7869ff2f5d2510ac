"""Plan orchestrator: runs tool steps in order with data flow between them.

Each step's arguments may reference earlier results through ``{{name.path}}``
placeholders. Steps run strictly one after another because later steps read
what earlier steps bound.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from toolsmith_server.errors import InvalidArgumentError, ToolErrorInfo
from toolsmith_server.orchestration.context import ExecutionContext
from toolsmith_server.orchestration.expressions import Expression, parse_template, resolve
from toolsmith_server.orchestration.patterns import PatternRecorder
from toolsmith_server.telemetry import BackgroundTasks
from toolsmith_server.tools.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

MIN_PATTERN_STEPS = 2


@dataclass
class PlanStep:
    """One step of a plan: which tool, with what arguments, bound to what name."""

    tool: str
    args: dict[str, Any] = field(default_factory=dict)
    output_as: str | None = None

    @staticmethod
    def from_dict(data: Any, index: int = 0) -> "PlanStep":
        """Build a step from its JSON form.

        Raises:
            InvalidArgumentError: If the step is not a well-formed object
        """
        if not isinstance(data, dict):
            raise InvalidArgumentError(
                f"Step {index + 1} must be an object", details={"step": index + 1}
            )
        tool = data.get("tool")
        if not isinstance(tool, str) or not tool:
            raise InvalidArgumentError(
                f"Step {index + 1} needs a tool name", details={"step": index + 1}
            )
        args = data.get("args")
        if args is None:
            args = {}
        if not isinstance(args, dict):
            raise InvalidArgumentError(
                f"Step {index + 1} args must be an object", details={"step": index + 1}
            )
        output_as = data.get("output_as", data.get("outputAs"))
        if output_as is not None and not isinstance(output_as, str):
            raise InvalidArgumentError(
                f"Step {index + 1} output_as must be a string",
                details={"step": index + 1},
            )
        return PlanStep(tool=tool, args=args, output_as=output_as or None)


@dataclass
class StepRecord:
    """Outcome of one attempted step."""

    step: int
    tool: str
    success: bool
    result: Any = None
    error: ToolErrorInfo | None = None
    output_as: str | None = None
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "tool": self.tool,
            "success": self.success,
            "result": self.result,
            "error": self.error.to_dict() if self.error else None,
            "output_as": self.output_as,
            "duration_ms": round(self.duration_ms, 1),
        }


@dataclass
class PlanResult:
    success: bool
    executed: int
    total: int
    results: list[StepRecord] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "executed": self.executed,
            "total": self.total,
            "results": [r.to_dict() for r in self.results],
            "context": self.context,
        }


class PlanOrchestrator:
    """Executes plans through a Dispatcher.

    Attributes:
        dispatcher: Invokes each step's tool
        recorder: Remembers fully successful multi-step plans
        background: Schedules pattern recording without blocking the run
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        recorder: PatternRecorder | None = None,
        background: BackgroundTasks | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.recorder = recorder
        self.background = background

    async def run(self, steps: list[PlanStep], stop_on_error: bool = True) -> PlanResult:
        """Run the steps in order.

        Args:
            steps: Steps to run
            stop_on_error: Halt at the first failing step

        Returns:
            PlanResult: Per-step records, the final bindings, and overall success
        """
        templates: list[Expression] = [parse_template(step.args) for step in steps]
        context = ExecutionContext()
        records: list[StepRecord] = []

        for index, (step, template) in enumerate(zip(steps, templates)):
            args = resolve(template, context.variables)
            outcome = await self.dispatcher.invoke(step.tool, args)
            records.append(
                StepRecord(
                    step=index + 1,
                    tool=step.tool,
                    success=outcome.success,
                    result=outcome.result,
                    error=outcome.error,
                    output_as=step.output_as,
                    duration_ms=outcome.duration_ms,
                )
            )

            if outcome.success:
                if step.output_as:
                    context.bind(step.output_as, outcome.result)
                continue

            logger.info(
                f"Plan step {index + 1}/{len(steps)} ({step.tool}) failed: "
                f"{outcome.error.message if outcome.error else 'unknown error'}"
            )
            if stop_on_error:
                break

        success = all(r.success for r in records)
        result = PlanResult(
            success=success,
            executed=len(records),
            total=len(steps),
            results=records,
            context=context.snapshot(),
        )

        if success and len(steps) >= MIN_PATTERN_STEPS:
            self._remember([step.tool for step in steps])

        logger.info(
            f"Plan finished: {result.executed}/{result.total} steps executed, "
            f"success={success}"
        )
        return result

    def _remember(self, tools: list[str]) -> None:
        if self.recorder is None or self.background is None:
            return
        self.background.spawn(self.recorder.record(tools, "plan"), name="pattern:plan")
