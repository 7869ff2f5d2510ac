"""Multi-step plan execution and workflow pattern learning."""

from toolsmith_server.orchestration.context import ExecutionContext
from toolsmith_server.orchestration.orchestrator import (
    PlanOrchestrator,
    PlanResult,
    PlanStep,
    StepRecord,
)
from toolsmith_server.orchestration.patterns import Pattern, PatternRecorder, PatternReport

__all__ = [
    "ExecutionContext",
    "Pattern",
    "PatternRecorder",
    "PatternReport",
    "PlanOrchestrator",
    "PlanResult",
    "PlanStep",
    "StepRecord",
]
