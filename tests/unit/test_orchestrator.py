"""Unit tests for the PlanOrchestrator."""

from unittest.mock import AsyncMock

import pytest

from toolsmith_server.errors import InvalidArgumentError, ToolErrorInfo
from toolsmith_server.orchestration import PlanOrchestrator, PlanStep
from toolsmith_server.telemetry import BackgroundTasks
from toolsmith_server.tools import InvocationResult


def ok(tool, result):
    return InvocationResult(tool=tool, success=True, result=result)


def failed(tool, message="boom"):
    return InvocationResult(
        tool=tool,
        success=False,
        error=ToolErrorInfo(kind="upstream", message=message),
    )


@pytest.fixture
def dispatcher():
    return AsyncMock()


@pytest.fixture
def recorder():
    return AsyncMock()


@pytest.fixture
def background():
    return BackgroundTasks()


@pytest.mark.asyncio
async def test_placeholder_resolved_before_dispatch(dispatcher, recorder, background):
    """Test that step2 receives step1's bound id."""
    dispatcher.invoke.side_effect = [
        ok("create_account", {"id": "abc-123"}),
        ok("get_account", {"id": "abc-123", "name": "A"}),
    ]
    steps = [
        PlanStep(tool="create_account", args={"name": "A"}, output_as="step1"),
        PlanStep(tool="get_account", args={"id": "{{step1.id}}"}),
    ]

    result = await PlanOrchestrator(dispatcher, recorder, background).run(steps)

    assert result.success
    assert result.executed == 2
    assert dispatcher.invoke.await_args_list[1].args == ("get_account", {"id": "abc-123"})
    assert result.context == {"step1": {"id": "abc-123"}}


@pytest.mark.asyncio
async def test_stop_on_error_halts(dispatcher, recorder, background):
    """Test that a failing step 2 of 3 stops the plan."""
    dispatcher.invoke.side_effect = [ok("a", 1), failed("b"), ok("c", 3)]
    steps = [PlanStep("a"), PlanStep("b"), PlanStep("c")]

    result = await PlanOrchestrator(dispatcher, recorder, background).run(steps)

    assert result.success is False
    assert result.executed == 2
    assert result.total == 3
    assert [r.tool for r in result.results] == ["a", "b"]
    assert result.results[1].error.message == "boom"
    assert dispatcher.invoke.await_count == 2


@pytest.mark.asyncio
async def test_continue_on_error(dispatcher, recorder, background):
    """Test that stop_on_error=False records failures and continues."""
    dispatcher.invoke.side_effect = [ok("a", 1), failed("b"), ok("c", 3)]
    steps = [PlanStep("a"), PlanStep("b"), PlanStep("c")]

    result = await PlanOrchestrator(dispatcher, recorder, background).run(
        steps, stop_on_error=False
    )

    assert result.success is False
    assert result.executed == 3
    assert [r.success for r in result.results] == [True, False, True]


@pytest.mark.asyncio
async def test_failed_step_does_not_bind(dispatcher, recorder, background):
    """Test that only successful results are bound."""
    dispatcher.invoke.side_effect = [failed("a"), ok("b", None)]
    steps = [
        PlanStep("a", output_as="first"),
        PlanStep("b", args={"ref": "{{first.id}}"}),
    ]

    result = await PlanOrchestrator(dispatcher, recorder, background).run(
        steps, stop_on_error=False
    )

    assert "first" not in result.context
    assert dispatcher.invoke.await_args_list[1].args == ("b", {"ref": None})


@pytest.mark.asyncio
async def test_rebinding_overwrites(dispatcher, recorder, background):
    """Test that a later step with the same output_as replaces the binding."""
    dispatcher.invoke.side_effect = [ok("a", {"v": 1}), ok("b", {"v": 2})]
    steps = [PlanStep("a", output_as="x"), PlanStep("b", output_as="x")]

    result = await PlanOrchestrator(dispatcher, recorder, background).run(steps)

    assert result.context == {"x": {"v": 2}}


@pytest.mark.asyncio
async def test_successful_multi_step_plan_records_pattern(dispatcher, recorder, background):
    """Test fire-and-forget pattern recording."""
    dispatcher.invoke.side_effect = [ok("a", 1), ok("b", 2)]

    await PlanOrchestrator(dispatcher, recorder, background).run(
        [PlanStep("a"), PlanStep("b")]
    )
    await background.drain()

    recorder.record.assert_awaited_once_with(["a", "b"], "plan")


@pytest.mark.asyncio
async def test_single_step_or_failed_plans_are_not_recorded(
    dispatcher, recorder, background
):
    """Test that only fully successful plans with two or more steps are recorded."""
    dispatcher.invoke.side_effect = [ok("a", 1), ok("a", 1), failed("b")]
    orchestrator = PlanOrchestrator(dispatcher, recorder, background)

    await orchestrator.run([PlanStep("a")])
    await orchestrator.run([PlanStep("a"), PlanStep("b")])
    await background.drain()

    recorder.record.assert_not_called()


def test_plan_step_from_dict():
    """Test step parsing from JSON, including the camelCase alias."""
    step = PlanStep.from_dict({"tool": "get_account", "args": None, "outputAs": "acc"})

    assert step == PlanStep(tool="get_account", args={}, output_as="acc")
    with pytest.raises(InvalidArgumentError):
        PlanStep.from_dict({"args": {}})
    with pytest.raises(InvalidArgumentError):
        PlanStep.from_dict({"tool": "x", "args": [1]})
