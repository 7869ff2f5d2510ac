"""Fire-and-forget background work and invocation telemetry.

Background coroutines (telemetry emission, pattern logging) are scheduled on
the running event loop and never awaited by the request that created them.
Their failures are logged and otherwise ignored.
"""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)
telemetry_logger = logging.getLogger("toolsmith_server.telemetry")


class BackgroundTasks:
    """Tracks fire-and-forget tasks so they are not garbage collected mid-flight."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Background task {task.get_name()} failed: {error}")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every pending task (used at shutdown and in tests)."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)


@dataclass
class ToolStats:
    """Aggregated invocation counters for one tool."""

    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0


class InvocationTelemetry:
    """Emits name/success/duration for every tool invocation."""

    def __init__(self, background: BackgroundTasks) -> None:
        self.background = background
        self.stats: dict[str, ToolStats] = {}

    def record(
        self, tool: str, success: bool, duration_ms: float, tracked: bool = True
    ) -> None:
        """Schedule emission without blocking the caller.

        Args:
            tool: Invoked tool name
            success: Whether the invocation succeeded
            duration_ms: Invocation duration
            tracked: Aggregate per-tool stats; False for names outside the catalog
        """
        emit = self._emit(tool, success, duration_ms, tracked)
        try:
            self.background.spawn(emit, name=f"telemetry:{tool}")
        except RuntimeError:
            # No running loop; drop the event
            emit.close()
            logger.debug(f"Telemetry for {tool} dropped: no running event loop")

    async def _emit(
        self, tool: str, success: bool, duration_ms: float, tracked: bool = True
    ) -> None:
        if tracked:
            stats = self.stats.setdefault(tool, ToolStats())
            stats.calls += 1
            stats.total_ms += duration_ms
            if not success:
                stats.failures += 1
        telemetry_logger.info(
            f"tool={tool} success={str(success).lower()} duration_ms={duration_ms:.1f}"
        )

    def snapshot(self) -> dict[str, dict[str, float]]:
        return {
            name: {
                "calls": s.calls,
                "failures": s.failures,
                "average_ms": round(s.average_ms, 1),
            }
            for name, s in self.stats.items()
        }
