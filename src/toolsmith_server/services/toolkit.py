"""Toolkit service: the contracts exposed to callers.

This module provides the ToolkitService class, the single entry point the
routers (or any other RPC layer) use to list, search, invoke and orchestrate
tools. Each call builds a fresh RequestContext holding the merged catalog
and a Dispatcher for that request.
"""

import logging
from collections.abc import Mapping
from typing import Any

from toolsmith_server.backend import BackendClient
from toolsmith_server.context import RequestContext
from toolsmith_server.discovery import ToolCache
from toolsmith_server.orchestration import (
    PatternRecorder,
    PatternReport,
    PlanOrchestrator,
    PlanResult,
    PlanStep,
)
from toolsmith_server.orchestration.patterns import DEFAULT_PATTERN_LIMIT
from toolsmith_server.store import ConfigStore
from toolsmith_server.telemetry import BackgroundTasks, InvocationTelemetry
from toolsmith_server.tools.dispatcher import Dispatcher, ToolHandler
from toolsmith_server.tools.registry import ToolRegistry
from toolsmith_server.tools.search import DEFAULT_MAX_RESULTS, IntentSearch, ScoredTool
from toolsmith_server.tools.types import InvocationResult, Tool

logger = logging.getLogger(__name__)


class ToolkitService:
    """Request-facing facade over registry, dispatcher, search and orchestrator."""

    def __init__(
        self,
        backend: BackendClient,
        store: ConfigStore,
        cache: ToolCache,
        background: BackgroundTasks,
        telemetry: InvocationTelemetry,
        static_tools: list[Tool],
        handlers: Mapping[str, ToolHandler],
    ):
        """Initialize the ToolkitService.

        Args:
            backend: Shared backend client
            store: Durable configuration store
            cache: Process-wide discovered tool cache
            background: Tracker for fire-and-forget work
            telemetry: Invocation telemetry sink
            static_tools: Intrinsic tool descriptors
            handlers: Intrinsic tool name -> handler map
        """
        self.backend = backend
        self.store = store
        self.cache = cache
        self.background = background
        self.telemetry = telemetry
        self.registry = ToolRegistry(static_tools, cache)
        self.handlers = handlers

    async def context(self) -> RequestContext:
        """Build the context (catalog snapshot plus dispatcher) for one request."""
        context = RequestContext(
            backend=self.backend,
            store=self.store,
            cache=self.cache,
            catalog=await self.registry.catalog(),
            background=self.background,
            telemetry=self.telemetry,
        )
        Dispatcher(self.handlers, context)
        return context

    async def invoke(self, name: str, args: dict[str, Any] | None = None) -> InvocationResult:
        context = await self.context()
        logger.debug(f"[{context.request_id}] invoke {name}")
        return await context.dispatcher.invoke(name, args)

    async def search(
        self,
        intent: str | None = None,
        category: str | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[ScoredTool]:
        catalog = await self.registry.catalog()
        return IntentSearch(catalog).search(intent, category, max_results)

    async def run(self, steps: list[PlanStep], stop_on_error: bool = True) -> PlanResult:
        context = await self.context()
        logger.debug(f"[{context.request_id}] run plan with {len(steps)} steps")
        orchestrator = PlanOrchestrator(
            context.dispatcher, PatternRecorder(self.store), self.background
        )
        return await orchestrator.run(steps, stop_on_error=stop_on_error)

    async def patterns(
        self, tool_filter: str | None = None, limit: int = DEFAULT_PATTERN_LIMIT
    ) -> PatternReport:
        return await PatternRecorder(self.store).read(tool_filter=tool_filter, limit=limit)

    async def get_config(self) -> dict[str, Any]:
        await self.cache.get_config()
        return self.cache.describe()

    async def update_config(
        self,
        ttl_seconds: int | None = None,
        categories: dict[str, bool] | None = None,
        blacklist_add: list[str] | None = None,
        blacklist_remove: list[str] | None = None,
    ) -> dict[str, Any]:
        """Apply discovery configuration changes.

        Raises:
            InvalidArgumentError: If a value is invalid
            CacheWriteError: If the change cannot be persisted
        """
        await self.cache.update_config(
            ttl_seconds=ttl_seconds,
            categories=categories,
            blacklist_add=blacklist_add,
            blacklist_remove=blacklist_remove,
        )
        return self.cache.describe()

    async def refresh(self) -> dict[str, Any]:
        await self.cache.refresh()
        return self.cache.describe()

    async def list(self, full: bool = False) -> list[dict[str, Any]]:
        return await self.registry.list(full=full)
