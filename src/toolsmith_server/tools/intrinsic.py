"""Statically authored tools and their handlers.

These tools are always present in the catalog, independent of discovery,
and take precedence over any discovered tool with the same name.
"""

import logging
from typing import Any

from toolsmith_server.context import RequestContext
from toolsmith_server.errors import InvalidArgumentError
from toolsmith_server.orchestration import PatternRecorder, PlanOrchestrator, PlanStep
from toolsmith_server.orchestration.patterns import DEFAULT_PATTERN_LIMIT
from toolsmith_server.store import DISCOVERY_CATEGORIES
from toolsmith_server.tools.dispatcher import ToolHandler
from toolsmith_server.tools.search import DEFAULT_MAX_RESULTS, IntentSearch
from toolsmith_server.tools.types import Tool

logger = logging.getLogger(__name__)

DISCOVERY = "discovery"
ORCHESTRATION = "orchestration"
SYSTEM = "system"


def _schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def build_static_tools() -> list[Tool]:
    """Create the intrinsic tool descriptors."""
    return [
        Tool(
            name="search_tools",
            description="Find the tools best suited to a free-text intent, "
            "optionally restricted to one category.",
            input_schema=_schema(
                {
                    "intent": {
                        "type": "string",
                        "description": "What you want to do, e.g. 'create account'",
                    },
                    "category": {
                        "type": "string",
                        "description": "Exact category, e.g. records, custom_apis, actions",
                    },
                    "max_results": {
                        "type": "integer",
                        "description": "Maximum number of tools to return",
                        "default": DEFAULT_MAX_RESULTS,
                    },
                }
            ),
            category=DISCOVERY,
            keywords=["search", "find", "tools", "discover", "intent", "help"],
        ),
        Tool(
            name="refresh_tool_catalog",
            description="Rediscover backend tools now, ignoring the cache TTL.",
            input_schema=_schema({}),
            category=DISCOVERY,
            keywords=["refresh", "reload", "rediscover", "catalog", "tools", "cache"],
        ),
        Tool(
            name="get_discovery_config",
            description="Show the discovery cache state, TTL, enabled categories "
            "and blacklist.",
            input_schema=_schema({}),
            category=DISCOVERY,
            keywords=["discovery", "config", "settings", "cache", "blacklist", "ttl"],
        ),
        Tool(
            name="update_discovery_config",
            description="Change the discovery TTL, enable or disable categories, or "
            "edit the blacklist. Invalidates the tool cache.",
            input_schema=_schema(
                {
                    "ttl_seconds": {
                        "type": "integer",
                        "description": "Cache lifetime in seconds",
                    },
                    "categories": {
                        "type": "object",
                        "description": "Enable flags keyed by category: "
                        + ", ".join(DISCOVERY_CATEGORIES),
                    },
                    "blacklist_add": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Entity or operation names to exclude",
                    },
                    "blacklist_remove": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Names to allow again",
                    },
                }
            ),
            category=DISCOVERY,
            keywords=["discovery", "config", "blacklist", "ttl", "categories", "update"],
        ),
        Tool(
            name="execute_plan",
            description="Run several tools in order. Step args may reference earlier "
            "results bound with output_as, e.g. \"{{account.id}}\".",
            input_schema=_schema(
                {
                    "steps": {
                        "type": "array",
                        "description": "Steps: {tool, args, output_as}",
                        "items": {
                            "type": "object",
                            "properties": {
                                "tool": {"type": "string"},
                                "args": {"type": "object"},
                                "output_as": {"type": "string"},
                            },
                            "required": ["tool"],
                        },
                    },
                    "stop_on_error": {
                        "type": "boolean",
                        "description": "Halt at the first failing step",
                        "default": True,
                    },
                },
                ["steps"],
            ),
            category=ORCHESTRATION,
            keywords=["plan", "workflow", "steps", "sequence", "batch", "execute", "run"],
        ),
        Tool(
            name="get_workflow_patterns",
            description="Show recently successful multi-step plans and the most "
            "frequent tools and tool pairs.",
            input_schema=_schema(
                {
                    "tool_filter": {
                        "type": "string",
                        "description": "Only patterns containing a matching tool name",
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum patterns to return (1-50)",
                        "default": DEFAULT_PATTERN_LIMIT,
                    },
                }
            ),
            category=ORCHESTRATION,
            keywords=["patterns", "workflow", "history", "insights", "plans"],
        ),
        Tool(
            name="whoami",
            description="Identify the backend user and organization the server acts as.",
            input_schema=_schema({}),
            category=SYSTEM,
            keywords=["whoami", "user", "identity", "me", "organization"],
        ),
    ]


async def search_tools(args: dict[str, Any], context: RequestContext) -> dict[str, Any]:
    results = IntentSearch(context.catalog).search(
        intent=args.get("intent"),
        category=args.get("category"),
        max_results=args.get("max_results") or DEFAULT_MAX_RESULTS,
    )
    return {"count": len(results), "tools": [item.to_dict() for item in results]}


async def refresh_tool_catalog(args: dict[str, Any], context: RequestContext) -> dict[str, Any]:
    await context.cache.refresh()
    return context.cache.describe()


async def get_discovery_config(args: dict[str, Any], context: RequestContext) -> dict[str, Any]:
    await context.cache.get_config()
    return context.cache.describe()


async def update_discovery_config(
    args: dict[str, Any], context: RequestContext
) -> dict[str, Any]:
    await context.cache.update_config(
        ttl_seconds=args.get("ttl_seconds"),
        categories=args.get("categories"),
        blacklist_add=args.get("blacklist_add"),
        blacklist_remove=args.get("blacklist_remove"),
    )
    return context.cache.describe()


def parse_steps(raw_steps: Any) -> list[PlanStep]:
    """Parse plan steps from their JSON form.

    Raises:
        InvalidArgumentError: If steps is not a list of well-formed step objects
    """
    if not isinstance(raw_steps, list):
        raise InvalidArgumentError(
            "Argument 'steps' must be a list", details={"argument": "steps"}
        )
    return [PlanStep.from_dict(item, index) for index, item in enumerate(raw_steps)]


async def execute_plan(args: dict[str, Any], context: RequestContext) -> dict[str, Any]:
    if context.dispatcher is None:
        raise RuntimeError("execute_plan requires a dispatcher in the request context")
    orchestrator = PlanOrchestrator(
        context.dispatcher, PatternRecorder(context.store), context.background
    )
    stop_on_error = args.get("stop_on_error")
    result = await orchestrator.run(
        parse_steps(args.get("steps")),
        stop_on_error=True if stop_on_error is None else stop_on_error,
    )
    return result.to_dict()


async def get_workflow_patterns(
    args: dict[str, Any], context: RequestContext
) -> dict[str, Any]:
    report = await PatternRecorder(context.store).read(
        tool_filter=args.get("tool_filter"),
        limit=args.get("limit") or DEFAULT_PATTERN_LIMIT,
    )
    return report.to_dict()


async def whoami(args: dict[str, Any], context: RequestContext) -> dict[str, Any]:
    return await context.backend.invoke_function("WhoAmI")


def build_handlers() -> dict[str, ToolHandler]:
    """Map each intrinsic tool name to its handler."""
    return {
        "search_tools": search_tools,
        "refresh_tool_catalog": refresh_tool_catalog,
        "get_discovery_config": get_discovery_config,
        "update_discovery_config": update_discovery_config,
        "execute_plan": execute_plan,
        "get_workflow_patterns": get_workflow_patterns,
        "whoami": whoami,
    }
