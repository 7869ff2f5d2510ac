"""Dispatcher: routes a tool invocation to the code that executes it.

Dispatch has two stages. Intrinsic tools are looked up in a fixed
name -> handler map. Everything else is parsed by naming convention into a
``CrudRoute`` or an ``OperationRoute`` and executed by the generic CRUD
executor or operation invoker. Failures come back as structured
``InvocationResult`` errors, never as exceptions.
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from toolsmith_server.errors import (
    InvalidArgumentError,
    ToolErrorInfo,
    ToolkitError,
    ToolNotFoundError,
)
from toolsmith_server.tools.crud import CRUD_VERBS, CrudExecutor
from toolsmith_server.tools.operations import OperationInvoker
from toolsmith_server.tools.types import InvocationResult
from toolsmith_server.tools.validation import validate_arguments

if TYPE_CHECKING:
    from toolsmith_server.context import RequestContext

logger = logging.getLogger(__name__)

OPERATION_PREFIXES = ("customapi", "action")


class ToolHandler(Protocol):
    """Callable implementing one intrinsic tool."""

    async def __call__(self, args: dict[str, Any], context: "RequestContext") -> Any: ...


@dataclass(frozen=True)
class CrudRoute:
    verb: str
    resource: str


@dataclass(frozen=True)
class OperationRoute:
    kind: str
    unique_name: str


Route = CrudRoute | OperationRoute


def parse_tool_name(name: str) -> Route | None:
    """Parse a conventional tool name.

    ``create_account`` -> CrudRoute("create", "account");
    ``customapi_new_Ping`` -> OperationRoute("customapi", "new_Ping").

    Returns:
        Route | None: The parsed route, or None if the name follows no convention
    """
    prefix, sep, rest = name.partition("_")
    if not sep or not rest:
        return None
    if prefix in CRUD_VERBS:
        return CrudRoute(verb=prefix, resource=rest)
    if prefix in OPERATION_PREFIXES:
        return OperationRoute(kind=prefix, unique_name=rest)
    return None


class Dispatcher:
    """Invokes tools by name within one request context."""

    def __init__(
        self, handlers: Mapping[str, ToolHandler], context: "RequestContext"
    ) -> None:
        self.handlers = handlers
        self.context = context
        self.crud = CrudExecutor(context.backend)
        self.operations = OperationInvoker(context.backend)
        context.dispatcher = self

    async def invoke(self, name: str, args: dict[str, Any] | None = None) -> InvocationResult:
        """Invoke a tool and return its structured result.

        Args:
            name: Tool name
            args: Tool arguments (None is treated as no arguments)

        Returns:
            InvocationResult: Success with result, or failure with a structured error
        """
        args = {} if args is None else args
        started = time.perf_counter()
        try:
            result = await self._dispatch(name, args)
            outcome = InvocationResult(tool=name, success=True, result=result)
        except ToolkitError as e:
            logger.info(f"Tool {name} failed ({e.kind}): {e.message}")
            outcome = InvocationResult(tool=name, success=False, error=e.to_info())
        except Exception as e:
            logger.error(f"Unexpected error invoking tool {name}: {e}", exc_info=True)
            outcome = InvocationResult(
                tool=name,
                success=False,
                error=ToolErrorInfo(kind="internal", message=str(e) or type(e).__name__),
            )

        outcome.duration_ms = (time.perf_counter() - started) * 1000
        tracked = name in self.context.catalog or name in self.handlers
        self.context.telemetry.record(
            name, outcome.success, outcome.duration_ms, tracked=tracked
        )
        return outcome

    async def _dispatch(self, name: str, args: Any) -> Any:
        if not isinstance(args, dict):
            raise InvalidArgumentError(
                "Arguments must be a JSON object", details={"tool": name}
            )

        tool = self.context.catalog.get(name)
        if tool is not None:
            validate_arguments(name, tool.input_schema, args)

        handler = self.handlers.get(name)
        if handler is not None:
            return await handler(args, self.context)

        route = parse_tool_name(name)
        if route is None:
            raise ToolNotFoundError(f"Unknown tool '{name}'", details={"tool": name})

        logger.debug(f"[{self.context.request_id}] {name} -> {route}")
        if isinstance(route, CrudRoute):
            return await self.crud.execute(route.verb, route.resource, args)
        return await self.operations.execute(route.kind, route.unique_name, args, tool)
