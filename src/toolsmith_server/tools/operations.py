"""Generic invoker for custom operations and global actions.

Resolves the binding kind and call style of an operation, builds its address
and calls it either function-style (GET, parameters inline as literals) or
action-style (POST, parameters in the JSON body).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from toolsmith_server.backend import BackendClient, BindingKind
from toolsmith_server.errors import InvalidArgumentError, ToolNotFoundError
from toolsmith_server.tools.types import ACTION_CALL, FUNCTION, Tool

logger = logging.getLogger(__name__)

BOUND_OPERATION_NAMESPACE = "Microsoft.Dynamics.CRM"
TARGET_ID = "target_id"
# Quote delimiters of string literals stay readable in the path
LITERAL_SAFE = "'"


def format_function_literal(value: Any) -> str:
    """Format a value as an inline function parameter literal.

    Strings are single-quoted with embedded quotes doubled, booleans are
    lowercased and numbers are written raw.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return json.dumps(value, separators=(",", ":"))


@dataclass
class OperationTarget:
    """How one operation is addressed and called."""

    unique_name: str
    binding_kind: BindingKind = BindingKind.UNBOUND
    call_style: str = ACTION_CALL
    bound_entity: str | None = None


class OperationInvoker:
    """Invokes ``customapi_*`` and ``action_*`` tools."""

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def resolve(self, kind: str, unique_name: str, tool: Tool | None) -> OperationTarget:
        """Determine binding kind and call style from the catalog or the backend.

        Raises:
            ToolNotFoundError: If a custom API is neither cataloged nor known to the backend
        """
        if tool is not None and tool.provenance.call_style:
            return OperationTarget(
                unique_name=unique_name,
                binding_kind=BindingKind(
                    tool.provenance.binding_kind or BindingKind.UNBOUND.value
                ),
                call_style=tool.provenance.call_style,
                bound_entity=tool.provenance.bound_entity,
            )

        if kind == "action":
            # Global actions are always unbound, body-carrying calls
            return OperationTarget(unique_name=unique_name)

        api = await self.backend.get_custom_api(unique_name)
        if api is None:
            raise ToolNotFoundError(
                f"Custom API '{unique_name}' not found",
                details={"operation": unique_name},
            )
        return OperationTarget(
            unique_name=api.unique_name,
            binding_kind=api.binding_kind,
            call_style=FUNCTION if api.is_function else ACTION_CALL,
            bound_entity=api.bound_entity,
        )

    async def address(self, target: OperationTarget, args: dict[str, Any]) -> str:
        """Build the request path for an operation.

        Raises:
            InvalidArgumentError: If a bound-to-one operation has no target_id
        """
        if target.binding_kind == BindingKind.UNBOUND or not target.bound_entity:
            return target.unique_name

        entity_set = await self.backend.resolve_entity_set(target.bound_entity)
        qualified = f"{BOUND_OPERATION_NAMESPACE}.{target.unique_name}"
        if target.binding_kind == BindingKind.BOUND_TO_MANY:
            return f"{entity_set}/{qualified}"

        target_id = args.get(TARGET_ID)
        if not isinstance(target_id, str) or not target_id.strip():
            raise InvalidArgumentError(
                f"Argument '{TARGET_ID}' is required for operations bound to "
                f"a single {target.bound_entity} record",
                details={"argument": TARGET_ID},
            )
        return f"{entity_set}({target_id.strip()})/{qualified}"

    async def execute(
        self, kind: str, unique_name: str, args: dict[str, Any], tool: Tool | None = None
    ) -> Any:
        target = await self.resolve(kind, unique_name, tool)
        path = await self.address(target, args)
        params = {k: v for k, v in args.items() if k != TARGET_ID}

        if target.call_style == FUNCTION:
            # Literals sit in the URL path, so '?', '#' and '/' in values are escaped
            inline = ",".join(
                f"{name}={quote(format_function_literal(value), safe=LITERAL_SAFE)}"
                for name, value in params.items()
            )
            logger.debug(f"Calling function {target.unique_name} at {path}")
            return await self.backend.invoke_function(f"{path}({inline})")

        logger.debug(f"Calling action {target.unique_name} at {path}")
        return await self.backend.invoke_action(path, params)
