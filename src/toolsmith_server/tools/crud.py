"""Generic record CRUD executor for ``{verb}_{resource}`` tools."""

import logging
from typing import Any

from toolsmith_server.backend import BackendClient
from toolsmith_server.discovery.synthesizer import DEFAULT_LIST_TOP
from toolsmith_server.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

CRUD_VERBS = ("create", "get", "update", "delete", "list", "query")


def _require_id(args: dict[str, Any]) -> str:
    record_id = args.get("id")
    if not isinstance(record_id, str) or not record_id.strip():
        raise InvalidArgumentError(
            "Argument 'id' is required and must be a non-empty string",
            details={"argument": "id"},
        )
    return record_id.strip()


def _string_list(value: Any, name: str) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise InvalidArgumentError(
        f"Argument '{name}' must be a list of field names",
        details={"argument": name},
    )


def _optional_int(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(
            f"Argument '{name}' must be a positive integer",
            details={"argument": name},
        )
    return value


class CrudExecutor:
    """Executes create/get/update/delete/list/query against any resource."""

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def execute(self, verb: str, resource: str, args: dict[str, Any]) -> Any:
        """Run one CRUD verb against a resource.

        Raises:
            InvalidArgumentError: If arguments are missing or malformed
            ToolNotFoundError: If the resource does not exist
            UpstreamError: If the backend rejects the call
        """
        logger.debug(f"CRUD {verb} on {resource}")

        if verb == "create":
            if not args:
                raise InvalidArgumentError(
                    f"No fields provided to create a {resource} record"
                )
            return await self.backend.create_record(resource, dict(args))

        if verb == "get":
            return await self.backend.get_record(
                resource,
                _require_id(args),
                select=_string_list(args.get("select"), "select"),
                expand=args.get("expand"),
            )

        if verb == "update":
            record_id = _require_id(args)
            body = {k: v for k, v in args.items() if k != "id"}
            if not body:
                raise InvalidArgumentError(
                    f"No fields provided to update {resource} record {record_id}"
                )
            return await self.backend.update_record(resource, record_id, body)

        if verb == "delete":
            return await self.backend.delete_record(resource, _require_id(args))

        if verb == "list":
            top = _optional_int(args.get("top"), "top") or DEFAULT_LIST_TOP
            return await self.backend.list_records(
                resource,
                top=top,
                select=_string_list(args.get("select"), "select"),
                orderby=args.get("orderby"),
            )

        if verb == "query":
            return await self.backend.list_records(
                resource,
                filter_expression=args.get("filter"),
                orderby=args.get("orderby"),
                top=_optional_int(args.get("top"), "top"),
                select=_string_list(args.get("select"), "select"),
                expand=args.get("expand"),
                count=bool(args.get("count", False)),
                page_link=args.get("page_link"),
            )

        raise InvalidArgumentError(f"Unsupported record operation '{verb}'")
