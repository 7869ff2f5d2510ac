"""Async client for the backend record web API.

This module provides an async wrapper around httpx.AsyncClient for the three
backend services the toolkit consumes: metadata queries, generic record CRUD
and operation invocation. The client is designed to be created once at
startup and reused across requests.
"""

import logging
import re
from typing import Any

import httpx

from toolsmith_server.backend.types import ActionInfo, CustomApiInfo, EntityInfo
from toolsmith_server.errors import ToolNotFoundError, UpstreamError

logger = logging.getLogger(__name__)

ENTITY_SELECT = (
    "LogicalName,EntitySetName,DisplayName,Description,"
    "PrimaryIdAttribute,PrimaryNameAttribute"
)
ATTRIBUTE_SELECT = (
    "LogicalName,AttributeType,DisplayName,Description,IsValidForCreate,"
    "IsValidForUpdate,IsValidForRead,RequiredLevel,IsPrimaryId"
)
CUSTOM_API_SELECT = (
    "uniquename,name,displayname,description,bindingtype,"
    "boundentitylogicalname,isfunction"
)
CUSTOM_API_EXPAND = (
    "CustomAPIRequestParameters($select=uniquename,name,type,isoptional,"
    "description,logicalentityname),"
    "CustomAPIResponseProperties($select=uniquename,name,type,description,"
    "logicalentityname)"
)

_ENTITY_ID_PATTERN = re.compile(r"\(([0-9a-fA-F-]{36})\)\s*$")


class BackendClient:
    """Async client for the backend metadata, CRUD and operation services.

    Attributes:
        base_url: Backend API root (e.g. "https://org.example.com/api/data/v9.2")
        page_size_limit: Maximum records requested per page
        _client: The underlying httpx.AsyncClient instance
        _entity_sets: Cache of logical name -> entity set name
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        page_size_limit: int = 5000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the backend client.

        Args:
            base_url: Backend API root URL
            token: Optional bearer token forwarded on every request
            timeout: Request timeout in seconds
            page_size_limit: Maximum page size for paged reads
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.page_size_limit = page_size_limit
        headers = {
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url + "/",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._entity_sets: dict[str, str] = {}
        logger.info(f"BackendClient initialized with base URL: {self.base_url}")

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and raise UpstreamError on any non-success outcome."""
        try:
            response = await self._client.request(
                method,
                path.lstrip("/") if not path.startswith("http") else path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Backend request {method} {path} failed: {e}")
            raise UpstreamError(
                f"Backend request failed: {e}",
                details={"method": method, "path": path},
            ) from e

        if response.is_error:
            error = UpstreamError.from_response(response)
            logger.warning(
                f"Backend {method} {path} returned {response.status_code}: {error.message}"
            )
            raise error
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def _get_paged(
        self, path: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Read every page of a collection by following @odata.nextLink."""
        items: list[dict[str, Any]] = []
        headers = {"Prefer": f"odata.maxpagesize={self.page_size_limit}"}
        next_path: str | None = path
        next_params = params

        while next_path:
            response = await self._request(
                "GET", next_path, params=next_params, headers=headers
            )
            payload = self._json(response)
            items.extend(payload.get("value", []))
            next_path = payload.get("@odata.nextLink")
            # nextLink already carries the query string
            next_params = None

        return items

    async def check_connection(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._request("GET", "WhoAmI")
            logger.debug("Backend connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Backend connection check failed: {e}")
            return False

    # --- Metadata service ---

    async def list_entity_definitions(self) -> list[EntityInfo]:
        """List record types with their field metadata.

        Returns:
            list[EntityInfo]: Record types visible to the caller

        Raises:
            UpstreamError: If the metadata query fails
        """
        rows = await self._get_paged(
            "EntityDefinitions",
            params={
                "$select": ENTITY_SELECT,
                "$filter": "IsValidForAdvancedFind eq true and IsPrivate eq false",
                "$expand": f"Attributes($select={ATTRIBUTE_SELECT})",
            },
        )
        entities = [EntityInfo.from_metadata(row) for row in rows]
        for entity in entities:
            self.register_entity_set(entity.logical_name, entity.entity_set_name)
        logger.info(f"Listed {len(entities)} entity definitions")
        return entities

    async def list_custom_apis(self) -> list[CustomApiInfo]:
        """List public custom operations with their parameters."""
        rows = await self._get_paged(
            "customapis",
            params={
                "$select": CUSTOM_API_SELECT,
                "$filter": "isprivate eq false",
                "$expand": CUSTOM_API_EXPAND,
            },
        )
        apis = [CustomApiInfo.from_metadata(row) for row in rows]
        logger.info(f"Listed {len(apis)} custom APIs")
        return apis

    async def get_custom_api(self, unique_name: str) -> CustomApiInfo | None:
        """Fetch a single custom operation definition by unique name.

        Returns:
            CustomApiInfo | None: The definition, or None if it does not exist
        """
        escaped = unique_name.replace("'", "''")
        rows = await self._get_paged(
            "customapis",
            params={
                "$select": CUSTOM_API_SELECT,
                "$filter": f"uniquename eq '{escaped}'",
                "$expand": CUSTOM_API_EXPAND,
            },
        )
        if not rows:
            return None
        return CustomApiInfo.from_metadata(rows[0])

    async def list_actions(self) -> list[ActionInfo]:
        """List activated global actions with request/response fields."""
        rows = await self._get_paged(
            "workflows",
            params={
                "$select": "name,uniquename,description,primaryentity",
                "$filter": "category eq 3 and type eq 1 and statecode eq 1",
            },
        )

        actions: list[ActionInfo] = []
        for row in rows:
            unique_name = row.get("uniquename")
            if not unique_name:
                continue
            escaped = unique_name.replace("'", "''")
            request_fields = await self._get_paged(
                "sdkmessagerequestfields",
                params={
                    "$select": "name,clrparser,optional,position",
                    "$filter": f"sdkmessagerequestid/name eq '{escaped}'",
                },
            )
            response_fields = await self._get_paged(
                "sdkmessageresponsefields",
                params={
                    "$select": "name,clrformatter,position",
                    "$filter": (
                        f"sdkmessageresponseid/sdkmessagerequestid/name eq '{escaped}'"
                    ),
                },
            )
            primary_entity = row.get("primaryentity")
            actions.append(
                ActionInfo(
                    unique_name=unique_name,
                    display_name=row.get("name") or unique_name,
                    description=row.get("description") or "",
                    primary_entity=(
                        None if primary_entity in (None, "", "none") else primary_entity
                    ),
                    request_fields=[
                        ActionInfo.field_from_metadata(item)
                        for item in sorted(
                            request_fields, key=lambda f: f.get("position", 0)
                        )
                    ],
                    response_fields=[
                        ActionInfo.field_from_metadata(item)
                        for item in sorted(
                            response_fields, key=lambda f: f.get("position", 0)
                        )
                    ],
                )
            )

        logger.info(f"Listed {len(actions)} global actions")
        return actions

    def register_entity_set(self, logical_name: str, entity_set_name: str) -> None:
        """Remember the entity set that addresses a record type."""
        self._entity_sets[logical_name.lower()] = entity_set_name

    async def resolve_entity_set(self, logical_name: str) -> str:
        """Resolve a record type's logical name to its entity set name.

        Raises:
            ToolNotFoundError: If the record type does not exist
            UpstreamError: If the metadata query fails otherwise
        """
        key = logical_name.lower()
        if key in self._entity_sets:
            return self._entity_sets[key]

        escaped = logical_name.replace("'", "''")
        try:
            response = await self._request(
                "GET",
                f"EntityDefinitions(LogicalName='{escaped}')",
                params={"$select": "LogicalName,EntitySetName"},
            )
        except UpstreamError as e:
            if e.status_code == 404:
                raise ToolNotFoundError(
                    f"Resource '{logical_name}' not found",
                    details={"resource": logical_name},
                ) from e
            raise

        entity_set = self._json(response).get("EntitySetName")
        if not entity_set:
            raise ToolNotFoundError(
                f"Resource '{logical_name}' has no entity set",
                details={"resource": logical_name},
            )
        self.register_entity_set(logical_name, entity_set)
        return entity_set

    # --- Record CRUD service ---

    async def create_record(self, resource: str, body: dict[str, Any]) -> dict[str, Any]:
        """Create a record and return its representation (or at least its id)."""
        entity_set = await self.resolve_entity_set(resource)
        response = await self._request(
            "POST",
            entity_set,
            json=body,
            headers={"Prefer": "return=representation"},
        )
        record = self._json(response)
        if not record:
            entity_id = response.headers.get("OData-EntityId", "")
            match = _ENTITY_ID_PATTERN.search(entity_id)
            record = {"id": match.group(1) if match else None}
        logger.info(f"Created {resource} record")
        return record

    async def get_record(
        self,
        resource: str,
        record_id: str,
        select: list[str] | None = None,
        expand: str | None = None,
    ) -> dict[str, Any]:
        entity_set = await self.resolve_entity_set(resource)
        params: dict[str, Any] = {}
        if select:
            params["$select"] = ",".join(select)
        if expand:
            params["$expand"] = expand
        response = await self._request(
            "GET", f"{entity_set}({record_id})", params=params or None
        )
        return self._json(response)

    async def update_record(
        self, resource: str, record_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        entity_set = await self.resolve_entity_set(resource)
        response = await self._request(
            "PATCH",
            f"{entity_set}({record_id})",
            json=body,
            headers={"If-Match": "*", "Prefer": "return=representation"},
        )
        logger.info(f"Updated {resource} record {record_id}")
        return self._json(response) or {"id": record_id, "updated": True}

    async def delete_record(self, resource: str, record_id: str) -> dict[str, Any]:
        entity_set = await self.resolve_entity_set(resource)
        await self._request("DELETE", f"{entity_set}({record_id})")
        logger.info(f"Deleted {resource} record {record_id}")
        return {"id": record_id, "deleted": True}

    async def list_records(
        self,
        resource: str,
        filter_expression: str | None = None,
        orderby: str | None = None,
        top: int | None = None,
        select: list[str] | None = None,
        expand: str | None = None,
        count: bool = False,
        page_link: str | None = None,
    ) -> dict[str, Any]:
        """Read one page of records.

        Returns:
            dict: {"records": [...], "next_page": str | None, "count": int | None}
        """
        if page_link:
            response = await self._request("GET", page_link)
        else:
            entity_set = await self.resolve_entity_set(resource)
            params: dict[str, Any] = {}
            if filter_expression:
                params["$filter"] = filter_expression
            if orderby:
                params["$orderby"] = orderby
            if top is not None:
                params["$top"] = min(top, self.page_size_limit)
            if select:
                params["$select"] = ",".join(select)
            if expand:
                params["$expand"] = expand
            if count:
                params["$count"] = "true"
            response = await self._request("GET", entity_set, params=params or None)

        payload = self._json(response)
        return {
            "records": payload.get("value", []),
            "next_page": payload.get("@odata.nextLink"),
            "count": payload.get("@odata.count"),
        }

    # --- Operation invocation service ---

    async def invoke_function(self, path: str) -> dict[str, Any]:
        """Call a function-style operation (safe retrieval, parameters inline)."""
        response = await self._request("GET", path)
        return self._json(response)

    async def invoke_action(
        self, path: str, body: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Call an action-style operation (mutating, JSON body)."""
        response = await self._request("POST", path, json=body or {})
        return self._json(response)

    async def close(self) -> None:
        """Close the client and release pooled connections."""
        await self._client.aclose()
        logger.debug("BackendClient closed")
