"""Tool synthesizer: turns discovered schema units into Tool descriptors.

Every record type yields six tools (create, get, update, delete, list,
query). Every custom operation and every global action yields one tool.
Names follow the ``{verb}_{resource}``, ``customapi_{name}`` and
``action_{name}`` conventions the dispatcher relies on.
"""

import logging
import re
from collections.abc import Iterable
from typing import Any

from toolsmith_server.backend import (
    ActionInfo,
    AttributeInfo,
    BindingKind,
    CustomApiInfo,
    EntityInfo,
    OperationParameter,
)
from toolsmith_server.discovery.prober import ProbeResult
from toolsmith_server.store.types import ACTIONS, CUSTOM_APIS, RECORDS
from toolsmith_server.tools.types import (
    ACTION,
    ACTION_CALL,
    CRUD,
    CUSTOM_API,
    FUNCTION,
    RECORD,
    Tool,
    ToolProvenance,
)

logger = logging.getLogger(__name__)

RECORD_VERBS = ("create", "get", "update", "delete", "list", "query")

VERB_SYNONYMS = {
    "create": ["create", "add", "new", "insert"],
    "get": ["get", "retrieve", "read", "fetch"],
    "update": ["update", "edit", "modify", "change"],
    "delete": ["delete", "remove"],
    "list": ["list", "browse", "all"],
    "query": ["query", "search", "find", "filter"],
}

BOOLEAN_TYPES = {"boolean"}
INTEGER_TYPES = {"integer", "bigint", "picklist", "enum", "state", "status"}
NUMBER_TYPES = {"decimal", "double", "float", "money", "currency"}
DATETIME_TYPES = {"datetime"}
IDENTIFIER_TYPES = {"uniqueidentifier", "guid"}
REFERENCE_TYPES = {"lookup", "customer", "owner", "entityreference"}
OPEN_SHAPE_TYPES = {"entity", "entitycollection", "unknown"}

# Field types that cannot be written through the record API
SKIPPED_ATTRIBUTE_TYPES = {"virtual", "managedproperty", "calendarrules", "entityname"}

OPEN_SHAPE_SUFFIX = " (open shape: any JSON object accepted)"

DEFAULT_LIST_TOP = 50

_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def name_words(*texts: str | None) -> list[str]:
    """Split names and labels into lowercase words (snake, camel and spaced)."""
    words: list[str] = []
    for text in texts:
        if not text:
            continue
        for part in re.split(r"[\s_\-.]+", text):
            words.extend(w.lower() for w in _WORD_PATTERN.findall(part))
    return words


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def field_schema(type_name: str, description: str = "") -> dict[str, Any]:
    """Map a backend type name to a JSON-Schema property."""
    type_name = type_name.lower()
    schema: dict[str, Any]

    if type_name in BOOLEAN_TYPES:
        schema = {"type": "boolean"}
    elif type_name in INTEGER_TYPES:
        schema = {"type": "integer"}
    elif type_name in NUMBER_TYPES:
        schema = {"type": "number"}
    elif type_name in DATETIME_TYPES:
        schema = {"type": "string", "format": "date-time"}
    elif type_name in IDENTIFIER_TYPES or type_name in REFERENCE_TYPES:
        schema = {"type": "string", "format": "uuid"}
    elif type_name == "stringarray":
        schema = {"type": "array", "items": {"type": "string"}}
    elif type_name in OPEN_SHAPE_TYPES:
        # No "type": any JSON value is accepted
        schema = {}
        description = (description or type_name) + OPEN_SHAPE_SUFFIX
    else:
        schema = {"type": "string"}

    if description:
        schema["description"] = description
    return schema


def _object_schema(
    properties: dict[str, Any], required: list[str] | None = None
) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _id_property(entity: EntityInfo) -> dict[str, Any]:
    return {
        "type": "string",
        "format": "uuid",
        "description": f"Identifier of the {entity.display_name} record",
    }


class ToolSynthesizer:
    """Builds Tool descriptors from a ProbeResult.

    Attributes:
        blacklist: Lowercased entity/operation names that are skipped entirely
    """

    def __init__(self, blacklist: Iterable[str] = ()) -> None:
        self.blacklist = {name.lower() for name in blacklist}

    def is_blacklisted(self, name: str) -> bool:
        return name.lower() in self.blacklist

    def synthesize(self, probe: ProbeResult) -> list[Tool]:
        """Convert every non-blacklisted schema unit into tools."""
        tools: list[Tool] = []
        skipped = 0

        for entity in probe.entities:
            if self.is_blacklisted(entity.logical_name):
                skipped += 1
                continue
            tools.extend(self.record_tools(entity))

        for api in probe.custom_apis:
            if self.is_blacklisted(api.unique_name):
                skipped += 1
                continue
            tools.append(self.custom_api_tool(api))

        for action in probe.actions:
            if self.is_blacklisted(action.unique_name):
                skipped += 1
                continue
            tools.append(self.action_tool(action))

        logger.info(f"Synthesized {len(tools)} tools ({skipped} blacklisted units skipped)")
        return tools

    # --- Record types ---

    @staticmethod
    def _writable(attribute: AttributeInfo) -> bool:
        return bool(attribute.logical_name) and (
            attribute.attribute_type not in SKIPPED_ATTRIBUTE_TYPES
        )

    @staticmethod
    def _is_identifier(entity: EntityInfo, attribute: AttributeInfo) -> bool:
        return (
            attribute.is_primary_id
            or attribute.logical_name == entity.primary_id_attribute
            or attribute.attribute_type in IDENTIFIER_TYPES
        )

    def _record_keywords(self, verb: str, entity: EntityInfo) -> list[str]:
        return _unique(
            VERB_SYNONYMS[verb]
            + [entity.logical_name.lower(), entity.entity_set_name.lower()]
            + name_words(entity.display_name)
        )

    def _record_tool(
        self, verb: str, entity: EntityInfo, description: str, schema: dict[str, Any]
    ) -> Tool:
        return Tool(
            name=f"{verb}_{entity.logical_name}",
            description=description,
            input_schema=schema,
            category=RECORDS,
            keywords=self._record_keywords(verb, entity),
            provenance=ToolProvenance(
                source_kind=RECORD,
                resource=entity.logical_name,
                operation=verb,
                call_style=CRUD,
            ),
        )

    def record_tools(self, entity: EntityInfo) -> list[Tool]:
        """Emit the six CRUD/query tools for a record type."""
        label = entity.display_name or entity.logical_name
        readable = [
            a.logical_name for a in entity.attributes if a.valid_for_read and a.logical_name
        ]
        select_schema = {
            "type": "array",
            "items": {"type": "string"},
            "description": "Fields to return"
            + (f" (e.g. {', '.join(readable[:5])})" if readable else ""),
        }

        create_props: dict[str, Any] = {}
        create_required: list[str] = []
        update_props: dict[str, Any] = {"id": _id_property(entity)}
        for attribute in entity.attributes:
            if not self._writable(attribute):
                continue
            description = attribute.description or attribute.display_name
            if attribute.valid_for_create and not self._is_identifier(entity, attribute):
                create_props[attribute.logical_name] = field_schema(
                    attribute.attribute_type, description
                )
                if attribute.is_required:
                    create_required.append(attribute.logical_name)
            if attribute.valid_for_update and not self._is_identifier(entity, attribute):
                update_props[attribute.logical_name] = field_schema(
                    attribute.attribute_type, description
                )

        suffix = f" {entity.description}" if entity.description else ""
        return [
            self._record_tool(
                "create",
                entity,
                f"Create a new {label} ({entity.logical_name}) record.{suffix}",
                _object_schema(create_props, create_required),
            ),
            self._record_tool(
                "get",
                entity,
                f"Get a single {label} ({entity.logical_name}) record by its identifier.",
                _object_schema(
                    {
                        "id": _id_property(entity),
                        "select": select_schema,
                        "expand": {
                            "type": "string",
                            "description": "Related records to expand",
                        },
                    },
                    ["id"],
                ),
            ),
            self._record_tool(
                "update",
                entity,
                f"Update fields of an existing {label} ({entity.logical_name}) record.",
                _object_schema(update_props, ["id"]),
            ),
            self._record_tool(
                "delete",
                entity,
                f"Delete a {label} ({entity.logical_name}) record by its identifier.",
                _object_schema({"id": _id_property(entity)}, ["id"]),
            ),
            self._record_tool(
                "list",
                entity,
                f"List {label} ({entity.logical_name}) records.",
                _object_schema(
                    {
                        "top": {
                            "type": "integer",
                            "description": "Maximum records to return",
                            "default": DEFAULT_LIST_TOP,
                        },
                        "select": select_schema,
                        "orderby": {
                            "type": "string",
                            "description": "Sort expression, e.g. 'createdon desc'",
                        },
                    }
                ),
            ),
            self._record_tool(
                "query",
                entity,
                f"Query {label} ({entity.logical_name}) records with filter, sort, "
                "paging and expansion.",
                _object_schema(
                    {
                        "filter": {
                            "type": "string",
                            "description": "Filter expression, e.g. \"name eq 'Contoso'\"",
                        },
                        "orderby": {"type": "string", "description": "Sort expression"},
                        "top": {"type": "integer", "description": "Page size"},
                        "select": select_schema,
                        "expand": {
                            "type": "string",
                            "description": "Related records to expand",
                        },
                        "count": {
                            "type": "boolean",
                            "description": "Include the total record count",
                        },
                        "page_link": {
                            "type": "string",
                            "description": "next_page link returned by a previous query",
                        },
                    }
                ),
            ),
        ]

    # --- Operations ---

    @staticmethod
    def _parameter_schema(
        parameters: list[OperationParameter],
    ) -> tuple[dict[str, Any], list[str]]:
        properties: dict[str, Any] = {}
        required: list[str] = []
        for parameter in parameters:
            if not parameter.name:
                continue
            description = parameter.description
            if parameter.entity and not description:
                description = f"{parameter.entity} record"
            properties[parameter.name] = field_schema(parameter.type, description)
            if not parameter.optional:
                required.append(parameter.name)
        return properties, required

    def custom_api_tool(self, api: CustomApiInfo) -> Tool:
        """Emit the tool for one custom operation."""
        properties, required = self._parameter_schema(api.parameters)
        if api.binding_kind == BindingKind.BOUND_TO_ONE:
            properties = {
                "target_id": {
                    "type": "string",
                    "format": "uuid",
                    "description": f"Identifier of the {api.bound_entity} record "
                    "the operation runs against",
                },
                **properties,
            }
            required = ["target_id", *required]

        style = FUNCTION if api.is_function else ACTION_CALL
        binding = {
            BindingKind.UNBOUND: "unbound",
            BindingKind.BOUND_TO_ONE: f"bound to one {api.bound_entity}",
            BindingKind.BOUND_TO_MANY: f"bound to {api.bound_entity} collection",
        }[api.binding_kind]
        description = api.description or api.display_name or api.unique_name
        description = f"{description} (custom {style}, {binding})"

        return Tool(
            name=f"customapi_{api.unique_name}",
            description=description,
            input_schema=_object_schema(properties, required),
            category=CUSTOM_APIS,
            keywords=_unique(
                [api.unique_name.lower()]
                + name_words(api.unique_name, api.display_name)
                + ([api.bound_entity.lower()] if api.bound_entity else [])
            ),
            provenance=ToolProvenance(
                source_kind=CUSTOM_API,
                resource=api.bound_entity,
                operation=api.unique_name,
                binding_kind=api.binding_kind.value,
                call_style=style,
                bound_entity=api.bound_entity,
            ),
        )

    def action_tool(self, action: ActionInfo) -> Tool:
        """Emit the tool for one global action."""
        properties, required = self._parameter_schema(action.request_fields)
        description = action.description or action.display_name or action.unique_name
        outputs = [f.name for f in action.response_fields if f.name]
        if outputs:
            description += f" Returns: {', '.join(outputs)}."

        return Tool(
            name=f"action_{action.unique_name}",
            description=description,
            input_schema=_object_schema(properties, required),
            category=ACTIONS,
            keywords=_unique(
                [action.unique_name.lower()]
                + name_words(action.unique_name, action.display_name)
                + ([action.primary_entity.lower()] if action.primary_entity else [])
            ),
            provenance=ToolProvenance(
                source_kind=ACTION,
                resource=action.primary_entity,
                operation=action.unique_name,
                binding_kind=BindingKind.UNBOUND.value,
                call_style=ACTION_CALL,
            ),
        )
