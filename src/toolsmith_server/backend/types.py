"""Type definitions for backend schema metadata.

This module contains dataclasses representing the schema units returned by
the backend metadata service: record types with their fields, custom
operations and global side-effecting operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Custom operation parameter type codes as reported by the metadata service
CUSTOM_API_PARAMETER_TYPES = {
    0: "boolean",
    1: "datetime",
    2: "decimal",
    3: "entity",
    4: "entitycollection",
    5: "entityreference",
    6: "float",
    7: "integer",
    8: "money",
    9: "picklist",
    10: "string",
    11: "stringarray",
    12: "guid",
}

# CLR type fragments used by global operation field descriptors, checked in order
CLR_TYPE_NAMES = [
    ("EntityCollection", "entitycollection"),
    ("EntityReference", "entityreference"),
    ("OptionSetValue", "picklist"),
    ("Money", "money"),
    ("Xrm.Sdk.Entity", "entity"),
    ("System.Boolean", "boolean"),
    ("System.Int32", "integer"),
    ("System.Int64", "bigint"),
    ("System.Decimal", "decimal"),
    ("System.Double", "float"),
    ("System.DateTime", "datetime"),
    ("System.Guid", "guid"),
    ("System.String[]", "stringarray"),
    ("System.String", "string"),
]


class BindingKind(str, Enum):
    """How a custom operation is addressed."""

    UNBOUND = "unbound"
    BOUND_TO_ONE = "bound_to_one"
    BOUND_TO_MANY = "bound_to_many"

    @classmethod
    def from_code(cls, code: Any) -> "BindingKind":
        """Map the metadata binding type code (0 global, 1 entity, 2 collection)."""
        if code in (1, "1", "Entity"):
            return cls.BOUND_TO_ONE
        if code in (2, "2", "EntityCollection"):
            return cls.BOUND_TO_MANY
        return cls.UNBOUND


def localized_label(value: Any, default: str = "") -> str:
    """Extract the user-localized label from a metadata label object."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        user_label = value.get("UserLocalizedLabel")
        if isinstance(user_label, dict) and user_label.get("Label"):
            return user_label["Label"]
        for label in value.get("LocalizedLabels") or []:
            if label.get("Label"):
                return label["Label"]
    return default


def clr_type_name(clr_parser: str | None) -> str:
    """Normalize a CLR type descriptor to a backend type name."""
    if not clr_parser:
        return "unknown"
    for fragment, type_name in CLR_TYPE_NAMES:
        if fragment in clr_parser:
            return type_name
    return "unknown"


@dataclass
class AttributeInfo:
    """A single field of a record type.

    Attributes:
        logical_name: Field name used in request bodies
        attribute_type: Backend type name, lowercased (e.g. "string", "money")
        display_name: Human-readable label
        description: Field description
        valid_for_create: Whether the field may be set on create
        valid_for_update: Whether the field may be set on update
        valid_for_read: Whether the field is returned on read
        required_level: "none", "recommended", "applicationrequired" or "systemrequired"
        is_primary_id: Whether this is the record identifier
    """

    logical_name: str
    attribute_type: str = "string"
    display_name: str = ""
    description: str = ""
    valid_for_create: bool = False
    valid_for_update: bool = False
    valid_for_read: bool = True
    required_level: str = "none"
    is_primary_id: bool = False

    @property
    def is_required(self) -> bool:
        return self.required_level in ("applicationrequired", "systemrequired")

    @staticmethod
    def from_metadata(data: dict[str, Any]) -> "AttributeInfo":
        required = data.get("RequiredLevel") or {}
        if isinstance(required, dict):
            required = required.get("Value") or "None"
        return AttributeInfo(
            logical_name=data.get("LogicalName", ""),
            attribute_type=str(data.get("AttributeType") or "String").lower(),
            display_name=localized_label(data.get("DisplayName")),
            description=localized_label(data.get("Description")),
            valid_for_create=bool(data.get("IsValidForCreate")),
            valid_for_update=bool(data.get("IsValidForUpdate")),
            valid_for_read=bool(data.get("IsValidForRead", True)),
            required_level=str(required).lower(),
            is_primary_id=bool(data.get("IsPrimaryId")),
        )


@dataclass
class EntityInfo:
    """A record type and its fields."""

    logical_name: str
    entity_set_name: str
    display_name: str = ""
    description: str = ""
    primary_id_attribute: str = ""
    primary_name_attribute: str = ""
    attributes: list[AttributeInfo] = field(default_factory=list)

    @staticmethod
    def from_metadata(data: dict[str, Any]) -> "EntityInfo":
        logical_name = data.get("LogicalName", "")
        return EntityInfo(
            logical_name=logical_name,
            entity_set_name=data.get("EntitySetName") or f"{logical_name}s",
            display_name=localized_label(data.get("DisplayName"), logical_name),
            description=localized_label(data.get("Description")),
            primary_id_attribute=data.get("PrimaryIdAttribute") or "",
            primary_name_attribute=data.get("PrimaryNameAttribute") or "",
            attributes=[
                AttributeInfo.from_metadata(attr)
                for attr in data.get("Attributes") or []
            ],
        )


@dataclass
class OperationParameter:
    """A declared request parameter or response property of an operation."""

    name: str
    type: str = "string"
    description: str = ""
    optional: bool = False
    entity: str | None = None


@dataclass
class CustomApiInfo:
    """A custom operation exposed by the backend."""

    unique_name: str
    display_name: str = ""
    description: str = ""
    binding_kind: BindingKind = BindingKind.UNBOUND
    bound_entity: str | None = None
    is_function: bool = False
    parameters: list[OperationParameter] = field(default_factory=list)
    response_properties: list[OperationParameter] = field(default_factory=list)

    @staticmethod
    def from_metadata(data: dict[str, Any]) -> "CustomApiInfo":
        def parameter(item: dict[str, Any]) -> OperationParameter:
            return OperationParameter(
                name=item.get("uniquename") or item.get("name") or "",
                type=CUSTOM_API_PARAMETER_TYPES.get(item.get("type"), "unknown"),
                description=item.get("description") or "",
                optional=bool(item.get("isoptional")),
                entity=item.get("logicalentityname"),
            )

        return CustomApiInfo(
            unique_name=data.get("uniquename", ""),
            display_name=data.get("displayname") or data.get("name") or "",
            description=data.get("description") or "",
            binding_kind=BindingKind.from_code(data.get("bindingtype")),
            bound_entity=data.get("boundentitylogicalname"),
            is_function=bool(data.get("isfunction")),
            parameters=[
                parameter(item) for item in data.get("CustomAPIRequestParameters") or []
            ],
            response_properties=[
                parameter(item) for item in data.get("CustomAPIResponseProperties") or []
            ],
        )


@dataclass
class ActionInfo:
    """A global side-effecting operation with its field descriptors."""

    unique_name: str
    display_name: str = ""
    description: str = ""
    primary_entity: str | None = None
    request_fields: list[OperationParameter] = field(default_factory=list)
    response_fields: list[OperationParameter] = field(default_factory=list)

    @staticmethod
    def field_from_metadata(data: dict[str, Any]) -> OperationParameter:
        return OperationParameter(
            name=data.get("name", ""),
            type=clr_type_name(data.get("clrparser") or data.get("clrformatter")),
            description=data.get("description") or "",
            optional=bool(data.get("optional")),
        )
