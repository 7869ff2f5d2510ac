"""Data types for tools and tool invocations.

A Tool is a uniformly-shaped capability descriptor: a unique name, a
description, a JSON-Schema-shaped input schema, plus the category, keywords
and provenance used for search and dispatch.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from toolsmith_server.errors import ToolErrorInfo

# Provenance source kinds
STATIC = "static"
RECORD = "record"
CUSTOM_API = "custom_api"
ACTION = "action"

# Call styles
CRUD = "crud"
FUNCTION = "function"
ACTION_CALL = "action"


@dataclass
class ToolProvenance:
    """Where a tool came from and how it is addressed.

    Attributes:
        source_kind: "static", "record", "custom_api" or "action"
        resource: Logical name of the record type the tool works on, if any
        operation: CRUD verb for record tools, unique name for operation tools
        binding_kind: Binding kind of a custom operation
        call_style: "crud", "function" or "action"
        bound_entity: Record type a bound operation is attached to
    """

    source_kind: str = STATIC
    resource: str | None = None
    operation: str | None = None
    binding_kind: str | None = None
    call_style: str | None = None
    bound_entity: str | None = None


@dataclass
class Tool:
    """A callable tool descriptor."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    category: str = ""
    keywords: list[str] = field(default_factory=list)
    provenance: ToolProvenance = field(default_factory=ToolProvenance)

    @property
    def is_discovered(self) -> bool:
        return self.provenance.source_kind != STATIC

    @property
    def required_arguments(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    def to_minimal(self) -> dict[str, Any]:
        """Invocation shape: name, description and input schema."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def to_full(self) -> dict[str, Any]:
        """Search shape: the invocation shape plus category, keywords and provenance."""
        data = self.to_minimal()
        data["category"] = self.category
        data["keywords"] = list(self.keywords)
        data["provenance"] = asdict(self.provenance)
        return data

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the discovery snapshot."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tool":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            input_schema=data.get("input_schema")
            or {"type": "object", "properties": {}},
            category=data.get("category", ""),
            keywords=list(data.get("keywords", [])),
            provenance=ToolProvenance(**(data.get("provenance") or {})),
        )


@dataclass
class InvocationResult:
    """Outcome of a single tool invocation.

    Exactly one of ``result`` and ``error`` is meaningful, depending on
    ``success``.
    """

    tool: str
    success: bool
    result: Any = None
    error: ToolErrorInfo | None = None
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "success": self.success,
            "result": self.result,
            "error": self.error.to_dict() if self.error else None,
            "duration_ms": round(self.duration_ms, 1),
        }
