"""Placeholder expressions for plan step arguments.

Step arguments are parsed once into an expression tree. A string that is
exactly ``"{{path}}"`` becomes a ``VariableRef`` to a dot-separated path in
the execution context; dicts and lists keep their structure; every other
value is a ``Literal``. Resolving a path that cannot be followed yields None.
"""

import re
from dataclasses import dataclass
from typing import Any, Union

PLACEHOLDER_PATTERN = re.compile(r"^\{\{\s*([^{}]+?)\s*\}\}$")


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class VariableRef:
    segments: tuple[str, ...]

    @property
    def path(self) -> str:
        return ".".join(self.segments)


@dataclass(frozen=True)
class ObjectTemplate:
    fields: tuple[tuple[str, "Expression"], ...]


@dataclass(frozen=True)
class ArrayTemplate:
    items: tuple["Expression", ...]


Expression = Union[Literal, VariableRef, ObjectTemplate, ArrayTemplate]


def parse_template(value: Any) -> Expression:
    """Parse a JSON-like value into an expression tree."""
    if isinstance(value, str):
        match = PLACEHOLDER_PATTERN.match(value)
        if match:
            segments = tuple(s.strip() for s in match.group(1).split("."))
            return VariableRef(segments)
        return Literal(value)
    if isinstance(value, dict):
        return ObjectTemplate(tuple((key, parse_template(v)) for key, v in value.items()))
    if isinstance(value, (list, tuple)):
        return ArrayTemplate(tuple(parse_template(v) for v in value))
    return Literal(value)


def resolve_path(variables: dict[str, Any], segments: tuple[str, ...]) -> Any:
    """Follow path segments through nested dicts and lists.

    Missing keys, out-of-range or negative indices and traversal through a
    scalar all resolve to None.
    """
    current: Any = variables
    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit():
                return None
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def resolve(expression: Expression, variables: dict[str, Any]) -> Any:
    """Evaluate an expression tree against the bound variables."""
    if isinstance(expression, Literal):
        return expression.value
    if isinstance(expression, VariableRef):
        return resolve_path(variables, expression.segments)
    if isinstance(expression, ObjectTemplate):
        return {key: resolve(value, variables) for key, value in expression.fields}
    if isinstance(expression, ArrayTemplate):
        return [resolve(item, variables) for item in expression.items]
    raise TypeError(f"Unknown expression type: {type(expression).__name__}")
