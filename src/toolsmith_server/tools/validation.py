"""Argument validation against a tool's input schema."""

from typing import Any

from toolsmith_server.errors import InvalidArgumentError

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list, tuple),
    "object": (dict,),
}


def _matches(value: Any, json_type: str) -> bool:
    expected = _JSON_TYPES.get(json_type)
    if expected is None:
        return True
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) and json_type != "boolean":
        return False
    return isinstance(value, expected)


def validate_arguments(tool_name: str, schema: dict[str, Any], args: Any) -> None:
    """Check required presence and primitive types of tool arguments.

    Raises:
        InvalidArgumentError: On the first missing or mistyped argument
    """
    if not isinstance(args, dict):
        raise InvalidArgumentError(
            "Arguments must be a JSON object",
            details={"tool": tool_name},
        )

    for name in schema.get("required", []):
        if args.get(name) is None:
            raise InvalidArgumentError(
                f"Missing required argument '{name}'",
                details={"tool": tool_name, "argument": name},
            )

    properties = schema.get("properties", {})
    for name, value in args.items():
        prop = properties.get(name)
        if prop is None or value is None:
            continue
        json_type = prop.get("type")
        if json_type and not _matches(value, json_type):
            raise InvalidArgumentError(
                f"Argument '{name}' must be of type {json_type}",
                details={
                    "tool": tool_name,
                    "argument": name,
                    "expected": json_type,
                    "received": type(value).__name__,
                },
            )
