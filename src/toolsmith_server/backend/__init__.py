"""Backend client wrapper and schema metadata types.

This package provides the async client for the backend record web API
(metadata queries, record CRUD and operation invocation).
"""

from toolsmith_server.backend.client import BackendClient
from toolsmith_server.backend.types import (
    ActionInfo,
    AttributeInfo,
    BindingKind,
    CustomApiInfo,
    EntityInfo,
    OperationParameter,
)

__all__ = [
    "BackendClient",
    "ActionInfo",
    "AttributeInfo",
    "BindingKind",
    "CustomApiInfo",
    "EntityInfo",
    "OperationParameter",
]
