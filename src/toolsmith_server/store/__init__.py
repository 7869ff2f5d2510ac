"""Durable configuration storage for toolsmith-server."""

from toolsmith_server.store.config_store import ConfigStore, JsonConfigStore
from toolsmith_server.store.types import (
    ACTIONS,
    CUSTOM_APIS,
    DISCOVERY_CATEGORIES,
    RECORDS,
    ConfigRecord,
)

__all__ = [
    "ConfigStore",
    "JsonConfigStore",
    "ConfigRecord",
    "DISCOVERY_CATEGORIES",
    "RECORDS",
    "CUSTOM_APIS",
    "ACTIONS",
]
