"""Data types for the durable configuration record."""

from dataclasses import dataclass, field
from typing import Any

RECORDS = "records"
CUSTOM_APIS = "custom_apis"
ACTIONS = "actions"

DISCOVERY_CATEGORIES = (RECORDS, CUSTOM_APIS, ACTIONS)

DEFAULT_TTL_SECONDS = 3600


def default_categories() -> dict[str, bool]:
    return {category: True for category in DISCOVERY_CATEGORIES}


@dataclass
class ConfigRecord:
    """The single named configuration record.

    Holds the discovery cache snapshot alongside its configuration, and the
    workflow pattern log.
    """

    name: str = "toolsmith"
    tools: list[dict[str, Any]] | None = None
    snapshot_timestamp: float | None = None
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    categories: dict[str, bool] = field(default_factory=default_categories)
    blacklist: list[str] = field(default_factory=list)
    pattern_log: str = ""
    pattern_updates: int = 0
    format_version: str = "1.0"
