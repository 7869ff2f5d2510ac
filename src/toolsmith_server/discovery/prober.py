"""Schema prober: reads the backend's live capabilities.

Each category (record types, custom operations, global actions) is probed
independently. A failing category yields an empty result and a logged cause
so that the other categories can still be turned into tools.
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass, field

from toolsmith_server.backend import ActionInfo, BackendClient, CustomApiInfo, EntityInfo
from toolsmith_server.store.types import ACTIONS, CUSTOM_APIS, DISCOVERY_CATEGORIES, RECORDS

logger = logging.getLogger(__name__)


@dataclass
class ProbeResult:
    """Schema units discovered in one probe, plus per-category failures."""

    entities: list[EntityInfo] = field(default_factory=list)
    custom_apis: list[CustomApiInfo] = field(default_factory=list)
    actions: list[ActionInfo] = field(default_factory=list)
    probed: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return bool(self.probed) and set(self.failures) >= set(self.probed)


class SchemaProber:
    """Queries backend metadata for every enabled discovery category."""

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def probe(
        self, categories: Collection[str] = DISCOVERY_CATEGORIES
    ) -> ProbeResult:
        """Probe the enabled categories.

        Args:
            categories: Discovery categories to query; others are skipped

        Returns:
            ProbeResult: Discovered units; failed categories are empty and
                listed in ``failures``
        """
        result = ProbeResult()

        if RECORDS in categories:
            result.probed.append(RECORDS)
            try:
                result.entities = await self.backend.list_entity_definitions()
            except Exception as e:
                logger.warning(f"Record type discovery failed: {e}")
                result.failures[RECORDS] = str(e)

        if CUSTOM_APIS in categories:
            result.probed.append(CUSTOM_APIS)
            try:
                result.custom_apis = await self.backend.list_custom_apis()
            except Exception as e:
                logger.warning(f"Custom API discovery failed: {e}")
                result.failures[CUSTOM_APIS] = str(e)

        if ACTIONS in categories:
            result.probed.append(ACTIONS)
            try:
                result.actions = await self.backend.list_actions()
            except Exception as e:
                logger.warning(f"Action discovery failed: {e}")
                result.failures[ACTIONS] = str(e)

        logger.info(
            f"Probe finished: {len(result.entities)} record types, "
            f"{len(result.custom_apis)} custom APIs, {len(result.actions)} actions"
            + (f", failed: {sorted(result.failures)}" if result.failures else "")
        )
        return result
