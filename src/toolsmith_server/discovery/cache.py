"""TTL-bounded cache of discovered tools.

The cache moves through EMPTY -> POPULATED -> EXPIRED -> POPULATED. A read
within the TTL returns the cached snapshot; otherwise discovery runs across
all enabled categories and the new snapshot is persisted. Discovery and
persistence failures are logged and never raised to the reader.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from toolsmith_server.backend import BackendClient
from toolsmith_server.discovery.prober import SchemaProber
from toolsmith_server.discovery.synthesizer import ToolSynthesizer
from toolsmith_server.errors import (
    CacheWriteError,
    InvalidArgumentError,
    PartialDiscoveryFailure,
)
from toolsmith_server.store import DISCOVERY_CATEGORIES, ConfigStore
from toolsmith_server.store.types import DEFAULT_TTL_SECONDS, default_categories
from toolsmith_server.tools.types import RECORD, Tool

logger = logging.getLogger(__name__)

EMPTY = "empty"
POPULATED = "populated"
EXPIRED = "expired"


@dataclass
class DiscoveryConfig:
    """Discovery settings loaded from the configuration record."""

    ttl_seconds: int = DEFAULT_TTL_SECONDS
    categories: dict[str, bool] = field(default_factory=default_categories)
    blacklist: list[str] = field(default_factory=list)

    @property
    def enabled_categories(self) -> list[str]:
        return [c for c in DISCOVERY_CATEGORIES if self.categories.get(c, True)]

    def admits(self, tool: Tool) -> bool:
        """Whether a discovered tool is allowed by the category flags and blacklist."""
        if not self.categories.get(tool.category, True):
            return False
        provenance = tool.provenance
        unit = provenance.resource if provenance.source_kind == RECORD else provenance.operation
        return not unit or unit.lower() not in {name.lower() for name in self.blacklist}

    def to_dict(self) -> dict:
        return {
            "ttl_seconds": self.ttl_seconds,
            "categories": dict(self.categories),
            "blacklist": list(self.blacklist),
        }


class ToolCache:
    """Caches synthesized tools for the lifetime of the process.

    Attributes:
        backend: Client used for discovery
        store: Durable store holding snapshot and configuration
        clock: Time source returning seconds since the epoch
    """

    def __init__(
        self,
        backend: BackendClient,
        store: ConfigStore,
        lock_enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend
        self.store = store
        self.clock = clock
        self._lock = asyncio.Lock() if lock_enabled else None
        self._config: DiscoveryConfig | None = None
        self._tools: list[Tool] | None = None
        self._timestamp: float | None = None

    @property
    def state(self) -> str:
        if self._tools is None:
            return EMPTY
        if self._is_fresh():
            return POPULATED
        return EXPIRED

    @property
    def timestamp(self) -> float | None:
        return self._timestamp

    def describe(self) -> dict:
        """Current configuration plus cache state, for display."""
        config = self._config or DiscoveryConfig()
        return {
            **config.to_dict(),
            "state": self.state,
            "timestamp": self._timestamp,
            "cached_tools": len(self._tools or []),
        }

    def _is_fresh(self) -> bool:
        if self._tools is None or self._timestamp is None or self._config is None:
            return False
        return self.clock() - self._timestamp < self._config.ttl_seconds

    async def get_config(self) -> DiscoveryConfig:
        """Load discovery configuration once per process.

        A persisted snapshot is adopted at the same time so that a restart
        within the TTL does not trigger discovery.
        """
        if self._config is not None:
            return self._config

        try:
            record = await self.store.load()
        except Exception as e:
            logger.warning(f"Failed to load discovery configuration, using defaults: {e}")
            self._config = DiscoveryConfig()
            return self._config

        self._config = DiscoveryConfig(
            ttl_seconds=record.ttl_seconds,
            categories=dict(record.categories),
            blacklist=list(record.blacklist),
        )
        if record.tools is not None and record.snapshot_timestamp is not None:
            try:
                self._tools = [Tool.from_dict(item) for item in record.tools]
                self._timestamp = record.snapshot_timestamp
                logger.info(f"Loaded persisted snapshot with {len(self._tools)} tools")
            except (KeyError, TypeError) as e:
                logger.warning(f"Ignoring unreadable persisted snapshot: {e}")
        return self._config

    async def get_tools(self) -> list[Tool]:
        """Return cached tools, refreshing them if the snapshot is stale."""
        await self.get_config()
        if self._is_fresh():
            return list(self._tools)

        if self._lock is None:
            return await self._refresh()

        async with self._lock:
            # Another request may have refreshed while we waited
            if self._is_fresh():
                return list(self._tools)
            return await self._refresh()

    async def refresh(self) -> list[Tool]:
        """Run discovery now, regardless of the TTL."""
        await self.get_config()
        if self._lock is None:
            return await self._refresh()
        async with self._lock:
            return await self._refresh()

    async def _refresh(self) -> list[Tool]:
        config = self._config or DiscoveryConfig()
        try:
            probe = await SchemaProber(self.backend).probe(config.enabled_categories)
            if probe.all_failed:
                raise PartialDiscoveryFailure(
                    "Every discovery category failed", details=probe.failures
                )
            if probe.failures:
                failure = PartialDiscoveryFailure(
                    f"Discovery incomplete for {sorted(probe.failures)}",
                    details=probe.failures,
                )
                logger.warning(f"{failure.message}; continuing with remaining categories")
            tools = ToolSynthesizer(config.blacklist).synthesize(probe)
        except Exception as e:
            fallback = [tool for tool in self._tools or [] if config.admits(tool)]
            logger.error(
                f"Discovery failed, serving {len(fallback)} previously cached tools: {e}"
            )
            return fallback

        now = self.clock()
        self._tools = tools
        self._timestamp = now
        try:
            await self.store.update(
                tools=[tool.to_dict() for tool in tools], snapshot_timestamp=now
            )
        except CacheWriteError as e:
            logger.error(f"Discovered tools not persisted: {e.message}")
        except Exception as e:
            logger.error(f"Discovered tools not persisted: {e}", exc_info=True)

        logger.info(f"Tool cache refreshed with {len(tools)} tools")
        return list(tools)

    async def update_config(
        self,
        ttl_seconds: int | None = None,
        categories: dict[str, bool] | None = None,
        blacklist_add: Iterable[str] | None = None,
        blacklist_remove: Iterable[str] | None = None,
    ) -> DiscoveryConfig:
        """Change discovery configuration and invalidate the snapshot.

        Raises:
            InvalidArgumentError: If the TTL or a category name is invalid
            CacheWriteError: If the configuration cannot be persisted
        """
        config = await self.get_config()

        if ttl_seconds is not None and ttl_seconds < 0:
            raise InvalidArgumentError(
                "ttl_seconds must be zero or positive",
                details={"argument": "ttl_seconds"},
            )
        unknown = set(categories or {}) - set(DISCOVERY_CATEGORIES)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown discovery categories: {sorted(unknown)}",
                details={"argument": "categories", "allowed": list(DISCOVERY_CATEGORIES)},
            )

        new_categories = dict(config.categories)
        new_categories.update(categories or {})

        removals = {name.lower() for name in blacklist_remove or []}
        blacklist = [name for name in config.blacklist if name.lower() not in removals]
        for name in blacklist_add or []:
            if name and name.lower() not in {b.lower() for b in blacklist}:
                blacklist.append(name)

        new_config = DiscoveryConfig(
            ttl_seconds=config.ttl_seconds if ttl_seconds is None else ttl_seconds,
            categories=new_categories,
            blacklist=blacklist,
        )
        await self.store.update(
            ttl_seconds=new_config.ttl_seconds,
            categories=new_config.categories,
            blacklist=new_config.blacklist,
            snapshot_timestamp=None,
        )

        self._config = new_config
        # Drop newly excluded tools; the rest stay as fallback until rediscovery
        if self._tools is not None:
            self._tools = [tool for tool in self._tools if new_config.admits(tool)]
        self._timestamp = None
        logger.info(f"Discovery configuration updated: {new_config.to_dict()}")
        return new_config
