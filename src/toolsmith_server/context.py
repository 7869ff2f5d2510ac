"""Request-scoped context shared by the components serving one request."""

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from toolsmith_server.backend import BackendClient
from toolsmith_server.discovery import ToolCache
from toolsmith_server.store import ConfigStore
from toolsmith_server.telemetry import BackgroundTasks, InvocationTelemetry
from toolsmith_server.tools.registry import ToolCatalog

if TYPE_CHECKING:
    from toolsmith_server.tools.dispatcher import Dispatcher


@dataclass
class RequestContext:
    """Everything a single request needs, passed by reference into each component.

    Process-wide collaborators (backend client, store, cache, background
    tasks) are shared; the catalog snapshot and the dispatcher belong to this
    request only.
    """

    backend: BackendClient
    store: ConfigStore
    cache: ToolCache
    catalog: ToolCatalog
    background: BackgroundTasks
    telemetry: InvocationTelemetry
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:10])
    dispatcher: "Dispatcher | None" = None
