"""Schema discovery: probing the backend, synthesizing tools and caching them."""

from toolsmith_server.discovery.cache import DiscoveryConfig, ToolCache
from toolsmith_server.discovery.prober import ProbeResult, SchemaProber
from toolsmith_server.discovery.synthesizer import ToolSynthesizer

__all__ = [
    "DiscoveryConfig",
    "ProbeResult",
    "SchemaProber",
    "ToolCache",
    "ToolSynthesizer",
]
