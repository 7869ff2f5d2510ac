"""toolsmith-server: schema-driven tool discovery and orchestration.

This package discovers the record types and operations of a backend web
API, turns them into uniformly shaped tools, and exposes listing, intent
search, invocation and multi-step plans over a REST API.
"""

from toolsmith_server.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
