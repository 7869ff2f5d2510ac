"""Business logic services for toolsmith-server.

This package contains the service class that exposes listing, search,
invocation, plan execution and pattern reading to the API layer.
"""

from toolsmith_server.services.toolkit import ToolkitService

__all__ = ["ToolkitService"]
