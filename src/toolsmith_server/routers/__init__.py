"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for one area (health, tools, plans,
patterns, discovery).
"""

from toolsmith_server.routers import discovery, health, patterns, plans, tools

__all__ = [
    "discovery",
    "health",
    "patterns",
    "plans",
    "tools",
]
