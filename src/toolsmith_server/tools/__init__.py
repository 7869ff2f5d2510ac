"""Tool catalog, dispatch and search layer.

This package provides the Tool descriptor types, the registry that merges
static and discovered tools, the dispatcher that routes invocations, and the
intent search over the merged catalog. Submodules are imported directly
(``toolsmith_server.tools.dispatcher`` etc.) to keep discovery free of import
cycles.
"""

from toolsmith_server.tools.types import InvocationResult, Tool, ToolProvenance

__all__ = ["InvocationResult", "Tool", "ToolProvenance"]
