"""
API Module - Tool interface for the orchestration bridge.

Exposes the engine as a catalog of named tools:
1. The bridge lists the tools and registers them with the LLM
2. Each tool call is validated, applied to one session and answered
   with the output plus the post-call snapshot
3. The bridge reads the textual digest to assemble the next prompt

All state is session-scoped. No persistent accounts required.
"""

from .tools import TOOL_REGISTRY, Tool, ToolArgs
from .service import ToolService, ToolCallResult, ToolArgumentError, UnknownToolError
from .app import create_app

__all__ = [
    # Catalog
    "TOOL_REGISTRY",
    "Tool",
    "ToolArgs",
    # Service
    "ToolService",
    "ToolCallResult",
    "ToolArgumentError",
    "UnknownToolError",
    "create_app",
]
