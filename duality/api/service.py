"""
Tool Service - Business logic layer between transports and the engine.

The service:
1. Resolves a session (creating it on first reference)
2. Validates tool arguments into typed records
3. Runs the tool against a clone of the session state, committing only
   on success
4. Wraps the output with the post-call snapshot

This layer is framework-agnostic (used by the FastAPI app and the CLI).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from pydantic import ValidationError

from ..session import SessionManager, Session
from ..engine_core.projection import render_state
from .tools import TOOL_REGISTRY, Tool


logger = logging.getLogger(__name__)


class UnknownToolError(KeyError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown tool: {self.name}"


class ToolArgumentError(ValueError):
    """Tool arguments failed validation. The session state is untouched."""

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]):
        self.tool_name = tool_name
        self.errors = errors
        summary = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())) or 'arguments'}: {err.get('msg')}"
            for err in errors
        )
        super().__init__(f"Invalid arguments for {tool_name}: {summary}")

    @classmethod
    def from_validation_error(cls, tool_name: str, exc: ValidationError) -> "ToolArgumentError":
        return cls(tool_name, exc.errors(include_url=False, include_context=False))


@dataclass
class ToolCallResult:
    """Outcome of one tool invocation."""
    name: str
    parameters: dict[str, Any]
    output: Any
    state_changed: bool
    game_state: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "parameters": self.parameters,
            "output": self.output,
            "stateChanged": self.state_changed,
            "gameState": self.game_state,
        }


def _serialize(output: Any) -> Any:
    if hasattr(output, "to_dict"):
        return output.to_dict()
    return output


@dataclass
class ToolService:
    """
    Session-scoped tool execution.

    Usage:
        service = ToolService()

        # Call a tool (the session is created on first reference)
        result = service.call("abc", "roll_action", {"trait": "agility", "difficulty": 12})

        # Prompt digest
        text = service.render_state("abc")
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # =========================================================================
    # Tools
    # =========================================================================

    def tool_definitions(self) -> list[dict[str, Any]]:
        """Name, description and argument schema of every tool."""
        return [
            {
                "name": t.name,
                "description": t.description,
                "parameters": t.json_schema(),
            }
            for t in TOOL_REGISTRY.values()
        ]

    def get_tool(self, tool_name: str) -> Tool:
        tool = TOOL_REGISTRY.get(tool_name)
        if tool is None:
            raise UnknownToolError(tool_name)
        return tool

    def call(
        self,
        session_id: str,
        tool_name: str,
        arguments: dict[str, Any] | None = None,
    ) -> ToolCallResult:
        """
        Invoke a tool on a session.

        Raises:
            UnknownToolError: If no tool has that name.
            ToolArgumentError: If the arguments fail validation.
            ValueError: If the engine rejects the input (e.g. a bad dice
                expression). The session state is unchanged.
        """
        tool = self.get_tool(tool_name)
        arguments = dict(arguments or {})

        try:
            args = tool.parse(arguments)
        except ValidationError as e:
            logger.warning("Rejected %s arguments for session %s: %s", tool_name, session_id, e)
            raise ToolArgumentError.from_validation_error(tool_name, e) from e

        session = self.session_manager.get_or_create(session_id)
        try:
            with session.transaction() as engine:
                before = engine.get_state()
                output = _serialize(tool.handler(engine, args))
                after = engine.get_state()
        except ValueError as e:
            logger.warning("%s failed for session %s: %s", tool_name, session_id, e)
            raise

        logger.debug("Tool %s on session %s -> %s", tool_name, session_id, output)
        return ToolCallResult(
            name=tool_name,
            parameters=arguments,
            output=output,
            state_changed=before != after,
            game_state=after,
        )

    # =========================================================================
    # State
    # =========================================================================

    def get_state(self, session_id: str) -> dict[str, Any]:
        """Full JSON snapshot. Reading never mutates."""
        return self.session_manager.get_or_create(session_id).snapshot()

    def render_state(self, session_id: str) -> str:
        """Textual digest for prompt assembly."""
        session = self.session_manager.get_or_create(session_id)
        with session.lock:
            return render_state(session.state)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, session_id: str | None = None, seed: int | None = None) -> Session:
        return self.session_manager.create_session(session_id, seed=seed)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def cleanup(self, max_age_seconds: float = 3600) -> list[str]:
        """Evict sessions idle longer than max_age_seconds."""
        return self.session_manager.cleanup_stale_sessions(max_age_seconds)
