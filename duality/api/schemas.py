"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the orchestration bridge and
the engine. Tool arguments live in tools.py; this module only covers the
HTTP envelope around them.

Error Codes:
- VALIDATION_ERROR: Tool arguments failed validation (nothing changed)
- UNKNOWN_TOOL: No tool is registered under that name
- SESSION_NOT_FOUND: Session does not exist (only reported by DELETE)
- INTERNAL_ERROR: Unexpected failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a session."""
    session_id: Optional[str] = Field(None, description="Caller-chosen id (generated if omitted)")
    seed: Optional[int] = Field(None, description="Seed for the session's dice")


# =============================================================================
# Response Models
# =============================================================================

class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    seed: Optional[int] = None
    created_at: float = 0.0
    operation_count: int = 0
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """List of active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response from ending a session."""
    success: bool
    session_id: str


class ToolDefinition(BaseModel):
    """A tool as registered with the LLM."""
    name: str
    description: str
    parameters: dict[str, Any] = Field(description="JSON schema of the arguments")


class ToolListResponse(BaseModel):
    """All registered tools."""
    tools: list[ToolDefinition]
    count: int


class ToolCallResponse(BaseModel):
    """Result of invoking one tool."""
    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    output: Any = None
    state_changed: bool = Field(False, alias="stateChanged")
    game_state: dict[str, Any] = Field(default_factory=dict, alias="gameState")

    model_config = {"populate_by_name": True}


class GameStateResponse(BaseModel):
    """Full JSON snapshot of a session."""
    session_id: str
    state: dict[str, Any]
    api_version: str = "v1"


class StateSummaryResponse(BaseModel):
    """Textual digest of a session for prompt assembly."""
    session_id: str
    summary: str
    api_version: str = "v1"


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str
    active_sessions: int = 0
