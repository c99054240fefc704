"""Game update schemas."""
from typing import Any, Optional
from pydantic import BaseModel, Field


class GameUpdateResponse(BaseModel):
    """Response schema for a client poll."""
    game: dict[str, Any]
    viewingPlayer: Optional[dict[str, Any]] = None  # None for spectators
    pendingInputs: list[Any] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response schema for the health check."""
    status: str
    backends: list[str]
