"""Health check endpoint."""
from fastapi import APIRouter, Depends

from gamestore.api.dependencies import get_game_store
from gamestore.schemas.game import HealthResponse
from gamestore.services.game_store import GameStore

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(store: GameStore = Depends(get_game_store)) -> HealthResponse:
    """Liveness plus the backend kinds this process can route to."""
    return HealthResponse(
        status="ok",
        backends=[kind.value for kind in store.registry.configured_kinds()],
    )
