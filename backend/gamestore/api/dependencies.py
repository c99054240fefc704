"""FastAPI dependency injection functions for the game store."""
from fastapi import Request

from gamestore.services.game_store import GameStore


def get_game_store(request: Request) -> GameStore:
    """Return the process-wide GameStore built at startup.

    Usage:
        @router.get("/game-updates")
        async def poll(store: GameStore = Depends(get_game_store)):
            ...
    """
    return request.app.state.game_store
