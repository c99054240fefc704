"""Game update polling endpoint."""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from gamestore.api.dependencies import get_game_store
from gamestore.core.exceptions import (
    GameNotFoundError,
    InvalidGamePayloadError,
    UnauthorizedError,
)
from gamestore.schemas.game import GameUpdateResponse
from gamestore.services.game_store import GameStore
from gamestore.services.game_view import GameView

router = APIRouter(tags=["game"])
logger = logging.getLogger(__name__)


def _load_view(game_id: str, payload: str) -> GameView:
    """Decode a stored payload. The store accepts any string, so check the shape here."""
    try:
        game = json.loads(payload)
    except ValueError as e:
        logger.error(f"Stored game {game_id} is not valid JSON: {e}")
        raise InvalidGamePayloadError(game_id, "not valid JSON") from e
    if not isinstance(game, dict):
        logger.error(f"Stored game {game_id} is JSON {type(game).__name__}, not an object")
        raise InvalidGamePayloadError(game_id, "not a JSON object")
    return GameView.from_json(game)


@router.get("/game-updates", response_model=GameUpdateResponse)
async def get_game_updates(
    sessionId: str = Query(..., min_length=1),
    playerId: Optional[str] = Query(None),
    playerSecret: Optional[str] = Query(None),
    stateVersion: Optional[int] = Query(None),
    store: GameStore = Depends(get_game_store),
):
    """
    Latest authoritative state of a game for one viewer.
    GET /api/game-updates?sessionId=&playerId=&playerSecret=&stateVersion=

    Returns:
        200 with {game, viewingPlayer, pendingInputs} when the state changed
        304 when stateVersion already matches the stored state
        403 when playerSecret does not match playerId
        404 when the game does not exist
        500 INVALID_GAME_PAYLOAD when the stored game is not a JSON object
    """
    payload = await store.get_game(sessionId)
    if payload is None:
        raise GameNotFoundError(sessionId)

    view = _load_view(sessionId, payload)

    if playerId is not None and not view.secret_matches(playerId, playerSecret):
        logger.warning(f"Rejected poll for game {sessionId}: bad secret for player {playerId}")
        raise UnauthorizedError("Invalid player secret")

    if stateVersion is not None and stateVersion == view.game_state_id:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)

    return GameUpdateResponse(
        game=view.public_game(),
        viewingPlayer=view.viewing_player(playerId),
        pendingInputs=view.pending_inputs_for(playerId),
    )
