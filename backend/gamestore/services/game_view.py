"""Envelope view over a stored JSON game.

The store treats payloads as opaque, but the update endpoint and the client
synchronizer both need a handful of top-level fields to do their job:

    {
        "gameStateId": 12,                # bumps on every authoritative change
        "activePlayerId": "p1",
        "gameStatus": "GAME_END" | ...,
        "players": [{"playerId": "p1", "playerSecret": "...", ...}, ...],
        "pendingInputs": {"p1": [...]}    # or a list for the active player
    }

Everything else in the game object is passed through untouched.
"""
import copy
import secrets
from dataclasses import dataclass, field
from typing import Any, Optional

GAME_OVER_STATUS = "GAME_END"
SECRET_FIELD = "playerSecret"


@dataclass(frozen=True)
class GameView:
    """Top-level fields of a game payload."""

    game_state_id: int
    active_player_id: Optional[str]
    is_game_over: bool
    players: list[dict] = field(default_factory=list)
    pending_inputs: Any = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, game: dict) -> "GameView":
        try:
            state_id = int(game.get("gameStateId", 0))
        except (TypeError, ValueError):
            state_id = 0
        players = game.get("players") or []
        return cls(
            game_state_id=state_id,
            active_player_id=game.get("activePlayerId"),
            is_game_over=game.get("gameStatus") == GAME_OVER_STATUS,
            players=[p for p in players if isinstance(p, dict)],
            pending_inputs=game.get("pendingInputs"),
            raw=game,
        )

    def find_player(self, player_id: str) -> Optional[dict]:
        for player in self.players:
            if player.get("playerId") == player_id:
                return player
        return None

    def secret_matches(self, player_id: str, secret: Optional[str]) -> bool:
        """Constant-time comparison of a player's secret."""
        player = self.find_player(player_id)
        if player is None or secret is None:
            return False
        expected = player.get(SECRET_FIELD)
        if not isinstance(expected, str):
            return False
        return secrets.compare_digest(expected.encode(), secret.encode())

    def public_game(self) -> dict:
        """Game JSON with every player secret removed."""
        game = copy.deepcopy(self.raw)
        for player in game.get("players") or []:
            if isinstance(player, dict):
                player.pop(SECRET_FIELD, None)
        return game

    def viewing_player(self, player_id: Optional[str]) -> Optional[dict]:
        if player_id is None:
            return None
        player = self.find_player(player_id)
        if player is None:
            return None
        public = dict(player)
        public.pop(SECRET_FIELD, None)
        return public

    def pending_inputs_for(self, player_id: Optional[str]) -> list:
        if player_id is None or self.is_game_over:
            return []
        inputs = self.pending_inputs
        if isinstance(inputs, dict):
            return list(inputs.get(player_id) or [])
        if isinstance(inputs, list) and player_id == self.active_player_id:
            return list(inputs)
        return []
