"""Game store facade.

The single entry point the rules engine and the HTTP layer use to read and
write persisted games. Each call resolves the backend for the game id,
makes sure the games table exists, then runs the operation.

Upsert protocol (save_game):
    exists -> update, else insert

The check and the write are separate statements, so two concurrent saves of
the same brand-new game can both see "absent"; the losing insert raises
DuplicateKeyError. With retry_on_conflict enabled that insert is retried
once as an update instead.
"""
import json
import logging
from typing import Any, Optional

from gamestore.core.exceptions import DuplicateKeyError
from gamestore.storage import StoreRegistry

logger = logging.getLogger(__name__)


class GameStore:
    """Read/write access to persisted game payloads.

    Payloads are opaque strings; the store never interprets them.
    """

    def __init__(self, registry: StoreRegistry, retry_on_conflict: bool = False):
        self._registry = registry
        self.retry_on_conflict = retry_on_conflict

    @property
    def registry(self) -> StoreRegistry:
        return self._registry

    async def get_game(self, game_id: str) -> Optional[str]:
        """Return the stored payload for a game, or None if it was never saved."""
        backend = self._registry.backend_for(game_id)
        await backend.ensure_schema()
        return await backend.fetch(game_id)

    async def save_game(self, game_id: str, payload: str) -> None:
        """Create the game record if absent, else overwrite its payload.

        Raises:
            DuplicateKeyError: If a concurrent save created the record between
                the existence check and the insert (unless retry_on_conflict).
            BackendUnavailableError: On backend I/O failure.
        """
        backend = self._registry.backend_for(game_id)
        await backend.ensure_schema()

        if await backend.exists(game_id):
            await backend.update(game_id, payload)
            return

        try:
            await backend.insert(game_id, payload)
        except DuplicateKeyError:
            if not self.retry_on_conflict:
                logger.warning(f"Concurrent first save for game {game_id} lost the insert race")
                raise
            logger.info(f"Insert race on game {game_id}, retrying as update")
            await backend.update(game_id, payload)

    async def get_game_json(self, game_id: str) -> Optional[Any]:
        """Load and decode a JSON game payload."""
        payload = await self.get_game(game_id)
        if payload is None:
            return None
        return json.loads(payload)

    async def save_game_json(self, game_id: str, data: Any) -> None:
        """Encode a game as JSON and save it."""
        await self.save_game(game_id, json.dumps(data, ensure_ascii=False))
