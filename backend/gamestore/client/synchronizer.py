"""Client-side game state synchronizer.

Keeps one client's view of a game in step with the server by polling the
update endpoint while someone else is expected to act:

    IDLE ──mount──> POLLING   game running and it is not our turn
                    STOPPED   game over, or it is our turn

The decision is re-made whenever the active player or the game-over flag
changes, and the previous timer is always torn down first, so a view never
has two timers. The timer is single-shot and re-armed only after a poll
completes, so polls never overlap.

When the turn passes to the local player (and this is not the first
observation since mount), a local notification is attempted.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from gamestore.client.notifications import (
    Notifier,
    NullNotifier,
    notify_safely,
    request_permission_safely,
)
from gamestore.core.config import settings
from gamestore.services.game_view import GameView

logger = logging.getLogger(__name__)

GAME_UPDATES_PATH = "/api/game-updates"
NOTIFICATION_TITLE = "Everdell"
NOTIFICATION_BODY = "It's your turn!"

UpdateCallback = Callable[[dict], Union[None, Awaitable[None]]]

_UNSET: Any = object()


class SyncPhase(str, Enum):
    """Synchronizer states."""
    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


@dataclass
class ClientSyncState:
    """Per-view synchronization state. Mutated only by the synchronizer."""
    session_id: str
    local_player_id: Optional[str]
    local_player_secret: Optional[str]
    active_player_id: Optional[str]
    last_known_state_version: int = 0
    is_game_over: bool = False

    @property
    def is_local_turn(self) -> bool:
        return (
            self.local_player_id is not None
            and self.active_player_id == self.local_player_id
        )


class GameUpdater:
    """Polls for fresh game state on behalf of one mounted game view.

    Args:
        state: Initial sync state for the view.
        on_update: Called with each successful poll response
            ({game, viewingPlayer, pendingInputs}). May be sync or async.
        http_client: Client pointed at the game server.
        notifier: Platform notifier; defaults to no notifications.
        interval: Seconds between polls; defaults to POLL_INTERVAL_SECONDS.
        endpoint: Path of the update endpoint.

    Usage:
        async with httpx.AsyncClient(base_url=url) as http:
            async with GameUpdater(state, on_update, http) as updater:
                ...
                updater.set_inputs(active_player_id="p2")
    """

    def __init__(
        self,
        state: ClientSyncState,
        on_update: UpdateCallback,
        http_client: httpx.AsyncClient,
        notifier: Optional[Notifier] = None,
        interval: Optional[float] = None,
        endpoint: str = GAME_UPDATES_PATH,
    ):
        if interval is None:
            interval = settings.POLL_INTERVAL_SECONDS
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.state = state
        self.interval = interval
        self.endpoint = endpoint
        self.phase = SyncPhase.IDLE
        self._on_update = on_update
        self._client = http_client
        self._notifier: Notifier = notifier or NullNotifier()
        self._timer: Optional[asyncio.Task] = None
        self._poll_in_flight = False
        self._mounted = False
        self._first_observation = True

    async def __aenter__(self) -> "GameUpdater":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def has_timer(self) -> bool:
        return self._timer is not None and not self._timer.done()

    # ── Lifecycle ──

    async def mount(self) -> None:
        """Start synchronizing: ask for notification permission, then decide."""
        if self._mounted:
            return
        self._mounted = True
        self._first_observation = True
        await request_permission_safely(self._notifier)
        self._evaluate(previous_active_player_id=self.state.active_player_id)

    def unmount(self) -> None:
        """Stop synchronizing. An in-flight poll still completes and applies."""
        self._mounted = False
        self._cancel_timer()
        self.phase = SyncPhase.STOPPED

    def set_inputs(
        self,
        *,
        active_player_id: Optional[str] = _UNSET,
        is_game_over: bool = _UNSET,
    ) -> None:
        """Feed new view inputs; re-decides polling when either one changed.

        Must be called from the event loop the updater was mounted on, since a
        re-decision may start a new timer task.

        Raises:
            RuntimeError: If a re-decision is needed and no event loop is running.
        """
        previous_active = self.state.active_player_id
        previous_over = self.state.is_game_over
        if active_player_id is not _UNSET:
            self.state.active_player_id = active_player_id
        if is_game_over is not _UNSET:
            self.state.is_game_over = bool(is_game_over)

        changed = (
            self.state.active_player_id != previous_active
            or self.state.is_game_over != previous_over
        )
        if changed and self._mounted:
            self._evaluate(previous_active_player_id=previous_active)

    # ── Polling ──

    async def refresh(self) -> bool:
        """Poll right away. Returns False if skipped or nothing new arrived."""
        return await self._poll()

    async def poll_once(self) -> Optional[dict]:
        """Fetch the latest state without applying it.

        Returns the response body on HTTP 200 when it is a JSON object; None
        for any other status or body, or on transport failure.
        """
        params = {
            "sessionId": self.state.session_id,
            "stateVersion": str(self.state.last_known_state_version),
        }
        if self.state.local_player_id is not None:
            params["playerId"] = self.state.local_player_id
        if self.state.local_player_secret is not None:
            params["playerSecret"] = self.state.local_player_secret

        try:
            response = await self._client.get(
                self.endpoint,
                params=params,
                headers={"Cache-Control": "no-cache", "Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.debug(f"Poll for game {self.state.session_id} failed: {e}")
            return None

        if response.status_code != 200:
            return None
        try:
            data = response.json()
        except ValueError:
            logger.debug(f"Poll for game {self.state.session_id} returned invalid JSON")
            return None
        if not isinstance(data, dict):
            logger.debug(f"Poll for game {self.state.session_id} returned a non-object body")
            return None
        return data

    async def _poll(self) -> bool:
        if self._poll_in_flight:
            return False
        self._poll_in_flight = True
        try:
            data = await self.poll_once()
        finally:
            self._poll_in_flight = False
        if data is None:
            return False
        await self._apply(data)
        return True

    async def _apply(self, data: dict) -> None:
        """Apply a poll response. Last response to arrive wins."""
        game = data.get("game")
        view = GameView.from_json(game if isinstance(game, dict) else {})
        self.state.last_known_state_version = view.game_state_id

        try:
            result = self._on_update(data)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"on_update failed for game {self.state.session_id}: {e}", exc_info=True)

        self.set_inputs(
            active_player_id=view.active_player_id,
            is_game_over=view.is_game_over,
        )

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            # Shielded: tearing down the timer never aborts a request in flight.
            try:
                await asyncio.shield(self._poll())
            except Exception as e:
                logger.error(f"Poll for game {self.state.session_id} failed: {e}", exc_info=True)

    # ── State machine ──

    def _evaluate(self, previous_active_player_id: Optional[str]) -> None:
        # Fails before touching the timer when called off the loop
        loop = asyncio.get_running_loop()
        self._cancel_timer()

        if self._first_observation:
            self._first_observation = False
        elif self.state.is_local_turn and previous_active_player_id != self.state.local_player_id:
            notify_safely(self._notifier, NOTIFICATION_TITLE, NOTIFICATION_BODY)

        if not self.state.is_game_over and not self.state.is_local_turn:
            self._timer = loop.create_task(self._run_timer())
            self.phase = SyncPhase.POLLING
        else:
            self.phase = SyncPhase.STOPPED

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
