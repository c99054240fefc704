"""Client-side synchronization with the game store service."""

from gamestore.client.notifications import (
    LoggingNotifier,
    NotificationPermission,
    Notifier,
    NullNotifier,
)
from gamestore.client.synchronizer import ClientSyncState, GameUpdater, SyncPhase

__all__ = [
    "ClientSyncState",
    "GameUpdater",
    "LoggingNotifier",
    "NotificationPermission",
    "Notifier",
    "NullNotifier",
    "SyncPhase",
]
