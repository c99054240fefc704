"""Custom exceptions for the application.

Provides standardized error handling across the store and the HTTP layer.
Store errors propagate unchanged from the drivers through the router and
the game store; only the HTTP layer turns them into responses.
"""
from typing import Optional
from fastapi import status


class AppException(Exception):
    """Base exception for application errors."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class StoreException(AppException):
    """Game store exceptions."""
    pass


class NoBackendConfiguredError(StoreException):
    """Raised when no store endpoint can serve a game id (or none is set at all)."""

    def __init__(self, game_id: Optional[str] = None, tried: Optional[list[str]] = None):
        if game_id is None:
            message = "No store endpoint configured"
        else:
            message = f"No store endpoint configured for game: {game_id}"
        details = {}
        if game_id is not None:
            details["game_id"] = game_id
        if tried:
            details["tried"] = tried
        super().__init__(
            message=message,
            code="NO_BACKEND_CONFIGURED",
            details=details
        )


class DuplicateKeyError(StoreException):
    """Raised when inserting a game id that already has a record."""

    http_status = status.HTTP_409_CONFLICT

    def __init__(self, game_id: str):
        super().__init__(
            message=f"Game already exists: {game_id}",
            code="DUPLICATE_KEY",
            details={"game_id": game_id}
        )


class BackendUnavailableError(StoreException):
    """Raised when a store backend fails with an I/O or connection error."""

    http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, backend: str, operation: str, reason: str = ""):
        super().__init__(
            message=f"Store backend {backend} unavailable during {operation}",
            code="BACKEND_UNAVAILABLE",
            details={"backend": backend, "operation": operation, "reason": reason}
        )


class GameException(AppException):
    """Game-related exceptions."""
    pass


class GameNotFoundError(GameException):
    """Raised when a game is not found."""

    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, game_id: str):
        super().__init__(
            message=f"Game not found: {game_id}",
            code="GAME_NOT_FOUND",
            details={"game_id": game_id}
        )


class UnauthorizedError(GameException):
    """Raised when a player secret does not match."""

    http_status = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED"
        )


class InvalidGamePayloadError(GameException):
    """Raised when a stored game payload is not a JSON object."""

    def __init__(self, game_id: str, reason: str = ""):
        super().__init__(
            message=f"Stored game is not a readable JSON object: {game_id}",
            code="INVALID_GAME_PAYLOAD",
            details={"game_id": game_id, "reason": reason}
        )
