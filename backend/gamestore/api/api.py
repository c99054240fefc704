"""API router aggregation."""
from fastapi import APIRouter

from gamestore.api.endpoints import game_updates, health

api_router = APIRouter(prefix="/api")
api_router.include_router(game_updates.router)
api_router.include_router(health.router)
