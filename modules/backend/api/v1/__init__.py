"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from modules.backend.api.v1.endpoints import bot

router = APIRouter()

# Backend link used by the bot gateway
router.include_router(bot.router, prefix="/bot", tags=["bot"])
