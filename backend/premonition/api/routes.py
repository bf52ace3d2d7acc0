"""API route definitions."""

from fastapi import APIRouter

from premonition.api.leaderboard import router as leaderboard_router

router = APIRouter()

router.include_router(leaderboard_router)
