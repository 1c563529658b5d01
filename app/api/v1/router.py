"""Aggregates all v1 routers."""
from fastapi import APIRouter
from app.api.v1.tasks import router as tasks_router
from app.api.v1.daily_completion import router as daily_completion_router
from app.api.v1.ai import router as ai_router

router = APIRouter()
router.include_router(tasks_router)
router.include_router(daily_completion_router)
router.include_router(ai_router)
