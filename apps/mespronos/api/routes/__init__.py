"""
API routes - combined router from all domain modules.
"""

from fastapi import APIRouter

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from mespronos.api.routes.reminders import router as reminders_router

router = APIRouter()
router.include_router(reminders_router)
