"""Bet reminder and health check route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mespronos.database.db import get_db_session
from mespronos.services import data_service
from mespronos.services.reminder_service import get_reminder_service
from mespronos.api.auth_dependencies import require_admin_token
from mespronos.models.schemas import ReminderResponse, ReminderRunSummary

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/api/reminders", response_model=List[ReminderResponse])
async def list_reminders(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: None = Depends(require_admin_token),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List sent reminders, newest first.

    Query params:
        limit: page size (1-200, default 50)
        offset: rows to skip
    """
    return await data_service.list_reminders(session, limit=limit, offset=offset)


@router.post("/api/reminders/run", response_model=ReminderRunSummary)
async def run_reminders(_: None = Depends(require_admin_token)):
    """
    Run the bet reminder job now.

    Returns:
        ReminderRunSummary with per-threshold and per-day counts
    """
    try:
        return await get_reminder_service().run()
    except Exception as e:
        logger.error(f"Reminder run failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Reminder run failed")
