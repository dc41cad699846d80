"""
Data service layer for database operations.
Handles the CRUD operations shared by the reminder job, the API and the scripts.
"""

from typing import List, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from mespronos.database.models import Day, Game, Reminder, Setting, User


#
# Settings
#

async def get_setting(session: AsyncSession, key: str) -> Optional[str]:
    """
    Get a setting value.

    Args:
        session: Database session
        key: Setting key

    Returns:
        Setting value or None if not found
    """
    result = await session.execute(
        select(Setting).where(Setting.key == key)
    )
    setting = result.scalar_one_or_none()
    return setting.value if setting else None


async def set_setting(session: AsyncSession, key: str, value: str) -> None:
    """
    Set a setting value (insert or update).

    Args:
        session: Database session
        key: Setting key
        value: Setting value
    """
    result = await session.execute(
        select(Setting).where(Setting.key == key)
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        session.add(Setting(key=key, value=value))
    else:
        setting.value = value
    await session.commit()


#
# Users, days and games
#

async def get_users_by_ids(session: AsyncSession, user_ids: List[int]) -> Dict[int, User]:
    """Load users keyed by id. Unknown ids are absent from the result."""
    if not user_ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(user_ids)))
    return {user.id: user for user in result.scalars().all()}


async def get_day_games(session: AsyncSession, day_id: int) -> List[Game]:
    """
    Get every game of a day, teams loaded, ordered by kickoff then id.

    Args:
        session: Database session
        day_id: Day ID

    Returns:
        List of Game ORM objects
    """
    result = await session.execute(
        select(Game)
        .options(selectinload(Game.team1), selectinload(Game.team2))
        .where(Game.day_id == day_id)
        .order_by(Game.game_date.asc(), Game.id.asc())
    )
    return list(result.scalars().all())


#
# Reminders
#

async def list_reminders(
    session: AsyncSession, limit: int = 50, offset: int = 0
) -> List[Dict]:
    """
    List sent reminders, newest first.

    Args:
        session: Database session
        limit: Maximum number of rows
        offset: Number of rows to skip

    Returns:
        List of reminder dicts including the day label
    """
    result = await session.execute(
        select(Reminder)
        .options(selectinload(Reminder.day).selectinload(Day.league))
        .order_by(Reminder.created_at.desc(), Reminder.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [
        {
            "id": reminder.id,
            "day_id": reminder.day_id,
            "day_label": reminder.day.label if reminder.day else None,
            "hour": reminder.hour,
            "emails_sended": reminder.emails_sended,
            "created_at": reminder.created_at.isoformat() if reminder.created_at else None,
        }
        for reminder in result.scalars().all()
    ]
