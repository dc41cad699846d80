"""
Bet reminder service: emails members who still have bets to place.

For every configured lookahead threshold H (hours), games kicking off within
the next H hours that are not played yet are collected. Members with the
reminder preference enabled and at least one missing bet on those games get
one email per day, provided they take part in the day's league ranking.
A Reminder row is written per (day, threshold) once emails went out, which
keeps the same day from being reminded again at that threshold or any larger one.

Runs once from scripts/send_reminders.py (cron), from the admin API, or as a
background worker polling every REMINDER_POLL_INTERVAL_SECONDS.
"""

import asyncio
import logging
import os
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Optional, Set

import pytz
from sqlalchemy import select, func, distinct, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from mespronos.database import db
from mespronos.database.models import Bet, Day, Game, RankingLeague, Reminder, User
from mespronos.models.schemas import (
    DayReminderResult,
    ReminderConfig,
    ReminderEmailVariables,
    ReminderRunSummary,
    ThresholdResult,
)
from mespronos.services import data_service, email_service, settings_service
from mespronos.services.reminder_email import (
    build_reminder_email_variables,
    build_reminder_subject,
    render_reminder_email,
)
from mespronos.utils.constants import (
    DEFAULT_SITE_NAME,
    DEFAULT_SITE_URL,
    DISPLAY_TIMEZONE_ENV,
    DISPLAY_TIMEZONE_KEY,
    REMINDER_ENABLED_ENV,
    REMINDER_ENABLED_KEY,
    REMINDER_HOURS_ENV,
    REMINDER_HOURS_KEY,
    SITE_NAME_ENV,
    SITE_NAME_KEY,
    SITE_URL_ENV,
    SITE_URL_KEY,
)
from mespronos.utils.datetime_utils import DEFAULT_DISPLAY_TIMEZONE, utcnow

logger = logging.getLogger(__name__)

# How often the worker runs the reminder job (seconds)
POLL_INTERVAL_SECONDS = int(os.getenv("REMINDER_POLL_INTERVAL_SECONDS", "900"))

# Called as mailer(to_email, subject, body, locale=..., session=...)
Mailer = Callable[..., Awaitable[bool]]
Renderer = Callable[[ReminderEmailVariables], str]
Clock = Callable[[], datetime]


#
# Configuration
#

async def get_reminder_config(session: Optional[AsyncSession]) -> ReminderConfig:
    """
    Read the enabled flag and the lookahead thresholds.

    Thresholds are deduplicated, non-positive values dropped, and sorted
    ascending so that the closest threshold is handled first.
    """
    enabled = await settings_service.get_bool_setting(
        session, REMINDER_ENABLED_KEY, env_var=REMINDER_ENABLED_ENV, default=False
    )
    hours = await settings_service.get_int_list_setting(
        session, REMINDER_HOURS_KEY, env_var=REMINDER_HOURS_ENV
    )
    return ReminderConfig(enabled=enabled, hours=sorted({h for h in hours if h > 0}))


async def get_email_context(session: Optional[AsyncSession]) -> Dict[str, str]:
    """Site name, site URL and display timezone used to build emails."""
    site_name = await settings_service.get_setting_with_fallback(
        session, SITE_NAME_KEY, env_var=SITE_NAME_ENV, default=DEFAULT_SITE_NAME
    )
    site_url = await settings_service.get_setting_with_fallback(
        session, SITE_URL_KEY, env_var=SITE_URL_ENV, default=DEFAULT_SITE_URL
    )
    timezone_name = await settings_service.get_setting_with_fallback(
        session,
        DISPLAY_TIMEZONE_KEY,
        env_var=DISPLAY_TIMEZONE_ENV,
        default=DEFAULT_DISPLAY_TIMEZONE,
    )
    if timezone_name not in pytz.all_timezones_set:
        logger.warning(
            f"Unknown display timezone {timezone_name!r}, using {DEFAULT_DISPLAY_TIMEZONE}"
        )
        timezone_name = DEFAULT_DISPLAY_TIMEZONE

    return {"site_name": site_name, "site_url": site_url, "timezone": timezone_name}


#
# Queries
#

async def get_upcoming_games(
    session: AsyncSession, nb_hours: int, now: datetime
) -> List[Game]:
    """
    Games kicking off in (now, now + nb_hours] with at least one score unset.

    Args:
        session: Database session
        nb_hours: Lookahead in hours
        now: Current UTC time

    Returns:
        Games (day and league loaded) ordered by kickoff, then id
    """
    date_to = now + timedelta(hours=nb_hours)
    result = await session.execute(
        select(Game)
        .options(selectinload(Game.day).selectinload(Day.league))
        .where(
            Game.game_date > now,
            Game.game_date <= date_to,
            or_(Game.score_team_1.is_(None), Game.score_team_2.is_(None)),
        )
        .order_by(Game.game_date.asc(), Game.id.asc())
    )
    return list(result.scalars().all())


async def is_day_reminded(session: AsyncSession, day_id: int, nb_hours: int) -> bool:
    """True if a reminder went out for the day at this threshold or a closer one."""
    result = await session.execute(
        select(Reminder.id)
        .where(Reminder.day_id == day_id, Reminder.hour <= nb_hours)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def filter_already_reminded(
    session: AsyncSession, games: List[Game], nb_hours: int
) -> List[Game]:
    """Drop games whose day was already reminded. Each day is looked up once."""
    reminded_days: Dict[int, bool] = {}
    remaining = []
    for game in games:
        if game.day_id not in reminded_days:
            reminded_days[game.day_id] = await is_day_reminded(session, game.day_id, nb_hours)
        if not reminded_days[game.day_id]:
            remaining.append(game)
    return remaining


async def get_users_with_enabled_reminder(session: AsyncSession) -> List[int]:
    """IDs of active members who opted in to bet reminders."""
    result = await session.execute(
        select(User.id)
        .where(User.status.is_(True), User.reminder_enabled.is_(True))
        .order_by(User.id.asc())
    )
    return list(result.scalars().all())


async def has_missing_bets(session: AsyncSession, user_id: int, games: List[Game]) -> bool:
    """
    Whether the member has not bet on at least one of `games`.

    An empty game list never has missing bets.
    """
    if not games:
        return False
    game_ids = [game.id for game in games]

    result = await session.execute(
        select(func.count(distinct(Bet.game_id))).where(
            Bet.game_id.in_(game_ids), Bet.better_id == user_id
        )
    )
    nb_bets_done = result.scalar() or 0
    return nb_bets_done < len(game_ids)


async def get_users_to_remind(
    session: AsyncSession, user_ids: List[int], games: List[Game]
) -> List[int]:
    """Members among `user_ids` with at least one missing bet on `games`."""
    users_to_remind = []
    for user_id in user_ids:
        if await has_missing_bets(session, user_id, games):
            users_to_remind.append(user_id)
    return users_to_remind


def group_games_by_day(games: List[Game]) -> Dict[int, Day]:
    """Days of `games` keyed by id, in order of first appearance."""
    days: Dict[int, Day] = {}
    for game in games:
        if game.day_id not in days:
            days[game.day_id] = game.day
    return days


async def get_betters_on_league(session: AsyncSession, league_id: int) -> Set[int]:
    """Members having an entry in the league ranking."""
    result = await session.execute(
        select(RankingLeague.better_id)
        .where(RankingLeague.league_id == league_id)
        .distinct()
    )
    return set(result.scalars().all())


def get_users_to_remind_on_day(users_to_remind: List[int], betters_on_league: Set[int]) -> List[int]:
    return [user_id for user_id in users_to_remind if user_id in betters_on_league]


class ReminderService:
    """Runs the bet reminder job, once or as a background worker."""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        mailer: Optional[Mailer] = None,
        renderer: Optional[Renderer] = None,
        clock: Optional[Clock] = None,
    ):
        self._session_factory = session_factory
        self._mailer = mailer or email_service.send_email
        self._renderer = renderer or render_reminder_email
        self._clock = clock or utcnow
        self._worker_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    def _sessions(self) -> async_sessionmaker:
        # Resolved at call time so a swapped db.AsyncSessionLocal is honoured
        return self._session_factory or db.AsyncSessionLocal

    def start(self) -> None:
        """Start the background reminder worker."""
        if self._worker_task is None or self._worker_task.done():
            self._stop_event.clear()
            self._worker_task = asyncio.create_task(self._poll_loop())
            logger.info("Reminder worker started")

    def stop(self) -> None:
        """Stop the background reminder worker."""
        self._stop_event.set()
        if self._worker_task and not self._worker_task.done():
            self._worker_task.cancel()
            logger.info("Reminder worker stopped")

    async def _poll_loop(self) -> None:
        """Main loop: run the job, then sleep. Repeats until stopped."""
        while not self._stop_event.is_set():
            try:
                await self.run()
            except Exception as e:
                logger.error(f"Error in reminder worker: {e}", exc_info=True)

            # Wait for poll interval or until stop is signalled
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=POLL_INTERVAL_SECONDS
                )
                break
            except asyncio.TimeoutError:
                pass

    async def run(self) -> ReminderRunSummary:
        """
        Run one reminder cycle.

        Returns:
            ReminderRunSummary. `enabled` is False when reminders are switched off;
            then nothing beyond the settings was queried and nothing was sent or written.
        """
        async with self._sessions()() as session:
            config = await get_reminder_config(session)
            if not config.enabled:
                logger.debug("Bet reminders are disabled")
                return ReminderRunSummary(enabled=False)
            if not config.hours:
                logger.debug("No reminder hours configured")
                return ReminderRunSummary(enabled=True)

            now = self._clock()
            email_context = await get_email_context(session)
            users = await get_users_with_enabled_reminder(session)
            summary = ReminderRunSummary(enabled=True, eligible_users=len(users))

            for nb_hours in config.hours:
                result = await self._remind_threshold(
                    session, nb_hours, now, users, email_context
                )
                summary.thresholds.append(result)
                summary.emails_sended += sum(day.emails_sended for day in result.days)

            return summary

    async def _remind_threshold(
        self,
        session: AsyncSession,
        nb_hours: int,
        now: datetime,
        users: List[int],
        email_context: Dict[str, str],
    ) -> ThresholdResult:
        """Remind every not-yet-reminded day with games within `nb_hours`."""
        games = await get_upcoming_games(session, nb_hours, now)
        games = await filter_already_reminded(session, games, nb_hours)
        result = ThresholdResult(hour=nb_hours, upcoming_games=len(games), users_to_remind=0)
        if not games:
            return result

        logger.debug(f"{len(games)} games upcoming in the next {nb_hours} hours")

        users_to_remind = await get_users_to_remind(session, users, games)
        result.users_to_remind = len(users_to_remind)
        if not users_to_remind:
            return result

        for day_id, day in group_games_by_day(games).items():
            betters_on_league = await get_betters_on_league(session, day.league_id)
            users_on_day = get_users_to_remind_on_day(users_to_remind, betters_on_league)
            if not users_on_day:
                continue

            nb_mail = await self.send_reminder(session, users_on_day, day, email_context)
            recorded = False
            if nb_mail > 0:
                recorded = await self.record_reminder(day_id, nb_hours, nb_mail)
                if recorded:
                    logger.info(
                        f"Reminder sent for day #{day_id} ({day.label}): {nb_mail} mails sent "
                        f"(total of {len(users)} members with reminder enabled)"
                    )

            result.days.append(
                DayReminderResult(
                    day_id=day_id,
                    day_label=day.label,
                    users_notified=len(users_on_day),
                    emails_sended=nb_mail,
                    recorded=recorded,
                )
            )

        return result

    async def send_reminder(
        self,
        session: AsyncSession,
        user_ids: List[int],
        day: Day,
        email_context: Dict[str, str],
    ) -> int:
        """
        Email every member in `user_ids` about `day`, one message at a time.

        Returns:
            Number of messages the mail transport accepted. Failures are logged
            and do not stop the remaining members.
        """
        if not user_ids:
            return 0

        games = await data_service.get_day_games(session, day.id)
        users = await data_service.get_users_by_ids(session, user_ids)
        subject = build_reminder_subject(email_context["site_name"], day)

        nb_mail = 0
        for user_id in user_ids:
            user = users.get(user_id)
            if user is None:
                continue

            variables = build_reminder_email_variables(
                user, day, games, email_context["site_url"], email_context["timezone"]
            )
            body = self._renderer(variables)

            try:
                sent = await self._mailer(
                    user.email,
                    subject,
                    body,
                    locale=user.preferred_langcode,
                    session=session,
                )
            except Exception as e:
                logger.warning(f"Failed to send reminder for day #{day.id} to user {user_id}: {e}")
                continue

            if sent:
                nb_mail += 1
            else:
                logger.warning(f"Reminder for day #{day.id} was not accepted for user {user_id}")

        return nb_mail

    async def record_reminder(self, day_id: int, nb_hours: int, nb_mail: int) -> bool:
        """
        Persist the write-once Reminder marker for (day, threshold).

        Returns:
            False if a concurrent run already recorded it.
        """
        async with self._sessions()() as session:
            session.add(Reminder(day_id=day_id, hour=nb_hours, emails_sended=nb_mail))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning(
                    f"Reminder for day #{day_id} at {nb_hours}h already recorded by another run"
                )
                return False
        return True


# Global singleton
_reminder_service = ReminderService()


def get_reminder_service() -> ReminderService:
    """Get the global reminder service instance."""
    return _reminder_service
