"""
Bet reminder email: variables, subject and plain-text rendering.
"""

from typing import List
from urllib.parse import urlencode

from mespronos.database.models import Day, Game, User
from mespronos.models.schemas import (
    GameSummary,
    ReminderEmailDay,
    ReminderEmailUser,
    ReminderEmailVariables,
)
from mespronos.utils.datetime_utils import format_long_date_without_year


def build_login_link(site_url: str, destination: str) -> str:
    """Absolute login URL that redirects to `destination` once signed in."""
    return f"{site_url.rstrip('/')}/user/login?{urlencode({'destination': destination})}"


def build_reminder_subject(site_name: str, day: Day) -> str:
    """e.g. "MesPronos - Bet Reminder - Ligue 1 - Day 12"."""
    return f"{site_name} - Bet Reminder - {day.league.name} - {day.name}"


def build_reminder_email_variables(
    user: User,
    day: Day,
    games: List[Game],
    site_url: str,
    timezone_name: str,
) -> ReminderEmailVariables:
    """
    Collect what the reminder template displays for one user and one day.

    Args:
        user: Recipient
        day: Day being reminded (league loaded)
        games: Every game of the day, teams loaded, in kickoff order
        site_url: Public base URL of the site
        timezone_name: Timezone kickoff times are displayed in

    Returns:
        ReminderEmailVariables
    """
    summaries = [
        GameSummary(
            team1=game.team1.name,
            team1_logo=game.team1.logo_url,
            team2=game.team2.name,
            team2_logo=game.team2.logo_url,
            date=format_long_date_without_year(
                game.game_date, timezone_name, user.preferred_langcode
            ),
        )
        for game in games
    ]

    return ReminderEmailVariables(
        user=ReminderEmailUser(
            name=user.username,
            my_account_link=build_login_link(site_url, f"/user/{user.id}/edit"),
        ),
        day=ReminderEmailDay(
            label=day.label,
            bet_link=build_login_link(site_url, f"/mespronos/day/{day.id}/bet"),
            games=summaries,
        ),
    )


def render_reminder_email(variables: ReminderEmailVariables) -> str:
    """Render the plain-text body of a bet reminder."""
    body_lines = [
        f"Hello {variables.user.name},",
        "",
        f"You have not placed all your bets for {variables.day.label} yet.",
        "",
        "=" * 60,
        "UPCOMING GAMES:",
        "=" * 60,
    ]

    for game in variables.day.games:
        body_lines.append(f"{game.team1} - {game.team2}")
        body_lines.append(f"    {game.date}")
        if game.team1_logo or game.team2_logo:
            body_lines.append(
                f"    {game.team1_logo or '-'} | {game.team2_logo or '-'}"
            )

    body_lines.extend(
        [
            "",
            f"Place your bets: {variables.day.bet_link}",
            "",
            "---",
            "You receive this email because bet reminders are enabled on your account.",
            f"Change your preferences: {variables.user.my_account_link}",
        ]
    )

    return "\n".join(body_lines)
