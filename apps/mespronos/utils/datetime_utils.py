"""
Datetime utility functions.
Provides replacements for deprecated datetime functions.
"""

from datetime import datetime
from typing import Optional
import pytz

DEFAULT_DISPLAY_TIMEZONE = "Europe/Paris"

_WEEKDAYS = {
    "fr": ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"],
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}

_MONTHS = {
    "fr": [
        "janvier", "février", "mars", "avril", "mai", "juin",
        "juillet", "août", "septembre", "octobre", "novembre", "décembre",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Return an aware UTC datetime.

    Naive values (as returned by backends without timezone support) are
    taken to already be in UTC.
    """
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def format_long_date_without_year(
    value: datetime,
    timezone_name: str = DEFAULT_DISPLAY_TIMEZONE,
    langcode: Optional[str] = None,
) -> str:
    """
    Format a kickoff time for emails, converted to the display timezone.

    Args:
        value: Kickoff datetime (UTC, aware or naive)
        timezone_name: pytz timezone name to display the time in
        langcode: "fr" or "en"; anything else falls back to English

    Returns:
        e.g. "samedi 12 octobre à 21h00" or "Saturday 12 October at 21:00"

    Examples:
        >>> format_long_date_without_year(datetime(2024, 10, 12, 19, 0), "Europe/Paris", "fr")
        "samedi 12 octobre à 21h00"
    """
    local = ensure_utc(value).astimezone(pytz.timezone(timezone_name))
    lang = langcode if langcode in _WEEKDAYS else "en"
    weekday = _WEEKDAYS[lang][local.weekday()]
    month = _MONTHS[lang][local.month - 1]

    if lang == "fr":
        return f"{weekday} {local.day} {month} à {local.hour:02d}h{local.minute:02d}"
    return f"{weekday} {local.day} {month} at {local.hour:02d}:{local.minute:02d}"
