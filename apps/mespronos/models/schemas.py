"""
Pydantic models for email variables and API request/response validation.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class GameSummary(BaseModel):
    """One game as listed in a reminder email."""

    team1: str
    team1_logo: Optional[str] = None
    team2: str
    team2_logo: Optional[str] = None
    date: str  # Kickoff, already converted to the display timezone


class ReminderEmailUser(BaseModel):
    """Recipient block of a reminder email."""

    name: str
    my_account_link: str


class ReminderEmailDay(BaseModel):
    """Day block of a reminder email."""

    label: str  # "<league> - <day>"
    bet_link: str
    games: List[GameSummary] = Field(default_factory=list)


class ReminderEmailVariables(BaseModel):
    """Everything the reminder renderer needs."""

    user: ReminderEmailUser
    day: ReminderEmailDay


class ReminderConfig(BaseModel):
    """Reminder job configuration."""

    enabled: bool = False
    hours: List[int] = Field(default_factory=list)


class DayReminderResult(BaseModel):
    """Outcome of reminding one day at one threshold."""

    day_id: int
    day_label: str
    users_notified: int
    emails_sended: int
    recorded: bool


class ThresholdResult(BaseModel):
    """Outcome of one lookahead threshold."""

    hour: int
    upcoming_games: int
    users_to_remind: int
    days: List[DayReminderResult] = Field(default_factory=list)


class ReminderRunSummary(BaseModel):
    """Outcome of a reminder job run."""

    enabled: bool
    eligible_users: int = 0
    emails_sended: int = 0
    thresholds: List[ThresholdResult] = Field(default_factory=list)


class ReminderResponse(BaseModel):
    """A sent-reminder record."""

    id: int
    day_id: int
    day_label: Optional[str] = None
    hour: int
    emails_sended: int
    created_at: Optional[str] = None
