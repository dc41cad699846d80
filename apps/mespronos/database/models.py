"""
SQLAlchemy ORM models for the MesPronos prediction system.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from mespronos.database.db import Base


class LeagueStatus(str, enum.Enum):
    """League status enum."""

    FUTURE = "future"
    ACTIVE = "active"
    OVER = "over"
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        """Human readable status, as shown on the site."""
        return LEAGUE_STATUS_LABELS[self]


LEAGUE_STATUS_LABELS = {
    LeagueStatus.FUTURE: "À venir",
    LeagueStatus.ACTIVE: "En cours",
    LeagueStatus.OVER: "Terminé",
    LeagueStatus.ARCHIVED: "Archivé",
}


class User(Base):
    """Member accounts."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(60), nullable=False, unique=True)
    email = Column(String, nullable=False)
    status = Column(Boolean, default=True, nullable=False)  # False = blocked account
    reminder_enabled = Column(Boolean, default=False, nullable=False)  # Opt-in for bet reminders
    preferred_langcode = Column(String(12), default="fr", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    bets = relationship("Bet", back_populates="better")
    rankings = relationship("RankingLeague", back_populates="better")

    __table_args__ = (
        Index("idx_users_reminder", "status", "reminder_enabled"),
    )


class League(Base):
    """Competitions (e.g. "Ligue 1 2015-2016")."""

    __tablename__ = "leagues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    status = Column(Enum(LeagueStatus), default=LeagueStatus.ACTIVE, nullable=False)
    has_ranking = Column(
        Boolean, default=True, nullable=False
    )  # Whether standings are computed for this league
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    days = relationship("Day", back_populates="league", cascade="all, delete-orphan")
    rankings = relationship("RankingLeague", back_populates="league", cascade="all, delete-orphan")


class Team(Base):
    """Teams playing games."""

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    logo_url = Column(String(500), nullable=True)


class Day(Base):
    """Match days: a named group of games within a league."""

    __tablename__ = "days"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    league = relationship("League", back_populates="days")
    games = relationship("Game", back_populates="day", order_by="Game.game_date")
    reminders = relationship("Reminder", back_populates="day")

    @property
    def label(self) -> str:
        """Label used in emails: league name followed by day name."""
        return f"{self.league.name} - {self.name}" if self.league else self.name

    __table_args__ = (Index("idx_days_league", "league_id"),)


class Game(Base):
    """Games: two teams, a kickoff and, once played, a score."""

    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    day_id = Column(Integer, ForeignKey("days.id"), nullable=False)
    team1_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    team2_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    game_date = Column(DateTime(timezone=True), nullable=False)  # Kickoff, UTC
    score_team_1 = Column(Integer, nullable=True)  # NULL until the game is played
    score_team_2 = Column(Integer, nullable=True)

    # Relationships
    day = relationship("Day", back_populates="games")
    team1 = relationship("Team", foreign_keys=[team1_id], lazy="select")
    team2 = relationship("Team", foreign_keys=[team2_id], lazy="select")
    bets = relationship("Bet", back_populates="game")

    __table_args__ = (
        Index("idx_games_day", "day_id"),
        Index("idx_games_date", "game_date"),
    )


class Bet(Base):
    """A member's prediction for one game (one per member and game)."""

    __tablename__ = "bets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    better_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    score_team_1 = Column(Integer, nullable=False)
    score_team_2 = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    better = relationship("User", back_populates="bets")
    game = relationship("Game", back_populates="bets")

    __table_args__ = (
        UniqueConstraint("better_id", "game_id", name="uq_bets_better_game"),
        Index("idx_bets_game", "game_id"),
        Index("idx_bets_better", "better_id"),
    )


class RankingLeague(Base):
    """A member's standing in a league; presence marks them as a participant."""

    __tablename__ = "ranking_leagues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    league_id = Column(Integer, ForeignKey("leagues.id"), nullable=False)
    better_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    points = Column(Integer, default=0, nullable=False)
    games_betted = Column(Integer, default=0, nullable=False)

    # Relationships
    league = relationship("League", back_populates="rankings")
    better = relationship("User", back_populates="rankings")

    __table_args__ = (
        UniqueConstraint("league_id", "better_id", name="uq_ranking_leagues_league_better"),
        Index("idx_ranking_leagues_league", "league_id"),
    )


class Reminder(Base):
    """Write-once marker: reminders for this day were sent at this threshold."""

    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    day_id = Column(Integer, ForeignKey("days.id"), nullable=False)
    hour = Column(Integer, nullable=False)  # Lookahead threshold (hours before kickoff)
    emails_sended = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    day = relationship("Day", back_populates="reminders")

    __table_args__ = (
        UniqueConstraint("day_id", "hour", name="uq_reminders_day_hour"),
        Index("idx_reminders_day", "day_id"),
    )


class Setting(Base):
    """Application configuration."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
