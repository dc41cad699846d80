"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Initial schema for fresh deployments:
- Members: users
- Competitions: leagues, teams, days, games
- Predictions: bets, ranking_leagues
- Reminder markers: reminders (unique per day and threshold)
- Runtime configuration: settings
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

league_status = sa.Enum("FUTURE", "ACTIVE", "OVER", "ARCHIVED", name="leaguestatus")


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(60), nullable=False, unique=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("status", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("reminder_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("preferred_langcode", sa.String(12), nullable=False, server_default="fr"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_users_reminder", "users", ["status", "reminder_enabled"])

    op.create_table(
        "leagues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("status", league_status, nullable=False, server_default="ACTIVE"),
        sa.Column("has_ranking", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("logo_url", sa.String(500), nullable=True),
    )

    op.create_table(
        "days",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_days_league", "days", ["league_id"])

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("day_id", sa.Integer(), sa.ForeignKey("days.id"), nullable=False),
        sa.Column("team1_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("team2_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("game_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("score_team_1", sa.Integer(), nullable=True),
        sa.Column("score_team_2", sa.Integer(), nullable=True),
    )
    op.create_index("idx_games_day", "games", ["day_id"])
    op.create_index("idx_games_date", "games", ["game_date"])

    op.create_table(
        "bets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("better_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False),
        sa.Column("score_team_1", sa.Integer(), nullable=False),
        sa.Column("score_team_2", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("better_id", "game_id", name="uq_bets_better_game"),
    )
    op.create_index("idx_bets_game", "bets", ["game_id"])
    op.create_index("idx_bets_better", "bets", ["better_id"])

    op.create_table(
        "ranking_leagues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("league_id", sa.Integer(), sa.ForeignKey("leagues.id"), nullable=False),
        sa.Column("better_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("games_betted", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("league_id", "better_id", name="uq_ranking_leagues_league_better"),
    )
    op.create_index("idx_ranking_leagues_league", "ranking_leagues", ["league_id"])

    op.create_table(
        "reminders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("day_id", sa.Integer(), sa.ForeignKey("days.id"), nullable=False),
        sa.Column("hour", sa.Integer(), nullable=False),
        sa.Column("emails_sended", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("day_id", "hour", name="uq_reminders_day_hour"),
    )
    op.create_index("idx_reminders_day", "reminders", ["day_id"])

    op.create_table(
        "settings",
        sa.Column("key", sa.String(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("settings")
    op.drop_index("idx_reminders_day", table_name="reminders")
    op.drop_table("reminders")
    op.drop_index("idx_ranking_leagues_league", table_name="ranking_leagues")
    op.drop_table("ranking_leagues")
    op.drop_index("idx_bets_better", table_name="bets")
    op.drop_index("idx_bets_game", table_name="bets")
    op.drop_table("bets")
    op.drop_index("idx_games_date", table_name="games")
    op.drop_index("idx_games_day", table_name="games")
    op.drop_table("games")
    op.drop_index("idx_days_league", table_name="days")
    op.drop_table("days")
    op.drop_table("teams")
    op.drop_table("leagues")
    op.drop_index("idx_users_reminder", table_name="users")
    op.drop_table("users")
    league_status.drop(op.get_bind(), checkfirst=True)
