"""
Database models for the esports arena.

Counters (games.tournament_count, teams.member_count,
tournaments.current_players) are stored alongside the rows they count and
are maintained by the storage layer in the same transaction as the write
that changes them.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Boolean, Text, Float, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    """Platform account. ``password`` holds a passlib hash, never plaintext."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    wallet_balance = Column(Integer, nullable=False, default=0)
    profile_image = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default="user")  # user, admin, superadmin
    kyc_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_banned = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    image_url = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    player_count = Column(Integer, nullable=False, default=0)
    tournament_count = Column(Integer, nullable=False, default=0)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    badge = Column(String(30), nullable=True)


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    logo_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    captain_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    wins = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Integer, nullable=False, default=0)
    member_count = Column(Integer, nullable=False, default=1)
    badge = Column(String(30), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=True)
    registration_end_date = Column(DateTime, nullable=True)
    entry_fee = Column(Integer, nullable=False, default=0)
    prize_pool = Column(Integer, nullable=False)
    max_players = Column(Integer, nullable=False)
    current_players = Column(Integer, nullable=False, default=0)
    min_participants = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="upcoming", index=True)
    game_mode = Column(String(20), nullable=False)  # solo, duo, squad, custom
    tournament_type = Column(String(20), nullable=False)  # free, paid, sponsored, seasonal
    rules = Column(Text, nullable=True)
    eligibility_criteria = Column(Text, nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    winner_team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    winner_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class TournamentRegistration(Base):
    """A team id of NULL means a solo entry."""
    __tablename__ = "tournament_registrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    registered_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    status = Column(String(20), nullable=False, default="accepted")


class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False)
    round = Column(Integer, nullable=False)
    match_number = Column(Integer, nullable=False)
    team1_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    team2_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    player1_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    player2_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    winner_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    winner_player_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    team1_score = Column(Integer, nullable=True)
    team2_score = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")
    scheduled_time = Column(DateTime, nullable=False)
    stream_url = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_matches_bracket_order", "tournament_id", "round", "match_number"),
    )


class LeaderboardEntry(Base):
    """One row per (user or team, game, period)."""
    __tablename__ = "leaderboard"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=True)
    points = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    total_matches = Column(Integer, nullable=False, default=0)
    kd_ratio = Column(Float, nullable=False, default=0.0)
    earnings = Column(Integer, nullable=False, default=0)
    rank = Column(Integer, nullable=True)
    period = Column(String(20), nullable=False, default="all-time", index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "team_id", "game_id", "period", name="uq_leaderboard_subject_game_period"),
    )


class WalletTransaction(Base):
    """Signed ledger row: positive credits, negative debits."""
    __tablename__ = "wallet_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    type = Column(String(20), nullable=False)  # deposit, withdrawal, prize, fee, referral
    status = Column(String(20), nullable=False, default="completed", index=True)
    description = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class AdminAuditLog(Base):
    """Append-only record of admin actions."""
    __tablename__ = "admin_audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True)
    details = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
