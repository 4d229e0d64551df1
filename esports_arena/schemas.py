"""
Entity schemas shared by both storage backends and the API.

``*Create`` models are what callers hand to storage; the plain entity
models are what storage hands back. Python code uses snake_case while the
JSON wire format is camelCase (``walletBalance``, ``team1Score``), which is
what the web client expects.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

UserRole = Literal["user", "admin", "superadmin"]
TournamentStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]
GameMode = Literal["solo", "duo", "squad", "custom"]
TournamentType = Literal["free", "paid", "sponsored", "seasonal"]
RegistrationStatus = Literal["pending", "accepted", "rejected"]
MatchStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
TransactionType = Literal["deposit", "withdrawal", "prize", "fee", "referral"]
TransactionStatus = Literal["pending", "completed", "rejected"]

# Credits must be positive and debits negative; balance math relies on it.
CREDIT_TYPES = frozenset({"deposit", "prize", "referral"})
DEBIT_TYPES = frozenset({"withdrawal", "fee"})


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# USERS
# =============================================================================

class UserBase(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    profile_image: Optional[str] = None
    role: UserRole = "user"


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    # Opening balance only; afterwards the balance moves through wallet transactions
    wallet_balance: int = Field(0, ge=0)


class UserPublic(UserBase):
    """A user as exposed over HTTP: everything but the password hash."""
    id: int
    wallet_balance: int = 0
    kyc_verified: bool = False
    is_active: bool = True
    is_banned: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime


class User(UserPublic):
    password: str

    def to_public(self) -> UserPublic:
        return UserPublic.model_validate(self.model_dump(exclude={"password"}))


class UserUpdate(CamelModel):
    """Profile and moderation fields. ``wallet_balance`` is deliberately absent."""
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    profile_image: Optional[str] = None
    role: Optional[UserRole] = None
    kyc_verified: Optional[bool] = None
    is_active: Optional[bool] = None
    is_banned: Optional[bool] = None
    last_login: Optional[datetime] = None


# =============================================================================
# GAMES
# =============================================================================

class GameCreate(CamelModel):
    name: str = Field(..., min_length=1)
    image_url: str
    description: str
    status: str = "active"
    player_count: int = Field(0, ge=0)
    tournament_count: int = Field(0, ge=0)
    featured: bool = False
    badge: Optional[str] = None


class Game(GameCreate):
    id: int


# =============================================================================
# TEAMS
# =============================================================================

class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    logo_url: Optional[str] = None
    description: Optional[str] = None
    captain_id: int
    wins: int = Field(0, ge=0)
    total_earnings: int = Field(0, ge=0)
    member_count: int = Field(1, ge=0)
    badge: Optional[str] = None


class Team(TeamCreate):
    id: int
    created_at: datetime


class TeamMemberRequest(CamelModel):
    user_id: int
    role: str = "member"


class TeamMemberCreate(TeamMemberRequest):
    team_id: int


class TeamMember(TeamMemberCreate):
    id: int
    joined_at: datetime


# =============================================================================
# TOURNAMENTS
# =============================================================================

class TournamentCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    game_id: int
    description: Optional[str] = None
    image_url: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    registration_end_date: Optional[datetime] = None
    entry_fee: int = Field(0, ge=0)
    prize_pool: int = Field(..., ge=0)
    max_players: int = Field(..., gt=0)
    current_players: int = Field(0, ge=0)
    min_participants: Optional[int] = Field(None, gt=0)
    status: TournamentStatus = "upcoming"
    game_mode: GameMode
    tournament_type: TournamentType
    rules: Optional[str] = None
    eligibility_criteria: Optional[str] = None
    featured: bool = False
    winner_team_id: Optional[int] = None
    winner_user_id: Optional[int] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class Tournament(TournamentCreate):
    id: int
    created_at: datetime

    @property
    def is_full(self) -> bool:
        return self.current_players >= self.max_players


class RegistrationRequest(CamelModel):
    user_id: int
    team_id: Optional[int] = None  # None means a solo entry
    status: RegistrationStatus = "accepted"


class RegistrationCreate(RegistrationRequest):
    tournament_id: int


class TournamentRegistration(RegistrationCreate):
    id: int
    registered_at: datetime


# =============================================================================
# MATCHES
# =============================================================================

class MatchRequest(CamelModel):
    round: int = Field(..., ge=1)
    match_number: int = Field(..., ge=1)
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    winner_id: Optional[int] = None
    winner_player_id: Optional[int] = None
    team1_score: Optional[int] = Field(None, ge=0)
    team2_score: Optional[int] = Field(None, ge=0)
    status: MatchStatus = "scheduled"
    scheduled_time: datetime
    stream_url: Optional[str] = None


class MatchCreate(MatchRequest):
    tournament_id: int


class Match(MatchCreate):
    id: int


class MatchResult(CamelModel):
    winner_id: int
    team1_score: int = Field(..., ge=0)
    team2_score: int = Field(..., ge=0)


# =============================================================================
# LEADERBOARD
# =============================================================================

class LeaderboardEntryCreate(CamelModel):
    user_id: Optional[int] = None
    team_id: Optional[int] = None
    game_id: Optional[int] = None
    points: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    total_matches: int = Field(0, ge=0)
    kd_ratio: float = Field(0.0, ge=0)
    earnings: int = Field(0, ge=0)
    rank: Optional[int] = Field(None, ge=1)
    period: str = "all-time"

    @model_validator(mode="after")
    def check_subject(self):
        if self.user_id is None and self.team_id is None:
            raise ValueError("either userId or teamId is required")
        return self

    def key(self) -> tuple:
        """Identity used for upserts: (user, team, game, period)."""
        return (self.user_id, self.team_id, self.game_id, self.period)


class LeaderboardEntry(LeaderboardEntryCreate):
    id: int
    updated_at: datetime


# =============================================================================
# WALLET
# =============================================================================

class WalletTransactionRequest(CamelModel):
    """
    A transaction as a client submits it.

    Status is never accepted from the caller: withdrawals start ``pending``
    so an admin can review them, everything else is ``completed``.
    """
    model_config = ConfigDict(extra="forbid")

    type: TransactionType
    amount: int
    description: str

    @model_validator(mode="after")
    def check_sign(self):
        if self.type in CREDIT_TYPES and self.amount <= 0:
            raise ValueError(f"{self.type} amount must be positive")
        if self.type in DEBIT_TYPES and self.amount >= 0:
            raise ValueError(f"{self.type} amount must be negative")
        return self

    @property
    def status(self) -> TransactionStatus:
        return "pending" if self.type == "withdrawal" else "completed"


class WalletTransactionCreate(WalletTransactionRequest):
    user_id: int


class WalletTransaction(CamelModel):
    id: int
    user_id: int
    type: TransactionType
    amount: int
    status: TransactionStatus
    description: str
    timestamp: datetime


# =============================================================================
# ADMIN
# =============================================================================

class AuditLogCreate(CamelModel):
    admin_id: int
    action: str = Field(..., min_length=1)
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    details: Optional[str] = None
    ip_address: Optional[str] = None


class AdminAuditLog(AuditLogCreate):
    id: int
    timestamp: datetime


class DashboardStats(CamelModel):
    total_users: int
    active_users: int
    total_revenue: int
    pending_withdrawals: int
    ongoing_tournaments: int
    total_transactions: int
