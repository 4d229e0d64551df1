"""
Storage contract shared by the in-memory and SQL backends.

Route handlers depend only on this interface, so either backend can be
selected at startup (see ``esports_arena.storage.create_storage``).

Conventions:
1. Lookups on a missing id return ``None`` (or an empty list).
2. Operations that must act on an existing row raise ``NotFoundError``:
   ``update_user_wallet``, ``update_match_result``, ``approve_withdrawal``
   and ``reject_withdrawal``.
3. Derived counters (``Game.tournament_count``, ``Team.member_count``,
   ``Tournament.current_players``) are adjusted by the storage methods that
   change what they count. Business rules such as tournament capacity are
   the caller's responsibility.
4. ``User.wallet_balance`` only moves through wallet transactions.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from esports_arena.schemas import (
    AdminAuditLog,
    AuditLogCreate,
    DashboardStats,
    Game,
    GameCreate,
    LeaderboardEntry,
    LeaderboardEntryCreate,
    Match,
    MatchCreate,
    RegistrationCreate,
    Team,
    TeamCreate,
    TeamMember,
    TeamMemberCreate,
    Tournament,
    TournamentCreate,
    TournamentRegistration,
    User,
    UserCreate,
    UserUpdate,
    WalletTransaction,
    WalletTransactionCreate,
)

DEFAULT_LEADERBOARD_PERIOD = "weekly"
ACTIVE_USER_WINDOW_DAYS = 30


def rejection_description(description: str, reason: str) -> str:
    """Description text of a rejected withdrawal."""
    return f"{description} - Rejected: {reason}"


def leaderboard_sort_key(entry: LeaderboardEntry) -> tuple:
    """Rank ascending, unranked entries last."""
    return (entry.rank is None, entry.rank or 0)


def is_active_tournament(tournament: Tournament, now: Optional[datetime] = None) -> bool:
    """Ongoing, or started and not yet past its end date."""
    now = now or datetime.utcnow()
    if tournament.status == "ongoing":
        return True
    return tournament.start_date <= now and (tournament.end_date is None or tournament.end_date >= now)


class Storage(ABC):
    """Capability interface for all persistent state of the platform."""

    # ========================================================================
    # Users
    # ========================================================================

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Find a user by id."""

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        """Find a user by exact username."""

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Find a user by exact email address."""

    @abstractmethod
    def get_users(self, limit: Optional[int] = None, offset: int = 0) -> List[User]:
        """Users ordered by id, paginated."""

    @abstractmethod
    def get_users_count(self) -> int:
        """Total number of users."""

    @abstractmethod
    def create_user(self, user: UserCreate) -> User:
        """Create a user; the plaintext password is hashed before storing."""

    @abstractmethod
    def update_user(self, user_id: int, changes: UserUpdate) -> Optional[User]:
        """Apply the fields set on ``changes``. Returns None if the user is missing."""

    @abstractmethod
    def update_user_wallet(self, user_id: int, amount: int) -> User:
        """
        Add a signed amount to a user's balance.

        Raises:
            NotFoundError: If the user does not exist
        """

    # ========================================================================
    # Games
    # ========================================================================

    @abstractmethod
    def get_games(self) -> List[Game]:
        ...

    @abstractmethod
    def get_game(self, game_id: int) -> Optional[Game]:
        ...

    @abstractmethod
    def get_featured_games(self) -> List[Game]:
        ...

    @abstractmethod
    def create_game(self, game: GameCreate) -> Game:
        ...

    @abstractmethod
    def delete_game(self, game_id: int) -> bool:
        """
        Delete a game, its tournaments (with their matches and registrations)
        and its leaderboard entries. Returns False if the game is missing.
        """

    # ========================================================================
    # Teams
    # ========================================================================

    @abstractmethod
    def get_teams(self) -> List[Team]:
        ...

    @abstractmethod
    def get_team(self, team_id: int) -> Optional[Team]:
        ...

    @abstractmethod
    def get_team_by_name(self, name: str) -> Optional[Team]:
        """Find a team by exact name."""

    @abstractmethod
    def get_top_teams(self, limit: int) -> List[Team]:
        """Teams ordered by wins, most first."""

    @abstractmethod
    def get_teams_by_user_id(self, user_id: int) -> List[Team]:
        """Teams the user is a member of."""

    @abstractmethod
    def create_team(self, team: TeamCreate) -> Team:
        ...

    @abstractmethod
    def delete_team(self, team_id: int) -> bool:
        """
        Delete a team with its members, registrations (releasing their
        tournament slots) and leaderboard entries; matches keep their row
        but lose the team reference. Returns False if the team is missing.
        """

    @abstractmethod
    def get_team_members(self, team_id: int) -> List[TeamMember]:
        ...

    @abstractmethod
    def get_team_member(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        """The user's roster row on the team, if any."""

    @abstractmethod
    def add_team_member(self, member: TeamMemberCreate) -> TeamMember:
        """Add a member and recount the team's ``member_count``."""

    # ========================================================================
    # Tournaments
    # ========================================================================

    @abstractmethod
    def get_tournaments(self) -> List[Tournament]:
        ...

    @abstractmethod
    def get_tournament(self, tournament_id: int) -> Optional[Tournament]:
        ...

    @abstractmethod
    def get_upcoming_tournaments(self, limit: Optional[int] = None) -> List[Tournament]:
        """Tournaments with status ``upcoming``, soonest first."""

    @abstractmethod
    def get_featured_tournament(self) -> Optional[Tournament]:
        ...

    @abstractmethod
    def get_tournaments_by_game_id(self, game_id: int) -> List[Tournament]:
        ...

    @abstractmethod
    def create_tournament(self, tournament: TournamentCreate) -> Tournament:
        """Create a tournament and bump the game's ``tournament_count``."""

    @abstractmethod
    def delete_tournament(self, tournament_id: int) -> bool:
        """
        Delete matches, then registrations, then decrement the game's
        ``tournament_count``, then delete the tournament.
        Returns False if the tournament is missing.
        """

    @abstractmethod
    def register_for_tournament(self, registration: RegistrationCreate) -> TournamentRegistration:
        """Record a registration and bump ``current_players`` by one."""

    @abstractmethod
    def get_tournament_registrations(self, tournament_id: int) -> List[TournamentRegistration]:
        ...

    # ========================================================================
    # Matches
    # ========================================================================

    @abstractmethod
    def get_matches(self, tournament_id: int) -> List[Match]:
        """A tournament's matches ordered by round, then match number."""

    @abstractmethod
    def get_match(self, match_id: int) -> Optional[Match]:
        ...

    @abstractmethod
    def create_match(self, match: MatchCreate) -> Match:
        ...

    @abstractmethod
    def update_match_result(self, match_id: int, winner_id: int, team1_score: int, team2_score: int) -> Match:
        """
        Record the winner and scores and mark the match completed.

        Raises:
            NotFoundError: If the match does not exist
        """

    # ========================================================================
    # Leaderboard
    # ========================================================================

    @abstractmethod
    def get_leaderboard_entries(
        self,
        game_id: Optional[int] = None,
        period: str = DEFAULT_LEADERBOARD_PERIOD,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """Entries for a period (optionally one game), by rank with unranked last."""

    @abstractmethod
    def get_leaderboard_entry(self, user_id: int, game_id: Optional[int] = None) -> Optional[LeaderboardEntry]:
        ...

    @abstractmethod
    def update_leaderboard_entry(self, entry: LeaderboardEntryCreate) -> LeaderboardEntry:
        """
        Upsert on (user or team, game, period): merge the given fields into
        the existing row and refresh ``updated_at``, or create a new row.
        """

    # ========================================================================
    # Wallet
    # ========================================================================

    @abstractmethod
    def create_wallet_transaction(self, transaction: WalletTransactionCreate) -> WalletTransaction:
        """
        Record a transaction and add its signed amount to the user's balance.

        Raises:
            NotFoundError: If the user does not exist
        """

    @abstractmethod
    def get_wallet_transaction(self, transaction_id: int) -> Optional[WalletTransaction]:
        ...

    @abstractmethod
    def get_wallet_transactions(self, user_id: int) -> List[WalletTransaction]:
        """A user's transactions, newest first."""

    @abstractmethod
    def get_recent_transactions(self, limit: int = 20) -> List[WalletTransaction]:
        """Transactions across all users, newest first."""

    @abstractmethod
    def get_pending_withdrawals(self) -> List[WalletTransaction]:
        """Withdrawals awaiting review, oldest first."""

    @abstractmethod
    def approve_withdrawal(self, transaction_id: int) -> WalletTransaction:
        """
        Mark a pending withdrawal completed. The balance was already debited
        when the withdrawal was created.

        Raises:
            NotFoundError: If the transaction does not exist
            InvalidOperationError: If it is not a pending withdrawal
        """

    @abstractmethod
    def reject_withdrawal(self, transaction_id: int, reason: str) -> WalletTransaction:
        """
        Refund ``abs(amount)`` to the user, mark the transaction rejected and
        append ``" - Rejected: {reason}"`` to its description.

        Raises:
            NotFoundError: If the transaction does not exist
            InvalidOperationError: If it is not a pending withdrawal
        """

    # ========================================================================
    # Admin
    # ========================================================================

    @abstractmethod
    def create_audit_log(self, log: AuditLogCreate) -> AdminAuditLog:
        ...

    @abstractmethod
    def get_audit_logs(self, admin_id: Optional[int] = None, limit: int = 20, offset: int = 0) -> List[AdminAuditLog]:
        """Audit entries, newest first."""

    @abstractmethod
    def get_dashboard_stats(self) -> DashboardStats:
        """
        Snapshot of six independent aggregates: user count, users active in
        the last 30 days, entry-fee revenue, pending withdrawals, ongoing
        tournaments and total transactions.
        """
