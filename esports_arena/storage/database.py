"""
SQL storage backend.

Every public method opens its own session. Writes run inside
``session.begin()`` so a mutation and the counter updates that go with it
(tournament_count, member_count, current_players, wallet balance) commit
together or not at all. ORM rows never leave this module: results are
converted to the schema models before the session closes.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, sessionmaker

from esports_arena import models
from esports_arena.core.exceptions import InvalidOperationError, NotFoundError
from esports_arena.core.logging import get_logger
from esports_arena.core.security import hash_password
from esports_arena.repositories import (
    AuditLogRepository,
    BaseRepository,
    LeaderboardRepository,
    MatchRepository,
    RegistrationRepository,
    TeamMemberRepository,
    TeamRepository,
    TournamentRepository,
    UserRepository,
    WalletTransactionRepository,
)
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
from esports_arena.storage.base import (
    ACTIVE_USER_WINDOW_DAYS,
    DEFAULT_LEADERBOARD_PERIOD,
    Storage,
    rejection_description,
)

logger = get_logger(__name__)


def _one(schema, row):
    return schema.model_validate(row) if row is not None else None


def _many(schema, rows) -> list:
    return [schema.model_validate(row) for row in rows]


class DatabaseStorage(Storage):
    """SQLAlchemy implementation of the Storage contract."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _read(self) -> Session:
        return self.session_factory()

    def _write(self):
        return self.session_factory.begin()

    # ========================================================================
    # Users
    # ========================================================================

    def get_user(self, user_id: int) -> Optional[User]:
        with self._read() as db:
            return _one(User, UserRepository(db).find_by_id(user_id))

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._read() as db:
            return _one(User, UserRepository(db).find_by_username(username))

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._read() as db:
            return _one(User, UserRepository(db).find_by_email(email))

    def get_users(self, limit: Optional[int] = None, offset: int = 0) -> List[User]:
        with self._read() as db:
            return _many(User, UserRepository(db).find_all(limit=limit, offset=offset))

    def get_users_count(self) -> int:
        with self._read() as db:
            return UserRepository(db).count()

    def create_user(self, user: UserCreate) -> User:
        data = user.model_dump()
        data["password"] = hash_password(user.password)
        with self._write() as db:
            row = UserRepository(db).create(**data)
            created = User.model_validate(row)
        logger.info(f"Created user {created.id} ({created.username})")
        return created

    def update_user(self, user_id: int, changes: UserUpdate) -> Optional[User]:
        with self._write() as db:
            repo = UserRepository(db)
            row = repo.find_by_id(user_id)
            if row is None:
                return None
            repo.update(row, **changes.model_dump(exclude_unset=True))
            db.flush()
            return User.model_validate(row)

    def update_user_wallet(self, user_id: int, amount: int) -> User:
        with self._write() as db:
            user = self._adjust_wallet(db, user_id, amount)
        return user

    def _adjust_wallet(self, db: Session, user_id: int, amount: int) -> User:
        row = UserRepository(db).adjust_balance(user_id, amount)
        if row is None:
            raise NotFoundError("User", user_id)
        logger.info(f"Adjusted wallet of user {user_id} by {amount}", extra={"balance": row.wallet_balance})
        return User.model_validate(row)

    # ========================================================================
    # Games
    # ========================================================================

    def get_games(self) -> List[Game]:
        with self._read() as db:
            return _many(Game, BaseRepository(models.Game, db).find_all())

    def get_game(self, game_id: int) -> Optional[Game]:
        with self._read() as db:
            return _one(Game, BaseRepository(models.Game, db).find_by_id(game_id))

    def get_featured_games(self) -> List[Game]:
        with self._read() as db:
            return _many(Game, BaseRepository(models.Game, db).where(models.Game.featured.is_(True)))

    def create_game(self, game: GameCreate) -> Game:
        with self._write() as db:
            row = BaseRepository(models.Game, db).create(**game.model_dump())
            return Game.model_validate(row)

    def delete_game(self, game_id: int) -> bool:
        with self._write() as db:
            games = BaseRepository(models.Game, db)
            if games.find_by_id(game_id) is None:
                return False

            for tournament in TournamentRepository(db).find_by_game(game_id):
                self._delete_tournament(db, tournament)

            LeaderboardRepository(db).delete_where(models.LeaderboardEntry.game_id == game_id)
            games.delete(game_id)

        logger.info(f"Deleted game {game_id}")
        return True

    # ========================================================================
    # Teams
    # ========================================================================

    def get_teams(self) -> List[Team]:
        with self._read() as db:
            return _many(Team, TeamRepository(db).find_all())

    def get_team(self, team_id: int) -> Optional[Team]:
        with self._read() as db:
            return _one(Team, TeamRepository(db).find_by_id(team_id))

    def get_team_by_name(self, name: str) -> Optional[Team]:
        with self._read() as db:
            return _one(Team, TeamRepository(db).find_by_name(name))

    def get_top_teams(self, limit: int) -> List[Team]:
        with self._read() as db:
            return _many(Team, TeamRepository(db).find_top(limit))

    def get_teams_by_user_id(self, user_id: int) -> List[Team]:
        with self._read() as db:
            return _many(Team, TeamRepository(db).find_by_member(user_id))

    def create_team(self, team: TeamCreate) -> Team:
        with self._write() as db:
            row = TeamRepository(db).create(**team.model_dump())
            return Team.model_validate(row)

    def delete_team(self, team_id: int) -> bool:
        Registration = models.TournamentRegistration
        MatchRow = models.Match

        with self._write() as db:
            teams = TeamRepository(db)
            if teams.find_by_id(team_id) is None:
                return False

            TeamMemberRepository(db).delete_where(models.TeamMember.team_id == team_id)

            registrations = RegistrationRepository(db)
            tournaments = TournamentRepository(db)
            for registration in registrations.where(Registration.team_id == team_id):
                tournaments.increment(registration.tournament_id, "current_players", -1, floor=0)
            registrations.delete_where(Registration.team_id == team_id)

            LeaderboardRepository(db).delete_where(models.LeaderboardEntry.team_id == team_id)

            matches = MatchRepository(db)
            for column in ("team1_id", "team2_id", "winner_id"):
                matches.update_where({column: None}, getattr(MatchRow, column) == team_id)

            tournaments.update_where({"winner_team_id": None}, models.Tournament.winner_team_id == team_id)
            teams.delete(team_id)

        logger.info(f"Deleted team {team_id}")
        return True

    def get_team_members(self, team_id: int) -> List[TeamMember]:
        with self._read() as db:
            return _many(TeamMember, TeamMemberRepository(db).find_by_team(team_id))

    def get_team_member(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        with self._read() as db:
            return _one(TeamMember, TeamMemberRepository(db).find_membership(team_id, user_id))

    def add_team_member(self, member: TeamMemberCreate) -> TeamMember:
        with self._write() as db:
            row = TeamMemberRepository(db).create(**member.model_dump())
            TeamRepository(db).recount_members(member.team_id)
            return TeamMember.model_validate(row)

    # ========================================================================
    # Tournaments
    # ========================================================================

    def get_tournaments(self) -> List[Tournament]:
        with self._read() as db:
            return _many(Tournament, TournamentRepository(db).find_all())

    def get_tournament(self, tournament_id: int) -> Optional[Tournament]:
        with self._read() as db:
            return _one(Tournament, TournamentRepository(db).find_by_id(tournament_id))

    def get_upcoming_tournaments(self, limit: Optional[int] = None) -> List[Tournament]:
        with self._read() as db:
            return _many(Tournament, TournamentRepository(db).find_upcoming(limit))

    def get_featured_tournament(self) -> Optional[Tournament]:
        with self._read() as db:
            return _one(Tournament, TournamentRepository(db).find_featured())

    def get_tournaments_by_game_id(self, game_id: int) -> List[Tournament]:
        with self._read() as db:
            return _many(Tournament, TournamentRepository(db).find_by_game(game_id))

    def create_tournament(self, tournament: TournamentCreate) -> Tournament:
        with self._write() as db:
            row = TournamentRepository(db).create(**tournament.model_dump())
            BaseRepository(models.Game, db).increment(tournament.game_id, "tournament_count", 1)
            return Tournament.model_validate(row)

    def delete_tournament(self, tournament_id: int) -> bool:
        with self._write() as db:
            row = TournamentRepository(db).find_by_id(tournament_id)
            if row is None:
                return False
            self._delete_tournament(db, row)

        logger.info(f"Deleted tournament {tournament_id}")
        return True

    def _delete_tournament(self, db: Session, row: models.Tournament) -> None:
        MatchRepository(db).delete_where(models.Match.tournament_id == row.id)
        RegistrationRepository(db).delete_where(models.TournamentRegistration.tournament_id == row.id)
        BaseRepository(models.Game, db).increment(row.game_id, "tournament_count", -1, floor=0)
        db.delete(row)
        db.flush()

    def register_for_tournament(self, registration: RegistrationCreate) -> TournamentRegistration:
        with self._write() as db:
            row = RegistrationRepository(db).create(**registration.model_dump())
            TournamentRepository(db).increment(registration.tournament_id, "current_players", 1)
            return TournamentRegistration.model_validate(row)

    def get_tournament_registrations(self, tournament_id: int) -> List[TournamentRegistration]:
        with self._read() as db:
            return _many(TournamentRegistration, RegistrationRepository(db).find_by_tournament(tournament_id))

    # ========================================================================
    # Matches
    # ========================================================================

    def get_matches(self, tournament_id: int) -> List[Match]:
        with self._read() as db:
            return _many(Match, MatchRepository(db).find_bracket(tournament_id))

    def get_match(self, match_id: int) -> Optional[Match]:
        with self._read() as db:
            return _one(Match, MatchRepository(db).find_by_id(match_id))

    def create_match(self, match: MatchCreate) -> Match:
        with self._write() as db:
            row = MatchRepository(db).create(**match.model_dump())
            return Match.model_validate(row)

    def update_match_result(self, match_id: int, winner_id: int, team1_score: int, team2_score: int) -> Match:
        with self._write() as db:
            repo = MatchRepository(db)
            row = repo.find_by_id(match_id)
            if row is None:
                raise NotFoundError("Match", match_id)
            repo.update(row, winner_id=winner_id, team1_score=team1_score, team2_score=team2_score, status="completed")
            db.flush()
            return Match.model_validate(row)

    # ========================================================================
    # Leaderboard
    # ========================================================================

    def get_leaderboard_entries(
        self,
        game_id: Optional[int] = None,
        period: str = DEFAULT_LEADERBOARD_PERIOD,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        with self._read() as db:
            return _many(LeaderboardEntry, LeaderboardRepository(db).find_ranked(period, game_id, limit))

    def get_leaderboard_entry(self, user_id: int, game_id: Optional[int] = None) -> Optional[LeaderboardEntry]:
        with self._read() as db:
            return _one(LeaderboardEntry, LeaderboardRepository(db).find_for_user(user_id, game_id))

    def update_leaderboard_entry(self, entry: LeaderboardEntryCreate) -> LeaderboardEntry:
        with self._write() as db:
            repo = LeaderboardRepository(db)
            row = repo.find_by_key(*entry.key())
            if row is None:
                row = repo.create(**entry.model_dump())
            else:
                repo.update(row, updated_at=datetime.utcnow(), **entry.model_dump(exclude_unset=True))
                db.flush()
            return LeaderboardEntry.model_validate(row)

    # ========================================================================
    # Wallet
    # ========================================================================

    def create_wallet_transaction(self, transaction: WalletTransactionCreate) -> WalletTransaction:
        with self._write() as db:
            if UserRepository(db).find_by_id(transaction.user_id) is None:
                raise NotFoundError("User", transaction.user_id)
            row = WalletTransactionRepository(db).create(status=transaction.status, **transaction.model_dump())
            self._adjust_wallet(db, transaction.user_id, transaction.amount)
            return WalletTransaction.model_validate(row)

    def get_wallet_transaction(self, transaction_id: int) -> Optional[WalletTransaction]:
        with self._read() as db:
            return _one(WalletTransaction, WalletTransactionRepository(db).find_by_id(transaction_id))

    def get_wallet_transactions(self, user_id: int) -> List[WalletTransaction]:
        with self._read() as db:
            return _many(WalletTransaction, WalletTransactionRepository(db).find_for_user(user_id))

    def get_recent_transactions(self, limit: int = 20) -> List[WalletTransaction]:
        with self._read() as db:
            return _many(WalletTransaction, WalletTransactionRepository(db).find_recent(limit))

    def get_pending_withdrawals(self) -> List[WalletTransaction]:
        with self._read() as db:
            return _many(WalletTransaction, WalletTransactionRepository(db).find_pending_withdrawals())

    @staticmethod
    def _pending_withdrawal(db: Session, transaction_id: int) -> models.WalletTransaction:
        row = WalletTransactionRepository(db).find_by_id(transaction_id)
        if row is None:
            raise NotFoundError("Transaction", transaction_id)
        if row.type != "withdrawal" or row.status != "pending":
            raise InvalidOperationError(f"Transaction {transaction_id} is not a pending withdrawal")
        return row

    def approve_withdrawal(self, transaction_id: int) -> WalletTransaction:
        with self._write() as db:
            row = self._pending_withdrawal(db, transaction_id)
            row.status = "completed"
            db.flush()
            approved = WalletTransaction.model_validate(row)
        logger.info(f"Approved withdrawal {transaction_id}")
        return approved

    def reject_withdrawal(self, transaction_id: int, reason: str) -> WalletTransaction:
        with self._write() as db:
            row = self._pending_withdrawal(db, transaction_id)
            self._adjust_wallet(db, row.user_id, abs(row.amount))
            row.status = "rejected"
            row.description = rejection_description(row.description, reason)
            db.flush()
            rejected = WalletTransaction.model_validate(row)
        logger.info(f"Rejected withdrawal {transaction_id}", extra={"reason": reason})
        return rejected

    # ========================================================================
    # Admin
    # ========================================================================

    def create_audit_log(self, log: AuditLogCreate) -> AdminAuditLog:
        with self._write() as db:
            row = AuditLogRepository(db).create(**log.model_dump())
            return AdminAuditLog.model_validate(row)

    def get_audit_logs(self, admin_id: Optional[int] = None, limit: int = 20, offset: int = 0) -> List[AdminAuditLog]:
        with self._read() as db:
            return _many(AdminAuditLog, AuditLogRepository(db).find_recent(admin_id, limit, offset))

    def get_dashboard_stats(self) -> DashboardStats:
        cutoff = datetime.utcnow() - timedelta(days=ACTIVE_USER_WINDOW_DAYS)
        with self._read() as db:
            users = UserRepository(db)
            tournaments = TournamentRepository(db)
            transactions = WalletTransactionRepository(db)
            return DashboardStats(
                total_users=users.count(),
                active_users=users.count_active_since(cutoff),
                total_revenue=tournaments.total_revenue(),
                pending_withdrawals=transactions.count_pending_withdrawals(),
                ongoing_tournaments=tournaments.count_ongoing(),
                total_transactions=transactions.count(),
            )
