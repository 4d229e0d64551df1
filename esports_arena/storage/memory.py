"""
In-memory storage backend.

Holds every entity in an id-keyed dict with a per-entity id counter
starting at 1. Instances own all of their state, so each test can build a
fresh store. Records are copied on the way in and out: callers never hold
a reference into the store, matching what the SQL backend gives them.

Not safe for concurrent mutation from multiple threads.
"""
from collections import defaultdict
from datetime import datetime, timedelta
from itertools import count
from typing import Dict, Iterator, List, Optional

from esports_arena.core.exceptions import InvalidOperationError, NotFoundError
from esports_arena.core.logging import get_logger
from esports_arena.core.security import hash_password
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
    leaderboard_sort_key,
    rejection_description,
)

logger = get_logger(__name__)


class MemStorage(Storage):
    """Dict-backed implementation of the Storage contract."""

    def __init__(self, seed: bool = True):
        self.users: Dict[int, User] = {}
        self.games: Dict[int, Game] = {}
        self.teams: Dict[int, Team] = {}
        self.team_members: Dict[int, TeamMember] = {}
        self.tournaments: Dict[int, Tournament] = {}
        self.registrations: Dict[int, TournamentRegistration] = {}
        self.matches: Dict[int, Match] = {}
        self.leaderboard: Dict[int, LeaderboardEntry] = {}
        self.transactions: Dict[int, WalletTransaction] = {}
        self.audit_logs: Dict[int, AdminAuditLog] = {}

        self._ids: Dict[str, Iterator[int]] = defaultdict(lambda: count(1))

        if seed:
            from esports_arena.storage.seed import seed_storage
            seed_storage(self)

    def _next_id(self, entity: str) -> int:
        return next(self._ids[entity])

    # ========================================================================
    # Users
    # ========================================================================

    def get_user(self, user_id: int) -> Optional[User]:
        user = self.users.get(user_id)
        return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self.users.values():
            if user.username == username:
                return user.model_copy()
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user.model_copy()
        return None

    def get_users(self, limit: Optional[int] = None, offset: int = 0) -> List[User]:
        users = [self.users[key].model_copy() for key in sorted(self.users)]
        end = offset + limit if limit is not None else None
        return users[offset:end]

    def get_users_count(self) -> int:
        return len(self.users)

    def create_user(self, user: UserCreate) -> User:
        data = user.model_dump()
        data["password"] = hash_password(user.password)
        new_user = User(id=self._next_id("user"), created_at=datetime.utcnow(), **data)
        self.users[new_user.id] = new_user
        logger.info(f"Created user {new_user.id} ({new_user.username})")
        return new_user.model_copy()

    def update_user(self, user_id: int, changes: UserUpdate) -> Optional[User]:
        user = self.users.get(user_id)
        if not user:
            return None
        for key, value in changes.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        return user.model_copy()

    def update_user_wallet(self, user_id: int, amount: int) -> User:
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        user.wallet_balance += amount
        logger.info(f"Adjusted wallet of user {user_id} by {amount}", extra={"balance": user.wallet_balance})
        return user.model_copy()

    # ========================================================================
    # Games
    # ========================================================================

    def get_games(self) -> List[Game]:
        return [game.model_copy() for game in self.games.values()]

    def get_game(self, game_id: int) -> Optional[Game]:
        game = self.games.get(game_id)
        return game.model_copy() if game else None

    def get_featured_games(self) -> List[Game]:
        return [game.model_copy() for game in self.games.values() if game.featured]

    def create_game(self, game: GameCreate) -> Game:
        new_game = Game(id=self._next_id("game"), **game.model_dump())
        self.games[new_game.id] = new_game
        return new_game.model_copy()

    def delete_game(self, game_id: int) -> bool:
        if game_id not in self.games:
            return False

        for tournament_id in [t.id for t in self.tournaments.values() if t.game_id == game_id]:
            self.delete_tournament(tournament_id)

        for entry_id in [e.id for e in self.leaderboard.values() if e.game_id == game_id]:
            del self.leaderboard[entry_id]

        del self.games[game_id]
        logger.info(f"Deleted game {game_id}")
        return True

    # ========================================================================
    # Teams
    # ========================================================================

    def get_teams(self) -> List[Team]:
        return [team.model_copy() for team in self.teams.values()]

    def get_team(self, team_id: int) -> Optional[Team]:
        team = self.teams.get(team_id)
        return team.model_copy() if team else None

    def get_team_by_name(self, name: str) -> Optional[Team]:
        for team in self.teams.values():
            if team.name == name:
                return team.model_copy()
        return None

    def get_top_teams(self, limit: int) -> List[Team]:
        ranked = sorted(self.teams.values(), key=lambda team: team.wins, reverse=True)
        return [team.model_copy() for team in ranked[:limit]]

    def get_teams_by_user_id(self, user_id: int) -> List[Team]:
        return [
            self.teams[member.team_id].model_copy()
            for member in self.team_members.values()
            if member.user_id == user_id and member.team_id in self.teams
        ]

    def create_team(self, team: TeamCreate) -> Team:
        new_team = Team(id=self._next_id("team"), created_at=datetime.utcnow(), **team.model_dump())
        self.teams[new_team.id] = new_team
        return new_team.model_copy()

    def delete_team(self, team_id: int) -> bool:
        if team_id not in self.teams:
            return False

        for member_id in [m.id for m in self.team_members.values() if m.team_id == team_id]:
            del self.team_members[member_id]

        for registration in [r for r in self.registrations.values() if r.team_id == team_id]:
            del self.registrations[registration.id]
            tournament = self.tournaments.get(registration.tournament_id)
            if tournament and tournament.current_players > 0:
                tournament.current_players -= 1

        for entry_id in [e.id for e in self.leaderboard.values() if e.team_id == team_id]:
            del self.leaderboard[entry_id]

        for match in self.matches.values():
            if match.team1_id == team_id:
                match.team1_id = None
            if match.team2_id == team_id:
                match.team2_id = None
            if match.winner_id == team_id:
                match.winner_id = None

        for tournament in self.tournaments.values():
            if tournament.winner_team_id == team_id:
                tournament.winner_team_id = None

        del self.teams[team_id]
        logger.info(f"Deleted team {team_id}")
        return True

    def get_team_members(self, team_id: int) -> List[TeamMember]:
        return [m.model_copy() for m in self.team_members.values() if m.team_id == team_id]

    def get_team_member(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        for member in self.team_members.values():
            if member.team_id == team_id and member.user_id == user_id:
                return member.model_copy()
        return None

    def add_team_member(self, member: TeamMemberCreate) -> TeamMember:
        new_member = TeamMember(id=self._next_id("team_member"), joined_at=datetime.utcnow(), **member.model_dump())
        self.team_members[new_member.id] = new_member

        team = self.teams.get(member.team_id)
        if team:
            team.member_count = sum(1 for m in self.team_members.values() if m.team_id == team.id)

        return new_member.model_copy()

    # ========================================================================
    # Tournaments
    # ========================================================================

    def get_tournaments(self) -> List[Tournament]:
        return [t.model_copy() for t in self.tournaments.values()]

    def get_tournament(self, tournament_id: int) -> Optional[Tournament]:
        tournament = self.tournaments.get(tournament_id)
        return tournament.model_copy() if tournament else None

    def get_upcoming_tournaments(self, limit: Optional[int] = None) -> List[Tournament]:
        upcoming = sorted(
            (t for t in self.tournaments.values() if t.status == "upcoming"),
            key=lambda t: t.start_date,
        )
        if limit:
            upcoming = upcoming[:limit]
        return [t.model_copy() for t in upcoming]

    def get_featured_tournament(self) -> Optional[Tournament]:
        for tournament in self.tournaments.values():
            if tournament.featured:
                return tournament.model_copy()
        return None

    def get_tournaments_by_game_id(self, game_id: int) -> List[Tournament]:
        return [t.model_copy() for t in self.tournaments.values() if t.game_id == game_id]

    def create_tournament(self, tournament: TournamentCreate) -> Tournament:
        new_tournament = Tournament(
            id=self._next_id("tournament"),
            created_at=datetime.utcnow(),
            **tournament.model_dump(),
        )
        self.tournaments[new_tournament.id] = new_tournament

        game = self.games.get(tournament.game_id)
        if game:
            game.tournament_count += 1

        return new_tournament.model_copy()

    def delete_tournament(self, tournament_id: int) -> bool:
        tournament = self.tournaments.get(tournament_id)
        if not tournament:
            return False

        for match_id in [m.id for m in self.matches.values() if m.tournament_id == tournament_id]:
            del self.matches[match_id]

        for registration_id in [r.id for r in self.registrations.values() if r.tournament_id == tournament_id]:
            del self.registrations[registration_id]

        game = self.games.get(tournament.game_id)
        if game and game.tournament_count > 0:
            game.tournament_count -= 1

        del self.tournaments[tournament_id]
        logger.info(f"Deleted tournament {tournament_id}")
        return True

    def register_for_tournament(self, registration: RegistrationCreate) -> TournamentRegistration:
        new_registration = TournamentRegistration(
            id=self._next_id("registration"),
            registered_at=datetime.utcnow(),
            **registration.model_dump(),
        )
        self.registrations[new_registration.id] = new_registration

        tournament = self.tournaments.get(registration.tournament_id)
        if tournament:
            tournament.current_players += 1

        return new_registration.model_copy()

    def get_tournament_registrations(self, tournament_id: int) -> List[TournamentRegistration]:
        return [r.model_copy() for r in self.registrations.values() if r.tournament_id == tournament_id]

    # ========================================================================
    # Matches
    # ========================================================================

    def get_matches(self, tournament_id: int) -> List[Match]:
        bracket = sorted(
            (m for m in self.matches.values() if m.tournament_id == tournament_id),
            key=lambda m: (m.round, m.match_number),
        )
        return [m.model_copy() for m in bracket]

    def get_match(self, match_id: int) -> Optional[Match]:
        match = self.matches.get(match_id)
        return match.model_copy() if match else None

    def create_match(self, match: MatchCreate) -> Match:
        new_match = Match(id=self._next_id("match"), **match.model_dump())
        self.matches[new_match.id] = new_match
        return new_match.model_copy()

    def update_match_result(self, match_id: int, winner_id: int, team1_score: int, team2_score: int) -> Match:
        match = self.matches.get(match_id)
        if not match:
            raise NotFoundError("Match", match_id)

        match.winner_id = winner_id
        match.team1_score = team1_score
        match.team2_score = team2_score
        match.status = "completed"
        return match.model_copy()

    # ========================================================================
    # Leaderboard
    # ========================================================================

    def get_leaderboard_entries(
        self,
        game_id: Optional[int] = None,
        period: str = DEFAULT_LEADERBOARD_PERIOD,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        entries = [
            e for e in self.leaderboard.values()
            if e.period == period and (game_id is None or e.game_id == game_id)
        ]
        entries.sort(key=leaderboard_sort_key)
        if limit:
            entries = entries[:limit]
        return [e.model_copy() for e in entries]

    def get_leaderboard_entry(self, user_id: int, game_id: Optional[int] = None) -> Optional[LeaderboardEntry]:
        for entry in self.leaderboard.values():
            if entry.user_id == user_id and (game_id is None or entry.game_id == game_id):
                return entry.model_copy()
        return None

    def update_leaderboard_entry(self, entry: LeaderboardEntryCreate) -> LeaderboardEntry:
        key = entry.key()
        for existing in self.leaderboard.values():
            if existing.key() == key:
                for field, value in entry.model_dump(exclude_unset=True).items():
                    setattr(existing, field, value)
                existing.updated_at = datetime.utcnow()
                return existing.model_copy()

        new_entry = LeaderboardEntry(
            id=self._next_id("leaderboard"),
            updated_at=datetime.utcnow(),
            **entry.model_dump(),
        )
        self.leaderboard[new_entry.id] = new_entry
        return new_entry.model_copy()

    # ========================================================================
    # Wallet
    # ========================================================================

    def create_wallet_transaction(self, transaction: WalletTransactionCreate) -> WalletTransaction:
        if transaction.user_id not in self.users:
            raise NotFoundError("User", transaction.user_id)

        new_transaction = WalletTransaction(
            id=self._next_id("transaction"),
            timestamp=datetime.utcnow(),
            status=transaction.status,
            **transaction.model_dump(),
        )
        self.transactions[new_transaction.id] = new_transaction
        self.update_user_wallet(transaction.user_id, transaction.amount)
        return new_transaction.model_copy()

    def get_wallet_transaction(self, transaction_id: int) -> Optional[WalletTransaction]:
        transaction = self.transactions.get(transaction_id)
        return transaction.model_copy() if transaction else None

    def get_wallet_transactions(self, user_id: int) -> List[WalletTransaction]:
        history = sorted(
            (t for t in self.transactions.values() if t.user_id == user_id),
            key=lambda t: (t.timestamp, t.id),
            reverse=True,
        )
        return [t.model_copy() for t in history]

    def get_recent_transactions(self, limit: int = 20) -> List[WalletTransaction]:
        recent = sorted(self.transactions.values(), key=lambda t: (t.timestamp, t.id), reverse=True)
        return [t.model_copy() for t in recent[:limit]]

    def get_pending_withdrawals(self) -> List[WalletTransaction]:
        pending = sorted(
            (t for t in self.transactions.values() if t.type == "withdrawal" and t.status == "pending"),
            key=lambda t: (t.timestamp, t.id),
        )
        return [t.model_copy() for t in pending]

    def _pending_withdrawal(self, transaction_id: int) -> WalletTransaction:
        transaction = self.transactions.get(transaction_id)
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        if transaction.type != "withdrawal" or transaction.status != "pending":
            raise InvalidOperationError(f"Transaction {transaction_id} is not a pending withdrawal")
        return transaction

    def approve_withdrawal(self, transaction_id: int) -> WalletTransaction:
        transaction = self._pending_withdrawal(transaction_id)
        transaction.status = "completed"
        logger.info(f"Approved withdrawal {transaction_id}")
        return transaction.model_copy()

    def reject_withdrawal(self, transaction_id: int, reason: str) -> WalletTransaction:
        transaction = self._pending_withdrawal(transaction_id)
        self.update_user_wallet(transaction.user_id, abs(transaction.amount))
        transaction.status = "rejected"
        transaction.description = rejection_description(transaction.description, reason)
        logger.info(f"Rejected withdrawal {transaction_id}", extra={"reason": reason})
        return transaction.model_copy()

    # ========================================================================
    # Admin
    # ========================================================================

    def create_audit_log(self, log: AuditLogCreate) -> AdminAuditLog:
        new_log = AdminAuditLog(id=self._next_id("audit_log"), timestamp=datetime.utcnow(), **log.model_dump())
        self.audit_logs[new_log.id] = new_log
        return new_log.model_copy()

    def get_audit_logs(self, admin_id: Optional[int] = None, limit: int = 20, offset: int = 0) -> List[AdminAuditLog]:
        logs = sorted(
            (log for log in self.audit_logs.values() if admin_id is None or log.admin_id == admin_id),
            key=lambda log: (log.timestamp, log.id),
            reverse=True,
        )
        return [log.model_copy() for log in logs[offset:offset + limit]]

    def get_dashboard_stats(self) -> DashboardStats:
        cutoff = datetime.utcnow() - timedelta(days=ACTIVE_USER_WINDOW_DAYS)
        return DashboardStats(
            total_users=len(self.users),
            active_users=sum(1 for u in self.users.values() if u.last_login and u.last_login >= cutoff),
            total_revenue=sum(t.entry_fee * t.current_players for t in self.tournaments.values()),
            pending_withdrawals=sum(
                1 for t in self.transactions.values() if t.type == "withdrawal" and t.status == "pending"
            ),
            ongoing_tournaments=sum(1 for t in self.tournaments.values() if t.status == "ongoing"),
            total_transactions=len(self.transactions),
        )
