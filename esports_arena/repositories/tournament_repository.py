"""
Tournament Repository for tournaments, registrations and brackets.

Usage:
    repo = TournamentRepository(db)
    upcoming = repo.find_upcoming(limit=5)
    bracket = MatchRepository(db).find_bracket(tournament_id)
"""
from typing import List, Optional

from sqlalchemy import func

from esports_arena.models import Match, Tournament, TournamentRegistration
from esports_arena.repositories.base import BaseRepository


class TournamentRepository(BaseRepository[Tournament]):
    """Repository for tournaments."""

    def __init__(self, db):
        super().__init__(Tournament, db)

    def find_upcoming(self, limit: Optional[int] = None) -> List[Tournament]:
        """Upcoming tournaments, soonest start first."""
        query = self.query().filter(Tournament.status == "upcoming").order_by(Tournament.start_date, Tournament.id)
        if limit:
            query = query.limit(limit)
        return query.all()

    def find_featured(self) -> Optional[Tournament]:
        return self.where_first(Tournament.featured.is_(True))

    def find_by_game(self, game_id: int) -> List[Tournament]:
        return self.where(Tournament.game_id == game_id)

    def count_ongoing(self) -> int:
        return self.count(Tournament.status == "ongoing")

    def total_revenue(self) -> int:
        """Entry fees collected across all tournaments."""
        total = self.db.query(
            func.coalesce(func.sum(Tournament.entry_fee * Tournament.current_players), 0)
        ).scalar()
        return int(total or 0)


class RegistrationRepository(BaseRepository[TournamentRegistration]):
    """Repository for tournament registrations."""

    def __init__(self, db):
        super().__init__(TournamentRegistration, db)

    def find_by_tournament(self, tournament_id: int) -> List[TournamentRegistration]:
        return self.where(TournamentRegistration.tournament_id == tournament_id)


class MatchRepository(BaseRepository[Match]):
    """Repository for bracket matches."""

    def __init__(self, db):
        super().__init__(Match, db)

    def find_bracket(self, tournament_id: int) -> List[Match]:
        """A tournament's matches ordered by round, then match number."""
        return (
            self.query()
            .filter(Match.tournament_id == tournament_id)
            .order_by(Match.round, Match.match_number, Match.id)
            .all()
        )
