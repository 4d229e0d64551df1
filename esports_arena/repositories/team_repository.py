"""
Team Repository for teams and their rosters.
"""
from typing import List, Optional

from sqlalchemy import desc

from esports_arena.models import Team, TeamMember
from esports_arena.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for teams."""

    def __init__(self, db):
        super().__init__(Team, db)

    def find_top(self, limit: int) -> List[Team]:
        """Teams with the most wins first."""
        return self.query().order_by(desc(Team.wins), Team.id).limit(limit).all()

    def find_by_name(self, name: str) -> Optional[Team]:
        return self.where_first(Team.name == name)

    def find_by_member(self, user_id: int) -> List[Team]:
        """Teams the user belongs to."""
        return (
            self.query()
            .join(TeamMember, TeamMember.team_id == Team.id)
            .filter(TeamMember.user_id == user_id)
            .order_by(TeamMember.id)
            .all()
        )

    def recount_members(self, team_id: int) -> None:
        """Set ``member_count`` from the roster table."""
        team = self.find_by_id(team_id)
        if team is not None:
            team.member_count = TeamMemberRepository(self.db).count(TeamMember.team_id == team_id)


class TeamMemberRepository(BaseRepository[TeamMember]):
    """Repository for team rosters."""

    def __init__(self, db):
        super().__init__(TeamMember, db)

    def find_by_team(self, team_id: int) -> List[TeamMember]:
        return self.where(TeamMember.team_id == team_id)

    def find_membership(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        return self.where_first(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
