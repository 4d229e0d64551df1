"""
Team and roster routes.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from esports_arena.core import metrics
from esports_arena.core.config import settings
from esports_arena.schemas import Team, TeamCreate, TeamMember, TeamMemberCreate, TeamMemberRequest
from esports_arena.storage import Storage, get_storage

router = APIRouter(prefix="/teams", tags=["teams"])


class TeamDetail(Team):
    """A team with its roster."""
    members: List[TeamMember]


@router.get("", response_model=List[Team])
async def list_teams(storage: Storage = Depends(get_storage)):
    return storage.get_teams()


@router.get("/top", response_model=List[Team])
async def list_top_teams(
    limit: int = Query(5, ge=1, le=100),
    storage: Storage = Depends(get_storage)
):
    """Teams with the most wins."""
    return storage.get_top_teams(limit)


@router.get("/user", response_model=List[Team])
async def list_my_teams(storage: Storage = Depends(get_storage)):
    """Teams of the demo user."""
    return storage.get_teams_by_user_id(settings.DEMO_USER_ID)


@router.get("/user/{user_id}", response_model=List[Team])
async def list_user_teams(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_teams_by_user_id(user_id)


@router.get("/{team_id}", response_model=TeamDetail)
async def get_team(team_id: int, storage: Storage = Depends(get_storage)):
    team = storage.get_team(team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return TeamDetail(**team.model_dump(), members=storage.get_team_members(team_id))


@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(request: TeamCreate, storage: Storage = Depends(get_storage)):
    if storage.get_team_by_name(request.name):
        raise HTTPException(status_code=400, detail="Team name already taken")
    return storage.create_team(request)


@router.post("/{team_id}/members", response_model=TeamMember, status_code=status.HTTP_201_CREATED)
async def add_team_member(
    team_id: int,
    request: TeamMemberRequest,
    storage: Storage = Depends(get_storage)
):
    """Add a player to a team; the team's member count is recounted."""
    if not storage.get_team(team_id):
        raise HTTPException(status_code=404, detail="Team not found")
    if storage.get_team_member(team_id, request.user_id):
        raise HTTPException(status_code=400, detail="User is already a member of this team")
    return storage.add_team_member(TeamMemberCreate(team_id=team_id, **request.model_dump()))


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(team_id: int, storage: Storage = Depends(get_storage)):
    if not storage.delete_team(team_id):
        raise HTTPException(status_code=404, detail="Team not found")
    metrics.record_delete("team")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
