"""
Leaderboard routes.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from esports_arena.schemas import CamelModel, LeaderboardEntry, LeaderboardEntryCreate
from esports_arena.storage import Storage, get_storage
from esports_arena.storage.base import DEFAULT_LEADERBOARD_PERIOD

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


class LeaderboardUser(CamelModel):
    username: str
    display_name: str
    profile_image: Optional[str] = None


class LeaderboardRow(LeaderboardEntry):
    user: Optional[LeaderboardUser] = None


@router.get("", response_model=List[LeaderboardRow])
async def get_leaderboard(
    game_id: Optional[int] = Query(None, alias="gameId"),
    period: str = Query(DEFAULT_LEADERBOARD_PERIOD),
    limit: Optional[int] = Query(None, ge=1),
    storage: Storage = Depends(get_storage)
):
    """Ranked entries for a period, each with the player's display fields."""
    rows = []
    for entry in storage.get_leaderboard_entries(game_id, period, limit):
        user = storage.get_user(entry.user_id) if entry.user_id is not None else None
        rows.append(LeaderboardRow(
            **entry.model_dump(),
            user=LeaderboardUser.model_validate(user) if user else None,
        ))
    return rows


@router.post("", response_model=LeaderboardEntry, status_code=status.HTTP_201_CREATED)
async def upsert_leaderboard_entry(request: LeaderboardEntryCreate, storage: Storage = Depends(get_storage)):
    """Create the entry for (player or team, game, period), or merge into the existing one."""
    return storage.update_leaderboard_entry(request)
