"""
Bracket routes: list and create a tournament's matches, record results.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from esports_arena.core import metrics
from esports_arena.schemas import Match, MatchCreate, MatchRequest, MatchResult
from esports_arena.storage import Storage, get_storage

router = APIRouter(tags=["matches"])


@router.get("/tournaments/{tournament_id}/matches", response_model=List[Match])
async def list_matches(tournament_id: int, storage: Storage = Depends(get_storage)):
    """Matches ordered by round, then match number."""
    return storage.get_matches(tournament_id)


@router.post("/tournaments/{tournament_id}/matches", response_model=Match, status_code=status.HTTP_201_CREATED)
async def create_match(
    tournament_id: int,
    request: MatchRequest,
    storage: Storage = Depends(get_storage)
):
    if not storage.get_tournament(tournament_id):
        raise HTTPException(status_code=404, detail="Tournament not found")
    return storage.create_match(MatchCreate(tournament_id=tournament_id, **request.model_dump()))


@router.put("/matches/{match_id}/result", response_model=Match)
async def record_match_result(
    match_id: int,
    request: MatchResult,
    storage: Storage = Depends(get_storage)
):
    """Set the winner and scores; the match becomes ``completed``."""
    match = storage.update_match_result(match_id, request.winner_id, request.team1_score, request.team2_score)
    metrics.record_match_result()
    return match
