"""
Game catalogue routes.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from esports_arena.core import metrics
from esports_arena.schemas import Game, GameCreate
from esports_arena.storage import Storage, get_storage

router = APIRouter(prefix="/games", tags=["games"])


@router.get("", response_model=List[Game])
async def list_games(storage: Storage = Depends(get_storage)):
    return storage.get_games()


@router.get("/featured", response_model=List[Game])
async def list_featured_games(storage: Storage = Depends(get_storage)):
    return storage.get_featured_games()


@router.get("/{game_id}", response_model=Game)
async def get_game(game_id: int, storage: Storage = Depends(get_storage)):
    game = storage.get_game(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


@router.post("", response_model=Game, status_code=status.HTTP_201_CREATED)
async def create_game(request: GameCreate, storage: Storage = Depends(get_storage)):
    return storage.create_game(request)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(game_id: int, storage: Storage = Depends(get_storage)):
    """Delete a game together with its tournaments and leaderboard rows."""
    if not storage.delete_game(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    metrics.record_delete("game")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
