"""Builders for test data, written through the Storage interface."""
from datetime import datetime, timedelta

from esports_arena.schemas import GameCreate, TeamCreate, TournamentCreate, UserCreate


def make_user(storage, username: str, balance: int = 0):
    return storage.create_user(UserCreate(
        username=username,
        password="password123",
        display_name=username.title(),
        email=f"{username}@example.com",
        wallet_balance=balance,
    ))


def make_game(storage, name: str = "Free Fire"):
    return storage.create_game(GameCreate(
        name=name,
        image_url="https://example.com/game.png",
        description=f"{name} battle royale",
    ))


def make_team(storage, captain_id: int, name: str = "Team Alpha", wins: int = 0):
    return storage.create_team(TeamCreate(name=name, captain_id=captain_id, wins=wins))


def make_tournament(storage, game_id: int, max_players: int = 100, **overrides):
    fields = dict(
        name="Weekly Showdown",
        game_id=game_id,
        start_date=datetime.utcnow() + timedelta(days=1),
        prize_pool=5000,
        max_players=max_players,
        game_mode="solo",
        tournament_type="free",
    )
    fields.update(overrides)
    return storage.create_tournament(TournamentCreate(**fields))
