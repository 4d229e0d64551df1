"""
Demo fixtures: four games, five players with a team each, five upcoming
tournaments, a weekly leaderboard and a three-round bracket for the
featured tournament.

Everything goes through the Storage interface, so the same data lands in
either backend and derived counters stay consistent.
"""
from datetime import datetime, timedelta
from typing import Optional

from esports_arena.core.logging import get_logger
from esports_arena.schemas import (
    GameCreate,
    LeaderboardEntryCreate,
    MatchCreate,
    TeamCreate,
    TeamMemberCreate,
    TournamentCreate,
    UserCreate,
)

logger = get_logger(__name__)

_UNSPLASH = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=1170&q=80"

GAMES = [
    ("Free Fire", "1614294148960-9aa740632a87", "Garena Free Fire is a battle royale game", 10000, 24, "POPULAR"),
    ("PUBG Mobile", "1560419015-7c427e8ae5ba", "PUBG Mobile is a battle royale game", 8000, 18, "TRENDING"),
    ("COD Mobile", "1640565819215-6a0123982de7", "Call of Duty Mobile is a first-person shooter game", 5000, 12, "NEW"),
    ("BGMI", "1542751110-97427bbecf20", "Battlegrounds Mobile India is a battle royale game", 7000, 15, "FEATURED"),
]

PLAYERS = [
    ("ghostsniper", "GhostSniper", 45500, "1568602471122-7832951cc4c5"),
    ("ninjawarrior", "NinjaWarrior", 38200, "1500648767791-00dcc994a43e"),
    ("stealthqueen", "StealthQueen", 32750, "1580489944761-15a19d654956"),
    ("shadowfighter", "ShadowFighter", 28500, "1507003211169-0a1dd7228f2d"),
    ("eagleeye", "EagleEye", 25400, "1531427186611-ecfd6d936c79"),
]

TEAMS = [
    ("Team Golf", "Top ranked squad with multiple tournament wins", 28, 45500, "PRO"),
    ("Team Alpha", "Rising stars in the competitive scene", 25, 38200, "ELITE"),
    ("Team Delta", "Tactical experts specializing in objective play", 22, 32750, None),
    ("Team Charlie", "Veteran team with consistent performance", 20, 28500, None),
    ("Team Foxtrot", "Aggressive playstyle with high kill counts", 18, 25400, None),
]

LEADERBOARD = [
    # points, wins, total matches, K/D
    (3200, 28, 42, 4.8),
    (2900, 25, 38, 4.5),
    (2750, 22, 35, 4.2),
    (2600, 20, 40, 3.9),
    (2400, 18, 33, 3.8),
]

# (round, match number, team1 index, team2 index, score1, score2, winner index)
BRACKET = [
    (1, 1, 1, 2, 15, 8, 1),
    (1, 2, 3, 4, 12, 10, 3),
    (1, 3, 0, None, 14, 9, 0),
    (1, 4, None, None, None, None, None),
    (2, 1, 1, 3, 18, 11, 1),
    (2, 2, 4, 0, 13, 17, 0),
    (3, 1, 1, 0, 14, 20, 0),
]


def _next_weekday(start: datetime, weekday: int) -> datetime:
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def seed_storage(storage, now: Optional[datetime] = None) -> None:
    """Load the demo fixtures into an empty storage backend."""
    now = now or datetime.utcnow()
    today = now.replace(minute=0, second=0, microsecond=0)

    games = [
        storage.create_game(GameCreate(
            name=name,
            image_url=_UNSPLASH.format(photo),
            description=description,
            player_count=players,
            tournament_count=tournaments,
            featured=True,
            badge=badge,
        ))
        for name, photo, description, players, tournaments, badge in GAMES
    ]

    users = [
        storage.create_user(UserCreate(
            username=username,
            password="password123",
            display_name=display_name,
            email=f"{username}@example.com",
            wallet_balance=balance,
            profile_image=_UNSPLASH.format(photo),
        ))
        for username, display_name, balance, photo in PLAYERS
    ]

    teams = [
        storage.create_team(TeamCreate(
            name=name,
            description=description,
            captain_id=users[i].id,
            wins=wins,
            total_earnings=earnings,
            badge=badge,
        ))
        for i, (name, description, wins, earnings, badge) in enumerate(TEAMS)
    ]

    schedule = [
        ("Weekly Showdown", 0, "Weekly tournament for solo players", today.replace(hour=19), 64, 42, 50, 5000, "solo", "paid"),
        ("Pro League Qualifier", 1, "Qualifier for the Pro League", (today + timedelta(days=1)).replace(hour=16), 100, 72, 100, 15000, "squad", "paid"),
        ("Weekend Warriors", 2, "Weekend duo tournament", _next_weekday(today, 5).replace(hour=14), 32, 24, 75, 8000, "duo", "paid"),
        ("Elite Showdown", 3, "Free tournament for all players", _next_weekday(today, 6).replace(hour=20), 100, 67, 0, 3000, "solo", "free"),
    ]
    for name, game_index, description, start, max_players, current, fee, prize, mode, kind in schedule:
        storage.create_tournament(TournamentCreate(
            name=name,
            game_id=games[game_index].id,
            description=description,
            image_url=games[game_index].image_url,
            start_date=start,
            max_players=max_players,
            current_players=current,
            entry_fee=fee,
            prize_pool=prize,
            game_mode=mode,
            tournament_type=kind,
        ))

    finals = storage.create_tournament(TournamentCreate(
        name="Pro League Finals",
        game_id=games[0].id,
        description="The ultimate championship with the biggest prize pool",
        image_url=_UNSPLASH.format("1511882150382-421056c89033"),
        start_date=today + timedelta(days=14),
        max_players=100,
        current_players=75,
        entry_fee=250,
        prize_pool=50000,
        game_mode="squad",
        tournament_type="paid",
        featured=True,
    ))

    for rank, (user, (points, wins, total, kd)) in enumerate(zip(users, LEADERBOARD), start=1):
        storage.update_leaderboard_entry(LeaderboardEntryCreate(
            user_id=user.id,
            game_id=games[0].id,
            points=points,
            wins=wins,
            total_matches=total,
            kd_ratio=kd,
            earnings=user.wallet_balance,
            rank=rank,
            period="weekly",
        ))

    for team, user in zip(teams, users):
        storage.add_team_member(TeamMemberCreate(team_id=team.id, user_id=user.id, role="captain"))

    days_before = {1: 3, 2: 1, 3: 0}
    for rnd, number, t1, t2, s1, s2, winner in BRACKET:
        scheduled = finals.start_date - timedelta(days=2 if (rnd, number) == (1, 4) else days_before[rnd])
        storage.create_match(MatchCreate(
            tournament_id=finals.id,
            round=rnd,
            match_number=number,
            team1_id=teams[t1].id if t1 is not None else None,
            team2_id=teams[t2].id if t2 is not None else None,
            team1_score=s1,
            team2_score=s2,
            winner_id=teams[winner].id if winner is not None else None,
            status="completed" if winner is not None else "scheduled",
            scheduled_time=scheduled,
        ))

    logger.info(
        "Seeded demo data",
        extra={"games": len(games), "users": len(users), "teams": len(teams), "tournaments": len(schedule) + 1},
    )
