"""
Tournament routes: listings, detail views and registration.

Capacity is enforced here, before storage is called: a full tournament
refuses the registration and nothing is written.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from esports_arena.core import metrics
from esports_arena.core.exceptions import StorageError
from esports_arena.core.logging import get_logger
from esports_arena.schemas import (
    Match,
    RegistrationCreate,
    RegistrationRequest,
    Team,
    Tournament,
    TournamentCreate,
    TournamentRegistration,
    User,
)
from esports_arena.storage import Storage, get_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/tournaments", tags=["tournaments"])


class FeaturedTournament(Tournament):
    matches: List[Match]


class TournamentDetail(Tournament):
    registrations: List[TournamentRegistration]
    matches: List[Match]


def _solo_entry(user: User) -> Team:
    """Present a solo registrant in the same shape as a team."""
    return Team(
        id=user.id,
        name=user.display_name,
        logo_url=user.profile_image,
        description=None,
        captain_id=user.id,
        member_count=1,
        wins=0,
        total_earnings=0,
        badge=None,
        created_at=user.created_at,
    )


@router.get("", response_model=List[Tournament])
async def list_tournaments(storage: Storage = Depends(get_storage)):
    return storage.get_tournaments()


@router.get("/upcoming", response_model=List[Tournament])
async def list_upcoming_tournaments(
    limit: Optional[int] = Query(None, ge=1),
    storage: Storage = Depends(get_storage)
):
    """Upcoming tournaments, soonest first."""
    return storage.get_upcoming_tournaments(limit)


@router.get("/featured", response_model=FeaturedTournament)
async def get_featured_tournament(storage: Storage = Depends(get_storage)):
    """The featured tournament with its bracket."""
    tournament = storage.get_featured_tournament()
    if not tournament:
        raise HTTPException(status_code=404, detail="No featured tournament found")
    return FeaturedTournament(**tournament.model_dump(), matches=storage.get_matches(tournament.id))


@router.get("/game/{game_id}", response_model=List[Tournament])
async def list_game_tournaments(game_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_tournaments_by_game_id(game_id)


@router.get("/{tournament_id}", response_model=TournamentDetail)
async def get_tournament(tournament_id: int, storage: Storage = Depends(get_storage)):
    tournament = storage.get_tournament(tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return TournamentDetail(
        **tournament.model_dump(),
        registrations=storage.get_tournament_registrations(tournament_id),
        matches=storage.get_matches(tournament_id),
    )


@router.get("/{tournament_id}/teams", response_model=List[Team])
async def list_tournament_teams(tournament_id: int, storage: Storage = Depends(get_storage)):
    """
    Participants of a tournament.

    Team registrations resolve to their teams. A tournament without any
    team registration lists its solo players as single-member teams.
    """
    registrations = storage.get_tournament_registrations(tournament_id)

    team_ids = list(dict.fromkeys(r.team_id for r in registrations if r.team_id is not None))
    if team_ids:
        teams = (storage.get_team(team_id) for team_id in team_ids)
        return [team for team in teams if team]

    users = (storage.get_user(r.user_id) for r in registrations)
    return [_solo_entry(user) for user in users if user]


@router.post("", response_model=Tournament, status_code=status.HTTP_201_CREATED)
async def create_tournament(request: TournamentCreate, storage: Storage = Depends(get_storage)):
    if not storage.get_game(request.game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return storage.create_tournament(request)


@router.post("/{tournament_id}/register", response_model=TournamentRegistration, status_code=status.HTTP_201_CREATED)
async def register_for_tournament(
    tournament_id: int,
    request: RegistrationRequest,
    storage: Storage = Depends(get_storage)
):
    """
    Claim a slot in a tournament.

    Returns 400 "Tournament is full" once ``currentPlayers`` has reached
    ``maxPlayers``.
    """
    try:
        tournament = storage.get_tournament(tournament_id)
        if not tournament:
            raise HTTPException(status_code=404, detail="Tournament not found")

        if tournament.is_full:
            metrics.record_registration("full")
            raise HTTPException(status_code=400, detail="Tournament is full")

        if not storage.get_user(request.user_id):
            raise HTTPException(status_code=404, detail="User not found")

        if request.team_id is not None and not storage.get_team(request.team_id):
            raise HTTPException(status_code=404, detail="Team not found")

        registration = storage.register_for_tournament(
            RegistrationCreate(tournament_id=tournament_id, **request.model_dump())
        )
        metrics.record_registration("accepted")
        return registration

    except (HTTPException, StorageError):
        raise
    except Exception as e:
        logger.error(f"Error registering for tournament {tournament_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to register for tournament")


@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tournament(tournament_id: int, storage: Storage = Depends(get_storage)):
    """Delete a tournament with its matches and registrations."""
    if not storage.delete_tournament(tournament_id):
        raise HTTPException(status_code=404, detail="Tournament not found")
    metrics.record_delete("tournament")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
