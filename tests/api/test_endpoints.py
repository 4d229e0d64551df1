"""
HTTP endpoint integration tests for esports-arena-api.

These tests verify that FastAPI endpoints:
- Return correct HTTP status codes
- Speak camelCase JSON
- Apply the business rules that live in the route layer
- Never expose password hashes

Uses FastAPI TestClient against both storage backends.
"""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from esports_arena.schemas import TeamMemberCreate
from tests.factories import make_game, make_team, make_tournament, make_user


def _user_body(username: str, **overrides) -> dict:
    body = {
        "username": username,
        "password": "secret123",
        "displayName": username.title(),
        "email": f"{username}@example.com",
    }
    body.update(overrides)
    return body


def _tournament_body(game_id: int, **overrides) -> dict:
    body = {
        "name": "Weekly Showdown",
        "gameId": game_id,
        "startDate": (datetime.utcnow() + timedelta(days=1)).isoformat(),
        "prizePool": 5000,
        "maxPlayers": 64,
        "gameMode": "solo",
        "tournamentType": "free",
    }
    body.update(overrides)
    return body


# =============================================================================
# ROOT AND HEALTH
# =============================================================================

class TestRootAndHealthEndpoints:
    """Tests for service information endpoints."""

    def test_root(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Esports Arena API"
        assert data["status"] == "running"

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_correlation_id_is_echoed(self, test_client):
        response = test_client.get("/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_metrics_exposed(self, test_client):
        test_client.get("/health")
        response = test_client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text


# =============================================================================
# USERS
# =============================================================================

class TestUserEndpoints:
    """Tests for /api/users."""

    def test_create_user_strips_password(self, test_client):
        response = test_client.post("/api/users", json=_user_body("alice", walletBalance=100))

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "alice"
        assert data["walletBalance"] == 100
        assert "password" not in data

    def test_get_user_strips_password(self, test_client, player):
        response = test_client.get(f"/api/users/{player.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["displayName"] == "Ghostsniper"
        assert "password" not in data

    def test_duplicate_username_rejected(self, test_client, storage):
        assert test_client.post("/api/users", json=_user_body("alice")).status_code == 201

        response = test_client.post("/api/users", json=_user_body("alice", email="other@example.com"))

        assert response.status_code == 400
        assert response.json()["detail"] == "Username already exists"
        assert storage.get_users_count() == 1

    def test_duplicate_email_rejected(self, test_client, storage):
        assert test_client.post("/api/users", json=_user_body("alice")).status_code == 201

        response = test_client.post("/api/users", json=_user_body("alicia", email="alice@example.com"))

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"
        assert storage.get_users_count() == 1

    def test_invalid_body_is_400_with_details(self, test_client):
        response = test_client.post("/api/users", json={"username": "al"})

        assert response.status_code == 400
        data = response.json()
        assert data["detail"] == "Invalid request data"
        assert data["errors"]

    def test_missing_user_404(self, test_client):
        response = test_client.get("/api/users/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_profile_is_demo_user(self, test_client, player):
        response = test_client.get("/api/user/profile")

        assert response.status_code == 200
        assert response.json()["id"] == player.id


# =============================================================================
# GAMES AND TEAMS
# =============================================================================

class TestGameEndpoints:
    """Tests for /api/games."""

    def test_create_and_list(self, test_client):
        body = {"name": "BGMI", "imageUrl": "https://example.com/bgmi.png", "description": "Battle royale", "featured": True}

        created = test_client.post("/api/games", json=body)

        assert created.status_code == 201
        assert created.json()["tournamentCount"] == 0
        assert [g["name"] for g in test_client.get("/api/games").json()] == ["BGMI"]
        assert [g["name"] for g in test_client.get("/api/games/featured").json()] == ["BGMI"]

    def test_missing_game_404(self, test_client):
        assert test_client.get("/api/games/999").status_code == 404

    def test_delete_game(self, test_client, storage, game):
        tournament = make_tournament(storage, game.id)

        response = test_client.delete(f"/api/games/{game.id}")

        assert response.status_code == 204
        assert storage.get_tournament(tournament.id) is None
        assert test_client.delete(f"/api/games/{game.id}").status_code == 404


class TestTeamEndpoints:
    """Tests for /api/teams."""

    def test_team_detail_includes_members(self, test_client, storage, player):
        team = make_team(storage, player.id)
        storage.add_team_member(TeamMemberCreate(team_id=team.id, user_id=player.id, role="captain"))

        response = test_client.get(f"/api/teams/{team.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Team Alpha"
        assert [m["userId"] for m in data["members"]] == [player.id]

    def test_add_member(self, test_client, storage, player):
        mate = make_user(storage, "mate")
        team = make_team(storage, player.id)
        test_client.post(f"/api/teams/{team.id}/members", json={"userId": player.id, "role": "captain"})

        response = test_client.post(f"/api/teams/{team.id}/members", json={"userId": mate.id})

        assert response.status_code == 201
        assert response.json()["role"] == "member"
        assert storage.get_team(team.id).member_count == 2

    def test_add_member_to_missing_team(self, test_client, player):
        response = test_client.post("/api/teams/999/members", json={"userId": player.id})

        assert response.status_code == 404

    def test_duplicate_team_name_rejected(self, test_client, storage, player):
        make_team(storage, player.id, name="Alpha")

        response = test_client.post("/api/teams", json={"name": "Alpha", "captainId": player.id})

        assert response.status_code == 400
        assert response.json()["detail"] == "Team name already taken"
        assert len(storage.get_teams()) == 1

    def test_duplicate_member_rejected(self, test_client, storage, player):
        team = make_team(storage, player.id)
        assert test_client.post(f"/api/teams/{team.id}/members", json={"userId": player.id}).status_code == 201

        response = test_client.post(f"/api/teams/{team.id}/members", json={"userId": player.id})

        assert response.status_code == 400
        assert storage.get_team(team.id).member_count == 1
        assert len(storage.get_team_members(team.id)) == 1

    def test_top_and_user_teams(self, test_client, storage, player):
        team = make_team(storage, player.id, wins=12)
        make_team(storage, player.id, name="Team Bravo", wins=3)
        storage.add_team_member(TeamMemberCreate(team_id=team.id, user_id=player.id))

        top = test_client.get("/api/teams/top", params={"limit": 1}).json()
        mine = test_client.get(f"/api/teams/user/{player.id}").json()

        assert [t["id"] for t in top] == [team.id]
        assert [t["id"] for t in mine] == [team.id]
        assert test_client.get("/api/teams/user").json() == mine

    def test_delete_team(self, test_client, storage, player):
        team = make_team(storage, player.id)

        assert test_client.delete(f"/api/teams/{team.id}").status_code == 204
        assert test_client.get(f"/api/teams/{team.id}").status_code == 404


# =============================================================================
# TOURNAMENTS
# =============================================================================

class TestTournamentEndpoints:
    """Tests for /api/tournaments and registration."""

    def test_create_tournament(self, test_client, storage, game):
        response = test_client.post("/api/tournaments", json=_tournament_body(game.id))

        assert response.status_code == 201
        assert response.json()["currentPlayers"] == 0
        assert storage.get_game(game.id).tournament_count == 1

    def test_create_for_missing_game(self, test_client):
        response = test_client.post("/api/tournaments", json=_tournament_body(999))

        assert response.status_code == 404

    def test_end_before_start_is_invalid(self, test_client, game):
        start = datetime.utcnow() + timedelta(days=2)
        body = _tournament_body(game.id, startDate=start.isoformat(), endDate=(start - timedelta(days=1)).isoformat())

        assert test_client.post("/api/tournaments", json=body).status_code == 400

    def test_capacity_is_enforced(self, test_client, storage, game):
        tournament = make_tournament(storage, game.id, max_players=2)
        alice, bob, carol = (make_user(storage, name) for name in ["alice", "bob", "carol"])
        url = f"/api/tournaments/{tournament.id}/register"

        first = test_client.post(url, json={"userId": alice.id})
        assert first.status_code == 201
        assert storage.get_tournament(tournament.id).current_players == 1

        second = test_client.post(url, json={"userId": bob.id})
        assert second.status_code == 201
        assert storage.get_tournament(tournament.id).current_players == 2

        third = test_client.post(url, json={"userId": carol.id})
        assert third.status_code == 400
        assert third.json()["detail"] == "Tournament is full"
        assert storage.get_tournament(tournament.id).current_players == 2
        assert len(storage.get_tournament_registrations(tournament.id)) == 2

    def test_register_missing_tournament(self, test_client, player):
        response = test_client.post("/api/tournaments/999/register", json={"userId": player.id})

        assert response.status_code == 404

    def test_register_missing_user(self, test_client, tournament):
        response = test_client.post(f"/api/tournaments/{tournament.id}/register", json={"userId": 999})

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_detail_includes_registrations_and_matches(self, test_client, storage, tournament, player):
        test_client.post(f"/api/tournaments/{tournament.id}/register", json={"userId": player.id})
        test_client.post(
            f"/api/tournaments/{tournament.id}/matches",
            json={"round": 1, "matchNumber": 1, "scheduledTime": datetime.utcnow().isoformat()},
        )

        data = test_client.get(f"/api/tournaments/{tournament.id}").json()

        assert data["currentPlayers"] == 1
        assert [r["userId"] for r in data["registrations"]] == [player.id]
        assert [m["matchNumber"] for m in data["matches"]] == [1]

    def test_listings(self, test_client, storage, game):
        make_tournament(storage, game.id, name="Finals", featured=True)
        make_tournament(storage, game.id, name="Cup", status="completed")

        assert len(test_client.get("/api/tournaments").json()) == 2
        assert [t["name"] for t in test_client.get("/api/tournaments/upcoming").json()] == ["Finals"]
        assert len(test_client.get(f"/api/tournaments/game/{game.id}").json()) == 2

        featured = test_client.get("/api/tournaments/featured").json()
        assert featured["name"] == "Finals"
        assert featured["matches"] == []

    def test_no_featured_tournament(self, test_client):
        response = test_client.get("/api/tournaments/featured")

        assert response.status_code == 404
        assert response.json()["detail"] == "No featured tournament found"

    def test_solo_participants_listed_as_teams(self, test_client, tournament, player):
        test_client.post(f"/api/tournaments/{tournament.id}/register", json={"userId": player.id})

        teams = test_client.get(f"/api/tournaments/{tournament.id}/teams").json()

        assert len(teams) == 1
        assert teams[0]["name"] == player.display_name
        assert teams[0]["memberCount"] == 1

    def test_team_participants(self, test_client, storage, tournament, player):
        team = make_team(storage, player.id)
        test_client.post(f"/api/tournaments/{tournament.id}/register", json={"userId": player.id, "teamId": team.id})

        teams = test_client.get(f"/api/tournaments/{tournament.id}/teams").json()

        assert [t["id"] for t in teams] == [team.id]

    def test_delete_tournament(self, test_client, storage, game, tournament):
        response = test_client.delete(f"/api/tournaments/{tournament.id}")

        assert response.status_code == 204
        assert storage.get_game(game.id).tournament_count == 0


# =============================================================================
# MATCHES AND LEADERBOARD
# =============================================================================

class TestMatchEndpoints:
    """Tests for bracket endpoints."""

    def test_matches_are_ordered(self, test_client, tournament):
        url = f"/api/tournaments/{tournament.id}/matches"
        when = datetime.utcnow().isoformat()
        for rnd, number in [(2, 1), (1, 2), (1, 1)]:
            assert test_client.post(url, json={"round": rnd, "matchNumber": number, "scheduledTime": when}).status_code == 201

        bracket = [(m["round"], m["matchNumber"]) for m in test_client.get(url).json()]

        assert bracket == [(1, 1), (1, 2), (2, 1)]

    def test_record_result(self, test_client, tournament):
        created = test_client.post(
            f"/api/tournaments/{tournament.id}/matches",
            json={"round": 1, "matchNumber": 1, "scheduledTime": datetime.utcnow().isoformat()},
        ).json()

        response = test_client.put(
            f"/api/matches/{created['id']}/result",
            json={"winnerId": 3, "team1Score": 14, "team2Score": 9},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["team1Score"] == 14

    def test_result_for_missing_match_404(self, test_client):
        response = test_client.put("/api/matches/999/result", json={"winnerId": 1, "team1Score": 1, "team2Score": 0})

        assert response.status_code == 404
        assert response.json()["detail"] == "Match with ID 999 not found"


class TestLeaderboardEndpoints:
    """Tests for /api/leaderboard."""

    def test_upsert_and_read(self, test_client, game, player):
        body = {"userId": player.id, "gameId": game.id, "period": "weekly", "points": 100, "rank": 1}
        assert test_client.post("/api/leaderboard", json=body).status_code == 201
        assert test_client.post("/api/leaderboard", json={**body, "points": 300}).status_code == 201

        entries = test_client.get("/api/leaderboard", params={"gameId": game.id}).json()

        assert len(entries) == 1
        assert entries[0]["points"] == 300
        assert entries[0]["user"] == {
            "username": "ghostsniper",
            "displayName": "Ghostsniper",
            "profileImage": None,
        }

    def test_subject_required(self, test_client):
        response = test_client.post("/api/leaderboard", json={"points": 1})

        assert response.status_code == 400


# =============================================================================
# WALLET
# =============================================================================

class TestWalletEndpoints:
    """Tests for /api/users/{id}/wallet."""

    def test_deposit_returns_new_balance(self, test_client, player):
        response = test_client.post(
            f"/api/users/{player.id}/wallet/transactions",
            json={"type": "deposit", "amount": 250, "description": "Top up"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["newBalance"] == 350
        assert data["transaction"]["status"] == "completed"

        wallet = test_client.get(f"/api/users/{player.id}/wallet").json()
        assert wallet["balance"] == 350
        assert [t["amount"] for t in wallet["transactions"]] == [250]

    def test_withdrawal_is_pending(self, test_client, player):
        response = test_client.post(
            f"/api/users/{player.id}/wallet/transactions",
            json={"type": "withdrawal", "amount": -40, "description": "Withdrawal"},
        )

        assert response.status_code == 201
        assert response.json()["transaction"]["status"] == "pending"
        assert response.json()["newBalance"] == 60

    def test_client_status_refused(self, test_client, storage, player):
        response = test_client.post(
            f"/api/users/{player.id}/wallet/transactions",
            json={"type": "withdrawal", "amount": -40, "status": "rejected", "description": "Withdrawal"},
        )

        assert response.status_code == 400
        assert storage.get_user(player.id).wallet_balance == 100
        assert storage.get_wallet_transactions(player.id) == []

    def test_withdrawal_can_be_refunded(self, test_client, storage, player):
        created = test_client.post(
            f"/api/users/{player.id}/wallet/transactions",
            json={"type": "withdrawal", "amount": -40, "description": "Withdrawal"},
        ).json()

        response = test_client.put(
            f"/api/admin/withdrawals/{created['transaction']['id']}/reject",
            json={"reason": "duplicate request"},
        )

        assert response.status_code == 200
        assert storage.get_user(player.id).wallet_balance == 100

    @pytest.mark.parametrize("transaction_type,amount", [
        ("deposit", -10),
        ("prize", 0),
        ("withdrawal", 40),
        ("fee", 5),
    ])
    def test_wrong_sign_rejected(self, test_client, player, transaction_type, amount):
        response = test_client.post(
            f"/api/users/{player.id}/wallet/transactions",
            json={"type": transaction_type, "amount": amount, "description": "bad"},
        )

        assert response.status_code == 400

    def test_overdraw_rejected(self, test_client, storage, player):
        response = test_client.post(
            f"/api/users/{player.id}/wallet/transactions",
            json={"type": "withdrawal", "amount": -500, "description": "Too much"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Insufficient balance"
        assert storage.get_user(player.id).wallet_balance == 100
        assert storage.get_wallet_transactions(player.id) == []

    def test_wallet_for_missing_user(self, test_client):
        assert test_client.get("/api/users/999/wallet").status_code == 404


# =============================================================================
# ERROR HANDLING
# =============================================================================

class TestErrorHandling:
    """Unexpected failures are reported without leaking details."""

    def test_unexpected_error_is_generic_500(self, storage, monkeypatch):
        from esports_arena.main import app
        from esports_arena.storage import get_storage

        def explode():
            raise RuntimeError("connection string with secrets")

        monkeypatch.setattr(storage, "get_games", explode)
        app.dependency_overrides[get_storage] = lambda: storage
        try:
            client = TestClient(app, raise_server_exceptions=False)
            response = client.get("/api/games")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


# =============================================================================
# ASYNC CLIENT
# =============================================================================

@pytest.mark.asyncio
async def test_async_client_round_trip(async_client, storage):
    game = make_game(storage, name="COD Mobile")

    response = await async_client.get(f"/api/games/{game.id}")

    assert response.status_code == 200
    assert response.json()["name"] == "COD Mobile"
