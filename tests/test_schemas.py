"""
Schema validation: wire aliases and the wallet sign convention.
"""
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from esports_arena.schemas import (
    LeaderboardEntryCreate,
    TournamentCreate,
    User,
    WalletTransactionRequest,
)


class TestWalletSignConvention:
    """Credits positive, debits negative, status derived from the type."""

    @pytest.mark.parametrize("transaction_type", ["deposit", "prize", "referral"])
    def test_credits_must_be_positive(self, transaction_type):
        assert WalletTransactionRequest(type=transaction_type, amount=10, description="ok").amount == 10
        with pytest.raises(ValidationError):
            WalletTransactionRequest(type=transaction_type, amount=-10, description="bad")

    @pytest.mark.parametrize("transaction_type", ["withdrawal", "fee"])
    def test_debits_must_be_negative(self, transaction_type):
        assert WalletTransactionRequest(type=transaction_type, amount=-10, description="ok").amount == -10
        with pytest.raises(ValidationError):
            WalletTransactionRequest(type=transaction_type, amount=10, description="bad")

    def test_status_follows_type(self):
        assert WalletTransactionRequest(type="withdrawal", amount=-5, description="w").status == "pending"
        assert WalletTransactionRequest(type="fee", amount=-5, description="f").status == "completed"
        assert WalletTransactionRequest(type="deposit", amount=5, description="d").status == "completed"

    @pytest.mark.parametrize("status", ["pending", "completed", "rejected"])
    def test_client_status_refused(self, status):
        with pytest.raises(ValidationError):
            WalletTransactionRequest.model_validate(
                {"type": "withdrawal", "amount": -5, "status": status, "description": "w"}
            )


class TestCamelCaseAliases:
    """Python uses snake_case, the wire uses camelCase."""

    def test_accepts_camel_case(self):
        request = WalletTransactionRequest.model_validate({"type": "deposit", "amount": 1, "description": "d"})
        entry = LeaderboardEntryCreate.model_validate({"userId": 3, "kdRatio": 4.5})

        assert request.amount == 1
        assert entry.user_id == 3
        assert entry.kd_ratio == 4.5

    def test_public_user_has_no_password(self):
        user = User(
            id=1,
            username="ghostsniper",
            password="hash",
            display_name="GhostSniper",
            email="ghostsniper@example.com",
            created_at=datetime.utcnow(),
        )

        public = user.to_public().model_dump(by_alias=True)

        assert "password" not in public
        assert public["displayName"] == "GhostSniper"


class TestTournamentDates:

    def test_end_before_start_rejected(self):
        start = datetime.utcnow()
        with pytest.raises(ValidationError):
            TournamentCreate(
                name="Cup", game_id=1, start_date=start, end_date=start - timedelta(hours=1),
                prize_pool=0, max_players=2, game_mode="solo", tournament_type="free",
            )


def test_leaderboard_entry_needs_subject():
    with pytest.raises(ValidationError):
        LeaderboardEntryCreate(game_id=1)
