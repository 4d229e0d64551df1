"""
Demo fixture loading.
"""
from esports_arena.storage import MemStorage
from esports_arena.storage.seed import seed_storage


class TestSeedStorage:
    """The demo data set loads identically into either backend."""

    def test_seed_counts(self, storage):
        seed_storage(storage)

        assert len(storage.get_games()) == 4
        assert storage.get_users_count() == 5
        assert len(storage.get_teams()) == 5
        assert len(storage.get_tournaments()) == 5

    def test_featured_bracket(self, storage):
        seed_storage(storage)

        finals = storage.get_featured_tournament()
        bracket = storage.get_matches(finals.id)

        assert finals.name == "Pro League Finals"
        assert [(m.round, m.match_number) for m in bracket] == [
            (1, 1), (1, 2), (1, 3), (1, 4), (2, 1), (2, 2), (3, 1)
        ]
        assert bracket[3].status == "scheduled"
        assert bracket[-1].status == "completed"

    def test_weekly_leaderboard(self, storage):
        seed_storage(storage)

        entries = storage.get_leaderboard_entries(period="weekly")

        assert [e.rank for e in entries] == [1, 2, 3, 4, 5]
        assert storage.get_user(entries[0].user_id).username == "ghostsniper"

    def test_captains_are_members(self, storage):
        seed_storage(storage)

        for team in storage.get_teams():
            assert team.member_count == 1
            assert [m.user_id for m in storage.get_team_members(team.id)] == [team.captain_id]

    def test_tournament_counters_include_seeded_tournaments(self, storage):
        seed_storage(storage)

        free_fire = storage.get_games()[0]
        # 24 listed plus the weekly showdown and the finals
        assert free_fire.tournament_count == 26


def test_mem_storage_seeds_by_default():
    assert MemStorage().get_users_count() == 5
    assert MemStorage(seed=False).get_users_count() == 0
