import asyncio

import pytest
from sqlalchemy import select

from ladder.data_models.ladder import RoundGenerationStatus
from ladder.database.models import LeagueState, Round, RoundStatus
from ladder.operations import RoundLifecycle
from ladder.utils.exceptions import (
    InsufficientPlayersError, NoActiveSeasonError, PlayerNotFoundError, ValidationError
)
from ladder.utils.pairing import PairingCandidate


# ============================================================================
# Rounds
# ============================================================================

async def test_generate_round_pairs_roster(lifecycle, register, queries):
    players = [await register(name, rating) for name, rating in
               (("D", 1400), ("A", 2000), ("C", 1600), ("B", 1800))]

    result = await lifecycle.generate_round()

    assert result.status == RoundGenerationStatus.CREATED
    assert result.rounds_played == 1
    assert result.max_rounds == 8
    by_name = {player.name: player.id for player in players}
    assert result.pairings == ((by_name["A"], by_name["B"]), (by_name["C"], by_name["D"]))

    round_view = await queries.get_current_pairings()
    assert round_view.round_id == result.round_id
    assert round_view.status == "active"
    assert [(p.player1_name, p.player2_name) for p in round_view.pairings] == [("A", "B"), ("C", "D")]
    assert round_view.completed_pairings == 0


@pytest.mark.parametrize("roster_size", [0, 1])
async def test_insufficient_players_creates_nothing(lifecycle, register, count_rounds, roster_size):
    for i in range(roster_size):
        await register(f"P{i}")

    for _ in range(2):
        with pytest.raises(InsufficientPlayersError):
            await lifecycle.generate_round()

    assert await count_rounds() == 0


async def test_odd_roster_drops_lowest_rated(lifecycle, register):
    top = await register("Top", 1300)
    middle = await register("Middle", 1250)
    bottom = await register("Bottom", 1200)

    result = await lifecycle.generate_round()

    assert result.created
    assert result.pairings == ((top.id, middle.id),)
    assert result.dropped_player_id == bottom.id
    assert "Odd number of players" in result.warning


async def test_inactive_players_left_out(lifecycle, register, player_ops):
    alice = await register("Alice")
    bob = await register("Bob")
    carol = await register("Carol")
    await player_ops.set_player_active(carol.id, False)

    result = await lifecycle.generate_round()

    assert result.pairings == ((alice.id, bob.id),)
    assert result.dropped_player_id is None
    assert result.warning is None


async def test_explicit_roster(lifecycle, register):
    alice = await register("Alice")
    bob = await register("Bob")
    await register("Carol")

    result = await lifecycle.generate_round(roster=[
        PairingCandidate(alice.id, 1100), PairingCandidate(bob.id, 1500)
    ])

    assert result.pairings == ((bob.id, alice.id),)


async def test_explicit_roster_with_unknown_player(lifecycle, register, count_rounds):
    alice = await register("Alice")
    with pytest.raises(PlayerNotFoundError):
        await lifecycle.generate_round(roster=[PairingCandidate(alice.id, 1250), PairingCandidate(777, 1250)])
    assert await count_rounds() == 0


async def test_new_round_closes_previous(lifecycle, register, database, queries):
    await register("Alice")
    await register("Bob")

    first = await lifecycle.generate_round()
    second = await lifecycle.generate_round()

    async with database.get_session() as session:
        previous = await session.get(Round, first.round_id)
        assert previous.status == RoundStatus.COMPLETED
        assert previous.completed_at is not None
        current = await session.get(Round, second.round_id)
        assert current.status == RoundStatus.ACTIVE

    assert (await queries.get_current_pairings()).round_id == second.round_id


@pytest.mark.parametrize("shared_instance", [True, False])
async def test_concurrent_generation_leaves_one_active_round(lifecycle, register, database, shared_instance):
    await register("Alice")
    await register("Bob")
    other = lifecycle if shared_instance else RoundLifecycle(database, max_rounds=8)

    results = await asyncio.gather(lifecycle.generate_round(), other.generate_round())

    assert sorted(result.rounds_played for result in results) == [1, 2]
    async with database.get_session() as session:
        rounds = (await session.execute(select(Round))).scalars().all()
        state = await session.get(LeagueState, LeagueState.SINGLETON_ID)
    assert len(rounds) == 2
    [active] = [r for r in rounds if r.status == RoundStatus.ACTIVE]
    assert active.id == max(result.round_id for result in results)
    assert state.active_round_id == active.id


async def test_round_cap_completes_league(database, register, count_rounds, queries):
    lifecycle = RoundLifecycle(database, max_rounds=2)
    await register("Alice")
    await register("Bob")

    assert (await lifecycle.generate_round()).rounds_played == 1
    last = await lifecycle.generate_round()
    assert last.rounds_played == 2

    result = await lifecycle.generate_round()

    assert result.status == RoundGenerationStatus.LEAGUE_COMPLETED
    assert not result.created
    assert result.rounds_played == 2
    assert result.round_id is None
    assert await count_rounds() == 2
    assert (await queries.get_current_pairings()).round_id == last.round_id


async def test_league_completion_ignores_roster_size(database, register):
    lifecycle = RoundLifecycle(database, max_rounds=1)
    alice = await register("Alice")
    await register("Bob")
    await lifecycle.generate_round()

    await lifecycle.generate_round(roster=[PairingCandidate(alice.id, 1250)])
    result = await lifecycle.generate_round(roster=[])

    assert result.status == RoundGenerationStatus.LEAGUE_COMPLETED


# ============================================================================
# Seasons
# ============================================================================

async def test_round_cap_holds_across_seasons(database, register, count_rounds):
    lifecycle = RoundLifecycle(database, max_rounds=2)
    await register("Alice")
    await register("Bob")
    await lifecycle.generate_round()
    await lifecycle.generate_round()

    await lifecycle.start_season("Autumn")
    result = await lifecycle.generate_round()

    assert result.status == RoundGenerationStatus.LEAGUE_COMPLETED
    assert result.rounds_played == 2
    assert await count_rounds() == 2


async def test_rounds_belong_to_active_season(lifecycle, register, database):
    await register("Alice")
    await register("Bob")
    seasonless = await lifecycle.generate_round()

    summary = await lifecycle.start_season("Autumn")
    result = await lifecycle.generate_round()

    assert result.rounds_played == 2
    async with database.get_session() as session:
        assert (await session.get(Round, seasonless.round_id)).season_id is None
        assert (await session.get(Round, result.round_id)).season_id == summary.season_id


async def test_start_season_with_reset(lifecycle, ledger, register, player_ops, database, queries):
    alice = await register("Alice")
    bob = await register("Bob")
    benched = await register("Benched", rating=1100)
    await player_ops.set_player_active(benched.id, False)
    await ledger.record_match(alice.id, bob.id, 11, 2)

    summary = await lifecycle.start_season("Spring", reset_ratings=True)

    assert summary.status == "active"
    assert summary.players_reset == 3
    for player in (alice, bob, benched):
        stored = await database.get_player_by_id(player.id)
        assert (stored.elo_rating, stored.wins, stored.losses) == (1250, 0, 0)
        assert stored.tier == "🥇 Gold"
        history = await queries.get_rating_history(player.id)
        assert history[-1].reason == "season_reset"
        assert history[-1].elo_rating == 1250


async def test_start_season_without_reset_keeps_ratings(lifecycle, ledger, register, database):
    alice = await register("Alice")
    bob = await register("Bob")
    await ledger.record_match(alice.id, bob.id, 11, 2)

    summary = await lifecycle.start_season("Spring")

    assert summary.players_reset == 0
    assert (await database.get_player_by_id(alice.id)).elo_rating == 1280


async def test_start_season_requires_name(lifecycle):
    with pytest.raises(ValidationError):
        await lifecycle.start_season("   ")


async def test_start_season_closes_active_round(lifecycle, register, queries):
    await register("Alice")
    await register("Bob")
    await lifecycle.generate_round()

    await lifecycle.start_season("Winter")

    assert await queries.get_current_pairings() is None


async def test_start_season_force_completes_previous(lifecycle, register, queries):
    await register("Alice")
    first = await lifecycle.start_season("One")
    second = await lifecycle.start_season("Two")

    seasons = {season.season_id: season for season in await queries.get_seasons()}
    assert seasons[first.season_id].status == "completed"
    assert seasons[first.season_id].end_date is not None
    assert seasons[second.season_id].status == "active"


async def test_end_season_without_active_season(lifecycle):
    with pytest.raises(NoActiveSeasonError):
        await lifecycle.end_season()


async def test_end_season_crowns_top_player(lifecycle, ledger, register, queries):
    alice = await register("Alice")
    bob = await register("Bob")
    await ledger.record_match(bob.id, alice.id, 11, 3)

    season = await lifecycle.start_season("Summer")
    await lifecycle.generate_round()
    await ledger.record_match(alice.id, bob.id, 11, 9)
    await ledger.record_match(alice.id, bob.id, 11, 8)

    summary = await lifecycle.end_season()

    assert summary.season_id == season.season_id
    assert summary.status == "completed"
    assert summary.champion_id == alice.id
    assert summary.champion_name == "Alice"
    assert summary.total_matches == 2
    assert summary.total_rounds == 1
    assert summary.end_date is not None
    assert await queries.get_current_pairings() is None

    with pytest.raises(NoActiveSeasonError):
        await lifecycle.end_season()

    [stored] = await queries.get_seasons()
    assert stored.champion_name == "Alice"
    assert stored.total_matches == 2


async def test_champion_tie_goes_to_earliest_player(lifecycle, register):
    first = await register("First")
    await register("Second")
    await lifecycle.start_season("Tied")

    summary = await lifecycle.end_season()

    assert summary.champion_id == first.id


async def test_inactive_player_cannot_be_champion(lifecycle, register, player_ops):
    star = await register("Star", rating=1500)
    regular = await register("Regular")
    await player_ops.set_player_active(star.id, False)
    await lifecycle.start_season("Quiet")

    summary = await lifecycle.end_season()

    assert summary.champion_id == regular.id
