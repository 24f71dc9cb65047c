import pytest

from ladder.utils.exceptions import DuplicatePlayerError, PlayerNotFoundError, ValidationError


async def test_register_player_starts_at_default_rating(player_ops, database, queries):
    player = await player_ops.register_player(42, "  Alice  ")

    assert player.name == "Alice"
    assert player.elo_rating == 1250
    assert player.tier == "🥇 Gold"
    assert (player.wins, player.losses) == (0, 0)
    assert player.is_active

    stored = await database.get_player_by_external_id(42)
    assert stored.id == player.id

    [entry] = await queries.get_rating_history(player.id)
    assert entry.reason == "registration"
    assert entry.elo_rating == 1250
    assert entry.match_id is None


async def test_register_player_with_custom_rating(player_ops):
    player = await player_ops.register_player(43, "Pro", rating=1450)
    assert player.elo_rating == 1450
    assert player.tier == "💼 Do some work"


async def test_duplicate_registration_rejected(player_ops, database):
    await player_ops.register_player(42, "Alice")
    with pytest.raises(DuplicatePlayerError):
        await player_ops.register_player(42, "Alice Again")

    assert len(await database.get_roster()) == 1


async def test_register_requires_name(player_ops):
    with pytest.raises(ValidationError):
        await player_ops.register_player(42, "")


async def test_set_player_active_toggles_roster(player_ops, register, database):
    alice = await register("Alice")
    bob = await register("Bob")

    await player_ops.set_player_active(bob.id, False)
    assert [player.id for player in await database.get_roster()] == [alice.id]

    await player_ops.set_player_active(bob.id, True)
    assert {player.id for player in await database.get_roster()} == {alice.id, bob.id}


async def test_set_player_active_unknown_player(player_ops):
    with pytest.raises(PlayerNotFoundError):
        await player_ops.set_player_active(12345, False)
