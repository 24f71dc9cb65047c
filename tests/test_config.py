import pytest

from ladder.config import Config


def test_max_rounds_from_league_settings(monkeypatch):
    monkeypatch.setattr(Config, "LEAGUE_DURATION_WEEKS", 4)
    monkeypatch.setattr(Config, "GAMES_PER_WEEK", 2)
    assert Config.max_rounds() == 8


def test_pairing_days_parsed(monkeypatch):
    monkeypatch.setattr(Config, "PAIRING_DAYS", "1, 3,5")
    assert Config.get_pairing_days() == [1, 3, 5]


@pytest.mark.parametrize("days", ["7", "-1", "mon,wed"])
def test_invalid_pairing_days(monkeypatch, days):
    monkeypatch.setattr(Config, "PAIRING_DAYS", days)
    with pytest.raises(ValueError):
        Config.get_pairing_days()


def test_guild_ids_prefer_multi_guild_setting(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "11, 22")
    monkeypatch.setattr(Config, "DISCORD_GUILD_ID", 33)
    assert Config.get_guild_ids() == [11, 22]

    monkeypatch.setattr(Config, "DISCORD_GUILD_IDS", "")
    assert Config.get_guild_ids() == [33]


def test_validate_requires_token(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_TOKEN", None)
    with pytest.raises(ValueError, match="DISCORD_TOKEN"):
        Config.validate()


def test_validate_rejects_empty_league(monkeypatch):
    monkeypatch.setattr(Config, "DISCORD_TOKEN", "token")
    monkeypatch.setattr(Config, "DISCORD_GUILD_ID", 1)
    monkeypatch.setattr(Config, "OWNER_DISCORD_ID", 2)
    monkeypatch.setattr(Config, "GAMES_PER_WEEK", 0)
    with pytest.raises(ValueError, match="GAMES_PER_WEEK"):
        Config.validate()
