import pytest

from ladder.utils.elo import EloCalculator, round_half_up


def test_expected_scores_sum_to_one():
    a = EloCalculator.expected_score(1400, 1200)
    b = EloCalculator.expected_score(1200, 1400)
    assert a + b == pytest.approx(1.0)
    assert a > 0.5 > b


def test_equal_ratings_swing_half_k():
    result = EloCalculator.apply_result(1200, 1200)
    assert result.winner_new_rating == 1230
    assert result.loser_new_rating == 1170
    assert result.rating_change == 30
    assert result.loser_delta == -30


def test_favourite_wins_small_change():
    result = EloCalculator.apply_result(1400, 1200)
    assert result.winner_delta == 14
    assert result.loser_delta == -14
    assert result.winner_new_rating == 1414
    assert result.loser_new_rating == 1186


def test_upset_wins_large_change():
    result = EloCalculator.apply_result(1200, 1400)
    assert result.winner_delta == 46
    assert result.loser_delta == -46
    assert result.winner_new_rating == 1246
    assert result.loser_new_rating == 1354


def test_four_hundred_point_gap():
    upset = EloCalculator.apply_result(1000, 1400)
    assert (upset.winner_delta, upset.loser_delta) == (55, -55)

    expected = EloCalculator.apply_result(1400, 1000)
    assert (expected.winner_delta, expected.loser_delta) == (5, -5)
    assert expected.winner_new_rating == 1405
    assert expected.loser_new_rating == 995


def test_deltas_rounded_independently(monkeypatch):
    def fake_expected(rating_a, rating_b):
        return 0.375 if rating_a < rating_b else 0.625

    monkeypatch.setattr(EloCalculator, "expected_score", staticmethod(fake_expected))

    result = EloCalculator.apply_result(1000, 1100)

    # 60 * 0.625 = 37.5 rounds up, -37.5 rounds up to -37
    assert result.winner_delta == 38
    assert result.loser_delta == -37
    assert result.winner_new_rating == 1038
    assert result.loser_new_rating == 1063


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.4999) == 0
    assert round_half_up(-0.6) == -1
    assert round_half_up(30.0) == 30


def test_format_elo_change():
    assert EloCalculator.format_elo_change(14) == "+14"
    assert EloCalculator.format_elo_change(-9) == "-9"
    assert EloCalculator.format_elo_change(0) == "±0"
