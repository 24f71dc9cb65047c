import pytest

from ladder.utils.exceptions import InvalidRosterSizeError, ValidationError
from ladder.utils.pairing import PairingCandidate, generate_pairings, sort_roster


def ids(pairs):
    return [(first.player_id, second.player_id) for first, second in pairs]


def test_pairs_adjacent_players_by_rating():
    roster = [
        PairingCandidate(1, 1400),
        PairingCandidate(2, 2000),
        PairingCandidate(3, 1600),
        PairingCandidate(4, 1800),
    ]
    assert ids(generate_pairings(roster)) == [(2, 4), (3, 1)]


def test_every_player_paired_once():
    roster = [PairingCandidate(i, 1000 + i * 7 % 13) for i in range(1, 11)]
    pairs = generate_pairings(roster)
    paired = [player for pair in ids(pairs) for player in pair]
    assert len(pairs) == 5
    assert sorted(paired) == list(range(1, 11))


def test_higher_rated_player_listed_first():
    roster = [PairingCandidate(1, 1100), PairingCandidate(2, 1300)]
    [(first, second)] = generate_pairings(roster)
    assert first.rating >= second.rating


def test_odd_roster_rejected():
    roster = [PairingCandidate(i, 1250) for i in range(3)]
    with pytest.raises(InvalidRosterSizeError):
        generate_pairings(roster)


def test_duplicate_players_rejected():
    roster = [PairingCandidate(1, 1250), PairingCandidate(1, 1250)]
    with pytest.raises(ValidationError):
        generate_pairings(roster)


def test_empty_roster_has_no_pairs():
    assert generate_pairings([]) == []


def test_equal_ratings_keep_input_order():
    roster = [PairingCandidate(7, 1250), PairingCandidate(3, 1250), PairingCandidate(5, 1250)]
    assert [candidate.player_id for candidate in sort_roster(roster)] == [7, 3, 5]

    roster.append(PairingCandidate(9, 1250))
    assert ids(generate_pairings(roster)) == [(7, 3), (5, 9)]
