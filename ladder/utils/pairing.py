"""
Swiss-style pairing for a ladder round.

Players are sorted by rating (highest first) and each unpaired player is
matched with the next unpaired player below them, which reduces to pairing
1st-vs-2nd, 3rd-vs-4th and so on.

Known limitations: rematches between players who already met are not
avoided, and there is no bye history. The caller drops a player when the
roster is odd.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ladder.utils.exceptions import InvalidRosterSizeError, ValidationError


@dataclass(frozen=True)
class PairingCandidate:
    """A rostered player as seen by the pairing generator."""
    player_id: int
    rating: int


def sort_roster(roster: Sequence[PairingCandidate]) -> List[PairingCandidate]:
    """Sort by rating descending; equal ratings keep their input order."""
    return sorted(roster, key=lambda candidate: candidate.rating, reverse=True)


def generate_pairings(roster: Sequence[PairingCandidate]) -> List[Tuple[PairingCandidate, PairingCandidate]]:
    """
    Pair an even-sized roster by descending rating.

    Args:
        roster: Players to pair, in any order

    Returns:
        List of (higher rated, lower rated) pairs

    Raises:
        InvalidRosterSizeError: If the roster has an odd number of players
        ValidationError: If a player appears more than once
    """
    if len(roster) % 2 != 0:
        raise InvalidRosterSizeError(len(roster))

    player_ids = [candidate.player_id for candidate in roster]
    if len(set(player_ids)) != len(player_ids):
        raise ValidationError("Roster contains duplicate players")

    sorted_roster = sort_roster(roster)
    pairings = []
    paired = set()

    for i, candidate in enumerate(sorted_roster):
        if candidate.player_id in paired:
            continue

        # Find the next unpaired player
        for opponent in sorted_roster[i + 1:]:
            if opponent.player_id not in paired:
                pairings.append((candidate, opponent))
                paired.add(candidate.player_id)
                paired.add(opponent.player_id)
                break

    return pairings
