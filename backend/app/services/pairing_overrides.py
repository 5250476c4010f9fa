"""
Manual pairing overrides.

MANUAL requests use the caller's pairs verbatim; HYBRID requests start from
the algorithm output and let caller pairs replace or extend it, keyed by
match_number.
"""

from typing import List, Sequence

from app.exceptions import PairingInputError
from app.services.pairing_algorithms import Pair


def validate_pairs(pairs: Sequence[Pair]) -> None:
    """Reject pairs that seat a player against themselves or reuse a match number.

    Raises:
        PairingInputError: On the first offending pair
    """
    seen_numbers = set()
    for pair in pairs:
        if pair.player1_id == pair.player2_id:
            raise PairingInputError(
                f"Match #{pair.match_number}: player '{pair.player1_id}' cannot be paired with themselves"
            )
        if pair.match_number in seen_numbers:
            raise PairingInputError(f"Duplicate match_number {pair.match_number} in pairs")
        seen_numbers.add(pair.match_number)


def apply_manual_overrides(auto_pairs: Sequence[Pair], manual_pairs: Sequence[Pair]) -> List[Pair]:
    """Merge *manual_pairs* over *auto_pairs*.

    A manual pair whose match_number matches an auto pair takes that pair's
    position; the rest are appended in the order the caller sent them.
    Neither input is modified.

    Example:
        auto   [(A,B)#1, (C,D)#2]
        manual [(A,E)#1, (X,Y)#5]
        result [(A,E)#1, (C,D)#2, (X,Y)#5]
    """
    manual_by_number = {p.match_number: p for p in manual_pairs}

    merged: List[Pair] = []
    used = set()
    for pair in auto_pairs:
        override = manual_by_number.get(pair.match_number)
        if override is not None:
            merged.append(override)
            used.add(pair.match_number)
        else:
            merged.append(pair)

    for pair in manual_pairs:
        if pair.match_number not in used:
            merged.append(pair)
            used.add(pair.match_number)

    return merged
