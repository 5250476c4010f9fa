"""
Pairing Algorithms: one strategy per match format.

Every strategy takes the seeding-resolver output (best first) and returns
``(pairs, metadata)``. Strategies never reorder their input; all ordering
decisions belong to the seeding resolver.

    Elimination:  seed i vs seed n-1-i, middle seed gets the bye
    Round robin:  every unordered pair once
    Leaderboard:  round robin for <= 8 players, otherwise no head-to-head
    Swiss:        first round only, top half vs bottom half
    Simple:       consecutive players, last player gets the bye
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from app.services.seeding_resolver import PlayerEntry

LEADERBOARD_ROUND_ROBIN_MAX = 8


class MatchFormat(str, Enum):
    SINGLE_ELIMINATION_1V1 = "SINGLE_ELIMINATION_1V1"
    DOUBLE_ELIMINATION_1V1 = "DOUBLE_ELIMINATION_1V1"
    ROUND_ROBIN_1V1 = "ROUND_ROBIN_1V1"
    LEADERBOARD_CHALLENGE = "LEADERBOARD_CHALLENGE"
    SWISS_SYSTEM = "SWISS_SYSTEM"
    SIMPLE = "SIMPLE"

    @classmethod
    def from_match_type(cls, match_type: Optional[str]) -> "MatchFormat":
        """Unknown or empty match types fall back to SIMPLE."""
        try:
            return cls((match_type or "").upper())
        except ValueError:
            return cls.SIMPLE


@dataclass(frozen=True)
class Pair:
    player1_id: str
    player1_name: str
    player2_id: str
    player2_name: str
    match_number: int
    table_number: Optional[int] = None
    round_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pair":
        return cls(
            player1_id=data["player1_id"],
            player1_name=data.get("player1_name") or "",
            player2_id=data["player2_id"],
            player2_name=data.get("player2_name") or "",
            match_number=int(data["match_number"]),
            table_number=data.get("table_number"),
            round_number=data.get("round_number"),
        )


PairingOutput = Tuple[List[Pair], Dict[str, Any]]


def _pair(p1: PlayerEntry, p2: PlayerEntry, match_number: int, round_number: Optional[int] = None) -> Pair:
    return Pair(
        player1_id=p1.external_id,
        player1_name=p1.name,
        player2_id=p2.external_id,
        player2_name=p2.name,
        match_number=match_number,
        round_number=round_number,
    )


def generate_elimination_pairs(players: Sequence[PlayerEntry], bracket_type: str) -> PairingOutput:
    """Fold the seeded list: 1 vs n, 2 vs n-1, ...

    With an odd count the player at index n // 2 sits out round 1. The bye is
    reported in metadata only, never as a Pair.
    """
    n = len(players)
    has_bye = n % 2 != 0

    pairs = [_pair(players[i], players[n - 1 - i], i + 1, round_number=1) for i in range(n // 2)]

    bye_player = None
    if has_bye:
        bye = players[n // 2]
        bye_player = {"id": bye.external_id, "name": bye.name}

    metadata = {
        "bracket_type": bracket_type,
        "total_players": n,
        "has_bye": has_bye,
        "bye_player": bye_player,
    }
    return pairs, metadata


def generate_round_robin_pairs(players: Sequence[PlayerEntry]) -> PairingOutput:
    n = len(players)
    pairs: List[Pair] = []
    match_number = 1
    for i in range(n):
        for j in range(i + 1, n):
            pairs.append(_pair(players[i], players[j], match_number))
            match_number += 1

    metadata = {
        "format": "round_robin",
        "total_players": n,
        "total_matches": len(pairs),
        "rounds_needed": n - 1 + n % 2,
    }
    return pairs, metadata


def generate_leaderboard_pairs(players: Sequence[PlayerEntry]) -> PairingOutput:
    """Small fields play round robin; large fields all play at once and rank by score."""
    n = len(players)
    if n <= LEADERBOARD_ROUND_ROBIN_MAX:
        return generate_round_robin_pairs(players)

    metadata = {
        "format": "leaderboard",
        "total_players": n,
        "simultaneous": True,
        "scoring_type": "individual",
    }
    return [], metadata


def generate_swiss_pairs(players: Sequence[PlayerEntry], round_number: int = 1) -> PairingOutput:
    """First-round Swiss: top half meets bottom half (1 vs n/2+1, 2 vs n/2+2, ...).

    Later rounds would re-pair by score; only round 1 is produced here.
    """
    n = len(players)
    half = n // 2
    pairs = [_pair(players[i], players[half + i], i + 1, round_number=round_number) for i in range(half)]

    metadata = {
        "format": "swiss",
        "round": round_number,
        "total_players": n,
        "pairing_rule": "top_vs_bottom",
        "has_bye": n % 2 != 0,
    }
    return pairs, metadata


def generate_simple_pairs(players: Sequence[PlayerEntry]) -> PairingOutput:
    n = len(players)
    pairs = [_pair(players[i], players[i + 1], i // 2 + 1) for i in range(0, n - 1, 2)]

    metadata = {
        "format": "simple",
        "total_players": n,
        "has_bye": n % 2 != 0,
    }
    return pairs, metadata


_DISPATCH: Dict[MatchFormat, Callable[[Sequence[PlayerEntry], MatchFormat], PairingOutput]] = {
    MatchFormat.SINGLE_ELIMINATION_1V1: lambda players, fmt: generate_elimination_pairs(players, fmt.value),
    MatchFormat.DOUBLE_ELIMINATION_1V1: lambda players, fmt: generate_elimination_pairs(players, fmt.value),
    MatchFormat.ROUND_ROBIN_1V1: lambda players, fmt: generate_round_robin_pairs(players),
    MatchFormat.LEADERBOARD_CHALLENGE: lambda players, fmt: generate_leaderboard_pairs(players),
    MatchFormat.SWISS_SYSTEM: lambda players, fmt: generate_swiss_pairs(players, round_number=1),
    MatchFormat.SIMPLE: lambda players, fmt: generate_simple_pairs(players),
}


def generate_pairs(match_format: MatchFormat, players: Sequence[PlayerEntry]) -> PairingOutput:
    """Run the strategy registered for *match_format*."""
    return _DISPATCH[MatchFormat(match_format)](players, MatchFormat(match_format))
