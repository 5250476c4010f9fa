"""
Seeding Resolver: order eligible players before automatic pairing.

RANK_BASED:  seed number ascending (1 = top seed)
SKILL_BASED: skill rating descending
RANDOM:      uniform shuffle from the caller's random source
CUSTOM:      input order (caller supplies explicit pairs)

Seeded players always sort ahead of unseeded ones; ties and unseeded
players fall back to join time ascending.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence


class SeedingMethod(str, Enum):
    RANDOM = "RANDOM"
    RANK_BASED = "RANK_BASED"
    SKILL_BASED = "SKILL_BASED"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class PlayerEntry:
    """Eligible participant, as supplied by the subscription store."""
    external_id: str
    name: str
    joined_at: datetime
    payment_status: str = "paid"


@dataclass(frozen=True)
class SeedingEntry:
    external_id: str
    seed_number: Optional[int] = None
    skill_rating: Optional[float] = None


def _has_seed(entry: Optional[SeedingEntry]) -> bool:
    return entry is not None and entry.seed_number is not None and entry.seed_number > 0


def _has_rating(entry: Optional[SeedingEntry]) -> bool:
    return entry is not None and entry.skill_rating is not None


def rank_sort_key(player: PlayerEntry, seedings: Dict[str, SeedingEntry]) -> tuple:
    """Sort key for RANK_BASED. Lower = better."""
    entry = seedings.get(player.external_id)
    if _has_seed(entry):
        return (0, entry.seed_number, player.joined_at)
    return (1, 0, player.joined_at)


def skill_sort_key(player: PlayerEntry, seedings: Dict[str, SeedingEntry]) -> tuple:
    """Sort key for SKILL_BASED. Lower = better."""
    entry = seedings.get(player.external_id)
    if _has_rating(entry):
        return (0, -entry.skill_rating, player.joined_at)
    return (1, 0.0, player.joined_at)


def sort_players_by_seeding(
    players: Sequence[PlayerEntry],
    seedings: Dict[str, SeedingEntry],
    method: SeedingMethod,
    rng: Optional[random.Random] = None,
) -> List[PlayerEntry]:
    """Return a new list of *players* ordered by *method*.

    The input sequence is never reordered in place. RANDOM draws from *rng*
    so tests can pass a seeded ``random.Random``.
    """
    ordered = list(players)
    method = SeedingMethod(method)

    if method == SeedingMethod.RANK_BASED:
        ordered.sort(key=lambda p: rank_sort_key(p, seedings))
    elif method == SeedingMethod.SKILL_BASED:
        ordered.sort(key=lambda p: skill_sort_key(p, seedings))
    elif method == SeedingMethod.RANDOM:
        (rng or random.Random()).shuffle(ordered)

    return ordered
