"""
Match Slot Updater

Receives the finalized pair list when a pairing is published. Seating the two
participants of each pair into the match's player slots belongs to the match
state service; the default updater only records the hand-off.
"""

import logging
from typing import Protocol, Sequence

from app.models.tournament_match import TournamentMatch
from app.services.pairing_algorithms import Pair

logger = logging.getLogger(__name__)


class MatchSlotUpdater(Protocol):
    def assign_pairs(self, match: TournamentMatch, pairs: Sequence[Pair]) -> None:
        ...


class LoggingMatchSlotUpdater:
    """Default updater: logs each assignment, mutates nothing."""

    def assign_pairs(self, match: TournamentMatch, pairs: Sequence[Pair]) -> None:
        for pair in pairs:
            logger.info(
                "Assign match %s #%d: %s vs %s",
                match.id,
                pair.match_number,
                pair.player1_id,
                pair.player2_id,
            )
