from app.models.match_pairing import MatchPairing
from app.models.player_seeding import PlayerSeeding
from app.models.tournament import Tournament
from app.models.tournament_batch import TournamentBatch
from app.models.tournament_match import TournamentMatch
from app.models.tournament_subscription import TournamentSubscription

__all__ = [
    "Tournament",
    "TournamentBatch",
    "TournamentMatch",
    "TournamentSubscription",
    "PlayerSeeding",
    "MatchPairing",
]
