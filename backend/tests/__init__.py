# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from app.models.match_pairing import MatchPairing  # noqa: F401
from app.models.player_seeding import PlayerSeeding  # noqa: F401
from app.models.tournament import Tournament  # noqa: F401
from app.models.tournament_batch import TournamentBatch  # noqa: F401
from app.models.tournament_match import TournamentMatch  # noqa: F401
from app.models.tournament_subscription import TournamentSubscription  # noqa: F401
