"""
Participant Directory

Read-only lookups the pairing orchestrator consumes: who is eligible to be
paired in a tournament, and what seeding data exists for them.
"""

from typing import Dict, List

from sqlmodel import Session, select

from app.models.player_seeding import PlayerSeeding
from app.models.tournament_subscription import TournamentSubscription
from app.services.seeding_resolver import PlayerEntry, SeedingEntry

ELIGIBLE_PAYMENT_STATUSES = ("paid", "pending")


def get_eligible_players(session: Session, tournament_id: int) -> List[PlayerEntry]:
    """Subscribers with a paid or pending payment, earliest join first."""
    subscriptions = session.exec(
        select(TournamentSubscription)
        .where(
            TournamentSubscription.tournament_id == tournament_id,
            TournamentSubscription.payment_status.in_(ELIGIBLE_PAYMENT_STATUSES),
        )
        .order_by(TournamentSubscription.joined_at, TournamentSubscription.id)
    ).all()

    return [
        PlayerEntry(
            external_id=s.external_user_id,
            name=s.user_name,
            joined_at=s.joined_at,
            payment_status=s.payment_status,
        )
        for s in subscriptions
    ]


def get_player_seedings(session: Session, tournament_id: int) -> Dict[str, SeedingEntry]:
    """Seeding rows for a tournament keyed by external user id."""
    rows = session.exec(select(PlayerSeeding).where(PlayerSeeding.tournament_id == tournament_id)).all()
    return {
        row.user_id: SeedingEntry(
            external_id=row.user_id,
            seed_number=row.seed_number,
            skill_rating=row.skill_rating,
        )
        for row in rows
    }
