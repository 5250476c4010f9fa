from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.tournament import Tournament


class TournamentSubscription(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("tournament_id", "external_user_id", name="uq_subscription_tournament_user"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    external_user_id: str = Field(index=True)
    user_name: str
    joined_at: datetime = Field(default_factory=datetime.utcnow)
    payment_status: str = Field(default="pending")  # "paid" | "pending" | "failed" | "refunded" | "waived"

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="subscriptions")
