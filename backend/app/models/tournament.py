from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.player_seeding import PlayerSeeding
    from app.models.tournament_batch import TournamentBatch
    from app.models.tournament_subscription import TournamentSubscription


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    status: str = Field(default="upcoming")  # "upcoming" | "active" | "completed" | "cancelled"
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    batches: List["TournamentBatch"] = Relationship(back_populates="tournament")
    subscriptions: List["TournamentSubscription"] = Relationship(back_populates="tournament")
    seedings: List["PlayerSeeding"] = Relationship(back_populates="tournament")
