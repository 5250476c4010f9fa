from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.tournament import Tournament


class PlayerSeeding(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "user_id", name="uq_seeding_tournament_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    user_id: str = Field(index=True)  # external user id
    user_name: Optional[str] = None

    seed_number: Optional[int] = Field(default=None)  # 1 = top seed; None/0 = unseeded
    skill_rating: Optional[float] = Field(default=None)  # higher is stronger
    previous_rank: Optional[int] = Field(default=None)

    win_count: int = Field(default=0)
    loss_count: int = Field(default=0)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="seedings")
