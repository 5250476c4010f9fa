from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.tournament_batch import TournamentBatch


class TournamentMatch(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    batch_id: int = Field(foreign_key="tournamentbatch.id", index=True)
    name: str
    description: Optional[str] = None
    status: str = Field(default="pending")
    sort_order: int = Field(default=0)

    # Drives which pairing algorithm runs (see MatchFormat)
    match_type: str = Field(default="SINGLE_ELIMINATION_1V1")

    # Pairing pointers. Plain columns (no FK) to avoid a cycle with matchpairing.match_id;
    # always written in the same transaction as the record they point to.
    current_pairing_id: Optional[str] = Field(default=None, index=True)
    published_pairing_id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    batch: "TournamentBatch" = Relationship(back_populates="matches")
