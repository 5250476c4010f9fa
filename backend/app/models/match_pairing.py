import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class MatchPairing(SQLModel, table=True):
    """One immutable pairing snapshot for a match plus its approval status.

    Rows are never deleted or re-paired; edits and regenerations insert a new
    row with the next version and move TournamentMatch.current_pairing_id.
    """

    __table_args__ = (SAUniqueConstraint("match_id", "version", name="uq_pairing_match_version"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    match_id: int = Field(foreign_key="tournamentmatch.id", index=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    batch_id: int = Field(foreign_key="tournamentbatch.id", index=True)

    pairing_type: str  # "AUTO" | "MANUAL" | "HYBRID"
    seeding_method: str  # "RANDOM" | "RANK_BASED" | "SKILL_BASED" | "CUSTOM"
    algorithm_used: str  # match_type of the match at generation time

    pairs_json: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    metadata_json: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    status: str = Field(default="proposed", index=True)  # "proposed" | "approved" | "published" | "rejected"
    version: int = Field(default=1)
    notes: Optional[str] = None

    proposed_by: Optional[str] = None
    proposed_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    published_by: Optional[str] = None
    published_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
