"""
Match Pairing endpoints: generate, edit, approve, publish, reject, status, history.

Actor identity comes from the X-User-Id header set by the gateway's auth
middleware. Domain errors raised by the orchestrator are rendered by the
PairingError handler registered in app.main.
"""
import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field
from sqlmodel import Session

from app.database import get_session
from app.services.match_slot_updater import LoggingMatchSlotUpdater, MatchSlotUpdater
from app.services.pairing_algorithms import Pair
from app.services.pairing_orchestrator import (
    PairingOrchestrator,
    PairingType,
    pairing_audit_fields,
    pairing_to_response,
)
from app.services.seeding_resolver import SeedingMethod

router = APIRouter()


# ============================================================================
# Dependencies
# ============================================================================


def get_actor(x_user_id: str = Header(..., alias="X-User-Id", min_length=1)) -> str:
    return x_user_id


def get_pairing_rng() -> random.Random:
    """Random source for RANDOM seeding. Overridden in tests with a seeded Random."""
    return random.Random()


def get_slot_updater() -> MatchSlotUpdater:
    return LoggingMatchSlotUpdater()


def get_orchestrator(
    session: Session = Depends(get_session),
    rng: random.Random = Depends(get_pairing_rng),
    slot_updater: MatchSlotUpdater = Depends(get_slot_updater),
) -> PairingOrchestrator:
    return PairingOrchestrator(session, slot_updater=slot_updater, rng=rng)


# ============================================================================
# Request / Response Models
# ============================================================================


class PairPayload(BaseModel):
    player1_id: str = Field(min_length=1)
    player1_name: str = ""
    player2_id: str = Field(min_length=1)
    player2_name: str = ""
    match_number: int = Field(ge=1)
    table_number: Optional[int] = None
    round_number: Optional[int] = None

    def to_pair(self) -> Pair:
        return Pair(
            player1_id=self.player1_id,
            player1_name=self.player1_name,
            player2_id=self.player2_id,
            player2_name=self.player2_name,
            match_number=self.match_number,
            table_number=self.table_number,
            round_number=self.round_number,
        )


class PairingGenerateRequest(BaseModel):
    match_id: int
    pairing_type: PairingType
    seeding_method: SeedingMethod
    custom_pairs: Optional[List[PairPayload]] = None
    force_regenerate: bool = False


class PairingUpdateRequest(BaseModel):
    pairs: List[PairPayload]
    notes: Optional[str] = None


class PairingApproveRequest(BaseModel):
    finalize: bool = False


class PairingRejectRequest(BaseModel):
    reason: str


class PairingResponse(BaseModel):
    match_id: int
    pairing_id: str
    status: str
    version: int
    pairs: List[PairPayload]
    total_pairs: int
    proposed_at: datetime
    can_edit: bool
    can_approve: bool
    can_publish: bool
    metadata: Dict[str, Any] = {}


class PairingStatusResponse(BaseModel):
    status: str
    pairing_id: Optional[str] = None
    match_id: int
    tournament_id: Optional[int] = None
    batch_id: Optional[int] = None
    has_pairing: bool
    version: Optional[int] = None
    pair_count: Optional[int] = None
    proposed_by: Optional[str] = None
    proposed_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    published_by: Optional[str] = None
    published_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    message: Optional[str] = None


class PairingHistoryEntry(BaseModel):
    id: str
    status: str
    version: int
    proposed_by: Optional[str] = None
    proposed_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    published_by: Optional[str] = None
    published_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class PairingHistoryResponse(BaseModel):
    match_id: int
    history: List[PairingHistoryEntry]
    count: int


class PairingRejectResponse(BaseModel):
    message: str
    pairing_id: str
    status: str
    rejected_at: Optional[datetime]
    reason: Optional[str]


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/pairings/generate", response_model=PairingResponse)
def generate_pairings(
    payload: PairingGenerateRequest,
    actor: str = Depends(get_actor),
    orchestrator: PairingOrchestrator = Depends(get_orchestrator),
):
    """Generate a proposed pairing for a match and make it the match's current pairing."""
    pairing = orchestrator.generate(
        match_id=payload.match_id,
        pairing_type=payload.pairing_type,
        seeding_method=payload.seeding_method,
        actor=actor,
        custom_pairs=[p.to_pair() for p in payload.custom_pairs or []],
        force_regenerate=payload.force_regenerate,
    )
    return pairing_to_response(pairing)


@router.get("/pairings/{pairing_id}", response_model=PairingResponse)
def get_pairing(pairing_id: str, orchestrator: PairingOrchestrator = Depends(get_orchestrator)):
    return pairing_to_response(orchestrator.get_pairing(pairing_id))


@router.put("/pairings/{pairing_id}", response_model=PairingResponse)
def update_pairings(
    pairing_id: str,
    payload: PairingUpdateRequest,
    actor: str = Depends(get_actor),
    orchestrator: PairingOrchestrator = Depends(get_orchestrator),
):
    """Edit a proposed pairing. Writes a new version; the edited one stays in history."""
    pairing = orchestrator.update_pairs(
        pairing_id,
        [p.to_pair() for p in payload.pairs],
        actor=actor,
        notes=payload.notes,
    )
    return pairing_to_response(pairing)


@router.post("/pairings/{pairing_id}/approve", response_model=PairingResponse)
def approve_pairings(
    pairing_id: str,
    payload: Optional[PairingApproveRequest] = None,
    actor: str = Depends(get_actor),
    orchestrator: PairingOrchestrator = Depends(get_orchestrator),
):
    finalize = payload.finalize if payload else False
    pairing = orchestrator.approve(pairing_id, actor=actor, finalize=finalize)
    return pairing_to_response(pairing)


@router.post("/pairings/{pairing_id}/publish", response_model=PairingResponse)
def publish_pairings(
    pairing_id: str,
    actor: str = Depends(get_actor),
    orchestrator: PairingOrchestrator = Depends(get_orchestrator),
):
    pairing = orchestrator.publish(pairing_id, actor=actor)
    return pairing_to_response(pairing)


@router.post("/pairings/{pairing_id}/reject", response_model=PairingRejectResponse)
def reject_pairings(
    pairing_id: str,
    payload: PairingRejectRequest,
    actor: str = Depends(get_actor),
    orchestrator: PairingOrchestrator = Depends(get_orchestrator),
):
    pairing = orchestrator.reject(pairing_id, actor=actor, reason=payload.reason)
    return PairingRejectResponse(
        message="pairings rejected",
        pairing_id=pairing.id,
        status=pairing.status,
        rejected_at=pairing.rejected_at,
        reason=pairing.rejection_reason,
    )


@router.get("/matches/{match_id}/pairing/status", response_model=PairingStatusResponse)
def get_pairing_status(match_id: int, orchestrator: PairingOrchestrator = Depends(get_orchestrator)):
    return orchestrator.get_status(match_id)


@router.get("/matches/{match_id}/pairing/history", response_model=PairingHistoryResponse)
def get_pairing_history(match_id: int, orchestrator: PairingOrchestrator = Depends(get_orchestrator)):
    """All pairing records for a match, newest proposal first."""
    records = orchestrator.get_history(match_id)
    history = [PairingHistoryEntry(id=p.id, **pairing_audit_fields(p)) for p in records]
    return PairingHistoryResponse(match_id=match_id, history=history, count=len(history))
