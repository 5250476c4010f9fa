"""
Pairing Orchestrator: generate, edit, and move pairing records through approval.

Lifecycle:
    proposed -> approved -> published
    proposed -> rejected

Every write is one transaction: the MatchPairing row and the match's
current_pairing_id pointer commit together or not at all. Status transitions
are compare-and-swap updates on the stored status and current pointer, so a
racing approve/reject/edit loses with PairingConflict instead of silently
overwriting. Published pairs reach the slot updater only after the commit.
"""

import logging
import random
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import exists, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from app.exceptions import (
    InvalidPairingState,
    PairingConflict,
    PairingError,
    PairingInputError,
    PairingNotFound,
    PairingStorageError,
)
from app.models.match_pairing import MatchPairing
from app.models.tournament_batch import TournamentBatch
from app.models.tournament_match import TournamentMatch
from app.services.match_slot_updater import LoggingMatchSlotUpdater, MatchSlotUpdater
from app.services.pairing_algorithms import MatchFormat, Pair, generate_pairs
from app.services.pairing_overrides import apply_manual_overrides, validate_pairs
from app.services.participant_directory import get_eligible_players, get_player_seedings
from app.services.seeding_resolver import PlayerEntry, SeedingEntry, SeedingMethod, sort_players_by_seeding

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_PROPOSED = "proposed"
STATUS_APPROVED = "approved"
STATUS_PUBLISHED = "published"
STATUS_REJECTED = "rejected"

# "pending" is a legacy alias of "proposed"; approve only accepts "proposed"
EDITABLE_STATUSES = (STATUS_PROPOSED, STATUS_PENDING)
REJECTABLE_STATUSES = (STATUS_PROPOSED, STATUS_PENDING)

MIN_PLAYERS = 2


class PairingType(str, Enum):
    AUTO = "AUTO"
    MANUAL = "MANUAL"
    HYBRID = "HYBRID"


def _coerce_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise PairingInputError(f"Invalid {field_name} '{value}'. Expected one of: {allowed}")


def pairing_pairs(pairing: MatchPairing) -> List[Pair]:
    return [Pair.from_dict(p) for p in pairing.pairs_json or []]


def pairing_to_response(pairing: MatchPairing) -> Dict[str, Any]:
    """Shape returned by generate/edit/approve/publish."""
    pairs = list(pairing.pairs_json or [])
    return {
        "match_id": pairing.match_id,
        "pairing_id": pairing.id,
        "status": pairing.status,
        "version": pairing.version,
        "pairs": pairs,
        "total_pairs": len(pairs),
        "proposed_at": pairing.proposed_at,
        "can_edit": pairing.status in EDITABLE_STATUSES,
        "can_approve": pairing.status == STATUS_PROPOSED,
        "can_publish": pairing.status == STATUS_APPROVED,
        "metadata": dict(pairing.metadata_json or {}),
    }


def pairing_audit_fields(pairing: MatchPairing) -> Dict[str, Any]:
    return {
        "status": pairing.status,
        "version": pairing.version,
        "proposed_by": pairing.proposed_by,
        "proposed_at": pairing.proposed_at,
        "approved_by": pairing.approved_by,
        "approved_at": pairing.approved_at,
        "published_by": pairing.published_by,
        "published_at": pairing.published_at,
        "rejected_by": pairing.rejected_by,
        "rejected_at": pairing.rejected_at,
        "rejection_reason": pairing.rejection_reason,
    }


class PairingOrchestrator:
    """Pairing workflow bound to one database session.

    Collaborators are injectable so tests can swap the participant source,
    the random source used by RANDOM seeding, the clock, and the slot updater
    that receives published pairs.
    """

    def __init__(
        self,
        session: Session,
        player_supplier: Optional[Callable[[int], List[PlayerEntry]]] = None,
        seeding_provider: Optional[Callable[[int], Dict[str, SeedingEntry]]] = None,
        slot_updater: Optional[MatchSlotUpdater] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session = session
        self.player_supplier = player_supplier or partial(get_eligible_players, session)
        self.seeding_provider = seeding_provider or partial(get_player_seedings, session)
        self.slot_updater = slot_updater or LoggingMatchSlotUpdater()
        self.rng = rng or random.Random()
        self.clock = clock or datetime.utcnow

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    @contextmanager
    def _unit_of_work(self, operation: str, commit: bool = True) -> Iterator[None]:
        try:
            yield
            if commit:
                self.session.commit()
        except PairingError:
            self.session.rollback()
            raise
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Pairing %s hit a concurrent write: %s", operation, exc)
            raise PairingConflict(f"Concurrent modification during {operation}; re-read and retry") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Pairing %s failed, transaction rolled back", operation)
            raise PairingStorageError(f"Storage failure during {operation}; safe to retry") from exc
        except Exception:
            self.session.rollback()
            logger.exception("Pairing %s failed, transaction rolled back", operation)
            raise

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    def _load_match(self, match_id: int) -> TournamentMatch:
        match = self.session.get(TournamentMatch, match_id)
        if not match:
            raise PairingNotFound(f"Match {match_id} not found")
        return match

    def _load_pairing(self, pairing_id: str) -> MatchPairing:
        pairing = self.session.get(MatchPairing, pairing_id)
        if not pairing:
            raise PairingNotFound(f"Pairing {pairing_id} not found")
        return pairing

    def _tournament_id_for(self, match: TournamentMatch) -> int:
        batch = self.session.get(TournamentBatch, match.batch_id)
        if not batch:
            raise PairingNotFound(f"Batch {match.batch_id} for match {match.id} not found")
        return batch.tournament_id

    def _require_current(self, match: TournamentMatch, pairing: MatchPairing) -> None:
        if match.current_pairing_id != pairing.id:
            raise InvalidPairingState(
                f"Pairing {pairing.id} (version {pairing.version}) is not the current pairing for match {match.id}"
            )

    def _next_version(self, match_id: int) -> int:
        max_version = self.session.exec(
            select(func.max(MatchPairing.version)).where(MatchPairing.match_id == match_id)
        ).first()
        return (max_version or 0) + 1

    # ------------------------------------------------------------------
    # Record creation
    # ------------------------------------------------------------------

    def _create_record(
        self,
        match: TournamentMatch,
        tournament_id: int,
        batch_id: int,
        pairing_type: str,
        seeding_method: str,
        algorithm_used: str,
        pairs: Sequence[Pair],
        metadata: Dict[str, Any],
        actor: str,
        notes: Optional[str] = None,
    ) -> MatchPairing:
        pairing = MatchPairing(
            match_id=match.id,
            tournament_id=tournament_id,
            batch_id=batch_id,
            pairing_type=pairing_type,
            seeding_method=seeding_method,
            algorithm_used=algorithm_used,
            pairs_json=[p.to_dict() for p in pairs],
            metadata_json=metadata,
            status=STATUS_PROPOSED,
            version=self._next_version(match.id),
            notes=notes,
            proposed_by=actor,
            proposed_at=self.clock(),
        )
        self.session.add(pairing)
        self.session.flush()

        match.current_pairing_id = pairing.id
        self.session.add(match)
        self.session.flush()
        return pairing

    def _generate_auto_pairs(
        self,
        match: TournamentMatch,
        tournament_id: int,
        players: Sequence[PlayerEntry],
        seeding_method: SeedingMethod,
    ):
        seedings = self.seeding_provider(tournament_id)
        ordered = sort_players_by_seeding(players, seedings, seeding_method, rng=self.rng)
        pairs, metadata = generate_pairs(MatchFormat.from_match_type(match.match_type), ordered)

        metadata["seeding_method"] = seeding_method.value
        metadata["match_type"] = match.match_type
        metadata["player_count"] = len(ordered)
        metadata["pair_count"] = len(pairs)
        return pairs, metadata

    # ------------------------------------------------------------------
    # Workflow operations
    # ------------------------------------------------------------------

    def generate(
        self,
        match_id: int,
        pairing_type,
        seeding_method,
        actor: str,
        custom_pairs: Optional[Sequence[Pair]] = None,
        force_regenerate: bool = False,
    ) -> MatchPairing:
        """Create a new proposed pairing for a match and make it current.

        Raises:
            PairingInputError: Bad enum value, MANUAL without pairs, invalid pairs, < 2 players
            PairingNotFound: Match (or its batch) does not exist
            InvalidPairingState: Match already has a pairing and force_regenerate is false
        """
        pairing_type = _coerce_enum(PairingType, pairing_type, "pairing_type")
        seeding_method = _coerce_enum(SeedingMethod, seeding_method, "seeding_method")
        custom_pairs = list(custom_pairs or [])

        if pairing_type == PairingType.MANUAL and not custom_pairs:
            raise PairingInputError("custom_pairs required for MANUAL pairing")
        if custom_pairs:
            validate_pairs(custom_pairs)

        with self._unit_of_work("generate"):
            match = self._load_match(match_id)
            tournament_id = self._tournament_id_for(match)

            if match.current_pairing_id and not force_regenerate:
                raise InvalidPairingState(
                    f"Match {match_id} already has pairing {match.current_pairing_id}; "
                    "set force_regenerate to replace it"
                )

            players = self.player_supplier(tournament_id)
            if len(players) < MIN_PLAYERS:
                raise PairingInputError(
                    f"Not enough players for pairing: {len(players)} eligible, {MIN_PLAYERS} required"
                )

            if pairing_type == PairingType.MANUAL:
                pairs = custom_pairs
                metadata = {
                    "pairing_type": PairingType.MANUAL.value,
                    "seeding_method": seeding_method.value,
                    "custom": True,
                    "match_type": match.match_type,
                    "player_count": len(players),
                    "pair_count": len(pairs),
                }
            else:
                pairs, metadata = self._generate_auto_pairs(match, tournament_id, players, seeding_method)
                if pairing_type == PairingType.HYBRID and custom_pairs:
                    pairs = apply_manual_overrides(pairs, custom_pairs)
                    metadata["hybrid"] = True
                    metadata["manual_overrides"] = len(custom_pairs)
                    metadata["pair_count"] = len(pairs)

            pairing = self._create_record(
                match,
                tournament_id=tournament_id,
                batch_id=match.batch_id,
                pairing_type=pairing_type.value,
                seeding_method=seeding_method.value,
                algorithm_used=match.match_type,
                pairs=pairs,
                metadata=metadata,
                actor=actor,
            )
            logger.info(
                "Generated %s pairing %s v%d for match %s (%d pairs)",
                pairing_type.value,
                pairing.id,
                pairing.version,
                match_id,
                len(pairs),
            )

        return pairing

    def update_pairs(
        self,
        pairing_id: str,
        pairs: Sequence[Pair],
        actor: str,
        notes: Optional[str] = None,
    ) -> MatchPairing:
        """Replace the pairs of a proposed record by writing the next version.

        The edited record is left untouched as history.
        """
        pairs = list(pairs or [])
        if not pairs:
            raise PairingInputError("pairs required")
        validate_pairs(pairs)

        with self._unit_of_work("edit"):
            previous = self._load_pairing(pairing_id)
            if previous.status not in EDITABLE_STATUSES:
                raise InvalidPairingState(f"Pairing cannot be edited in status '{previous.status}'")

            match = self._load_match(previous.match_id)
            self._require_current(match, previous)

            metadata = dict(previous.metadata_json or {})
            metadata["pair_count"] = len(pairs)
            metadata["edited_from"] = previous.id

            pairing = self._create_record(
                match,
                tournament_id=previous.tournament_id,
                batch_id=previous.batch_id,
                pairing_type=previous.pairing_type,
                seeding_method=previous.seeding_method,
                algorithm_used=previous.algorithm_used,
                pairs=pairs,
                metadata=metadata,
                actor=actor,
                notes=notes,
            )
            logger.info("Edited pairing %s -> %s v%d for match %s", previous.id, pairing.id, pairing.version, match.id)

        return pairing

    def _transition(self, pairing: MatchPairing, expected: Sequence[str], values: Dict[str, Any]) -> None:
        """Compare-and-swap the stored status and current pointer.

        Zero rows matched means someone else moved the status, or an edit or
        regenerate replaced this record as the match's current pairing.
        """
        still_current = exists().where(
            TournamentMatch.id == MatchPairing.match_id,
            TournamentMatch.current_pairing_id == MatchPairing.id,
        )
        result = self.session.execute(
            update(MatchPairing)
            .where(MatchPairing.id == pairing.id, MatchPairing.status.in_(list(expected)), still_current)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "Pairing %s transition to %s lost a race (expected status in %s)",
                pairing.id,
                values.get("status"),
                list(expected),
            )
            raise PairingConflict(f"Pairing {pairing.id} was modified concurrently; re-read and retry")
        self.session.refresh(pairing)

    def _approve(self, pairing: MatchPairing, match: TournamentMatch, actor: str) -> None:
        if pairing.status != STATUS_PROPOSED:
            raise InvalidPairingState(f"Pairing cannot be approved in status '{pairing.status}'")
        self._require_current(match, pairing)
        self._transition(
            pairing,
            (STATUS_PROPOSED,),
            {"status": STATUS_APPROVED, "approved_by": actor, "approved_at": self.clock()},
        )

    def _publish(self, pairing: MatchPairing, match: TournamentMatch, actor: str) -> List[Pair]:
        """Mark *pairing* published and return the pairs to hand off once the commit lands."""
        if pairing.status != STATUS_APPROVED:
            raise InvalidPairingState(f"Pairing cannot be published in status '{pairing.status}'")
        self._require_current(match, pairing)
        self._transition(
            pairing,
            (STATUS_APPROVED,),
            {"status": STATUS_PUBLISHED, "published_by": actor, "published_at": self.clock()},
        )

        match.current_pairing_id = pairing.id
        match.published_pairing_id = pairing.id
        self.session.add(match)
        self.session.flush()
        return pairing_pairs(pairing)

    def _hand_off(self, match: TournamentMatch, pairs: Sequence[Pair]) -> None:
        """Give committed pairs to the slot updater.

        Runs after the commit, so a failing updater leaves the record published
        and the error propagates to the caller.
        """
        try:
            self.slot_updater.assign_pairs(match, pairs)
        except Exception:
            logger.exception("Slot assignment failed for published match %s", match.id)
            raise

    def approve(self, pairing_id: str, actor: str, finalize: bool = False) -> MatchPairing:
        """Approve a proposed pairing; with *finalize* also publish it in the same transaction."""
        published_pairs: Optional[List[Pair]] = None
        with self._unit_of_work("approve"):
            pairing = self._load_pairing(pairing_id)
            match = self._load_match(pairing.match_id)
            self._approve(pairing, match, actor)
            if finalize:
                published_pairs = self._publish(pairing, match, actor)
            logger.info("Approved pairing %s (finalize=%s) by %s", pairing_id, finalize, actor)

        if published_pairs is not None:
            self._hand_off(match, published_pairs)
        return pairing

    def publish(self, pairing_id: str, actor: str) -> MatchPairing:
        with self._unit_of_work("publish"):
            pairing = self._load_pairing(pairing_id)
            match = self._load_match(pairing.match_id)
            published_pairs = self._publish(pairing, match, actor)
            logger.info("Published pairing %s for match %s by %s", pairing_id, match.id, actor)

        self._hand_off(match, published_pairs)
        return pairing

    def reject(self, pairing_id: str, actor: str, reason: str) -> MatchPairing:
        if not reason or not reason.strip():
            raise PairingInputError("reason required to reject a pairing")

        with self._unit_of_work("reject"):
            pairing = self._load_pairing(pairing_id)
            if pairing.status not in REJECTABLE_STATUSES:
                raise InvalidPairingState(f"Pairing cannot be rejected in status '{pairing.status}'")
            match = self._load_match(pairing.match_id)
            self._require_current(match, pairing)
            self._transition(
                pairing,
                REJECTABLE_STATUSES,
                {
                    "status": STATUS_REJECTED,
                    "rejected_by": actor,
                    "rejected_at": self.clock(),
                    "rejection_reason": reason.strip(),
                },
            )
            logger.info("Rejected pairing %s by %s: %s", pairing_id, actor, reason)

        return pairing

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_pairing(self, pairing_id: str) -> MatchPairing:
        with self._unit_of_work("read", commit=False):
            return self._load_pairing(pairing_id)

    def get_current_pairing(self, match_id: int) -> Optional[MatchPairing]:
        with self._unit_of_work("read", commit=False):
            match = self._load_match(match_id)
            if not match.current_pairing_id:
                return None
            return self.session.get(MatchPairing, match.current_pairing_id)

    def get_status(self, match_id: int) -> Dict[str, Any]:
        """Status of the match's current pairing, or an explicit no_pairing result."""
        pairing = self.get_current_pairing(match_id)
        if pairing is None:
            return {
                "status": "no_pairing",
                "pairing_id": None,
                "match_id": match_id,
                "has_pairing": False,
                "message": "No pairing has been generated yet",
            }

        result = {
            "pairing_id": pairing.id,
            "match_id": pairing.match_id,
            "tournament_id": pairing.tournament_id,
            "batch_id": pairing.batch_id,
            "has_pairing": True,
            "pair_count": len(pairing.pairs_json or []),
        }
        result.update(pairing_audit_fields(pairing))
        return result

    def get_history(self, match_id: int) -> List[MatchPairing]:
        """All records for a match, newest proposal first."""
        with self._unit_of_work("read", commit=False):
            self._load_match(match_id)
            return list(
                self.session.exec(
                    select(MatchPairing)
                    .where(MatchPairing.match_id == match_id)
                    .order_by(MatchPairing.proposed_at.desc(), MatchPairing.version.desc())
                ).all()
            )
