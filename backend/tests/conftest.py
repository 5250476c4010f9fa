import random
from datetime import datetime, timedelta
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.database import get_session
from app.main import app
from app.routes.pairings import get_pairing_rng, get_slot_updater

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. Tables are dropped after each test so every test starts empty
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

BASE_JOIN_TIME = datetime(2026, 3, 1, 9, 0, 0)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


class RecordingSlotUpdater:
    """Captures published pair lists instead of touching match state."""

    def __init__(self):
        self.calls = []

    def assign_pairs(self, match, pairs):
        self.calls.append((match.id, list(pairs)))


@pytest.fixture(name="session", scope="function")
def session_fixture():
    # Import all models to ensure they're registered BEFORE create_all
    from app.models.match_pairing import MatchPairing  # noqa: F401
    from app.models.player_seeding import PlayerSeeding  # noqa: F401
    from app.models.tournament import Tournament  # noqa: F401
    from app.models.tournament_batch import TournamentBatch  # noqa: F401
    from app.models.tournament_match import TournamentMatch  # noqa: F401
    from app.models.tournament_subscription import TournamentSubscription  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="slot_updater")
def slot_updater_fixture():
    return RecordingSlotUpdater()


@pytest.fixture(name="client")
def client_fixture(session: Session, slot_updater: RecordingSlotUpdater):
    """Test client with the session, random source and slot updater overridden.

    Overrides are set BEFORE TestClient() so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_pairing_rng] = lambda: random.Random(1234)
    app.dependency_overrides[get_slot_updater] = lambda: slot_updater

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Data builders
# ============================================================================


def make_match(
    session: Session,
    match_type: str = "SINGLE_ELIMINATION_1V1",
    player_names: Optional[List[str]] = None,
    seeds: Optional[dict] = None,
    ratings: Optional[dict] = None,
):
    """Tournament -> batch -> match, with paid subscribers joined one minute apart.

    *seeds* / *ratings* map player name -> seed number / skill rating.
    External ids are the lower-cased names ("A" -> "a").
    """
    from app.models.player_seeding import PlayerSeeding
    from app.models.tournament import Tournament
    from app.models.tournament_batch import TournamentBatch
    from app.models.tournament_match import TournamentMatch
    from app.models.tournament_subscription import TournamentSubscription

    player_names = player_names if player_names is not None else ["A", "B", "C", "D"]
    seeds = seeds or {}
    ratings = ratings or {}

    tournament = Tournament(name="Spring Open")
    session.add(tournament)
    session.flush()

    batch = TournamentBatch(tournament_id=tournament.id, name="Day 1")
    session.add(batch)
    session.flush()

    match = TournamentMatch(batch_id=batch.id, name="Match 1", match_type=match_type)
    session.add(match)
    session.flush()

    for i, name in enumerate(player_names):
        session.add(
            TournamentSubscription(
                tournament_id=tournament.id,
                external_user_id=name.lower(),
                user_name=name,
                joined_at=BASE_JOIN_TIME + timedelta(minutes=i),
                payment_status="paid",
            )
        )
        if name in seeds or name in ratings:
            session.add(
                PlayerSeeding(
                    tournament_id=tournament.id,
                    user_id=name.lower(),
                    user_name=name,
                    seed_number=seeds.get(name),
                    skill_rating=ratings.get(name),
                )
            )

    session.commit()
    session.refresh(match)
    return tournament, match
