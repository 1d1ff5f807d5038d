"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os
from datetime import datetime

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of pawprint.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.ext.compiler import compiles  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

# Bound here, before any test reloads pawprint.api.deps, so the dependency
# overrides below always match the functions the routers captured.
from pawprint.api.deps import (  # noqa: E402
    JWT_ALGORITHM,
    get_catalog,
    get_engine,
)
from pawprint.api.main import app  # noqa: E402
from pawprint.database.engine import (  # noqa: E402
    create_db_engine,
    enable_sqlite_immediate_transactions,
    get_session,
    init_db,
)
from pawprint.database.models import (  # noqa: E402
    Base,
    Challenge,
    ChallengeEntry,
    ChallengeStatus,
    ChallengeVote,
)
from pawprint.engine.catalog import MissionCatalog  # noqa: E402


@compiles(PG_JSONB, "sqlite")
def _compile_jsonb_as_text(type_, compiler, **kw):
    return "TEXT"


TEST_MISSIONS = [
    {
        "id": "first-upload",
        "title": "First Upload",
        "category": "social",
        "xp_reward": 50,
        "criteria": {"activity": "photo_upload", "target": 1},
    },
    {
        "id": "watch_3",
        "title": "Binge Watcher",
        "category": "watch",
        "xp_reward": 30,
        "criteria": {"activity": "video_watched", "target": 3},
    },
    {
        "id": "comment_1",
        "title": "First Comment",
        "category": "engage",
        "xp_reward": 10,
        "criteria": {"activity": "comment_posted", "target": 1},
    },
    {
        "id": "comment_3",
        "title": "Conversation Starter",
        "category": "engage",
        "xp_reward": 25,
        "criteria": {"activity": "comment_posted", "target": 3},
    },
    {
        "id": "streak_3",
        "title": "Three in a Row",
        "category": "engage",
        "cadence": "once",
        "xp_reward": 100,
        "criteria": {"activity": "daily_check_in", "target": 3},
    },
]


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Pawprint tables.

    JSONB columns are transparently mapped to TEXT for SQLite compatibility.
    Uses StaticPool so all threads (TestClient runs sync routes on a worker
    thread) share the same in-memory database.  Transactions begin
    explicitly so SAVEPOINTs behave as they do on PostgreSQL.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_immediate_transactions(engine)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def file_engine(tmp_path) -> Engine:
    """A file-backed SQLite engine for tests that race real threads.

    Each thread gets its own connection; ``BEGIN IMMEDIATE`` makes the
    writers queue on the database lock.
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pawprint.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def catalog() -> MissionCatalog:
    return MissionCatalog.from_dicts(TEST_MISSIONS)


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------
def seed_challenge(
    engine: Engine,
    challenge_id: str = "c1",
    status: ChallengeStatus = ChallengeStatus.VOTING,
    voting_ends_at: datetime | None = None,
) -> str:
    with get_session(engine) as session:
        session.add(Challenge(
            id=challenge_id,
            slug=f"{challenge_id}-slug",
            title=f"Challenge {challenge_id}",
            status=status,
            voting_ends_at=voting_ends_at,
        ))
    return challenge_id


def seed_entry(
    engine: Engine,
    entry_id: str,
    challenge_id: str = "c1",
    author_id: str | None = None,
    votes: int = 0,
    approved: bool = True,
) -> str:
    """Insert an entry with *votes* votes from distinct seeded voters."""
    with get_session(engine) as session:
        session.add(ChallengeEntry(
            id=entry_id,
            challenge_id=challenge_id,
            author_id=author_id or f"author-{entry_id}",
            title=f"Entry {entry_id}",
            is_approved=approved,
        ))
        session.flush()
        for n in range(votes):
            session.add(ChallengeVote(entry_id=entry_id, voter_id=f"seed-voter-{n}"))
    return entry_id


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------
def make_token(sub: str = "u1", is_admin: bool = False) -> str:
    """Create a member (or admin) JWT signed with the test secret."""
    import jwt

    return jwt.encode(
        {"sub": sub, "is_admin": is_admin},
        os.environ["JWT_SECRET"],
        algorithm=JWT_ALGORITHM,
    )


def auth(sub: str = "u1", is_admin: bool = False) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, is_admin)}"}


@pytest.fixture
def client(db_engine, catalog):
    """FastAPI TestClient bound to the in-memory engine and test catalog."""
    from fastapi.testclient import TestClient

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
