"""
Test fixtures shared across all tests.

Architecture:
- Integration tests run the real FastAPI app against a throwaway SQLite
  file (aiosqlite). DATABASE_URL must be set before trainer_insights is
  imported, because settings and the engine are created at import time.
- The SQLite engine uses NullPool, so no connection outlives the event
  loop that opened it and each test can run on its own loop.
- setup_db drops and recreates every table, so each test starts empty
  and admin-wide numbers are exact.
- Seed data is committed via the app's own AsyncSessionLocal; the HTTP
  client then sees it through the app's sessions.
- Unit tests for the analytics core build AssessmentRecord values through the
  record_factory fixture and never touch the database.
"""

import os
import tempfile
import uuid
from datetime import date, datetime, timezone

_TEST_DB = os.path.join(tempfile.gettempdir(), f"trainer_insights_test_{uuid.uuid4().hex}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["GAMIFICATION_ENABLED"] = "true"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from trainer_insights.database import AsyncSessionLocal, Base, engine  # noqa: E402
from trainer_insights.main import app  # noqa: E402
from trainer_insights.models import Assessment, Profile  # noqa: E402
from trainer_insights.structure import PARAMETERS, AssessmentRecord, ParameterId  # noqa: E402


def make_record(
    score=None,
    day: date = date(2026, 1, 15),
    trainer_id="t1",
    assessor_id="m1",
    ratings=None,
):
    """Build an AssessmentRecord for unit tests.

    Pass `score` to rate all 21 parameters the same, or `ratings` for
    explicit per-parameter values (everything else is left unrated).
    """
    if ratings is None:
        ratings = {param: score for param in PARAMETERS} if score is not None else {}
    return AssessmentRecord(
        id=uuid.uuid4(),
        trainer_id=trainer_id,
        assessor_id=assessor_id,
        assessment_date=day,
        ratings=ratings,
        created_at=datetime(day.year, day.month, day.day, tzinfo=timezone.utc),
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest_asyncio.fixture
async def setup_db():
    """Start every integration test from empty tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def client(setup_db):
    """Async HTTP test client over the real FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- Seed data fixtures ---
# Each fixture opens its own session, commits, and closes.

async def _add_profile(**fields) -> Profile:
    profile = Profile(
        id=uuid.uuid4(),
        email=f"test_{uuid.uuid4().hex[:8]}@example.com",
        **fields,
    )
    async with AsyncSessionLocal() as session:
        session.add(profile)
        await session.commit()
        await session.refresh(profile)
    return profile


@pytest_asyncio.fixture
async def test_admin(setup_db):
    return await _add_profile(full_name="Test Admin", role="admin")


@pytest_asyncio.fixture
async def test_line_manager(setup_db):
    """The trainer's own manager: NOT allowed to assess them."""
    return await _add_profile(full_name="Line Manager", role="manager")


@pytest_asyncio.fixture
async def test_manager(setup_db):
    """A manager from another team: eligible to assess test_trainer."""
    return await _add_profile(full_name="Test Manager", role="manager", team_name="Delivery")


@pytest_asyncio.fixture
async def test_trainer(test_line_manager):
    return await _add_profile(
        full_name="Test Trainer",
        role="trainer",
        team_name="Onboarding",
        reporting_manager_id=test_line_manager.id,
    )


@pytest_asyncio.fixture
async def seed_assessments(setup_db):
    """Factory: commit assessments directly, bypassing the API (no rewards).

    Usage:
        await seed_assessments(trainer, manager, [(date(2026, 1, 5), 4), ...])
    """
    async def _seed(trainer, assessor, scores, ratings_for=None):
        rows = []
        for day, score in scores:
            row = Assessment(
                id=uuid.uuid4(),
                trainer_id=trainer.id,
                assessor_id=assessor.id,
                assessment_date=day,
            )
            params = ratings_for or list(ParameterId)
            for param in params:
                setattr(row, param.value, score)
            rows.append(row)

        async with AsyncSessionLocal() as session:
            session.add_all(rows)
            await session.commit()
        return rows

    return _seed


@pytest_asyncio.fixture
async def test_other_trainer(test_manager):
    """A second trainer, reporting to test_manager."""
    return await _add_profile(
        full_name="Rival Trainer",
        role="trainer",
        team_name="Delivery",
        reporting_manager_id=test_manager.id,
    )


@pytest_asyncio.fixture
async def test_polish_trainer(test_manager):
    """A trainer whose name is outside Latin-1."""
    return await _add_profile(
        full_name="Łukasz Nowak",
        role="trainer",
        team_name="Delivery",
        reporting_manager_id=test_manager.id,
    )
