"""Pytest configuration and fixtures."""

import datetime as dt
from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from examdesk.db.base import Base
from examdesk.db.models import Candidate, Exam
from examdesk.db.session import get_db
from examdesk.main import app
from examdesk.schemas.sessions import ExamLocation, ExamSession


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def seeded_exams(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, int]:
    """
    Four exams inserted out of datetime order. Returns title -> id.

    German B1 carries a status the API does not know and no location.
    """
    async with session_factory() as session:
        jo = Candidate(name="Jo")
        amelie = Candidate(name="Amélie")
        sam = Candidate(name="Sam")
        exams = [
            Exam(
                title="French B2",
                status="Pending",
                datetime=dt.datetime(2025, 1, 12, 10, 0),
                language="FR",
                country="France",
                latitude=48.8566,
                longitude=2.3522,
                candidates=[jo, amelie],
            ),
            Exam(
                title="English C1",
                status="Started",
                datetime=dt.datetime(2025, 1, 10, 9, 0),
                language="EN",
                country="United Kingdom",
                latitude=51.5072,
                longitude=-0.1276,
                candidates=[sam],
            ),
            Exam(
                title="Spanish A2",
                status="Finished",
                datetime=dt.datetime(2025, 1, 10, 14, 30),
                language="ES",
                country="Spain",
                candidates=[],
            ),
            Exam(
                title="German B1",
                status="Weird",
                datetime=dt.datetime(2025, 2, 1, 8, 0),
                language="DE",
                candidates=[jo],
            ),
        ]
        session.add_all(exams)
        await session.commit()
        return {exam.title: exam.id for exam in exams}


@pytest.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints against the SQLite database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


def _make_session(
    id: int,
    *,
    title: str | None = None,
    status: str = "Pending",
    datetime: str = "2025-01-10T09:00:00Z",
    language: str = "EN",
    country: str = "France",
    candidates: tuple[str, ...] = (),
    latitude: float = 0.0,
    longitude: float = 0.0,
) -> ExamSession:
    """Build a canonical session for view-model and filter tests."""
    return ExamSession(
        id=id,
        title=title or f"Exam {id}",
        status=status,
        datetime=datetime,
        language=language,
        candidates=candidates,
        location=ExamLocation(country=country, latitude=latitude, longitude=longitude),
    )


@pytest.fixture
def make_session() -> Callable[..., ExamSession]:
    return _make_session
