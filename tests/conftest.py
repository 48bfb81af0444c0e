"""Shared fixtures: in-memory database, sessions, entity factories and an API client."""

from typing import Any, AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_admin_token
from app.main import app as fastapi_app
from app.models import Certification, Education, Project, Skill, SkillSourceType
from app.services.skill_normalizer import clean_name, guess_category
from app.services.skill_sync_service import SkillSyncService


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """One in-memory SQLite database per test, with SAVEPOINT support."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_maker: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def sync_service() -> SkillSyncService:
    return SkillSyncService()


# ─── Factories ─────────────────────────────────────────────────

@pytest.fixture
def make_project(
    sync_service: SkillSyncService,
) -> Callable[..., Awaitable[Project]]:
    """Create a project and run the same sync the content hook runs."""

    async def _make(db: AsyncSession, technologies: list, **fields: Any) -> Project:
        project = Project(
            title=fields.pop("title", "Sample Project"),
            technologies=list(technologies),
            skills=[],
            **fields,
        )
        await sync_service.reconcile_entity_skills(db, "project", project)
        return project

    return _make


@pytest.fixture
def make_certification(
    sync_service: SkillSyncService,
) -> Callable[..., Awaitable[Certification]]:
    async def _make(db: AsyncSession, skills: list, **fields: Any) -> Certification:
        certification = Certification(
            title=fields.pop("title", "Sample Certification"),
            skills=list(skills),
            **fields,
        )
        await sync_service.reconcile_entity_skills(db, "certification", certification)
        return certification

    return _make


@pytest.fixture
def make_education(
    sync_service: SkillSyncService,
) -> Callable[..., Awaitable[Education]]:
    async def _make(db: AsyncSession, skills: list, **fields: Any) -> Education:
        education = Education(
            degree=fields.pop("degree", "BSc"),
            field=fields.pop("field", "Computer Science"),
            skills=list(skills),
            **fields,
        )
        await sync_service.reconcile_entity_skills(db, "education", education)
        return education

    return _make


@pytest.fixture
def make_manual_skill() -> Callable[..., Awaitable[Skill]]:
    """Insert a skill the way an admin creates one, bypassing the service."""

    async def _make(db: AsyncSession, name: str, **fields: Any) -> Skill:
        skill = Skill(
            name=clean_name(name),
            name_key=clean_name(name).lower(),
            category=fields.pop("category", guess_category(name)),
            sources=fields.pop(
                "sources",
                [{"type": SkillSourceType.MANUAL.value, "reference_id": None}],
            ),
            **fields,
        )
        db.add(skill)
        await db.commit()
        return skill

    return _make


# ─── API ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(session_maker: async_sessionmaker) -> AsyncIterator[AsyncClient]:
    """ASGI client whose requests each get their own session on the test database."""

    async def _override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = create_admin_token()
    return {"Authorization": f"Bearer {token}"}
