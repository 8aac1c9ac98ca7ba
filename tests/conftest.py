# tests/conftest.py

from __future__ import annotations

import os
import uuid
from pathlib import Path

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CREATE_TABLES", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from taskboard.database import Base, get_db
from taskboard.main import app
from taskboard.models.tasks import Task
from taskboard.models.user import User
from taskboard.utils.security import get_password_hash


@pytest.fixture()
async def session_factory(tmp_path: Path):
    """
    One SQLite file per test.

    NullPool gives every session its own connection, so the requests under
    test and the seeding helpers never share a transaction.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskboard.sqlite3'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture()
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(session_factory):
    async def _make_user(name: str, password: str = "secret-password") -> User:
        async with session_factory() as db:
            user = User(
                name=name,
                email=f"{name.lower()}-{uuid.uuid4().hex[:6]}@taskboard.io",
                hashed_password=get_password_hash(password),
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return user

    return _make_user


@pytest.fixture()
def insert_task(session_factory):
    """
    Write a task row directly, bypassing request validation.

    Needed for states the API refuses to create, such as past due dates or
    soft-deleted rows.
    """
    async def _insert_task(project_id: int, user_id: int, **fields) -> Task:
        values = {
            "title": "Seeded task",
            "type": "feature",
            "status": "todo",
            "priority": "medium",
        }
        values.update(fields)
        async with session_factory() as db:
            task = Task(uuid=str(uuid.uuid4()), project_id=project_id, user_id=user_id, **values)
            db.add(task)
            await db.commit()
            await db.refresh(task)
            return task

    return _insert_task

