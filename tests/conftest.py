"""
Test fixtures using async SQLite for fast, isolated tests.
No PostgreSQL required.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.models import User
from app.auth.repository import UserRepository
from app.config import Settings
from app.core.dependencies import get_db, get_settings
from app.core.exceptions import DuplicateEmailError, NotFoundError
from app.db.base import Base
from app.main import app
from app.todos.models import Todo
from app.todos.repository import UPDATABLE_FIELDS, TodoRepository


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        jwt_secret="test-secret",
        password_pepper="test-pepper",
        bcrypt_rounds=4,
        request_timeout_seconds=5.0,
    )


@pytest_asyncio.fixture
async def session_factory():
    """A fresh in-memory SQLite database per test, shared by all its sessions."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, test_settings):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self.users: dict[uuid.UUID, User] = {}

    async def create(self, email: str, full_name: str, password_hash: str) -> User:
        if await self.find_by_email(email) is not None:
            raise DuplicateEmailError()
        now = datetime.now(timezone.utc)
        user = User(
            id=uuid.uuid4(),
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def find_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        return self.users.get(user_id)


class InMemoryTodoRepository(TodoRepository):
    def __init__(self):
        self.todos: dict[uuid.UUID, Todo] = {}

    async def create(self, owner_id: uuid.UUID, title: str, completed: bool | None = None) -> Todo:
        now = datetime.now(timezone.utc)
        todo = Todo(
            id=uuid.uuid4(),
            title=title,
            completed=bool(completed),
            user_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        self.todos[todo.id] = todo
        return todo

    async def find_all(self, owner_id: uuid.UUID) -> list[Todo]:
        return [t for t in self.todos.values() if t.user_id == owner_id]

    async def find_by_id(self, todo_id: uuid.UUID, owner_id: uuid.UUID) -> Todo:
        todo = self.todos.get(todo_id)
        if todo is None or todo.user_id != owner_id:
            raise NotFoundError("Todo")
        return todo

    async def update(
        self, todo_id: uuid.UUID, owner_id: uuid.UUID, changes: dict[str, Any]
    ) -> Todo:
        todo = await self.find_by_id(todo_id, owner_id)
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(todo, key, value)
        todo.updated_at = datetime.now(timezone.utc)
        return todo

    async def delete(self, todo_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        await self.find_by_id(todo_id, owner_id)
        del self.todos[todo_id]


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def todo_repo() -> InMemoryTodoRepository:
    return InMemoryTodoRepository()
