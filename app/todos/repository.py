"""Owner-scoped todo storage.

Every query filters on both the todo id and the owning user id, so a todo
that belongs to someone else is indistinguishable from one that does not
exist.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.security import utcnow
from app.db.deadline import Deadline
from app.todos.models import Todo

UPDATABLE_FIELDS = frozenset({"title", "completed"})


class TodoRepository(ABC):
    @abstractmethod
    async def create(self, owner_id: uuid.UUID, title: str, completed: bool | None = None) -> Todo:
        ...

    @abstractmethod
    async def find_all(self, owner_id: uuid.UUID) -> list[Todo]:
        ...

    @abstractmethod
    async def find_by_id(self, todo_id: uuid.UUID, owner_id: uuid.UUID) -> Todo:
        """Raises NotFoundError when missing or owned by another user."""
        ...

    @abstractmethod
    async def update(
        self, todo_id: uuid.UUID, owner_id: uuid.UUID, changes: dict[str, Any]
    ) -> Todo:
        """Write only the keys in ``changes`` and return the re-read record."""
        ...

    @abstractmethod
    async def delete(self, todo_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        ...


class SqlTodoRepository(TodoRepository):
    def __init__(
        self,
        db: AsyncSession,
        deadline: Deadline,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = db
        self._deadline = deadline
        self._clock = clock

    async def create(self, owner_id: uuid.UUID, title: str, completed: bool | None = None) -> Todo:
        now = self._clock()
        todo = Todo(
            title=title,
            completed=bool(completed) if completed is not None else False,
            user_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        self._db.add(todo)
        await self._deadline.run(self._db.commit())
        await self._deadline.run(self._db.refresh(todo))
        return todo

    async def find_all(self, owner_id: uuid.UUID) -> list[Todo]:
        result = await self._deadline.run(
            self._db.execute(
                select(Todo).where(Todo.user_id == owner_id).order_by(Todo.created_at)
            )
        )
        return list(result.scalars().all())

    async def find_by_id(self, todo_id: uuid.UUID, owner_id: uuid.UUID) -> Todo:
        result = await self._deadline.run(
            self._db.execute(
                select(Todo)
                .where(Todo.id == todo_id, Todo.user_id == owner_id)
                .execution_options(populate_existing=True)
            )
        )
        todo = result.scalar_one_or_none()
        if todo is None:
            raise NotFoundError("Todo")
        return todo

    async def update(
        self, todo_id: uuid.UUID, owner_id: uuid.UUID, changes: dict[str, Any]
    ) -> Todo:
        values = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}
        values["updated_at"] = self._clock()

        result = await self._deadline.run(
            self._db.execute(
                update(Todo)
                .where(Todo.id == todo_id, Todo.user_id == owner_id)
                .values(**values)
            )
        )
        if result.rowcount == 0:
            await self._deadline.run(self._db.rollback())
            raise NotFoundError("Todo")
        await self._deadline.run(self._db.commit())

        # A delete that lands between the update and this read is a NotFoundError.
        return await self.find_by_id(todo_id, owner_id)

    async def delete(self, todo_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        result = await self._deadline.run(
            self._db.execute(
                delete(Todo).where(Todo.id == todo_id, Todo.user_id == owner_id)
            )
        )
        if result.rowcount == 0:
            await self._deadline.run(self._db.rollback())
            raise NotFoundError("Todo")
        await self._deadline.run(self._db.commit())
