import uuid

from app.core.exceptions import InvalidIdentifierError
from app.todos.models import Todo
from app.todos.repository import TodoRepository
from app.todos.schemas import TodoCreate, TodoUpdate


def parse_identifier(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        raise InvalidIdentifierError(value)


class TodoService:
    """Binds the caller's identity to todo storage."""

    def __init__(self, todos: TodoRepository):
        self._todos = todos

    async def create_todo(self, user_id: str, body: TodoCreate) -> Todo:
        return await self._todos.create(parse_identifier(user_id), body.title, body.completed)

    async def get_todo(self, todo_id: str, user_id: str) -> Todo:
        return await self._todos.find_by_id(parse_identifier(todo_id), parse_identifier(user_id))

    async def get_all_todos(self, user_id: str) -> list[Todo]:
        return await self._todos.find_all(parse_identifier(user_id))

    async def update_todo(self, todo_id: str, user_id: str, body: TodoUpdate) -> Todo:
        return await self._todos.update(
            parse_identifier(todo_id), parse_identifier(user_id), body.changes()
        )

    async def delete_todo(self, todo_id: str, user_id: str) -> None:
        await self._todos.delete(parse_identifier(todo_id), parse_identifier(user_id))
