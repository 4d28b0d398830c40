from fastapi import APIRouter, Response

from app.core.dependencies import CurrentIdentity, TodoServiceDep
from app.todos.schemas import TodoCreate, TodoResponse, TodoUpdate

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("", response_model=list[TodoResponse])
async def list_todos(identity: CurrentIdentity, todos: TodoServiceDep):
    return await todos.get_all_todos(identity.user_id)


@router.post("", response_model=TodoResponse, status_code=201)
async def create_todo(body: TodoCreate, identity: CurrentIdentity, todos: TodoServiceDep):
    return await todos.create_todo(identity.user_id, body)


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_todo(todo_id: str, identity: CurrentIdentity, todos: TodoServiceDep):
    return await todos.get_todo(todo_id, identity.user_id)


@router.put("/{todo_id}", response_model=TodoResponse)
async def update_todo(
    todo_id: str, body: TodoUpdate, identity: CurrentIdentity, todos: TodoServiceDep
):
    return await todos.update_todo(todo_id, identity.user_id, body)


@router.delete("/{todo_id}", status_code=204)
async def delete_todo(todo_id: str, identity: CurrentIdentity, todos: TodoServiceDep) -> Response:
    await todos.delete_todo(todo_id, identity.user_id)
    return Response(status_code=204)
