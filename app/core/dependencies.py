import logging
from datetime import timedelta
from typing import Annotated, AsyncIterator

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.repository import SqlUserRepository
from app.auth.service import AuthService, verify_token
from app.config import Settings, settings
from app.core.exceptions import UnauthorizedError
from app.core.security import Identity, TokenCodec
from app.db.deadline import Deadline
from app.db.session import async_session_factory
from app.todos.repository import SqlTodoRepository
from app.todos.service import TodoService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_settings() -> Settings:
    return settings


async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        yield session


SettingsDep = Annotated[Settings, Depends(get_settings)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_deadline(config: SettingsDep) -> Deadline:
    """One deadline per request, shared by every persistence call it makes."""
    return Deadline.after(config.request_timeout_seconds)


RequestDeadline = Annotated[Deadline, Depends(get_deadline)]


def get_token_codec(config: SettingsDep) -> TokenCodec:
    return TokenCodec(
        secret=config.jwt_secret,
        algorithm=config.jwt_algorithm,
        expiration=timedelta(seconds=config.jwt_expiration_seconds),
    )


TokenCodecDep = Annotated[TokenCodec, Depends(get_token_codec)]


def get_auth_service(
    db: DbSession,
    deadline: RequestDeadline,
    codec: TokenCodecDep,
    config: SettingsDep,
) -> AuthService:
    return AuthService(
        users=SqlUserRepository(db, deadline),
        tokens=codec,
        pepper=config.password_pepper,
        token_expiration=timedelta(seconds=config.jwt_expiration_seconds),
        bcrypt_rounds=config.bcrypt_rounds,
    )


def get_todo_service(db: DbSession, deadline: RequestDeadline) -> TodoService:
    return TodoService(SqlTodoRepository(db, deadline))


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TodoServiceDep = Annotated[TodoService, Depends(get_todo_service)]


async def require_identity(
    codec: TokenCodecDep,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Gate for protected routes: a valid ``Bearer`` token or a 401.

    Needs only the token codec, so rejected requests never open a session.
    """
    if not authorization:
        logger.info("Missing authorization header")
        raise UnauthorizedError("authorization header is required")
    if not authorization.startswith(BEARER_PREFIX):
        logger.info("Invalid authorization header format")
        raise UnauthorizedError("authorization header must start with 'Bearer '")

    identity = verify_token(codec, authorization[len(BEARER_PREFIX):].strip())
    logger.debug("Authenticated user %s", identity.user_id)
    return identity


CurrentIdentity = Annotated[Identity, Depends(require_identity)]
