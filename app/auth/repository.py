import logging
import uuid
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.exceptions import DuplicateEmailError
from app.db.deadline import Deadline

logger = logging.getLogger(__name__)


class UserRepository(ABC):
    """Storage for user accounts, unique by email."""

    @abstractmethod
    async def create(self, email: str, full_name: str, password_hash: str) -> User:
        """Store a new user or raise DuplicateEmailError."""
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        ...


class SqlUserRepository(UserRepository):
    def __init__(self, db: AsyncSession, deadline: Deadline):
        self._db = db
        self._deadline = deadline

    async def create(self, email: str, full_name: str, password_hash: str) -> User:
        # Friendlier error for the common case; concurrent registrations
        # can still both pass this check and are settled by the unique index.
        if await self.find_by_email(email) is not None:
            raise DuplicateEmailError()

        user = User(email=email, full_name=full_name, password_hash=password_hash)
        self._db.add(user)
        try:
            await self._deadline.run(self._db.commit())
        except IntegrityError as exc:
            await self._deadline.run(self._db.rollback())
            logger.info("Registration lost unique-email race for %s", email)
            raise DuplicateEmailError() from exc
        await self._deadline.run(self._db.refresh(user))
        return user

    async def find_by_email(self, email: str) -> User | None:
        result = await self._deadline.run(
            self._db.execute(select(User).where(User.email == email))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        result = await self._deadline.run(
            self._db.execute(select(User).where(User.id == user_id))
        )
        return result.scalar_one_or_none()
