import asyncio
import logging
from datetime import timedelta

from app.auth.models import User
from app.auth.repository import UserRepository
from app.auth.schemas import RegisterRequest
from app.core.exceptions import (
    InternalError,
    InvalidCredentialsError,
    InvalidInputError,
    UnauthorizedError,
)
from app.core.security import (
    DEFAULT_BCRYPT_ROUNDS,
    HashingError,
    Identity,
    TokenCodec,
    TokenError,
    fits_bcrypt,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


def verify_token(tokens: TokenCodec, token: str) -> Identity:
    """Verify a bearer token, reporting every failure as a 401."""
    try:
        return tokens.verify(token)
    except TokenError as exc:
        logger.info("Token rejected (%s): %s", type(exc).__name__, exc)
        raise UnauthorizedError("invalid token") from exc


class AuthService:
    """Registration, login and token verification."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenCodec,
        pepper: str,
        token_expiration: timedelta = timedelta(hours=1),
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        self._users = users
        self._tokens = tokens
        self._pepper = pepper
        self._token_expiration = token_expiration
        self._bcrypt_rounds = bcrypt_rounds

    async def register(self, body: RegisterRequest) -> User:
        if not fits_bcrypt(body.password, self._pepper):
            raise InvalidInputError("password is too long")

        try:
            password_hash = await asyncio.to_thread(
                hash_password, body.password, self._pepper, self._bcrypt_rounds
            )
        except HashingError as exc:
            logger.error("Password hashing failed: %s", exc)
            raise InternalError("password hashing failed") from exc

        user = await self._users.create(
            email=body.email, full_name=body.full_name, password_hash=password_hash
        )
        logger.info("Registered user %s", user.id)
        return user

    async def login(self, email: str, password: str) -> str:
        """Returns a signed token or raises InvalidCredentialsError."""
        user = await self._users.find_by_email(email)
        # Unknown email and wrong password must be indistinguishable.
        if user is None or not await asyncio.to_thread(
            verify_password, password, self._pepper, user.password_hash
        ):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()

        return self._tokens.issue(str(user.id), user.email, self._token_expiration)

    def verify_token(self, token: str) -> Identity:
        return verify_token(self._tokens, token)
