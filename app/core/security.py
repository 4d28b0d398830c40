"""Password hashing and bearer token handling."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import bcrypt
from jose import JWTError, jwt

DEFAULT_BCRYPT_ROUNDS = 12
# bcrypt rejects (or, in older releases, silently truncates) longer input.
BCRYPT_MAX_BYTES = 72
MIN_PASSWORD_BYTES = 6


class HashingError(Exception):
    pass


def fits_bcrypt(password: str, pepper: str) -> bool:
    """Whether ``password + pepper`` is within bcrypt's input limit, in bytes."""
    return len(password.encode()) + len(pepper.encode()) <= BCRYPT_MAX_BYTES


def hash_password(password: str, pepper: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash ``password + pepper`` with a fresh bcrypt salt."""
    try:
        return bcrypt.hashpw((password + pepper).encode(), bcrypt.gensalt(rounds=rounds)).decode()
    except (ValueError, TypeError) as exc:
        raise HashingError(str(exc)) from exc


def verify_password(password: str, pepper: str, hashed: str) -> bool:
    # A corrupted hash is reported the same way as a wrong password.
    try:
        return bcrypt.checkpw((password + pepper).encode(), hashed.encode())
    except (ValueError, TypeError):
        return False


class TokenError(Exception):
    pass


class TokenEmptyError(TokenError):
    pass


class TokenMalformedError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class SigningMethodMismatchError(TokenError):
    pass


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as asserted by a verified token."""
    user_id: str
    email: str


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expiration: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._expiration = expiration
        self._clock = clock

    def issue(self, user_id: str, email: str, expiration: timedelta | None = None) -> str:
        now = self._clock()
        payload = {
            "sub": user_id,
            "email": email,
            "iat": now,
            "exp": now + (expiration if expiration is not None else self._expiration),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        if not token or not token.strip():
            raise TokenEmptyError("empty token string")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise TokenMalformedError(str(exc)) from exc
        if header.get("alg") != self._algorithm:
            raise SigningMethodMismatchError(f"unexpected signing method: {header.get('alg')}")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise TokenMalformedError(str(exc)) from exc

        # Expiry is checked here, against the codec clock.
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            raise TokenMalformedError("missing or invalid exp claim")
        if self._clock().timestamp() > exp:
            raise TokenExpiredError("token has expired")

        user_id = claims.get("sub")
        email = claims.get("email")
        if not isinstance(user_id, str) or not user_id or not isinstance(email, str):
            raise TokenMalformedError("invalid token claims")
        return Identity(user_id=user_id, email=email)
