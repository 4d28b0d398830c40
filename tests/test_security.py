"""Tests for password hashing and the token codec."""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.security import (
    Identity,
    SigningMethodMismatchError,
    TokenCodec,
    TokenEmptyError,
    TokenExpiredError,
    TokenMalformedError,
    hash_password,
    verify_password,
)

SECRET = "test-secret"


def test_hash_verifies_with_same_pepper():
    hashed = hash_password("secret1", "pepper", rounds=4)
    assert hashed != "secret1"
    assert verify_password("secret1", "pepper", hashed)


def test_hash_is_salted():
    assert hash_password("secret1", "pepper", rounds=4) != hash_password("secret1", "pepper", rounds=4)


def test_wrong_password_or_pepper_does_not_match():
    hashed = hash_password("secret1", "pepper", rounds=4)
    assert not verify_password("secret2", "pepper", hashed)
    assert not verify_password("secret1", "other-pepper", hashed)


def test_corrupted_hash_is_reported_as_no_match():
    assert not verify_password("secret1", "pepper", "not-a-bcrypt-hash")
    assert not verify_password("secret1", "pepper", "")


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


def test_issued_token_verifies_to_same_identity(fixed_clock):
    codec = TokenCodec(SECRET, clock=fixed_clock)
    token = codec.issue("user-1", "a@x.com")
    assert codec.verify(token) == Identity(user_id="user-1", email="a@x.com")


def test_token_expiry_boundary(fixed_clock):
    codec = TokenCodec(SECRET, expiration=timedelta(hours=1), clock=fixed_clock)
    issued_at = fixed_clock.now
    token = codec.issue("user-1", "a@x.com")

    fixed_clock.now = issued_at + timedelta(hours=1) - timedelta(seconds=1)
    assert codec.verify(token).user_id == "user-1"

    fixed_clock.now = issued_at + timedelta(hours=1) + timedelta(seconds=1)
    with pytest.raises(TokenExpiredError):
        codec.verify(token)


def test_per_call_expiration_overrides_default(fixed_clock):
    codec = TokenCodec(SECRET, expiration=timedelta(hours=1), clock=fixed_clock)
    token = codec.issue("user-1", "a@x.com", expiration=timedelta(seconds=10))

    fixed_clock.now = fixed_clock.now + timedelta(seconds=11)
    with pytest.raises(TokenExpiredError):
        codec.verify(token)


@pytest.mark.parametrize("token", ["", "   "])
def test_blank_token_is_empty(token):
    with pytest.raises(TokenEmptyError):
        TokenCodec(SECRET).verify(token)


def test_garbage_token_is_malformed():
    with pytest.raises(TokenMalformedError):
        TokenCodec(SECRET).verify("not.a.jwt")


def test_wrong_secret_is_malformed():
    token = TokenCodec("another-secret").issue("user-1", "a@x.com")
    with pytest.raises(TokenMalformedError):
        TokenCodec(SECRET).verify(token)


def test_tampered_payload_is_malformed():
    token = TokenCodec(SECRET).issue("user-1", "a@x.com")
    forged = TokenCodec("attacker").issue("user-2", "b@x.com")
    header, _, signature = token.split(".")
    _, forged_payload, _ = forged.split(".")
    with pytest.raises(TokenMalformedError):
        TokenCodec(SECRET).verify(f"{header}.{forged_payload}.{signature}")


def test_unexpected_algorithm_is_rejected():
    token = TokenCodec(SECRET, algorithm="HS512").issue("user-1", "a@x.com")
    with pytest.raises(SigningMethodMismatchError):
        TokenCodec(SECRET, algorithm="HS256").verify(token)


def test_missing_claims_are_malformed():
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    without_email = jwt.encode({"sub": "user-1", "exp": exp}, SECRET, algorithm="HS256")
    without_exp = jwt.encode({"sub": "user-1", "email": "a@x.com"}, SECRET, algorithm="HS256")

    with pytest.raises(TokenMalformedError):
        TokenCodec(SECRET).verify(without_email)
    with pytest.raises(TokenMalformedError):
        TokenCodec(SECRET).verify(without_exp)
