"""Password hashing, JWT round trip and request-id parsing."""

from datetime import timedelta

import pytest

from app.infrastructure.security.jwt import create_access_token, verify_token
from app.infrastructure.security.password import get_password_hash, verify_password
from app.middleware.request_id import resolve_request_id


def test_password_hash_verifies() -> None:
    hashed = get_password_hash("correct horse battery staple")
    assert hashed != "correct horse battery staple"
    assert verify_password("correct horse battery staple", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_long_passwords_are_not_truncated() -> None:
    base = "a" * 80
    hashed = get_password_hash(base + "1")
    assert verify_password(base + "2", hashed) is False


def test_verify_password_rejects_garbage_hash() -> None:
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_token_round_trip() -> None:
    token = create_access_token({"sub": "u-1"})
    payload = verify_token(token)
    assert payload["sub"] == "u-1"
    assert "exp" in payload


def test_expired_token_is_rejected() -> None:
    token = create_access_token({"sub": "u-1"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError):
        verify_token(token)


def test_tampered_token_is_rejected() -> None:
    token = create_access_token({"sub": "u-1"})
    with pytest.raises(ValueError):
        verify_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1])


@pytest.mark.parametrize(
    ("raw", "kept"),
    [("abc-123_X", True), ("", False), (None, False), ("bad id!", False), ("x" * 65, False)],
)
def test_resolve_request_id(raw: str | None, kept: bool) -> None:
    resolved = resolve_request_id(raw)
    assert (resolved == raw) is kept
    assert 1 <= len(resolved) <= 64
