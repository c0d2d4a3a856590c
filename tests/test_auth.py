"""Tests for JWT handling and the static admin accounts."""

from datetime import timedelta

import jwt
import pytest

from app.core.auth_service import AuthService
from app.core.exceptions import AuthenticationException
from app.core.security import JWTHandler, PasswordHandler
from app.schemas.auth import LoginResponse

ADMIN = {"id": "admin1", "email": "admin@trelax.com", "role": "admin"}


def test_token_roundtrip():
    token = JWTHandler.create_access_token(ADMIN)

    payload = JWTHandler.verify_token(token)

    assert payload["sub"] == "admin1"
    assert payload["email"] == "admin@trelax.com"
    assert payload["role"] == "admin"


def test_expired_token_rejected():
    token = JWTHandler.create_access_token(ADMIN, expires_delta=timedelta(seconds=-5))

    with pytest.raises(AuthenticationException) as exc_info:
        JWTHandler.verify_token(token)

    assert exc_info.value.message == "Token has expired"


@pytest.mark.parametrize("token", [
    jwt.encode({"sub": "admin1"}, "some-other-secret", algorithm="HS256"),
    "not.a.token",
])
def test_invalid_token_rejected(token):
    with pytest.raises(AuthenticationException) as exc_info:
        JWTHandler.verify_token(token)

    assert exc_info.value.message == "Invalid token"
    assert exc_info.value.status_code == 401


def test_password_hashing():
    hashed = PasswordHandler.hash_password("s3cret")

    assert hashed != "s3cret"
    assert PasswordHandler.verify_password("s3cret", hashed)
    assert not PasswordHandler.verify_password("wrong", hashed)


def test_login_success():
    result = AuthService.login("Admin@Trelax.com", "admin123")

    assert result["user"]["id"] == "admin1"
    assert result["tokens"]["token_type"] == "bearer"
    assert AuthService.resolve_token(result["tokens"]["access_token"])["email"] == "admin@trelax.com"
    assert LoginResponse.model_validate(result).user.role == "admin"


@pytest.mark.parametrize("email, password", [
    ("admin@trelax.com", "wrong-password"),
    ("nobody@trelax.com", "admin123"),
])
def test_login_failure(email, password):
    with pytest.raises(AuthenticationException) as exc_info:
        AuthService.login(email, password)

    assert exc_info.value.message == "Invalid email or password"


def test_refresh_issues_token_for_same_admin():
    tokens = AuthService.refresh_token("admin2")

    profile = AuthService.resolve_token(tokens["access_token"])

    assert profile["email"] == "superadmin@trelax.com"
    assert profile["role"] == "super_admin"


def test_unknown_admin_subject_rejected():
    token = JWTHandler.create_access_token({"id": "ghost", "email": "ghost@trelax.com", "role": "admin"})

    with pytest.raises(AuthenticationException):
        AuthService.resolve_token(token)
