from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.errors import AuthError
from app.services.auth_service import create_access_token, decode_access_token


def test_access_token_round_trip_returns_subject():
    token = create_access_token("user-123")
    assert decode_access_token(token) == "user-123"


def test_expired_token_is_rejected():
    token = create_access_token("user-123", expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthError) as excinfo:
        decode_access_token(token)
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Invalid authentication token"


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode({"sub": "user-123", "aud": "authenticated"}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthError):
        decode_access_token(token)


def test_token_for_other_audience_is_rejected():
    token = jwt.encode(
        {"sub": "user-123", "aud": "anon"},
        settings.AUTH_JWT_SECRET,
        algorithm=settings.AUTH_JWT_ALGORITHM,
    )
    with pytest.raises(AuthError):
        decode_access_token(token)


def test_token_without_subject_is_rejected():
    token = jwt.encode(
        {"aud": "authenticated"},
        settings.AUTH_JWT_SECRET,
        algorithm=settings.AUTH_JWT_ALGORITHM,
    )
    with pytest.raises(AuthError):
        decode_access_token(token)
