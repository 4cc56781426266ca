from datetime import timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from feedback_api.auth import create_access_token, decode_access_token, require_user
from feedback_api.errors import Forbidden, Unauthorized


@pytest.fixture(autouse=True)
def _secret(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")


def test_token_roundtrip():
    claims = decode_access_token(create_access_token("admin"))
    assert claims["sub"] == "admin"


def test_token_signed_with_other_secret_is_rejected(monkeypatch):
    token = create_access_token("admin")
    monkeypatch.setenv("SECRET_KEY", "rotated")
    assert decode_access_token(token) is None


def test_expired_token_is_rejected():
    token = create_access_token("admin", expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None


def test_jwt_secret_alias(monkeypatch):
    monkeypatch.delenv("SECRET_KEY")
    monkeypatch.setenv("JWT_SECRET", "legacy")
    token = create_access_token("ops")
    monkeypatch.setenv("SECRET_KEY", "legacy")
    assert decode_access_token(token)["sub"] == "ops"


def test_require_user_without_credentials():
    with pytest.raises(Unauthorized):
        require_user(None)


def test_require_user_with_garbage_token():
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage")
    with pytest.raises(Forbidden):
        require_user(creds)


def test_require_user_returns_claims():
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token("admin"))
    assert require_user(creds)["sub"] == "admin"
