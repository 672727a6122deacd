"""
Security Test Suite: JWT Authentication

Tests that the JWT verification in dependencies.py correctly:
- Rejects missing Authorization headers
- Rejects malformed, expired and wrongly signed tokens
- Accepts properly signed HS256 tokens when JWKS is unavailable
"""

import time
from unittest.mock import patch

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from amy.api.dependencies import get_current_user_id
from amy.config.settings import get_settings


# ---------------------------------------------------------------------------
# Minimal app that uses the real dependency
# ---------------------------------------------------------------------------

test_app = FastAPI()


@test_app.get("/protected")
async def protected_endpoint(user_id: str = Depends(get_current_user_id)):
    return {"user_id": user_id}


client = TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(autouse=True)
def offline_jwks():
    """No JWKS endpoint in tests; verification falls through to HS256."""
    with patch(
        "amy.api.dependencies._decode_with_jwks",
        side_effect=jwt.exceptions.PyJWKClientError("JWKS unavailable"),
    ):
        yield


def _token(secret: str, **claims) -> str:
    settings = get_settings()
    payload = {
        "sub": "user_2abc123",
        "aud": "authenticated",
        "iss": f"{settings.supabase_url}/auth/v1",
        "exp": int(time.time()) + 3600,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


# ---------------------------------------------------------------------------
# Tests: rejection scenarios
# ---------------------------------------------------------------------------


class TestJWTRejection:
    """Verify that invalid/missing JWTs are rejected with 401."""

    def test_no_auth_header(self):
        resp = client.get("/protected")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Unauthorized"

    def test_malformed_scheme(self):
        resp = client.get("/protected", headers={"Authorization": "Basic abc123"})
        assert resp.status_code == 401

    def test_garbage_token(self):
        resp = client.get("/protected", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401

    def test_wrong_secret(self):
        token = _token("some-other-secret-that-is-long-enough-1234")
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_expired_token(self):
        token = _token(get_settings().supabase_jwt_secret, exp=int(time.time()) - 60)
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has expired"

    def test_wrong_audience(self):
        token = _token(get_settings().supabase_jwt_secret, aud="anon")
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_raw_user_id_rejected(self):
        resp = client.get("/protected", headers={"Authorization": "Bearer user_2abc123"})
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Tests: acceptance
# ---------------------------------------------------------------------------


class TestJWTAcceptance:

    def test_valid_hs256_token(self):
        token = _token(get_settings().supabase_jwt_secret)
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["user_id"] == "user_2abc123"
