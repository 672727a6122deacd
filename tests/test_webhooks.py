"""
Integration Tests for Webhooks (Resend)

Verifies:
- Missing signature header (400)
- Signature mismatch (401)
- Malformed body (400)
- Successful event handling
"""

import hashlib
import hmac
import json

import pytest

from amy.api.routes.webhooks import verify_resend_signature
from amy.config.settings import get_settings


def _sign(body: bytes) -> str:
    secret = get_settings().resend_webhook_secret
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"t=1760000000,v1={digest}"


class TestResendWebhooks:

    def test_webhook_missing_signature(self, client):
        response = client.post("/api/webhooks/resend", json={"type": "email.sent"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing signature"

    def test_webhook_invalid_signature(self, client):
        response = client.post(
            "/api/webhooks/resend",
            json={"type": "email.sent"},
            headers={"resend-signature": "v1=deadbeef"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid signature"

    def test_webhook_malformed_body(self, client):
        body = b"not json"
        response = client.post(
            "/api/webhooks/resend",
            content=body,
            headers={"resend-signature": _sign(body)},
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("event_type", ["email.delivered", "email.bounced", "email.unknown"])
    def test_webhook_success(self, client, event_type):
        body = json.dumps({"type": event_type, "data": {"email_id": "em_123"}}).encode()
        response = client.post(
            "/api/webhooks/resend",
            content=body,
            headers={"resend-signature": _sign(body), "content-type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_webhook_without_email_id_is_acknowledged(self, client):
        body = json.dumps({"type": "email.sent", "data": {}}).encode()
        response = client.post(
            "/api/webhooks/resend",
            content=body,
            headers={"resend-signature": _sign(body)},
        )
        assert response.status_code == 200


class TestSignature:

    def test_verify(self):
        body = b'{"type":"email.sent"}'
        digest = hmac.new(b"secret", body, hashlib.sha256).hexdigest()

        assert verify_resend_signature(body, f"v1={digest}", "secret")
        assert verify_resend_signature(body, f"t=1, v1={digest}", "secret")
        assert not verify_resend_signature(body, f"v1={digest}", "other")
        assert not verify_resend_signature(body, digest, "secret")
