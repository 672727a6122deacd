"""
Resend Webhook Handler

Receives delivery events for sent emails. The payload is only logged; the
signature check keeps unauthenticated callers out.

Events:
- email.sent / email.delivered / email.opened / email.clicked: informational
- email.bounced / email.complained: logged as warnings
"""

import hashlib
import hmac
import json
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status

from amy.config.settings import get_settings


logger = logging.getLogger(__name__)

router = APIRouter()

WARNING_EVENTS = {"email.bounced", "email.complained"}
INFO_EVENTS = {"email.sent", "email.delivered", "email.opened", "email.clicked"}


def _signature_hash(header: str) -> Optional[str]:
    """The ``v1=`` digest from a comma-separated signature header."""
    for part in header.split(","):
        part = part.strip()
        if part.startswith("v1="):
            return part[3:]
    return None


def verify_resend_signature(payload: bytes, header: str, secret: str) -> bool:
    expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    received = _signature_hash(header)
    return received is not None and hmac.compare_digest(received, expected)


@router.post("/webhooks/resend")
async def resend_webhook(request: Request):
    """
    Handle Resend delivery events.

    Raises:
        HTTPException 400: missing signature header or malformed body
        HTTPException 401: signature mismatch
        HTTPException 500: webhook secret not configured
    """
    signature = request.headers.get("resend-signature")
    if not signature:
        logger.error("Missing Resend signature header")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing signature")

    secret = get_settings().resend_webhook_secret
    if not secret:
        logger.error("RESEND_WEBHOOK_SECRET is not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook secret not configured",
        )

    body = await request.body()
    if not verify_resend_signature(body, signature, secret):
        logger.error("Invalid Resend webhook signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        payload = None
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

    event_type = payload.get("type")
    data = payload.get("data") or {}
    email_id = data.get("email_id") or payload.get("email_id")

    if not email_id:
        logger.warning(f"No email ID found in Resend webhook payload ({event_type})")
        return {"received": True}

    if event_type in WARNING_EVENTS:
        logger.warning(f"Email {email_id} {event_type}")
    elif event_type in INFO_EVENTS:
        logger.info(f"Email {email_id} {event_type}")
    else:
        logger.info(f"Unhandled Resend event type: {event_type}")

    return {"received": True}
