"""
Resend Email Client

Thin async wrapper over the Resend REST API. Built once at startup and
injected into the notification service; the shared HTTP client is closed by
the application lifespan.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx


logger = logging.getLogger(__name__)


@dataclass
class EmailSendResult:
    """Mirror of the provider's ``{data} | {error}`` reply."""
    data: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ResendEmailClient:
    """
    Sends email through ``POST /emails``.

    Transport and provider failures are returned as ``error`` rather than
    raised, so callers decide whether a failed send matters.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.resend.com",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def send(
        self,
        *,
        from_address: str,
        to: Union[str, List[str]],
        subject: str,
        html: str,
    ) -> EmailSendResult:
        if not self._api_key:
            return EmailSendResult(error={"name": "missing_api_key", "message": "RESEND_API_KEY is not set"})

        payload = {
            "from": from_address,
            "to": [to] if isinstance(to, str) else to,
            "subject": subject,
            "html": html,
        }
        try:
            response = await self._client.post(
                f"{self._base_url}/emails",
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed: {e}")
            return EmailSendResult(error={"name": "transport_error", "message": str(e)})

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"message": response.text}
            return EmailSendResult(error={"status_code": response.status_code, **body})

        return EmailSendResult(data=response.json())

    async def aclose(self) -> None:
        await self._client.aclose()
