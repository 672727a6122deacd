"""
Supabase User Directory

Resolves an owner id to the contact details used for notification email,
via the Supabase auth admin API (service-role key).
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from amy.config.settings import settings
from amy.infrastructure.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserDetails:
    email: Optional[str]
    first_name: Optional[str] = None


class SupabaseUserDirectory:
    """
    Looks up users by id.

    The Supabase client is created lazily on first lookup so the API can start
    without identity credentials in development.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not settings.supabase_url or not settings.supabase_service_role_key:
                raise ConfigurationError(
                    "Missing Supabase configuration",
                    missing_keys=["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"],
                )
            options = ClientOptions(auto_refresh_token=False, persist_session=False)
            self._client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options,
            )
        return self._client

    async def get_user_details(self, user_id: str) -> Optional[UserDetails]:
        """
        Contact details for a user.

        Returns:
            UserDetails, or None when the lookup fails
        """
        try:
            response = await asyncio.to_thread(
                lambda: self.client.auth.admin.get_user_by_id(user_id)
            )
        except Exception as e:
            logger.error(f"Error fetching user details for {user_id}: {e}")
            return None

        user = getattr(response, "user", None)
        if user is None:
            return None

        metadata = user.user_metadata or {}
        first_name = (
            metadata.get("first_name")
            or metadata.get("given_name")
            or (metadata.get("full_name") or metadata.get("name") or "").split(" ")[0]
            or None
        )
        return UserDetails(email=user.email, first_name=first_name)
