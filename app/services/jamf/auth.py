"""
Jamf Pro authentication using secure in-memory token storage
No tokens are ever saved to files - only stored in memory
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

import httpx
from pydantic import TypeAdapter, ValidationError

from app.core.config import Settings, get_settings
from app.core.exceptions import AuthConfigError, AuthFetchError
from .token_manager import TokenCache

logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(datetime)


class JamfAuthManager:
    """
    Issues bearer tokens for the Jamf Pro API.

    Tokens are cached until they are within the safety margin of expiry, so
    most calls cost no network round trip. Refresh is lazy and on demand:
    there is no background renewal. Two credential modes are supported:

    - API client (JAMF_CLIENT_ID / JAMF_CLIENT_SECRET): client-credentials
      grant against /api/oauth/token. Used when configured.
    - Basic (JAMF_USERNAME / JAMF_PASSWORD): /api/v1/auth/token.
    """

    BASIC_TOKEN_PATH = "/api/v1/auth/token"
    CLIENT_TOKEN_PATH = "/api/oauth/token"
    DEFAULT_TOKEN_LIFETIME = timedelta(minutes=20)

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_cache: Optional[TokenCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.JAMF_URL.rstrip("/")
        self.timeout = self.settings.HTTP_TIMEOUT_SECONDS
        self.token_cache = token_cache or TokenCache(
            safety_margin=timedelta(seconds=self.settings.JAMF_TOKEN_SAFETY_MARGIN_SECONDS)
        )
        self._transport = transport
        self._refresh_lock = asyncio.Lock()

        logger.debug(f"JamfAuthManager initialized for {self.base_url or '<unconfigured>'}")

    @property
    def uses_api_client(self) -> bool:
        return bool(self.settings.JAMF_CLIENT_ID and self.settings.JAMF_CLIENT_SECRET)

    def _check_config(self):
        if not self.base_url:
            raise AuthConfigError("JAMF_URL is not configured")
        if self.uses_api_client:
            return
        if not (self.settings.JAMF_USERNAME and self.settings.JAMF_PASSWORD):
            raise AuthConfigError(
                "Missing Jamf credentials: set JAMF_CLIENT_ID/JAMF_CLIENT_SECRET "
                "or JAMF_USERNAME/JAMF_PASSWORD"
            )

    async def get_token(self) -> str:
        """
        Get a valid bearer token, refreshing if necessary
        """
        self._check_config()

        token = self.token_cache.get_valid_token()
        if token:
            logger.debug("Using cached access token from memory")
            return token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            token = self.token_cache.get_valid_token()
            if token:
                return token

            logger.info("No valid access token in memory, refreshing...")
            token, expires_at = await self._fetch_token()
            self.token_cache.store(token, expires_at)
            logger.info("Successfully refreshed access token")
            return token

    def reset_token(self):
        """Forget the cached token; the next call fetches a new one"""
        self.token_cache.clear()

    async def _fetch_token(self) -> Tuple[str, datetime]:
        if self.uses_api_client:
            url = f"{self.base_url}{self.CLIENT_TOKEN_PATH}"
            request_kwargs = {
                "data": {
                    "grant_type": "client_credentials",
                    "client_id": self.settings.JAMF_CLIENT_ID,
                    "client_secret": self.settings.JAMF_CLIENT_SECRET,
                },
            }
        else:
            url = f"{self.base_url}{self.BASIC_TOKEN_PATH}"
            request_kwargs = {
                "auth": httpx.BasicAuth(self.settings.JAMF_USERNAME, self.settings.JAMF_PASSWORD),
            }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    headers={"Accept": "application/json"},
                    **request_kwargs
                )
        except httpx.RequestError as e:
            logger.error(f"Network error refreshing token: {str(e)}")
            raise AuthFetchError(f"Network error refreshing access token: {str(e)}")

        if response.status_code != 200:
            logger.error(f"Token refresh failed ({response.status_code}): {response.text}")
            raise AuthFetchError(
                f"Token endpoint returned {response.status_code}: {response.text}"
            )

        try:
            token_data = response.json()
        except ValueError:
            raise AuthFetchError("Token endpoint returned a non-JSON body")

        return self._parse_token_response(token_data)

    def _parse_token_response(self, token_data: dict) -> Tuple[str, datetime]:
        now = self.token_cache.clock()

        if self.uses_api_client:
            token = token_data.get("access_token")
            expires_in = token_data.get("expires_in")
            if expires_in is None:
                expires_at = now + self.DEFAULT_TOKEN_LIFETIME
            else:
                try:
                    expires_at = now + timedelta(seconds=int(expires_in))
                except (TypeError, ValueError):
                    raise AuthFetchError(f"Token endpoint returned an invalid expires_in: {expires_in}")
        else:
            token = token_data.get("token")
            expires = token_data.get("expires")
            if expires:
                try:
                    expires_at = _datetime_adapter.validate_python(expires)
                except ValidationError:
                    raise AuthFetchError(f"Token endpoint returned an invalid expiry: {expires}")
            else:
                logger.warning("Token response carried no expiry, assuming default lifetime")
                expires_at = now + self.DEFAULT_TOKEN_LIFETIME

        if not token:
            raise AuthFetchError("Token endpoint response did not include a token")

        return token, expires_at
