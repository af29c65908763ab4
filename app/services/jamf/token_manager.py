"""
In-memory bearer token storage for the Jamf Pro API
Tokens are never persisted to disk
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: datetime


class TokenCache:
    """
    Single-slot token cache.

    A stored token is handed out only while now < expires_at - safety_margin.
    One instance is owned by the auth manager; nothing else writes to it.
    """

    def __init__(
        self,
        safety_margin: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.safety_margin = safety_margin
        self.clock = clock
        self._credential: Optional[Credential] = None

    def get_valid_token(self) -> Optional[str]:
        """Return the cached token if it is outside the safety margin"""
        credential = self._credential
        if credential is None:
            return None

        if self.clock() < credential.expires_at - self.safety_margin:
            logger.debug(f"Returning valid access token from memory (expires: {credential.expires_at})")
            return credential.token

        logger.debug("Access token expired or expiring soon")
        return None

    def store(self, token: str, expires_at: datetime) -> Credential:
        """Replace the cached credential"""
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        self._credential = Credential(token=token, expires_at=expires_at)
        logger.info(f"Saved access token to memory (expires: {expires_at})")
        return self._credential

    def clear(self):
        """Drop the cached credential"""
        if self._credential is not None:
            self._credential = None
            logger.info("Cleared access token from memory")

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._credential.expires_at if self._credential else None
