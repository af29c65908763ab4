import logging
from typing import Optional

import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigError, SnipeITAPIError

logger = logging.getLogger(__name__)


class SnipeITClient:
    """
    Read-only Snipe-IT client used to turn an asset tag into a serial number.

    Notifications in the Slack format only carry the asset tag, while Jamf
    correlates devices by serial.
    """

    HARDWARE_PATH = "/api/v1/hardware"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.SNIPEIT_URL.rstrip("/")
        self.api_token = self.settings.SNIPEIT_API_TOKEN
        self.timeout = self.settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    def _get_headers(self):
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Accept": "application/json",
        }

    async def resolve_serial(self, asset_tag: str) -> Optional[str]:
        """
        Look up the serial number of the asset with exactly this tag

        A search can return several assets whose tags merely contain the
        query; only an exact tag match is accepted.

        Returns:
            The serial, or None when no asset carries exactly this tag

        Raises:
            ConfigError: SNIPEIT_URL or SNIPEIT_API_TOKEN is missing
            SnipeITAPIError: the search request failed
        """
        if not (self.base_url and self.api_token):
            raise ConfigError("SNIPEIT_URL and SNIPEIT_API_TOKEN are required to resolve asset tags")

        url = f"{self.base_url}{self.HARDWARE_PATH}"
        logger.debug(f"Searching Snipe-IT hardware for tag {asset_tag}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=self._get_headers(), params={"search": asset_tag})
        except httpx.RequestError as e:
            logger.error(f"Network error searching Snipe-IT: {str(e)}")
            raise SnipeITAPIError(f"Network error searching Snipe-IT for tag {asset_tag}: {str(e)}")

        if response.status_code != 200:
            logger.error(f"Snipe-IT search failed ({response.status_code}): {response.text}")
            raise SnipeITAPIError(
                f"Snipe-IT search for tag {asset_tag} returned {response.status_code}: {response.text}"
            )

        try:
            rows = response.json().get("rows") or []
        except (ValueError, AttributeError):
            raise SnipeITAPIError(f"Snipe-IT search for tag {asset_tag} returned an unreadable body")

        wanted = asset_tag.strip()
        for row in rows:
            if str(row.get("asset_tag") or "").strip() == wanted:
                serial = str(row.get("serial") or "").strip()
                if serial:
                    return serial
                logger.warning(f"Snipe-IT asset {wanted} has no serial number")
                return None

        logger.info(f"No Snipe-IT asset with tag {wanted} among {len(rows)} search results")
        return None
