"""Guest authorization operations (hotspot ``stamgr`` commands)."""

from typing import TYPE_CHECKING, List, Optional

import structlog
from pydantic import ValidationError

from unifi_client.exceptions import ApiError, ConfigurationError, SerializationError
from unifi_client.models import (
    DEFAULT_AP_MAC,
    AuthorizeGuestRequest,
    GuestEntry,
    UnauthorizeGuestRequest,
    parse_guest_entries,
)

from .endpoints import GUEST_COMMAND, GUEST_LIST

if TYPE_CHECKING:
    from .client import UnifiClient

logger = structlog.get_logger(__name__)


class GuestApi:
    """Authorize, list and revoke guest network access on the client's site."""

    def __init__(self, client: "UnifiClient") -> None:
        self._client = client

    async def authorize(
        self,
        mac: str,
        duration_minutes: Optional[int] = None,
        upload_speed_limit_kbps: Optional[int] = None,
        download_speed_limit_kbps: Optional[int] = None,
        data_quota_megabytes: Optional[int] = None,
        access_point_mac_address: str = DEFAULT_AP_MAC,
    ) -> GuestEntry:
        """Authorize a guest device.

        Args:
            mac: MAC address of the guest device.
            duration_minutes: Minutes until the authorization expires.
            upload_speed_limit_kbps: Upload limit in Kbps.
            download_speed_limit_kbps: Download limit in Kbps.
            data_quota_megabytes: Data transfer quota in MB.
            access_point_mac_address: AP the guest is connected to.

        Returns:
            The newly created authorization.

        Raises:
            ConfigurationError: ``mac`` is empty or a limit is negative.
            ApiError: The controller returned no authorization.
        """
        try:
            body = AuthorizeGuestRequest(
                mac=mac,
                minutes=duration_minutes,
                up=upload_speed_limit_kbps,
                down=download_speed_limit_kbps,
                bytes=data_quota_megabytes,
                ap_mac=access_point_mac_address,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid guest authorization: {e.errors()[0]['msg']}") from e

        data = await self._client.request_json(
            "POST",
            GUEST_COMMAND.format(site=self._client.site),
            json=body.to_payload(),
        )
        entries = _parse(data)
        if not entries:
            raise ApiError("No authorize guest response received")

        logger.info("guest_authorized", mac=body.mac, minutes=body.minutes, site=self._client.site)
        return entries[0]

    async def list(self, within_hours: Optional[int] = None) -> List[GuestEntry]:
        """List guest authorizations, optionally only those from the last N hours."""
        body = {"within": within_hours} if within_hours is not None else None
        data = await self._client.request_json(
            "GET",
            GUEST_LIST.format(site=self._client.site),
            json=body,
        )
        guests = _parse(data)
        logger.debug("guests_retrieved", count=len(guests), site=self._client.site)
        return guests

    async def unauthorize(self, mac: str) -> None:
        """Revoke a guest's network access."""
        try:
            body = UnauthorizeGuestRequest(mac=mac)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid guest MAC address: {e.errors()[0]['msg']}") from e

        await self._client.request_json(
            "POST",
            GUEST_COMMAND.format(site=self._client.site),
            json=body.to_payload(),
            require_data=False,
        )
        logger.info("guest_unauthorized", mac=body.mac, site=self._client.site)

    async def unauthorize_all(self) -> int:
        """Revoke every listed guest authorization.

        Returns:
            Number of guests unauthorized.
        """
        guests = await self.list()
        for guest in guests:
            await self.unauthorize(guest.mac)
        return len(guests)


def _parse(data: object) -> List[GuestEntry]:
    try:
        return parse_guest_entries(data)
    except ValidationError as e:
        raise SerializationError(f"Unexpected guest entry shape: {e.errors()[0]['msg']}") from e
