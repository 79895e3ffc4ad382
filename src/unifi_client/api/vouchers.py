"""Hotspot voucher operations."""

from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from unifi_client.exceptions import ConfigurationError, SerializationError
from unifi_client.models import CreateVoucherRequest, CreateVoucherResponse, Voucher

from .endpoints import HOTSPOT_COMMAND, VOUCHER_LIST

if TYPE_CHECKING:
    from .client import UnifiClient

logger = structlog.get_logger(__name__)

_voucher_list_adapter = TypeAdapter(List[Voucher])
_create_response_adapter = TypeAdapter(List[CreateVoucherResponse])


class VoucherApi:
    """Create, list and delete hotspot vouchers on the client's site."""

    def __init__(self, client: "UnifiClient") -> None:
        self._client = client

    async def create(
        self,
        count: int,
        minutes: int,
        note: Optional[str] = None,
        up: Optional[int] = None,
        down: Optional[int] = None,
        mb_quota: Optional[int] = None,
        quota: Optional[int] = None,
    ) -> List[Voucher]:
        """Create a batch of vouchers.

        Args:
            count: Number of vouchers to create.
            minutes: Validity after first use, in minutes.
            note: Optional note stored with each voucher.
            up: Upload limit in Kbps.
            down: Download limit in Kbps.
            mb_quota: Data quota in megabytes.
            quota: Allowed uses per voucher (0 = unlimited, 1 = single use).

        Returns:
            The vouchers of the new batch. If the controller does not report
            the batch's creation time, every voucher on the site is returned.

        Raises:
            ConfigurationError: A count, duration or limit is out of range.
        """
        try:
            body = CreateVoucherRequest.build(
                count=count,
                minutes=minutes,
                note=note,
                up=up,
                down=down,
                mb_quota=mb_quota,
                quota=quota,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid voucher request: {e.errors()[0]['msg']}") from e

        data = await self._client.request_json(
            "POST",
            HOTSPOT_COMMAND.format(site=self._client.site),
            json=body.to_payload(),
            require_data=False,
        )
        create_time = _batch_create_time(data)

        logger.info(
            "vouchers_created",
            count=count,
            minutes=minutes,
            create_time=create_time,
            site=self._client.site,
        )

        if create_time is None:
            return await self.list()
        return await self.get_by_create_time(create_time)

    async def list(self) -> List[Voucher]:
        data = await self._client.request_json(
            "GET",
            VOUCHER_LIST.format(site=self._client.site),
        )
        try:
            vouchers = _voucher_list_adapter.validate_python(data)
        except ValidationError as e:
            raise SerializationError(f"Unexpected voucher shape: {e.errors()[0]['msg']}") from e
        logger.debug("vouchers_retrieved", count=len(vouchers), site=self._client.site)
        return vouchers

    async def get_by_create_time(self, create_time: int) -> List[Voucher]:
        """Return the vouchers created at ``create_time`` (one batch)."""
        return [v for v in await self.list() if v.create_time == create_time]

    async def delete(self, voucher_id: str) -> None:
        await self._client.request_json(
            "POST",
            HOTSPOT_COMMAND.format(site=self._client.site),
            json={"cmd": "delete-voucher", "_id": voucher_id},
            require_data=False,
        )
        logger.info("voucher_deleted", voucher_id=voucher_id, site=self._client.site)

    async def delete_all(self) -> int:
        """Delete every voucher on the site.

        Returns:
            Number of vouchers deleted.
        """
        vouchers = await self.list()
        for voucher in vouchers:
            await self.delete(voucher.id)
        return len(vouchers)


def _batch_create_time(data: Any) -> Optional[int]:
    if not data:
        return None
    try:
        entries = _create_response_adapter.validate_python(data)
    except ValidationError:
        logger.debug("voucher_create_response_unrecognized")
        return None
    return entries[0].create_time if entries else None
