"""Site listing, lookup, management and health statistics."""

from typing import TYPE_CHECKING, Any, Dict, List

import structlog
from pydantic import TypeAdapter, ValidationError

from unifi_client.exceptions import ApiError, SerializationError, SiteNotFoundError
from unifi_client.models import Site, SiteStats

from .endpoints import SELF_SITES, SITE_COMMAND, SITE_HEALTH

if TYPE_CHECKING:
    from .client import UnifiClient

logger = structlog.get_logger(__name__)

_site_list_adapter = TypeAdapter(List[Site])
_site_stats_adapter = TypeAdapter(List[SiteStats])


class SiteApi:
    """Operations on the sites visible to the logged-in admin.

    Site management commands (create, update, delete) are issued in the
    context of the client's current site.
    """

    def __init__(self, client: "UnifiClient") -> None:
        self._client = client

    async def list(self) -> List[Site]:
        data = await self._client.request_json("GET", SELF_SITES)
        try:
            sites = _site_list_adapter.validate_python(data)
        except ValidationError as e:
            raise SerializationError(f"Unexpected site shape: {e.errors()[0]['msg']}") from e
        logger.debug("sites_retrieved", count=len(sites))
        return sites

    async def get(self, site_id: str) -> Site:
        """Find a site by its ``_id``.

        Raises:
            SiteNotFoundError: No visible site has that id.
        """
        sites = await self.list()
        for site in sites:
            if site.id == site_id:
                return site
        raise SiteNotFoundError(site_id, available_sites=[s.name for s in sites])

    async def get_by_name(self, name: str) -> Site:
        """Find a site by short name or description.

        Raises:
            SiteNotFoundError: No visible site matches.
        """
        sites = await self.list()
        for site in sites:
            if site.name == name or site.desc == name:
                return site
        raise SiteNotFoundError(name, available_sites=[s.name for s in sites])

    async def create(self, name: str, description: str) -> Site:
        """Create a site and return it as listed by the controller."""
        await self._command({"cmd": "add-site", "name": name, "desc": description})
        logger.info("site_created", name=name)
        return await self.get_by_name(name)

    async def update(self, site_id: str, description: str) -> Site:
        """Change a site's description.

        Raises:
            SiteNotFoundError: The site does not exist.
        """
        await self.get(site_id)
        await self._command({"cmd": "update-site", "site_id": site_id, "desc": description})
        logger.info("site_updated", site_id=site_id)
        return await self.get(site_id)

    async def delete(self, site_id: str) -> None:
        """Delete a site.

        Raises:
            SiteNotFoundError: The site does not exist.
        """
        await self.get(site_id)
        await self._command({"cmd": "delete-site", "site_id": site_id})
        logger.info("site_deleted", site_id=site_id)

    async def stats(self) -> SiteStats:
        """Health statistics for the client's current site.

        Raises:
            ApiError: The controller returned no statistics.
        """
        data = await self._client.request_json("GET", SITE_HEALTH.format(site=self._client.site))
        try:
            stats = _site_stats_adapter.validate_python(data)
        except ValidationError as e:
            raise SerializationError(f"Unexpected site statistics: {e.errors()[0]['msg']}") from e
        if not stats:
            raise ApiError("No site statistics available")
        return stats[0]

    def set_as_default(self, site: Site) -> "UnifiClient":
        """Return a client handle operating on ``site``, sharing the session."""
        return self._client.clone(site=site.name)

    async def _command(self, body: Dict[str, Any]) -> None:
        await self._client.request_json(
            "POST",
            SITE_COMMAND.format(site=self._client.site),
            json=body,
            require_data=False,
        )
