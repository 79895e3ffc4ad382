"""API endpoint definitions for the two UniFi controller kinds.

UniFi controllers have different API structures depending on kind:
- UniFi OS consoles (UDM, UCG, Cloud Key Gen2+): /api/auth/login, /proxy/network prefix
- Network application (self-hosted): /api/login, no prefix
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List

import httpx

from unifi_client.models import ControllerKind

from unifi_client.exceptions import InvalidEndpointError


@dataclass(frozen=True)
class Endpoints:
    """Collection of per-kind API paths.

    Attributes:
        login: Authentication endpoint (POST)
        logout: Logout endpoint (POST)
        api_prefix: Prefix in front of every Network API path
        reauth_statuses: HTTP statuses that mean the session is no longer valid
    """

    login: str
    logout: str
    api_prefix: str
    reauth_statuses: FrozenSet[int]


# Network answers an expired session with 401 only. UniFi OS also answers
# 403 when the CSRF token no longer matches the session.
OS_ENDPOINTS = Endpoints(
    login="/api/auth/login",
    logout="/api/auth/logout",
    api_prefix="/proxy/network",
    reauth_statuses=frozenset({401, 403}),
)

NETWORK_ENDPOINTS = Endpoints(
    login="/api/login",
    logout="/api/logout",
    api_prefix="",
    reauth_statuses=frozenset({401}),
)

ENDPOINTS_BY_KIND: Dict[ControllerKind, Endpoints] = {
    ControllerKind.OS: OS_ENDPOINTS,
    ControllerKind.NETWORK: NETWORK_ENDPOINTS,
}

# Resource paths, relative to the API base
SELF_SITES = "/api/self/sites"
GUEST_COMMAND = "/api/s/{site}/cmd/stamgr"
GUEST_LIST = "/api/s/{site}/stat/guest"
HOTSPOT_COMMAND = "/api/s/{site}/cmd/hotspot"
VOUCHER_LIST = "/api/s/{site}/stat/voucher"
SITE_COMMAND = "/api/s/{site}/cmd/sitemgr"
SITE_HEALTH = "/api/s/{site}/stat/health"


def get_endpoints(kind: ControllerKind) -> Endpoints:
    """Get the API endpoints for a controller kind.

    Args:
        kind: The detected controller kind.

    Returns:
        Endpoints for that kind.
    """
    return ENDPOINTS_BY_KIND[kind]


def is_reauth_status(kind: ControllerKind, status_code: int) -> bool:
    """Return True if ``status_code`` means the session must be renewed."""
    return status_code in ENDPOINTS_BY_KIND[kind].reauth_statuses


def _segments(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def join_url(base_url: str, *paths: str) -> str:
    """Join path fragments onto a base URL segment by segment.

    Empty segments are dropped, so repeated or trailing slashes in any
    fragment never produce ``//`` in the result. The base URL's own path is
    kept in front.

    Args:
        base_url: Absolute controller URL, possibly with a path.
        *paths: Path fragments to append. Must not carry a query or fragment.

    Returns:
        The absolute URL as a string.

    Raises:
        InvalidEndpointError: A fragment contains ``?`` or ``#``.

    Example:
        >>> join_url("https://unifi:8443/", "/proxy/network", "//api/self//")
        'https://unifi:8443/proxy/network/api/self'
    """
    for path in paths:
        if "?" in path or "#" in path:
            raise InvalidEndpointError(path)

    url = httpx.URL(base_url)
    segments = _segments(url.path)
    for path in paths:
        segments.extend(_segments(path))
    return str(url.copy_with(path="/" + "/".join(segments)))
