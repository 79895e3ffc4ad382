"""Async UniFi API client with controller detection and session recovery.

The UnifiClient provides a high-level interface to UniFi controllers. It
detects the controller kind, logs in, and keeps the session usable across
expiry and CSRF token rotation, even when many requests run concurrently.

Features:
- Automatic controller kind detection (Network application vs UniFi OS)
- Re-authentication on an expired session, shared by concurrent requests
- CSRF token tracking, including mid-session rotation
- Exponential backoff retry on connection failures while building
- Cookie-based session persistence

Example usage:
    from unifi_client import UnifiClient, UnifiSettings

    settings = UnifiSettings(
        controller_url="https://192.168.1.1", username="admin", password="secret"
    )

    async with await UnifiClient.build(settings) as client:
        guests = await client.guests().list()
        print(f"Found {len(guests)} guests")
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from unifi_client.config import UnifiSettings, build_settings
from unifi_client.exceptions import (
    ConfigurationError,
    HttpError,
    NotAuthenticatedError,
)
from unifi_client.models import ControllerKind

from .auth import (
    CSRF_HEADER,
    UPDATED_CSRF_HEADER,
    authenticate,
    detect_controller_kind,
    logout,
    validate_credentials,
)
from .endpoints import get_endpoints, join_url
from .envelope import unwrap_envelope
from .guests import GuestApi
from .session import ReauthCoordinator, SessionState, create_retry_decorator
from .sites import SiteApi
from .vouchers import VoucherApi

logger = structlog.get_logger(__name__)


class UnifiClient:
    """Client for interacting with the UniFi Controller API.

    Instances are created with :meth:`build` (or :meth:`create`), which
    probes the controller and logs in before returning. A built client is
    always authenticated; if the session later expires it is renewed
    transparently on the next request.

    Handles obtained through :meth:`clone` share the HTTP connection pool,
    cookie jar, session state and re-authentication coordinator with the
    client they were cloned from.

    Attributes:
        settings: UnifiSettings the client was built from.

    Example:
        async with await UnifiClient.build(settings) as client:
            vouchers = await client.vouchers().create(count=5, minutes=60)
    """

    def __init__(
        self,
        settings: UnifiSettings,
        http_client: httpx.AsyncClient,
        controller_kind: ControllerKind,
        session: Optional[SessionState] = None,
        coordinator: Optional[ReauthCoordinator] = None,
        owns_http_client: bool = True,
    ) -> None:
        """Initialize a client around an already-configured HTTP client.

        Prefer :meth:`build`; this constructor performs no network calls and
        leaves the session unauthenticated.
        """
        self.settings = settings
        self._http = http_client
        self._kind = controller_kind
        self._endpoints = get_endpoints(controller_kind)
        self._session = session if session is not None else SessionState()
        self._coordinator = (
            coordinator if coordinator is not None else ReauthCoordinator(self._session)
        )
        self._owns_http_client = owns_http_client
        self._closed = False

    @classmethod
    async def build(
        cls,
        settings: UnifiSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "UnifiClient":
        """Connect to a controller and return an authenticated client.

        Validates the credentials, detects the controller kind, and performs
        the initial login. Transient connection failures are retried with
        exponential backoff up to ``settings.max_retries`` attempts.

        Args:
            settings: Validated client configuration.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
                in tests.

        Returns:
            An authenticated UnifiClient.

        Raises:
            ConfigurationError: Username or password is empty.
            AuthenticationError: Login was rejected.
            HttpError: The controller could not be reached.
            SerializationError: Login response was malformed.
        """
        validate_credentials(settings.username, settings.password)

        http_client = httpx.AsyncClient(
            verify=settings.verify_ssl,
            timeout=settings.timeout,
            follow_redirects=False,
            headers={"User-Agent": settings.user_agent},
            transport=transport,
        )

        retry = create_retry_decorator(max_retries=settings.max_retries)
        try:
            return await retry(cls._connect)(settings, http_client)
        except BaseException:
            await http_client.aclose()
            raise

    @classmethod
    async def create(
        cls,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **settings_fields: Any,
    ) -> "UnifiClient":
        """Build a client from keyword settings merged with env and YAML sources.

        Raises:
            ConfigurationError: The settings do not validate.
        """
        return await cls.build(build_settings(**settings_fields), transport=transport)

    @classmethod
    async def _connect(
        cls,
        settings: UnifiSettings,
        http_client: httpx.AsyncClient,
    ) -> "UnifiClient":
        logger.info("connecting", controller_url=settings.controller_url)

        kind = await detect_controller_kind(
            http_client,
            settings.controller_url,
            timeout=settings.probe_timeout,
        )
        client = cls(settings, http_client, kind)
        await client.login()

        logger.info(
            "connected",
            controller_kind=kind.value,
            api_base_url=client.api_base_url,
            site=settings.site,
        )
        return client

    @property
    def controller_kind(self) -> ControllerKind:
        return self._kind

    @property
    def site(self) -> str:
        """Short name of the site resource handlers operate on."""
        return self.settings.site

    @property
    def epoch(self) -> int:
        """Number of successful logins on the shared session."""
        return self._session.epoch

    @property
    def api_base_url(self) -> str:
        """Controller URL with the kind-specific API prefix applied."""
        return join_url(self.settings.controller_url, self._endpoints.api_prefix)

    def api_url(self, endpoint: str) -> str:
        """Build the absolute URL for an API endpoint path.

        Raises:
            InvalidEndpointError: ``endpoint`` includes a query or fragment.
        """
        return join_url(self.settings.controller_url, self._endpoints.api_prefix, endpoint)

    async def login(self) -> None:
        """Log in with the configured credentials and commit the new session.

        Used for the initial login and for every re-authentication. The CSRF
        token is replaced (or cleared) and the session epoch advances.

        Raises:
            ConfigurationError: Username or password is empty.
            AuthenticationError: Login was rejected.
            HttpError: The login request could not be sent.
        """
        csrf_token = await authenticate(
            self._http,
            self.settings.controller_url,
            self._kind,
            self.settings.username,
            self.settings.password,
        )
        epoch = self._session.commit_login(csrf_token)
        logger.debug("session_committed", epoch=epoch)

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """Send an authenticated request, renewing the session once if needed.

        If the controller rejects the session (401, or 401/403 on UniFi OS),
        the client logs in again and retries exactly once. Concurrent
        requests that hit the same expired session share a single login.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API path relative to the API base, without query or fragment.
            json: Optional JSON body.

        Returns:
            The response. Statuses other than session rejections are returned
            unchanged for the caller to interpret.

        Raises:
            InvalidEndpointError: ``endpoint`` includes a query or fragment.
            NotAuthenticatedError: The retry was rejected as well.
            AuthenticationError: Re-authentication failed.
            HttpError: Transport failure.
        """
        url = self.api_url(endpoint)

        snapshot = self._session.snapshot()
        response = await self._send(method, url, json, snapshot.csrf_token)
        if response.status_code not in self._endpoints.reauth_statuses:
            return response

        logger.info(
            "session_rejected",
            method=method,
            path=response.request.url.path,
            status_code=response.status_code,
            epoch=snapshot.epoch,
        )
        await self._coordinator.dedupe_reauthenticate(self.login, observed_epoch=snapshot.epoch)

        snapshot = self._session.snapshot()
        response = await self._send(method, url, json, snapshot.csrf_token)
        if response.status_code in self._endpoints.reauth_statuses:
            raise NotAuthenticatedError(
                f"Request {method} {endpoint} rejected with status "
                f"{response.status_code} after re-authentication"
            )
        return response

    async def request_json(
        self,
        method: str,
        endpoint: str,
        json: Optional[Any] = None,
        *,
        require_data: bool = True,
    ) -> Any:
        """Send an authenticated request and return the envelope's ``data``.

        Raises:
            ApiError: Non-2xx status or an error envelope.
            SerializationError: Response body is not an envelope.
        """
        response = await self.request(method, endpoint, json=json)
        return unwrap_envelope(response, require_data=require_data)

    async def _send(
        self,
        method: str,
        url: str,
        json: Optional[Any],
        csrf_token: Optional[str],
    ) -> httpx.Response:
        headers: Dict[str, str] = {}
        if self._kind is ControllerKind.OS and csrf_token:
            headers[CSRF_HEADER] = csrf_token

        try:
            response = await self._http.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise HttpError(message=f"Request {method} {url} failed: {e}") from e

        # Rotation is honored on any status, before the status is interpreted
        rotated = response.headers.get(UPDATED_CSRF_HEADER)
        if rotated:
            self._session.rotate_csrf(rotated)
            logger.debug("csrf_token_rotated", status_code=response.status_code)

        logger.debug(
            "api_request",
            method=method,
            path=response.request.url.path,
            status_code=response.status_code,
        )
        return response

    def clone(self, site: Optional[str] = None) -> "UnifiClient":
        """Return a handle sharing this client's session, optionally for another site.

        Raises:
            ConfigurationError: ``site`` is empty.
        """
        settings = self.settings
        if site is not None:
            if not site.strip():
                raise ConfigurationError("Site cannot be empty")
            settings = settings.model_copy(update={"site": site.strip()})

        return UnifiClient(
            settings,
            self._http,
            self._kind,
            session=self._session,
            coordinator=self._coordinator,
            owns_http_client=False,
        )

    def guests(self) -> GuestApi:
        return GuestApi(self)

    def vouchers(self) -> VoucherApi:
        return VoucherApi(self)

    def sites(self) -> SiteApi:
        return SiteApi(self)

    def session_cookies(self) -> Dict[str, str]:
        """Get the cookies of the current login session.

        Returns:
            Dictionary mapping cookie name to cookie value.
        """
        return {
            cookie.name: cookie.value
            for cookie in self._http.cookies.jar
            if cookie.value is not None
        }

    async def aclose(self, logout_first: bool = True) -> None:
        """Log out (best-effort) and close the HTTP client.

        Handles created by :meth:`clone` do not own the connection; closing
        them does nothing. Safe to call more than once.
        """
        if not self._owns_http_client or self._closed:
            return
        self._closed = True

        if logout_first and self._session.epoch > 0:
            await logout(
                self._http,
                self.settings.controller_url,
                self._kind,
                csrf_token=self._session.csrf_token if self._kind is ControllerKind.OS else None,
            )
        await self._http.aclose()
        logger.debug("disconnected")

    async def __aenter__(self) -> "UnifiClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"UnifiClient(controller_url={self.settings.controller_url!r}, "
            f"kind={self._kind.value}, site={self.site!r}, epoch={self.epoch})"
        )
