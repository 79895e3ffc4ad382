"""Authentication and controller kind detection for UniFi controllers.

This module handles:
- Detection of the controller kind (Network application vs UniFi OS)
- Authentication with local admin credentials
- Logout for session cleanup
"""

from typing import Optional

import httpx
import structlog
from pydantic import SecretStr, ValidationError

from unifi_client.exceptions import (
    AuthenticationError,
    ConfigurationError,
    HttpError,
    SerializationError,
)
from unifi_client.models import ApiResponse, ControllerKind

from .endpoints import get_endpoints, join_url

logger = structlog.get_logger(__name__)

CSRF_HEADER = "x-csrf-token"
UPDATED_CSRF_HEADER = "x-updated-csrf-token"


async def detect_controller_kind(
    client: httpx.AsyncClient,
    base_url: str,
    timeout: float = 5.0,
) -> ControllerKind:
    """Detect the controller kind with an unauthenticated probe.

    UniFi OS consoles serve their web UI at ``/`` and answer ``HEAD /`` with
    200. The Network application redirects instead (302/304 depending on
    version). Anything other than a plain 200, including a failed probe, is
    treated as a Network controller.

    Args:
        client: Shared httpx.AsyncClient (redirects must not be followed).
        base_url: Controller base URL.
        timeout: Probe timeout in seconds.

    Returns:
        The detected ControllerKind. Never raises for network errors.
    """
    url = join_url(base_url)
    try:
        response = await client.head(url, timeout=timeout, follow_redirects=False)
    except httpx.HTTPError as e:
        logger.debug(
            "controller_probe_failed",
            url=url,
            error=str(e) or type(e).__name__,
        )
        return ControllerKind.NETWORK

    kind = ControllerKind.OS if response.status_code == 200 else ControllerKind.NETWORK
    logger.info(
        "controller_detected",
        url=url,
        status_code=response.status_code,
        controller_kind=kind.value,
    )
    return kind


def validate_credentials(username: str, password: SecretStr) -> None:
    """Reject blank credentials before any request is made.

    Raises:
        ConfigurationError: Username or password is empty after stripping.
    """
    if not username or not username.strip():
        raise ConfigurationError("Username is required")
    if not password.get_secret_value().strip():
        raise ConfigurationError("Password is required")


async def authenticate(
    client: httpx.AsyncClient,
    base_url: str,
    kind: ControllerKind,
    username: str,
    password: SecretStr,
) -> Optional[str]:
    """Authenticate with the UniFi Controller.

    Sends credentials to the login endpoint for the controller kind. On
    success the session cookie is stored in the client's cookie jar.

    Args:
        client: httpx.AsyncClient instance (will store session cookie).
        base_url: Base URL of the controller.
        kind: The type of UniFi controller.
        username: Local admin username.
        password: Admin password.

    Returns:
        The CSRF token issued by a UniFi OS console, or None when the
        response carried none (always None for Network controllers).

    Raises:
        ConfigurationError: Username or password is empty.
        AuthenticationError: Login rejected, no session cookie, or an error envelope.
        HttpError: The login request could not be sent.
        SerializationError: Network login body is not a valid envelope.

    Note:
        Password is never logged at any level. Username is logged at DEBUG only.
    """
    validate_credentials(username, password)

    endpoints = get_endpoints(kind)
    login_url = join_url(base_url, endpoints.login)

    logger.debug("authenticating", username=username, controller_kind=kind.value)

    try:
        response = await client.post(
            login_url,
            json={"username": username, "password": password.get_secret_value()},
        )
    except httpx.HTTPError as e:
        raise HttpError(message=f"Connection failed during authentication: {e}") from e

    if not response.is_success:
        raise AuthenticationError(
            message=(
                f"Authentication failed with status code: {response.status_code} "
                f"{response.reason_phrase}"
            ).rstrip(),
            status_code=response.status_code,
        )

    if not response.headers.get_list("set-cookie"):
        raise AuthenticationError(
            message="No cookies received from server",
            status_code=response.status_code,
        )

    csrf_token: Optional[str] = None
    if kind is ControllerKind.OS:
        csrf_token = response.headers.get(CSRF_HEADER)
    else:
        try:
            envelope = ApiResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise SerializationError(f"Unexpected login response: {e.errors()[0]['msg']}") from e
        if not envelope.meta.is_ok:
            raise AuthenticationError(
                message=envelope.meta.msg or "Unknown error",
                status_code=response.status_code,
            )

    logger.info(
        "authentication_successful",
        controller_kind=kind.value,
        csrf_token_issued=csrf_token is not None,
    )
    return csrf_token


async def logout(
    client: httpx.AsyncClient,
    base_url: str,
    kind: ControllerKind,
    csrf_token: Optional[str] = None,
) -> None:
    """Logout from the UniFi Controller (best-effort).

    Errors are logged but not raised. The session will eventually expire on
    its own if logout fails.
    """
    endpoints = get_endpoints(kind)
    logout_url = join_url(base_url, endpoints.logout)
    headers = {CSRF_HEADER: csrf_token} if csrf_token else None

    try:
        response = await client.post(logout_url, headers=headers)
        if response.is_success:
            logger.debug("logout_successful")
        else:
            logger.debug("logout_status", status_code=response.status_code)
    except httpx.HTTPError as e:
        logger.debug("logout_failed", error=str(e))
