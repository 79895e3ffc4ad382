"""Exceptions raised by the UniFi client.

All exceptions inherit from UnifiError for consistent error handling.
Each exception carries a suggested CLI exit code and, where useful, a hint
for non-expert users.
"""

from typing import List, Optional


class UnifiError(Exception):
    """Base exception for all UniFi client errors.

    Attributes:
        message: Human-readable error message.
        hint: Optional troubleshooting hint for non-experts.
        exit_code: Suggested exit code for CLI applications.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.hint = hint
        if exit_code is not None:
            self.exit_code = exit_code
        text = message if not hint else f"{message}\n\nHint: {hint}"
        super().__init__(text)


class ConfigurationError(UnifiError):
    """Client configuration is invalid or cannot be loaded.

    Raised before any network traffic, e.g. for a malformed controller URL
    or missing credentials.
    """

    exit_code: int = 1


class AuthenticationError(UnifiError):
    """Login was rejected or returned an unusable session.

    Common causes are a cloud or SSO account where a local one is needed,
    a wrong password, or a login response that set no session cookie.

    Attributes:
        status_code: HTTP status of the login response, when there was one.
    """

    exit_code: int = 3

    def __init__(
        self,
        message: str = "Authentication failed",
        hint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message=message, hint=hint, exit_code=3)


class NotAuthenticatedError(UnifiError):
    """A request was still rejected after re-authenticating once."""

    exit_code: int = 3

    def __init__(
        self,
        message: str = "Request rejected after re-authentication",
        hint: Optional[str] = None,
    ) -> None:
        if hint is None:
            hint = "The account may lack permission for this endpoint or site."
        super().__init__(message=message, hint=hint, exit_code=3)


class InvalidEndpointError(UnifiError):
    """An endpoint path contained a query string or fragment."""

    exit_code: int = 1

    def __init__(self, endpoint: str) -> None:
        self.endpoint = endpoint
        super().__init__(
            message=f"Invalid endpoint '{endpoint}': endpoint must not include query or fragment",
        )


class ApiError(UnifiError):
    """The controller returned an error status or an error envelope.

    Attributes:
        status_code: HTTP status when the error came from a non-2xx response.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str = "Unknown API error",
        hint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message=message, hint=hint)


class SiteNotFoundError(ApiError):
    """Specified site does not exist on the controller."""

    def __init__(
        self,
        site_name: str,
        available_sites: Optional[List[str]] = None,
    ) -> None:
        self.site_name = site_name
        self.available_sites = list(available_sites or [])
        super().__init__(
            message=f"Site '{site_name}' does not exist on the controller",
            hint=f"Available sites: {', '.join(self.available_sites)}"
            if self.available_sites
            else None,
        )


class HttpError(UnifiError):
    """Transport-level failure talking to the controller.

    The underlying httpx exception is kept as ``__cause__``.
    """

    exit_code: int = 2

    def __init__(
        self,
        message: str = "Cannot connect to UniFi Controller",
        hint: Optional[str] = None,
    ) -> None:
        if hint is None:
            hint = (
                "Is the UniFi Controller running? Check the controller URL "
                "and network connectivity."
            )
        super().__init__(message=message, hint=hint, exit_code=2)


class SerializationError(UnifiError):
    """A response body could not be decoded into the expected shape."""

    exit_code: int = 1
