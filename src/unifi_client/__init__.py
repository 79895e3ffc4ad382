"""
UniFi Client - Async client for the UniFi Controller API.

This package connects to UniFi Network applications and UniFi OS consoles,
keeps the login session alive, and exposes typed operations for guests,
vouchers and sites.

Features:
- Automatic controller kind detection (Network vs UniFi OS)
- CSRF token tracking and rotation
- Single re-authentication shared by concurrent requests when a session expires
- Configuration via YAML with environment variable overrides
- Structured logging (JSON for production, text for development)
"""

__version__ = "0.1.0"

from unifi_client.api import GuestApi, SiteApi, UnifiClient, VoucherApi
from unifi_client.config import UnifiSettings
from unifi_client.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    HttpError,
    InvalidEndpointError,
    NotAuthenticatedError,
    SerializationError,
    SiteNotFoundError,
    UnifiError,
)
from unifi_client.models import ControllerKind

__all__ = [
    "__version__",
    # Client
    "UnifiClient",
    "UnifiSettings",
    "ControllerKind",
    "GuestApi",
    "SiteApi",
    "VoucherApi",
    # Errors
    "UnifiError",
    "ApiError",
    "AuthenticationError",
    "ConfigurationError",
    "HttpError",
    "InvalidEndpointError",
    "NotAuthenticatedError",
    "SerializationError",
    "SiteNotFoundError",
]
