"""UniFi API client module.

This module provides:
- UnifiClient: async client with session recovery
- Resource handlers for guests, vouchers and sites
- Endpoint definitions for Network and UniFi OS controllers
"""

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

from .auth import authenticate, detect_controller_kind, logout
from .client import UnifiClient
from .endpoints import Endpoints, get_endpoints, is_reauth_status, join_url
from .envelope import unwrap_envelope
from .guests import GuestApi
from .session import ReauthCoordinator, SessionState, create_retry_decorator
from .sites import SiteApi
from .vouchers import VoucherApi

__all__ = [
    # Client
    "UnifiClient",
    "GuestApi",
    "SiteApi",
    "VoucherApi",
    # Core
    "ReauthCoordinator",
    "SessionState",
    "authenticate",
    "create_retry_decorator",
    "detect_controller_kind",
    "logout",
    "unwrap_envelope",
    # Endpoints
    "Endpoints",
    "get_endpoints",
    "is_reauth_status",
    "join_url",
    # Exceptions
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
