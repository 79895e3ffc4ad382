"""Data models for the UniFi client."""

from .enums import ControllerKind, VoucherStatus
from .envelope import ApiMeta, ApiResponse
from .guest import (
    DEFAULT_AP_MAC,
    ActiveGuest,
    AuthorizeGuestRequest,
    GuestEntry,
    InactiveGuest,
    NewGuest,
    UnauthorizeGuestRequest,
    parse_guest_entries,
    parse_guest_entry,
)
from .site import Site, SiteStats, SubsystemHealth
from .voucher import CreateVoucherRequest, CreateVoucherResponse, Voucher

__all__ = [
    "ActiveGuest",
    "ApiMeta",
    "ApiResponse",
    "AuthorizeGuestRequest",
    "ControllerKind",
    "CreateVoucherRequest",
    "CreateVoucherResponse",
    "DEFAULT_AP_MAC",
    "GuestEntry",
    "InactiveGuest",
    "NewGuest",
    "Site",
    "SiteStats",
    "SubsystemHealth",
    "UnauthorizeGuestRequest",
    "Voucher",
    "VoucherStatus",
    "parse_guest_entries",
    "parse_guest_entry",
]
