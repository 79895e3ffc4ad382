"""Shared enumerations for the UniFi client models."""

from enum import Enum
from typing import Optional


class ControllerKind(str, Enum):
    """Type of UniFi controller, fixed when the client is built."""

    NETWORK = "network"
    OS = "os"


class VoucherStatus(str, Enum):
    """Lifecycle state reported by the controller for a hotspot voucher."""

    VALID_ONE = "VALID_ONE"
    VALID_MULTI = "VALID_MULTI"
    USED = "USED"
    USED_MULTIPLE = "USED_MULTIPLE"
    EXPIRED = "EXPIRED"

    @classmethod
    def _missing_(cls, value: object) -> Optional["VoucherStatus"]:
        # Controllers are not consistent about the case of status strings,
        # and older releases report a bare "valid" for single-use vouchers
        if isinstance(value, str):
            normalized = value.upper()
            if normalized == "VALID":
                return cls.VALID_ONE
            for member in cls:
                if member.value == normalized:
                    return member
        return None
