"""Hotspot voucher models."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import VoucherStatus

BYTES_PER_MEGABYTE = 1024 * 1024


class Voucher(BaseModel):
    """A voucher code that grants a guest time- or quota-limited access.

    ``quota`` is the number of allowed uses: 0 for unlimited, 1 for
    single-use, n for n uses.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id", description="Voucher identifier")
    admin_name: Optional[str] = Field(default=None, description="Admin who created the voucher")
    code: str = Field(..., description="Code the guest enters on the portal")
    create_time: int = Field(..., description="Creation time (Unix timestamp)")
    duration: int = Field(..., description="Validity after activation, in minutes")
    for_hotspot: Optional[bool] = None
    note: Optional[str] = None
    qos_overwrite: Optional[bool] = None
    qos_rate_max_down: Optional[int] = Field(default=None, description="Download limit in Kbps")
    qos_rate_max_up: Optional[int] = Field(default=None, description="Upload limit in Kbps")
    qos_usage_quota: Optional[int] = Field(default=None, description="Data quota in MB")
    quota: int
    site_id: Optional[str] = None
    status: VoucherStatus
    status_expires: Optional[int] = Field(
        default=None, description="Expiry after first use (Unix timestamp), 0 if unused"
    )
    used: int

    def __str__(self) -> str:
        return f"Code: {self.code} ({self.status.value})"


class CreateVoucherRequest(BaseModel):
    """Body of the ``create-voucher`` hotspot command."""

    cmd: Literal["create-voucher"] = "create-voucher"
    n: int = Field(..., ge=1, description="Number of vouchers to create")
    minutes: int = Field(..., ge=1, description="Validity after activation, in minutes")
    quota: Optional[int] = Field(default=None, ge=0, description="Allowed uses, 0 = unlimited")
    note: Optional[str] = None
    up: Optional[int] = Field(default=None, ge=0, description="Upload limit in Kbps")
    down: Optional[int] = Field(default=None, ge=0, description="Download limit in Kbps")
    bytes: Optional[int] = Field(default=None, ge=0, description="Data quota in bytes")

    @classmethod
    def build(
        cls,
        count: int,
        minutes: int,
        note: Optional[str] = None,
        up: Optional[int] = None,
        down: Optional[int] = None,
        mb_quota: Optional[int] = None,
        quota: Optional[int] = None,
    ) -> "CreateVoucherRequest":
        """Build a request, converting a megabyte quota to bytes."""
        return cls(
            n=count,
            minutes=minutes,
            quota=quota,
            note=note,
            up=up,
            down=down,
            bytes=mb_quota * BYTES_PER_MEGABYTE if mb_quota is not None else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CreateVoucherResponse(BaseModel):
    """Entry returned by ``create-voucher``; identifies the batch by creation time."""

    model_config = ConfigDict(extra="allow")

    create_time: int
