"""Guest authorization models.

The controller returns guest entries without an explicit type tag; the shape
of the object tells us what state the authorization is in:

- active: ``expired`` plus traffic counters (``bytes``, ``rx_bytes``, ``tx_bytes``)
- inactive: ``expired`` without traffic counters, optionally ``unauthorized_by``
- new: neither, as returned by the authorize-guest command
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)

DEFAULT_AP_MAC = "00:00:00:00:00:00"

_TRAFFIC_FIELDS = ("bytes", "rx_bytes", "tx_bytes")


class _GuestBase(BaseModel):
    """Fields shared by every guest entry."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id", description="Authorization identifier")
    authorized_by: str = Field(..., description="Who or what authorized the guest")
    end: int = Field(..., description="Authorization end (Unix timestamp)")
    mac: str = Field(..., description="Guest MAC address")
    site_id: str = Field(..., description="Site the guest was authorized on")
    start: int = Field(..., description="Authorization start (Unix timestamp)")

    @property
    def expires_at(self) -> int:
        return self.end

    @property
    def is_expired(self) -> bool:
        return False

    @property
    def was_unauthorized(self) -> bool:
        return False


class ActiveGuest(_GuestBase):
    """A guest that is authorized and has used the network."""

    kind: Literal["active"] = Field(default="active", exclude=True)
    expired: bool
    bytes: int = Field(..., description="Data transfer limit in MB")
    rx_bytes: int
    tx_bytes: int

    @property
    def is_expired(self) -> bool:
        return self.expired


class InactiveGuest(_GuestBase):
    """A guest authorization that is not in use or has expired."""

    kind: Literal["inactive"] = Field(default="inactive", exclude=True)
    expired: bool
    unauthorized_by: Optional[str] = None

    @property
    def is_expired(self) -> bool:
        return self.expired

    @property
    def was_unauthorized(self) -> bool:
        return self.unauthorized_by is not None


class NewGuest(_GuestBase):
    """A freshly created authorization, as returned by authorize-guest."""

    kind: Literal["new"] = Field(default="new", exclude=True)


def guest_entry_kind(value: Any) -> str:
    """Classify a raw guest entry by which fields are present."""
    if isinstance(value, _GuestBase):
        return value.kind  # type: ignore[attr-defined]
    if not isinstance(value, dict):
        return "new"
    if "expired" in value:
        if all(name in value for name in _TRAFFIC_FIELDS):
            return "active"
        return "inactive"
    return "new"


GuestEntry = Annotated[
    Union[
        Annotated[ActiveGuest, Tag("active")],
        Annotated[InactiveGuest, Tag("inactive")],
        Annotated[NewGuest, Tag("new")],
    ],
    Discriminator(guest_entry_kind),
]

_guest_entry_adapter: TypeAdapter[Any] = TypeAdapter(GuestEntry)
_guest_list_adapter: TypeAdapter[Any] = TypeAdapter(List[GuestEntry])


def parse_guest_entry(data: Dict[str, Any]) -> Union[ActiveGuest, InactiveGuest, NewGuest]:
    """Validate one raw guest entry into its variant model."""
    return _guest_entry_adapter.validate_python(data)


def parse_guest_entries(data: Any) -> List[Union[ActiveGuest, InactiveGuest, NewGuest]]:
    """Validate a list of raw guest entries."""
    return _guest_list_adapter.validate_python(data)


class AuthorizeGuestRequest(BaseModel):
    """Body of the ``authorize-guest`` stamgr command."""

    cmd: Literal["authorize-guest"] = "authorize-guest"
    mac: str
    minutes: Optional[int] = Field(default=None, ge=0, description="Minutes until expiry")
    up: Optional[int] = Field(default=None, ge=0, description="Upload limit in Kbps")
    down: Optional[int] = Field(default=None, ge=0, description="Download limit in Kbps")
    bytes: Optional[int] = Field(default=None, ge=0, description="Data quota in MB")
    ap_mac: str = DEFAULT_AP_MAC

    @field_validator("mac", "ap_mac")
    @classmethod
    def normalize_mac(cls, v: str) -> str:
        """Lowercase MAC addresses and reject empty ones."""
        if not v or not v.strip():
            raise ValueError("MAC address is required")
        return v.strip().lower()

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UnauthorizeGuestRequest(BaseModel):
    """Body of the ``unauthorize-guest`` stamgr command."""

    cmd: Literal["unauthorize-guest"] = "unauthorize-guest"
    mac: str

    @field_validator("mac")
    @classmethod
    def normalize_mac(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("MAC address is required")
        return v.strip().lower()

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()
