"""Site and site health models."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Site(BaseModel):
    """A UniFi site. ``name`` is the short identifier used in API paths."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., alias="_id", description="Site identifier")
    name: str = Field(..., description="Short name used in API paths")
    desc: str = Field(default="", description="Human-readable description")
    role: Optional[str] = Field(default=None, description="Role of the logged-in admin")
    hidden: Optional[bool] = None

    def __str__(self) -> str:
        return f"{self.desc} ({self.name})"


class SubsystemHealth(BaseModel):
    """Health of one subsystem (wlan, lan, wan, ...)."""

    model_config = ConfigDict(extra="allow")

    subsystem: str
    score: Optional[float] = None
    status: Optional[str] = None


class SiteStats(BaseModel):
    """Summary statistics for a site."""

    model_config = ConfigDict(extra="allow")

    num_ap: int = 0
    num_user: int = 0
    num_guest: int = 0
    num_iot: Optional[int] = None
    status: Optional[str] = None
    score: Optional[float] = None
    subsystems: Optional[List[SubsystemHealth]] = None
    timestamp: Optional[int] = None
