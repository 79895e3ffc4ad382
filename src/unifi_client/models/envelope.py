"""Standard response envelope returned by the UniFi Network API.

Every Network API payload looks like ``{"meta": {"rc": "ok"}, "data": [...]}``.
``rc`` is ``"ok"`` on success; on failure ``msg`` usually carries a short
machine-ish reason such as ``api.err.Invalid``.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiMeta(BaseModel):
    """The ``meta`` object of a response envelope."""

    model_config = ConfigDict(extra="allow")

    rc: str = Field(..., description="Result code, 'ok' on success")
    msg: Optional[str] = Field(default=None, description="Error reason when rc != 'ok'")

    @property
    def is_ok(self) -> bool:
        return self.rc == "ok"


class ApiResponse(BaseModel):
    """A full response envelope. ``data`` is left untyped for the caller to decode."""

    model_config = ConfigDict(extra="allow")

    meta: ApiMeta
    data: Optional[Any] = None
