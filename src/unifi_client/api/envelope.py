"""Unwrapping of the ``{"meta": ..., "data": ...}`` response envelope."""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from unifi_client.exceptions import ApiError, SerializationError
from unifi_client.models import ApiResponse

logger = structlog.get_logger(__name__)


def parse_envelope(response: httpx.Response) -> ApiResponse:
    """Decode a response body as an envelope.

    Raises:
        SerializationError: Body is not JSON or lacks a ``meta.rc`` field.
    """
    try:
        return ApiResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise SerializationError(
            f"Unexpected response from {response.request.url.path}: {e.errors()[0]['msg']}"
        ) from e


def unwrap_envelope(response: httpx.Response, require_data: bool = True) -> Optional[Any]:
    """Check a response and return its ``data`` member.

    Args:
        response: A response that has already passed re-authentication handling.
        require_data: If True, a missing ``data`` member is an error. If False,
            it yields None.

    Returns:
        The envelope's ``data`` value, undecoded.

    Raises:
        ApiError: Non-2xx status, ``rc`` other than ``ok``, or missing data.
        SerializationError: Body is not a valid envelope.
    """
    if not response.is_success:
        raise ApiError(
            f"API request failed with status code: {response.status_code} "
            f"{response.reason_phrase}".rstrip(),
            status_code=response.status_code,
        )

    envelope = parse_envelope(response)

    if not envelope.meta.is_ok:
        logger.debug(
            "api_error_envelope",
            rc=envelope.meta.rc,
            msg=envelope.meta.msg,
            path=response.request.url.path,
        )
        raise ApiError(envelope.meta.msg or "Unknown API error", status_code=response.status_code)

    if envelope.data is None:
        if require_data:
            raise ApiError("No data returned from API", status_code=response.status_code)
        return None

    return envelope.data
