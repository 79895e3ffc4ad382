"""Session state, re-authentication coordination, and connection retry.

A single login session is shared by every handle cloned from one client.
``SessionState`` holds the CSRF token together with an epoch counter that
is advanced by every successful login. The epoch lets concurrent requests
that failed on the same stale session agree on who re-authenticates:

    task A: send (epoch 1) -> 401 -> lock -> epoch still 1 -> login -> epoch 2
    task B: send (epoch 1) -> 401 -> wait -> epoch now 2 -> skip login -> retry

Example usage:
    from unifi_client.api.session import create_retry_decorator

    retry = create_retry_decorator(max_retries=5)

    @retry
    async def connect():
        ...
"""

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, NamedTuple, Optional

import httpx
import structlog
from pydantic import SecretStr
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from unifi_client.exceptions import HttpError

logger = structlog.get_logger(__name__)


class SessionSnapshot(NamedTuple):
    """Consistent view of the session taken before sending a request."""

    csrf_token: Optional[str]
    epoch: int


class SessionState:
    """Mutable session credentials shared between client handles.

    Epoch 0 means no login has completed yet. Every mutation happens under a
    short-lived lock, so readers never observe a token from one login paired
    with the epoch of another.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._csrf_token: Optional[SecretStr] = None
        self._epoch = 0

    @property
    def epoch(self) -> int:
        with self._lock:
            return self._epoch

    @property
    def csrf_token(self) -> Optional[str]:
        with self._lock:
            return self._csrf_token.get_secret_value() if self._csrf_token else None

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            token = self._csrf_token.get_secret_value() if self._csrf_token else None
            return SessionSnapshot(csrf_token=token, epoch=self._epoch)

    def commit_login(self, csrf_token: Optional[str]) -> int:
        """Record a successful login.

        The stored token is replaced, including being cleared when the login
        response carried none, and the epoch advances by one.

        Returns:
            The new epoch.
        """
        with self._lock:
            self._csrf_token = SecretStr(csrf_token) if csrf_token else None
            self._epoch += 1
            return self._epoch

    def rotate_csrf(self, csrf_token: str) -> None:
        """Replace the CSRF token mid-session. The epoch is unchanged."""
        with self._lock:
            self._csrf_token = SecretStr(csrf_token)

    def __repr__(self) -> str:
        snapshot = self.snapshot()
        has_token = snapshot.csrf_token is not None
        return f"SessionState(epoch={snapshot.epoch}, csrf_token={'**********' if has_token else None})"


class ReauthCoordinator:
    """Collapses concurrent re-authentication attempts into one login."""

    def __init__(self, session: SessionState) -> None:
        self._session = session
        self._lock = asyncio.Lock()

    async def dedupe_reauthenticate(
        self,
        login: Callable[[], Awaitable[None]],
        observed_epoch: Optional[int] = None,
    ) -> bool:
        """Run ``login`` unless another task already renewed the session.

        Args:
            login: Coroutine function performing a full login and committing it.
            observed_epoch: Epoch the failing request was sent under. Defaults
                to the current epoch.

        Returns:
            True if this call performed the login, False if it found the
            session already renewed.

        Raises:
            Whatever ``login`` raises. Only the task that ran it sees the error.
        """
        if observed_epoch is None:
            observed_epoch = self._session.epoch

        async with self._lock:
            current = self._session.epoch
            if current != observed_epoch:
                logger.debug(
                    "reauth_skipped",
                    observed_epoch=observed_epoch,
                    current_epoch=current,
                )
                return False

            logger.info("reauthenticating", epoch=current)
            await login()
            logger.info("reauthenticated", epoch=self._session.epoch)
            return True


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and isinstance(
        exc.__cause__, (httpx.ConnectError, httpx.TimeoutException)
    )


def create_retry_decorator(
    max_retries: int = 3,
    min_wait: float = 1,
    max_wait: float = 60,
    log_level: int = logging.WARNING,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Create a tenacity retry decorator with exponential backoff.

    Only transport failures caused by connect errors or timeouts are
    retried; rejected credentials and bad configuration fail on the first
    attempt. Works for both plain and coroutine functions.

    Args:
        max_retries: Maximum number of attempts (1 disables retrying).
        min_wait: Minimum wait time in seconds between attempts.
        max_wait: Maximum wait time in seconds between attempts.
        log_level: Log level for retry attempt messages.

    Returns:
        A tenacity retry decorator.

    Backoff sequence (with min=1, max=60):
        Attempt 1: immediate
        Attempt 2: wait 1-2 seconds
        Attempt 3: wait 2-4 seconds
        ...
        Capped at 60 seconds max
    """
    stdlib_logger = logging.getLogger(__name__)

    return retry(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(_is_transient),
        before_sleep=before_sleep_log(stdlib_logger, log_level),
        reraise=True,
    )
