"""Shared fixtures: an in-process UniFi controller built on httpx.MockTransport."""

import asyncio
import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import structlog

from unifi_client import UnifiClient, UnifiSettings
from unifi_client.models import ControllerKind

BASE_URL = "https://unifi.example.com"
USERNAME = "test-user"
PASSWORD = "test-password"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def envelope(data: Any = None, rc: str = "ok", msg: Optional[str] = None) -> Dict[str, Any]:
    """Build a standard ``{"meta": ..., "data": ...}`` body."""
    meta: Dict[str, Any] = {"rc": rc}
    if msg is not None:
        meta["msg"] = msg
    body: Dict[str, Any] = {"meta": meta}
    if data is not None:
        body["data"] = data
    return body


def ok(data: Any = None, **kwargs: Any) -> httpx.Response:
    return httpx.Response(200, json=envelope([] if data is None else data), **kwargs)


class MockController:
    """Fake controller that behaves like a Network application or UniFi OS console.

    - ``HEAD /`` answers 200 for UniFi OS and 302 for Network.
    - Each successful login issues a fresh session cookie and, on UniFi OS,
      a fresh CSRF token (unless ``issue_csrf`` is False).
    - API requests without a valid cookie get 401. On UniFi OS a mismatched
      CSRF token gets 403, and a CSRF header sent while none is expected
      gets 418 so stale tokens are easy to spot.
    - ``x-updated-csrf-token`` on a route's response rotates the expected token.
    """

    def __init__(self, kind: ControllerKind = ControllerKind.NETWORK) -> None:
        self.kind = kind
        self.requests: List[httpx.Request] = []
        self.login_count = 0
        self.login_failures: List[httpx.Response] = []
        self.issue_csrf = True
        self.probe_status = 200 if kind is ControllerKind.OS else 302
        self.valid_sessions: set = set()
        self.current_csrf: Optional[str] = None
        self._routes: Dict[Tuple[str, str], List[Responder]] = {}

    @property
    def cookie_name(self) -> str:
        return "TOKEN" if self.kind is ControllerKind.OS else "unifises"

    @property
    def login_path(self) -> str:
        return "/api/auth/login" if self.kind is ControllerKind.OS else "/api/login"

    @property
    def logout_path(self) -> str:
        return "/api/auth/logout" if self.kind is ControllerKind.OS else "/api/logout"

    def api_path(self, endpoint: str) -> str:
        prefix = "/proxy/network" if self.kind is ControllerKind.OS else ""
        return prefix + "/" + endpoint.lstrip("/")

    def route(self, method: str, endpoint: str, *responders: Responder) -> None:
        """Register responses for an API endpoint.

        Responders are used in order; the last one keeps answering.
        """
        self._routes[(method.upper(), self.api_path(endpoint))] = list(responders)

    def expire_sessions(self) -> None:
        self.valid_sessions.clear()

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def api_calls(self, method: str, endpoint: str) -> List[httpx.Request]:
        return self.calls(method, self.api_path(endpoint))

    @property
    def login_requests(self) -> List[httpx.Request]:
        return self.calls("POST", self.login_path)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Let concurrent requests interleave
        await asyncio.sleep(0)

        path = request.url.path
        if request.method == "HEAD" and path == "/":
            return httpx.Response(self.probe_status)
        if request.method == "POST" and path == self.login_path:
            return self._login(request)
        if request.method == "POST" and path == self.logout_path:
            return httpx.Response(200, json=envelope([]))

        if self._session_cookie(request) not in self.valid_sessions:
            return httpx.Response(401, json=envelope(rc="error", msg="api.err.LoginRequired"))

        if self.kind is ControllerKind.OS:
            sent = request.headers.get("x-csrf-token")
            if self.current_csrf is None and sent is not None:
                return httpx.Response(418)
            if self.current_csrf is not None and sent != self.current_csrf:
                return httpx.Response(403)

        responders = self._routes.get((request.method, path))
        if not responders:
            return httpx.Response(404)
        responder = responders.pop(0) if len(responders) > 1 else responders[0]
        if isinstance(responder, httpx.Response):
            # Fresh copy so the same canned response can answer repeatedly
            response = httpx.Response(
                responder.status_code,
                headers=responder.headers,
                content=responder.content,
            )
        else:
            response = responder(request)

        rotated = response.headers.get("x-updated-csrf-token")
        if rotated:
            self.current_csrf = rotated
        return response

    def _session_cookie(self, request: httpx.Request) -> Optional[str]:
        for part in request.headers.get("cookie", "").split(";"):
            name, _, value = part.strip().partition("=")
            if name == self.cookie_name:
                return value
        return None

    def _login(self, request: httpx.Request) -> httpx.Response:
        if self.login_failures:
            return self.login_failures.pop(0)

        body = json.loads(request.content)
        if body != {"username": USERNAME, "password": PASSWORD}:
            status = 403 if self.kind is ControllerKind.OS else 400
            return httpx.Response(status, json=envelope(rc="error", msg="api.err.Invalid"))

        self.login_count += 1
        session = f"session-{self.login_count}"
        self.valid_sessions.add(session)
        headers = {"set-cookie": f"{self.cookie_name}={session}; Path=/"}

        if self.kind is ControllerKind.OS:
            self.current_csrf = f"csrf-{self.login_count}" if self.issue_csrf else None
            if self.current_csrf:
                headers["x-csrf-token"] = self.current_csrf
            return httpx.Response(200, headers=headers)

        return httpx.Response(200, headers=headers, json=envelope([]))


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep UNIFI_* variables and .env files on the developer machine out of tests."""
    for key in list(os.environ):
        if key.startswith("UNIFI_") or key == "CONFIG_PATH":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    structlog.reset_defaults()
    # Keep library log lines out of captured command output
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))


def make_settings(**overrides: Any) -> UnifiSettings:
    """Create UnifiSettings pointing at the mock controller."""
    fields: Dict[str, Any] = {
        "controller_url": BASE_URL,
        "username": USERNAME,
        "password": PASSWORD,
        "site": "default",
        "max_retries": 1,
    }
    fields.update(overrides)
    return UnifiSettings(**fields)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture(params=[ControllerKind.NETWORK, ControllerKind.OS], ids=["network", "os"])
def controller(request):
    """A mock controller of each kind."""
    return MockController(request.param)


@pytest.fixture
def network_controller():
    return MockController(ControllerKind.NETWORK)


@pytest.fixture
def os_controller():
    return MockController(ControllerKind.OS)


async def connect(controller: MockController, **overrides: Any) -> UnifiClient:
    """Build a client against ``controller``."""
    return await UnifiClient.build(make_settings(**overrides), transport=controller.transport())
