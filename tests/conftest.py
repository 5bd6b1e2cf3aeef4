"""Pytest fixtures for testing the navigator client."""

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from navigator.core.page import Page
from navigator.webdriver.session import Session

SERVICE_URL = "http://driver.test"
SESSION_ID = "abc123"
SESSION_PATH = f"/session/{SESSION_ID}"


class FakeRemote:
    """
    Scripted WebDriver remote end, served through httpx.MockTransport.

    Responses are registered per (method, path). When several are registered
    for the same route they are returned in order, and the last one repeats.
    Unregistered routes succeed with a null value. Every request is recorded
    as (method, path, decoded body).
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Tuple[int, bytes]]] = {}
        self.requests: List[Tuple[str, str, Any]] = []
        self.on_raw("POST", "/session", 200, json.dumps({"sessionId": SESSION_ID, "value": {}}))

    def on_raw(self, method: str, path: str, status: int, body: str = "") -> None:
        self.routes.setdefault((method, path), []).append((status, body.encode("utf-8")))

    def on(self, method: str, pathname: str, value: Any = None, status: int = 200) -> None:
        """Register a ``{"value": value}`` response for a session-relative path."""
        path = f"{SESSION_PATH}/{pathname}".rstrip("/")
        self.on_raw(method, path, status, json.dumps({"value": value}))

    def fail(self, method: str, pathname: str, message: str, status: int = 500) -> None:
        """Register a WebDriver error response for a session-relative path."""
        path = f"{SESSION_PATH}/{pathname}".rstrip("/")
        self.on_raw(method, path, status, json.dumps({"value": {"message": message}}))

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(200, content=b'{"value": null}')
        status, content = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status, content=content)

    def session_requests(self) -> List[Tuple[str, str, Any]]:
        """Recorded requests under the session, with session-relative paths."""
        prefix = f"{SESSION_PATH}/"
        return [
            (method, path[len(prefix):], body)
            for method, path, body in self.requests
            if path.startswith(prefix)
        ]

    def bodies(self, method: str, pathname: str) -> List[Any]:
        """Bodies of every recorded request to one session-relative path."""
        return [
            body
            for m, path, body in self.session_requests()
            if m == method and path == pathname
        ]


@pytest.fixture
def remote():
    """Create a fake remote end with a session already available."""
    return FakeRemote()


@pytest_asyncio.fixture
async def http_client(remote):
    """Create an HTTP client that talks to the fake remote end."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(remote.handler)) as client:
        yield client


@pytest_asyncio.fixture
async def session(http_client):
    """Open a session against the fake remote end."""
    return await Session.open(http_client, SERVICE_URL)


@pytest.fixture
def page(session):
    """Create a page on the fake session."""
    return Page(session)


class _StatusHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        ready_at = self.server.ready_at
        ready = ready_at is not None and time.monotonic() >= ready_at
        status = 200 if ready and self.path == "/status" else 500
        body = json.dumps({"value": {"ready": ready}}).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def status_server():
    """
    Start local HTTP servers standing in for a driver's status endpoint.

    Call the fixture with the seconds until /status answers 200, or None
    for a server that never becomes ready; it returns the server URL.
    """
    servers = []

    def start(ready_after: Optional[float] = 0.0) -> str:
        server = ThreadingHTTPServer(("127.0.0.1", 0), _StatusHandler)
        server.daemon_threads = True
        server.ready_at = None if ready_after is None else time.monotonic() + ready_after
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        host, port = server.server_address[:2]
        return f"http://{host}:{port}"

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()
