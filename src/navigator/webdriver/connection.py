"""HTTP connection to a WebDriver session."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx
from anyio.lowlevel import checkpoint_if_cancelled

from ..core.exceptions import ProtocolError, SessionError, TransportError
from ..utils.error_mapper import map_response_error

logger = logging.getLogger(__name__)

GET = "GET"
POST = "POST"
DELETE = "DELETE"


def encode_body(body: Any) -> Optional[bytes]:
    """JSON-encode a request body; None means no body."""
    if body is None:
        return None
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise TransportError(f"invalid request body: {e}") from e


def unwrap_value(content: bytes) -> Any:
    """
    Unwrap the ``{"value": ...}`` envelope of a successful response.

    An empty body carries no value and yields None.

    Raises:
        ProtocolError: If the body is not a JSON object
    """
    if not content.strip():
        return None
    try:
        payload = json.loads(content)
    except (ValueError, UnicodeDecodeError) as e:
        raise ProtocolError(
            200, f"unexpected response: {content.decode('utf-8', errors='replace')}", content
        ) from e
    if not isinstance(payload, dict):
        raise ProtocolError(200, f"unexpected response: {payload!r}", content)
    return payload.get("value")


def _lookup(mapping: Any, key: str) -> Any:
    """Case-insensitive key lookup, as legacy drivers vary in key casing."""
    if not isinstance(mapping, dict):
        return None
    for k, v in mapping.items():
        if isinstance(k, str) and k.lower() == key.lower():
            return v
    return None


def parse_session_id(content: bytes) -> str:
    """
    Read the session ID from a new-session response.

    The legacy protocol returns ``{"sessionId": ...}`` at the top level; W3C
    drivers (GeckoDriver) nest it as ``{"value": {"sessionId": ...}}``.

    Raises:
        SessionError: If no session ID is present
    """
    try:
        payload = json.loads(content)
    except (ValueError, UnicodeDecodeError) as e:
        raise SessionError(f"failed to decode new session response: {e}") from e

    session_id = _lookup(payload, "sessionId")
    if isinstance(session_id, str) and session_id:
        return session_id

    session_id = _lookup(_lookup(payload, "value"), "sessionId")
    if isinstance(session_id, str) and session_id:
        return session_id

    raise SessionError("failed to retrieve a session ID")


class Connection:
    """
    A bus to one remote session of the WebDriver service.

    All paths passed to send() are relative to ``{service_url}/session/{id}``.
    The underlying httpx.AsyncClient may be shared by many connections.
    """

    def __init__(
        self,
        session_url: str,
        http_client: httpx.AsyncClient,
        debug: bool = False,
    ):
        self.session_url = session_url
        self.http_client = http_client
        self.debug = debug

    @classmethod
    async def open(
        cls,
        http_client: httpx.AsyncClient,
        service_url: str,
        capabilities: Optional[dict] = None,
        debug: bool = False,
    ) -> "Connection":
        """
        Open a new remote session and return a connection scoped to it.

        Args:
            http_client: Shared HTTP client
            service_url: Base URL of the WebDriver service
            capabilities: Desired capabilities (defaults to empty)
            debug: Log every outbound request

        Returns:
            Connection bound to the new session

        Raises:
            TransportError: If the request cannot be made
            ProtocolError: If the service rejects the request
            SessionError: If the response carries no session ID
        """
        body = encode_body({"desiredCapabilities": capabilities or {}})
        content = await _request(http_client, POST, f"{service_url}/session", body)
        session_id = parse_session_id(content)
        logger.info(f"Opened session {session_id} on {service_url}")
        return cls(
            session_url=f"{service_url}/session/{session_id}",
            http_client=http_client,
            debug=debug,
        )

    async def send(self, method: str, pathname: str, body: Any = None) -> Any:
        """
        Send a command to the session and return the unwrapped ``value``.

        Args:
            method: HTTP method (GET, POST, DELETE)
            pathname: Path relative to the session URL
            body: JSON-serializable request body, or None for no body

        Returns:
            The ``value`` member of the response envelope
        """
        data = encode_body(body)
        url = f"{self.session_url}/{pathname}".removesuffix("/")
        if self.debug:
            logger.info(f"{method} {url} {data.decode('utf-8') if data else ''}")
        content = await _request(self.http_client, method, url, data)
        return unwrap_value(content)


async def _request(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    body: Optional[bytes],
) -> bytes:
    """Perform one round trip; non-2xx responses raise ProtocolError."""
    await checkpoint_if_cancelled()

    headers = {"Content-Type": "application/json"} if body is not None else None
    try:
        request = http_client.build_request(method, url, content=body, headers=headers)
    except httpx.InvalidURL as e:
        raise TransportError(f"invalid request: {e}") from e

    try:
        response = await http_client.send(request)
    except httpx.HTTPError as e:
        raise TransportError(f"request failed: {e}") from e

    if not 200 <= response.status_code <= 299:
        raise map_response_error(response.status_code, response.content)
    return response.content
