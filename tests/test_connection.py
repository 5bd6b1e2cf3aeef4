"""Tests for the session connection and response envelopes."""

import json
import logging

import anyio
import httpx
import pytest

from navigator.core.exceptions import ProtocolError, SessionError, TransportError
from navigator.webdriver.connection import (
    GET,
    POST,
    Connection,
    encode_body,
    parse_session_id,
    unwrap_value,
)

from conftest import SERVICE_URL, SESSION_ID


class TestParseSessionId:
    """Tests for reading the session ID of a new-session response."""

    def test_top_level(self):
        """Should read the legacy top-level sessionId."""
        assert parse_session_id(b'{"sessionId": "s1", "status": 0, "value": {}}') == "s1"

    def test_nested_in_value(self):
        """Should read the W3C sessionId nested in value."""
        assert parse_session_id(b'{"value": {"sessionId": "s2", "capabilities": {}}}') == "s2"

    def test_case_insensitive(self):
        """Should match the key regardless of case."""
        assert parse_session_id(b'{"SessionID": "s3"}') == "s3"

    def test_top_level_wins(self):
        """Should prefer the top-level ID over the nested one."""
        assert parse_session_id(b'{"sessionId": "top", "value": {"sessionId": "nested"}}') == "top"

    def test_missing(self):
        """Should fail when no session ID is present."""
        with pytest.raises(SessionError, match="failed to retrieve a session ID"):
            parse_session_id(b'{"value": {}}')

    def test_not_json(self):
        """Should fail on a body that is not JSON."""
        with pytest.raises(SessionError):
            parse_session_id(b"<html>")


class TestEnvelope:
    """Tests for request and response bodies."""

    def test_unwrap_value(self):
        """Should return the value member."""
        assert unwrap_value(b'{"sessionId": "s1", "status": 0, "value": [1, 2]}') == [1, 2]

    def test_unwrap_empty_body(self):
        """Should treat an empty body as no value."""
        assert unwrap_value(b"") is None

    def test_unwrap_invalid_body(self):
        """Should reject a body that is not a JSON object."""
        with pytest.raises(ProtocolError, match="unexpected response"):
            unwrap_value(b"not json")

    def test_encode_none(self):
        """Should send no body for None."""
        assert encode_body(None) is None

    def test_encode_unserializable(self):
        """Should fail to encode values JSON cannot represent."""
        with pytest.raises(TransportError, match="invalid request body"):
            encode_body({"value": object()})


class TestConnection:
    """Tests for round trips through a connection."""

    @pytest.mark.asyncio
    async def test_open_sends_capabilities(self, http_client, remote):
        """Should post desired capabilities and scope the connection to the session."""
        connection = await Connection.open(http_client, SERVICE_URL, {"browserName": "firefox"})

        assert connection.session_url == f"{SERVICE_URL}/session/{SESSION_ID}"
        assert remote.requests == [
            ("POST", "/session", {"desiredCapabilities": {"browserName": "firefox"}})
        ]

    @pytest.mark.asyncio
    async def test_open_defaults_to_empty_capabilities(self, http_client, remote):
        """Should send empty desired capabilities by default."""
        await Connection.open(http_client, SERVICE_URL)

        assert remote.requests[0][2] == {"desiredCapabilities": {}}

    @pytest.mark.asyncio
    async def test_open_rejected(self, http_client, remote):
        """Should surface the driver's error when a session cannot be created."""
        remote.routes.clear()
        remote.on_raw("POST", "/session", 500, json.dumps({"value": {"message": "no browser"}}))

        with pytest.raises(ProtocolError, match="request unsuccessful: no browser"):
            await Connection.open(http_client, SERVICE_URL)

    @pytest.mark.asyncio
    async def test_send_unwraps_value(self, session, remote):
        """Should return the unwrapped value of the response."""
        remote.on("GET", "title", "Example")

        assert await session.connection.send(GET, "title") == "Example"

    @pytest.mark.asyncio
    async def test_send_trims_trailing_slash(self, session, remote):
        """Should address the session itself for an empty path."""
        remote.on("DELETE", "")

        await session.connection.send("DELETE", "")

        assert remote.requests[-1][:2] == ("DELETE", f"/session/{SESSION_ID}")

    @pytest.mark.asyncio
    async def test_send_trims_one_trailing_slash(self, session, remote):
        """Should drop only the last trailing slash of the path."""
        await session.connection.send(GET, "window//")

        assert remote.requests[-1][:2] == ("GET", f"/session/{SESSION_ID}/window/")

    @pytest.mark.asyncio
    async def test_send_json_body(self, remote):
        """Should JSON-encode the body with a JSON content type."""
        captured = []

        def handler(request):
            captured.append(request)
            return remote.handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with client:
            connection = await Connection.open(client, SERVICE_URL)
            remote.on("POST", "url")
            await connection.send(POST, "url", {"url": "https://example.com"})

        assert captured[-1].headers["Content-Type"] == "application/json"
        assert json.loads(captured[-1].content) == {"url": "https://example.com"}

    @pytest.mark.asyncio
    async def test_send_error_decoded(self, session, remote):
        """Should decode a nested errorMessage from a failed response."""
        message = json.dumps({"errorMessage": "Unable to find element"})
        remote.fail("POST", "element", message, status=404)

        with pytest.raises(ProtocolError) as exc_info:
            await session.connection.send(POST, "element", {"using": "id", "value": "x"})

        assert str(exc_info.value) == "request unsuccessful: Unable to find element"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_send_transport_failure(self, session):
        """Should wrap connection failures as transport errors."""

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        broken = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        connection = Connection(session.url, broken)
        async with broken:
            with pytest.raises(TransportError, match="request failed: connection refused"):
                await connection.send(GET, "url")

    @pytest.mark.asyncio
    async def test_cancelled_before_round_trip(self, session, remote):
        """Should not send anything once the caller is cancelled."""
        remote.on("GET", "url", "about:blank")

        with anyio.CancelScope() as scope:
            scope.cancel()
            await session.connection.send(GET, "url")

        assert scope.cancelled_caught
        assert remote.session_requests() == []

    @pytest.mark.asyncio
    async def test_debug_logs_requests(self, http_client, remote, caplog):
        """Should log each request and its body in debug mode."""
        connection = await Connection.open(http_client, SERVICE_URL, debug=True)
        remote.on("POST", "url")

        with caplog.at_level(logging.INFO, logger="navigator.webdriver.connection"):
            await connection.send(POST, "url", {"url": "about:blank"})

        assert f'POST {SERVICE_URL}/session/{SESSION_ID}/url {{"url": "about:blank"}}' in caplog.text
