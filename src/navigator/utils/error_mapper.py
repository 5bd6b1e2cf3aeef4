"""Map non-2xx WebDriver responses to readable error messages."""

import json
from typing import Any, Optional

from ..core.exceptions import ProtocolError


def _outer_message(body: bytes) -> Optional[str]:
    """Extract ``value.message`` from ``{"value": {"message": ...}}``."""
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    value = payload.get("value")
    if not isinstance(value, dict):
        return None
    message = value.get("message")
    if not isinstance(message, str):
        return None
    return message


def _inner_error_message(message: str) -> Optional[str]:
    """Extract ``errorMessage`` from a message that is itself JSON."""
    try:
        payload: Any = json.loads(message)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error_message = payload.get("errorMessage")
    if not isinstance(error_message, str):
        return None
    return error_message


def decode_error_body(body: bytes) -> str:
    """
    Recover the most specific error text from a failed response body.

    Drivers nest their error payloads differently, so decoding happens in
    two stages:

    1. ``{"value": {"message": M}}`` yields ``M``.
    2. ``M`` parsed as ``{"errorMessage": E}`` yields ``E``.

    If stage 1 fails the raw body is returned verbatim. If only stage 2
    fails, ``M`` is returned (or the raw body when ``M`` is empty).

    Args:
        body: Raw response body

    Returns:
        Human-readable error text
    """
    raw = body.decode("utf-8", errors="replace")
    message = _outer_message(body)
    if message is None:
        return raw
    error_message = _inner_error_message(message)
    if error_message is not None:
        return error_message
    return message or raw


def map_response_error(status_code: int, body: bytes) -> ProtocolError:
    """Build the ProtocolError for a non-2xx response."""
    return ProtocolError(status_code, decode_error_body(body), body)
