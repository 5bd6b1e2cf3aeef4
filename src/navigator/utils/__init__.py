"""Shared utilities for the navigator client."""

from .error_mapper import decode_error_body, map_response_error
from .log_parser import MESSAGE_PATTERN, ms_to_datetime, split_message

__all__ = [
    "decode_error_body",
    "map_response_error",
    "MESSAGE_PATTERN",
    "ms_to_datetime",
    "split_message",
]
